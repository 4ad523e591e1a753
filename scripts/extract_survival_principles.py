#!/usr/bin/env python3
"""
Build the survival principles knowledge base from the SAS Survival Handbook.

Pipeline:
1) extract text from both halves of the handbook PDF
2) sort passages into survival topics by keyword
3) merge the curated core principles ahead of the harvested passages
4) write src/data/survivalPrinciples.json

Run scripts/clean_principles.py afterwards to filter extraction artifacts.

Usage:
  python scripts/extract_survival_principles.py
  python scripts/extract_survival_principles.py --text-file handbook.txt
  python scripts/extract_survival_principles.py --pdf a.pdf b.pdf --output out.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from categorize_principles import categorize_text
from core_principles import merge_core_principles
from corpus_common import (
    PRINCIPLES_PATH,
    REFERENCE_DIR,
    SOURCE_NAME,
    STAGE_CATEGORIZATION,
    STAGE_MERGE,
    PipelineError,
    count_principles,
    read_text,
    utc_now_iso,
    write_json,
)
from extract_pdf import ExtractionMethod, extract_text

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

PDF_FILES = [
    REFERENCE_DIR / "SAS Survival Handbook_compressed-1-376.pdf",
    REFERENCE_DIR / "SAS Survival Handbook_compressed-377-752.pdf",
]


def extract_corpus(pdf_paths: Sequence[Path], method: ExtractionMethod = ExtractionMethod.AUTO) -> str:
    """
    Concatenate the text of every PDF.

    Any single failure propagates: a partial corpus would skew which topic
    each passage lands in.
    """
    all_text = ""
    for pdf_path in pdf_paths:
        logger.info(f"Extracting text from {pdf_path}...")
        all_text += "\n" + extract_text(str(pdf_path), method)
    return all_text


def extract_key_principles(text: str) -> Dict[str, List[str]]:
    logger.info("Categorizing survival principles...")
    try:
        harvested = categorize_text(text)
    except TypeError as exc:
        raise PipelineError(STAGE_CATEGORIZATION, str(exc)) from exc

    try:
        return merge_core_principles(harvested)
    except (TypeError, AttributeError) as exc:
        raise PipelineError(STAGE_MERGE, f"cannot merge core principles: {exc}") from exc


def build_document(principles: Mapping[str, List[str]], source: str = SOURCE_NAME,
                   extracted_at: Optional[str] = None) -> Dict:
    return {
        "metadata": {
            "source": source,
            "extractedAt": extracted_at or utc_now_iso(),
            "totalCategories": len(principles),
            "totalPrinciples": count_principles(principles),
        },
        "principles": dict(principles),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract categorized survival principles from the handbook PDFs.")
    parser.add_argument("--pdf", type=Path, nargs="*", default=PDF_FILES, help="Source PDF files, in order")
    parser.add_argument("--text-file", type=Path, help="Use already-extracted text instead of the PDFs")
    parser.add_argument("--output", type=Path, default=PRINCIPLES_PATH, help="Knowledge base JSON to write")
    parser.add_argument(
        "--method",
        choices=[m.value for m in ExtractionMethod],
        default="auto",
        help="PDF extraction method (default: auto)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    print("Starting survival principles extraction...\n")
    try:
        if args.text_file:
            all_text = read_text(args.text_file)
        else:
            all_text = extract_corpus(args.pdf, ExtractionMethod(args.method))
        print(f"Total text extracted: {len(all_text)} characters\n")

        principles = extract_key_principles(all_text)
        document = build_document(principles)
        write_json(args.output, document)
    except PipelineError as exc:
        logger.error(f"Error extracting survival principles: {exc}")
        sys.exit(1)

    metadata = document["metadata"]
    print("Extraction complete!")
    print(f"Output saved to: {args.output}")
    print(f"Categories: {metadata['totalCategories']}")
    print(f"Total principles: {metadata['totalPrinciples']}\n")

    print("Category breakdown:")
    for topic, items in principles.items():
        print(f"  {topic}: {len(items)} principles")


if __name__ == "__main__":
    main()
