#!/usr/bin/env python3
"""
PDF text source for the survival handbook.

Turns a PDF into one text blob, page texts joined by newlines. Backends, in
order of preference for AUTO:

1. PyMuPDF (fitz) - fast, handles most modern PDFs
2. pdfplumber - slower, better on odd layouts
3. PyPDF2 - last resort, copes with some encrypted files

Scanned pages with no text layer are OCR'd with Tesseract (pytesseract +
Pillow, rendered through PyMuPDF) when it is installed.

Usage:
    python scripts/extract_pdf.py handbook.pdf -o handbook.txt
    python scripts/extract_pdf.py handbook.pdf -m pdfplumber --no-ocr-fallback
    python scripts/extract_pdf.py --check-deps
"""

import argparse
import importlib
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List

from corpus_common import ExtractionError, PipelineError, write_text

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

OCR_DPI = 300
OCR_LANG = "eng"


class ExtractionMethod(Enum):
    PYMUPDF = "pymupdf"
    PDFPLUMBER = "pdfplumber"
    PYPDF2 = "pypdf2"
    OCR = "ocr"
    AUTO = "auto"


AUTO_ORDER = (ExtractionMethod.PYMUPDF, ExtractionMethod.PDFPLUMBER, ExtractionMethod.PYPDF2)


class DependencyChecker:
    """Probe optional PDF libraries once and remember the answer."""

    MODULES = {
        "pymupdf": "fitz",
        "pdfplumber": "pdfplumber",
        "pypdf2": "PyPDF2",
        "tesseract": "pytesseract",
        "pillow": "PIL.Image",
    }

    _cache: Dict[str, bool] = {}

    @classmethod
    def check(cls, library: str) -> bool:
        if library not in cls._cache:
            cls._cache[library] = cls._probe(library)
        return cls._cache[library]

    @classmethod
    def _probe(cls, library: str) -> bool:
        try:
            module = importlib.import_module(cls.MODULES[library])
        except ImportError:
            return False
        if library == "tesseract":
            # The Python wrapper is useless without the tesseract binary
            try:
                module.get_tesseract_version()
            except Exception:
                return False
        return True

    @classmethod
    def check_all(cls) -> Dict[str, bool]:
        return {library: cls.check(library) for library in cls.MODULES}

    @classmethod
    def ocr_available(cls) -> bool:
        return cls.check("tesseract") and cls.check("pillow") and cls.check("pymupdf")

    @classmethod
    def available_methods(cls) -> List[ExtractionMethod]:
        methods = [method for method in AUTO_ORDER if cls.check(method.value)]
        if cls.ocr_available():
            methods.append(ExtractionMethod.OCR)
        return methods

    @classmethod
    def print_status(cls):
        print("\nDependency Status:")
        print("-" * 40)
        for name, available in cls.check_all().items():
            status = "✓ Available" if available else "✗ Missing"
            print(f"  {name:15} {status}")

        methods = cls.available_methods()
        print(f"\nAvailable extraction methods: {', '.join(m.value for m in methods) or 'none'}")
        if not methods:
            print("Install at least one: pip install pymupdf pdfplumber PyPDF2")


# ---------------------------------------------------------------------------
# Page readers
# ---------------------------------------------------------------------------

def read_pages_pymupdf(pdf_path: str) -> List[str]:
    import fitz
    with fitz.open(pdf_path) as doc:
        return [page.get_text("text") or "" for page in doc]


def read_pages_pdfplumber(pdf_path: str) -> List[str]:
    import pdfplumber
    with pdfplumber.open(pdf_path) as pdf:
        return [page.extract_text() or "" for page in pdf.pages]


def read_pages_pypdf2(pdf_path: str) -> List[str]:
    from PyPDF2 import PdfReader
    reader = PdfReader(pdf_path)
    if reader.is_encrypted:
        reader.decrypt('')
    return [page.extract_text() or "" for page in reader.pages]


def ocr_page(pdf_path: str, page_index: int, dpi: int = OCR_DPI, lang: str = OCR_LANG) -> str:
    """Render one page with PyMuPDF and run Tesseract over the image."""
    import fitz
    import pytesseract
    from PIL import Image

    with fitz.open(pdf_path) as doc:
        page = doc[page_index]
        zoom = dpi / 72
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom))
        image = Image.frombytes("RGB", [pix.width, pix.height], pix.samples)
    return pytesseract.image_to_string(image, lang=lang)


PAGE_READERS: Dict[ExtractionMethod, Callable[[str], List[str]]] = {
    ExtractionMethod.PYMUPDF: read_pages_pymupdf,
    ExtractionMethod.PDFPLUMBER: read_pages_pdfplumber,
    ExtractionMethod.PYPDF2: read_pages_pypdf2,
}


def select_method(method: ExtractionMethod = ExtractionMethod.AUTO) -> ExtractionMethod:
    if method == ExtractionMethod.AUTO:
        for candidate in AUTO_ORDER:
            if DependencyChecker.check(candidate.value):
                return candidate
        raise ExtractionError("no PDF library available (pip install pymupdf)")

    if method == ExtractionMethod.OCR:
        if not DependencyChecker.ocr_available():
            raise ExtractionError("OCR requested but pytesseract, Pillow or PyMuPDF is missing")
        return method

    if not DependencyChecker.check(method.value):
        raise ExtractionError(f"requested method {method.value} is not installed")
    return method


def extract_pages(pdf_path: str, method: ExtractionMethod = ExtractionMethod.AUTO,
                  ocr_fallback: bool = True) -> List[str]:
    """Extract the text of every page, OCR'ing pages that come back empty."""
    path = Path(pdf_path)
    if not path.exists():
        raise ExtractionError(f"file not found: {pdf_path}")

    chosen = select_method(method)
    logger.info(f"Extracting: {path.name} ({path.stat().st_size / (1024 * 1024):.1f} MB) with {chosen.value}")

    try:
        if chosen == ExtractionMethod.OCR:
            page_count = len(read_pages_pymupdf(str(path)))
            return [ocr_page(str(path), index) for index in range(page_count)]

        pages = PAGE_READERS[chosen](str(path))

        if ocr_fallback and DependencyChecker.ocr_available():
            for index, text in enumerate(pages):
                if not text.strip():
                    logger.debug(f"Page {index + 1}: no text layer, trying OCR")
                    pages[index] = ocr_page(str(path), index)
    except ExtractionError:
        raise
    except Exception as e:
        raise ExtractionError(f"{chosen.value} failed on {path.name}: {e}") from e

    logger.info(f"Extracted {len(pages)} pages from {path.name}")
    return pages


def extract_text(pdf_path: str, method: ExtractionMethod = ExtractionMethod.AUTO,
                 ocr_fallback: bool = True) -> str:
    """Return the whole PDF as a single text blob. Raises ExtractionError on failure."""
    text = '\n'.join(extract_pages(pdf_path, method, ocr_fallback))
    if not text.strip():
        raise ExtractionError(f"no text content extracted from {pdf_path}")
    return text


def main():
    parser = argparse.ArgumentParser(description='Extract the text of a PDF into a single file')
    parser.add_argument('input', nargs='?', help='PDF file path')
    parser.add_argument('-o', '--output', help='Output text file (default: <input>_extracted.txt)')
    parser.add_argument('-m', '--method', choices=[m.value for m in ExtractionMethod], default='auto',
                        help='Extraction method (default: auto)')
    parser.add_argument('--no-ocr-fallback', action='store_true',
                        help='Do not OCR pages that have no text layer')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--check-deps', action='store_true', help='Show which PDF libraries are installed')
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.check_deps:
        DependencyChecker.print_status()
        sys.exit(0)

    if not args.input:
        parser.print_help()
        sys.exit(1)

    output = Path(args.output or f"{Path(args.input).stem}_extracted.txt")
    try:
        text = extract_text(args.input, ExtractionMethod(args.method), not args.no_ocr_fallback)
        write_text(output, text)
    except PipelineError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"Wrote {len(text)} characters to {output}")


if __name__ == "__main__":
    main()
