#!/usr/bin/env python3
"""
Principles Cleanup Script — filters PDF artifacts out of the knowledge base.

Every principle in src/data/survivalPrinciples.json is run through the
quality filters in principle_filters.py; only clean ones are kept. The
original document is copied to survivalPrinciples.json.backup before the
cleaned document overwrites it.

After cleaning, near-miss principles from the original document (15-19
characters, or missing terminal punctuation) are listed for manual review.

Usage:
    python scripts/clean_principles.py                 # clean in place
    python scripts/clean_principles.py --dry-run       # report only, write nothing
    python scripts/clean_principles.py --input other.json --corpus sas_handbook
"""

import argparse
import logging
import math
import sys
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from corpus_common import (
    PRINCIPLES_PATH,
    STAGE_CLASSIFICATION,
    MalformedInputError,
    PipelineError,
    backup_path_for,
    count_principles,
    read_json,
    utc_now_iso,
    write_json,
)
from principle_filters import (
    CORPUS_ARTIFACTS,
    DEFAULT_CORPUS,
    SAS_HANDBOOK_ARTIFACTS,
    artifacts_for,
    is_borderline,
    rejection_reason,
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

CLEANING_NOTE = 'Filtered PDF artifacts using automated script'
BORDERLINE_EXAMPLES_PER_CATEGORY = 3


@dataclass(frozen=True)
class CategoryRetention:
    """How many principles of one category survived cleaning."""
    category: str
    original_count: int
    cleaned_count: int
    reasons: Dict[str, int] = field(default_factory=dict)

    @property
    def removed_count(self) -> int:
        return self.original_count - self.cleaned_count

    @property
    def retention_percent(self) -> int:
        if self.original_count == 0:
            return 100
        # Half rounds up, not to even
        return math.floor(self.cleaned_count / self.original_count * 100 + 0.5)


@dataclass(frozen=True)
class CleaningReport:
    categories: Tuple[CategoryRetention, ...]

    @property
    def total_original(self) -> int:
        return sum(c.original_count for c in self.categories)

    @property
    def total_cleaned(self) -> int:
        return sum(c.cleaned_count for c in self.categories)

    @property
    def total_removed(self) -> int:
        return self.total_original - self.total_cleaned

    def category(self, name: str) -> CategoryRetention:
        for retention in self.categories:
            if retention.category == name:
                return retention
        raise KeyError(name)


@dataclass(frozen=True)
class CleaningResult:
    document: Dict[str, Any]
    report: CleaningReport


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def validate_document(document: Any) -> Mapping[str, Any]:
    """Check the top-level shape; returns the principles mapping."""
    if not isinstance(document, dict):
        raise MalformedInputError("knowledge base must be a JSON object")
    principles = document.get('principles')
    if not isinstance(principles, dict):
        raise MalformedInputError("knowledge base has no 'principles' mapping")
    return principles


def load_document(path: Path) -> Dict[str, Any]:
    document = read_json(path)
    validate_document(document)
    return document


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------

def clean_category(category: str, items: Any,
                   artifacts: Iterable[str]) -> Tuple[List[str], CategoryRetention]:
    if not isinstance(items, list):
        raise PipelineError(STAGE_CLASSIFICATION,
                            f"category '{category}' holds {type(items).__name__}, expected a list")

    kept: List[str] = []
    reasons: Counter = Counter()
    for item in items:
        reason = rejection_reason(item, artifacts)
        if reason is None:
            kept.append(item)
            continue
        if reason == 'type':
            logger.debug(f"{category}: dropping non-string entry {item!r}")
        reasons[reason] += 1

    return kept, CategoryRetention(category, len(items), len(kept), dict(reasons))


def clean_document(document: Mapping[str, Any],
                   artifacts: Iterable[str] = SAS_HANDBOOK_ARTIFACTS,
                   cleaned_at: Optional[str] = None,
                   note: str = CLEANING_NOTE) -> CleaningResult:
    """
    Filter every category of ``document`` and return a new document plus a
    retention report. The input is left untouched.

    Running this again on its own output keeps every principle; only the
    cleanedAt stamp moves.
    """
    principles = validate_document(document)
    artifacts = tuple(artifacts)

    cleaned_principles: Dict[str, List[str]] = {}
    retention: List[CategoryRetention] = []
    for category, items in principles.items():
        kept, stats = clean_category(category, items, artifacts)
        cleaned_principles[category] = kept
        retention.append(stats)

    metadata = dict(document.get('metadata') or {})
    metadata['cleanedAt'] = cleaned_at or utc_now_iso()
    metadata['cleaningNote'] = note
    metadata['totalCategories'] = len(cleaned_principles)
    metadata['totalPrinciples'] = count_principles(cleaned_principles)

    cleaned = {**document, 'metadata': metadata, 'principles': cleaned_principles}
    return CleaningResult(cleaned, CleaningReport(tuple(retention)))


def find_borderline_cases(document: Mapping[str, Any],
                          limit: int = BORDERLINE_EXAMPLES_PER_CATEGORY) -> Dict[str, List[str]]:
    """Collect up to ``limit`` near-miss principles per category. Read-only."""
    cases: Dict[str, List[str]] = {}
    for category, items in validate_document(document).items():
        if not isinstance(items, list):
            continue
        borderline = [item for item in items if is_borderline(item)][:limit]
        if borderline:
            cases[category] = borderline
    return cases


def write_cleaned_dataset(original: Mapping[str, Any], cleaned: Mapping[str, Any], path: Path) -> Path:
    """
    Back up ``original`` next to ``path``, then overwrite ``path`` with ``cleaned``.

    The overwrite only starts once the backup is on disk; if the backup write
    fails the original file is never touched.
    """
    backup_path = backup_path_for(path)
    write_json(backup_path, original)
    write_json(path, cleaned)
    return backup_path


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

def print_report(report: CleaningReport, verbose: bool = False) -> None:
    print('\nCleaning principles by category:')
    for stats in report.categories:
        print(f"  {stats.category}: {stats.original_count} → {stats.cleaned_count} "
              f"({stats.retention_percent}% retained)")
        if verbose and stats.reasons:
            for reason, count in sorted(stats.reasons.items()):
                print(f"      - {reason}: {count}")

    print(f"\nTotal: {report.total_original} → {report.total_cleaned} principles")
    print(f"Removed: {report.total_removed} noisy principles")


def print_borderline(cases: Mapping[str, List[str]]) -> None:
    print('\n--- BORDERLINE CASES FOR MANUAL REVIEW ---')
    print('(Principles between 15-19 characters or missing punctuation)\n')
    for category, examples in cases.items():
        print(f"{category}:")
        for example in examples:
            print(f'  - "{example}"')
        print()


def run_cleaning(path: Path, artifacts: Iterable[str] = SAS_HANDBOOK_ARTIFACTS,
                 dry_run: bool = False, verbose: bool = False) -> CleaningResult:
    print('Reading survival principles...')
    original = load_document(path)

    result = clean_document(original, artifacts)
    print_report(result.report, verbose)

    if dry_run:
        print('\nDry run: nothing written.')
    else:
        print('\nCreating backup and writing cleaned data...')
        backup_path = write_cleaned_dataset(original, result.document, path)
        print(f"✓ Done! Original backed up to {backup_path.name}")

    print_borderline(find_borderline_cases(original))
    return result


def main():
    parser = argparse.ArgumentParser(description="Filter PDF artifacts out of the survival principles JSON")
    parser.add_argument('--input', type=Path, default=PRINCIPLES_PATH, help="Knowledge base JSON to clean in place")
    parser.add_argument('--corpus', choices=sorted(CORPUS_ARTIFACTS), default=DEFAULT_CORPUS,
                        help="Which artifact denylist to apply")
    parser.add_argument('--dry-run', action='store_true', help="Report what would be removed without writing")
    parser.add_argument('-v', '--verbose', action='store_true', help="Show rejection reasons per category")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        run_cleaning(args.input, artifacts_for(args.corpus), args.dry_run, args.verbose)
    except PipelineError as e:
        logger.error(f"Cleaning failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
