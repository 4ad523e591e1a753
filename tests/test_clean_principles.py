#!/usr/bin/env python3
"""Tests for the cleaning pass (scripts/clean_principles.py)"""

import copy
import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

import clean_principles
from clean_principles import (
    CLEANING_NOTE,
    CategoryRetention,
    clean_document,
    find_borderline_cases,
    load_document,
    run_cleaning,
    write_cleaned_dataset,
)
from core_principles import CORE_PRINCIPLES
from corpus_common import (
    STAGE_CLASSIFICATION,
    MalformedInputError,
    PipelineError,
    PipelineIOError,
    backup_path_for,
)

CLEANED_AT = "2026-01-02T00:00:00+00:00"

CLEAN_FIRE = CORE_PRINCIPLES['fire'] + CORE_PRINCIPLES['weather'][:2]
DIRTY_FIRE = [
    "-- 5 of 376 --",
    "too short",
    "No punctuation at the end of this one",
    42,
]


def make_document():
    return {
        "metadata": {
            "source": "SAS Survival Handbook",
            "extractedAt": "2026-01-01T00:00:00+00:00",
            "totalCategories": 2,
            "totalPrinciples": 14,
        },
        "principles": {
            "fire": CLEAN_FIRE[:3] + DIRTY_FIRE[:2] + CLEAN_FIRE[3:] + DIRTY_FIRE[2:],
            "water": list(CORE_PRINCIPLES['water']),
        },
    }


@pytest.fixture
def dataset_path(tmp_path):
    path = tmp_path / "survivalPrinciples.json"
    path.write_text(json.dumps(make_document(), indent=2), encoding="utf-8")
    return path


# ─── Cleaning ─────────────────────────────────────────────────────────────

class TestCleanDocument:
    def test_sixty_percent_retention(self):
        result = clean_document(make_document(), cleaned_at=CLEANED_AT)
        fire = result.report.category('fire')
        assert (fire.original_count, fire.cleaned_count) == (10, 6)
        assert fire.retention_percent == 60
        assert result.report.total_removed == 4

    def test_total_reduced_by_removed(self):
        original = make_document()
        result = clean_document(original, cleaned_at=CLEANED_AT)
        assert result.document['metadata']['totalPrinciples'] == original['metadata']['totalPrinciples'] - 4

    def test_total_matches_buckets(self):
        result = clean_document(make_document(), cleaned_at=CLEANED_AT)
        principles = result.document['principles']
        assert result.document['metadata']['totalPrinciples'] == sum(len(v) for v in principles.values())

    def test_clean_entries_kept_in_order(self):
        result = clean_document(make_document(), cleaned_at=CLEANED_AT)
        assert result.document['principles']['fire'] == CLEAN_FIRE
        assert result.document['principles']['water'] == CORE_PRINCIPLES['water']

    def test_metadata_stamped(self):
        result = clean_document(make_document(), cleaned_at=CLEANED_AT)
        metadata = result.document['metadata']
        assert metadata['cleanedAt'] == CLEANED_AT
        assert metadata['cleaningNote'] == CLEANING_NOTE
        assert metadata['extractedAt'] == "2026-01-01T00:00:00+00:00"
        assert metadata['source'] == "SAS Survival Handbook"

    def test_cleaned_at_defaults_to_now(self):
        result = clean_document(make_document())
        assert result.document['metadata']['cleanedAt'] != "2026-01-01T00:00:00+00:00"

    def test_idempotent(self):
        once = clean_document(make_document(), cleaned_at=CLEANED_AT)
        twice = clean_document(once.document, cleaned_at=CLEANED_AT)
        assert twice.document == once.document
        assert twice.report.total_removed == 0
        assert all(c.retention_percent == 100 for c in twice.report.categories)

    def test_input_not_modified(self):
        original = make_document()
        snapshot = copy.deepcopy(original)
        clean_document(original, cleaned_at=CLEANED_AT)
        assert original == snapshot

    def test_rejection_reasons_counted(self):
        result = clean_document(make_document(), cleaned_at=CLEANED_AT)
        assert result.report.category('fire').reasons == {'length': 2, 'punctuation': 1, 'type': 1}

    def test_non_list_category(self):
        document = make_document()
        document['principles']['fire'] = "not a list"
        with pytest.raises(PipelineError) as excinfo:
            clean_document(document)
        assert excinfo.value.stage == STAGE_CLASSIFICATION
        assert "[classification]" in str(excinfo.value)

    def test_empty_category(self):
        document = make_document()
        document['principles']['food'] = []
        result = clean_document(document, cleaned_at=CLEANED_AT)
        assert result.report.category('food').retention_percent == 100
        assert result.document['principles']['food'] == []

    def test_custom_artifacts(self):
        result = clean_document(make_document(), artifacts=("Fire",), cleaned_at=CLEANED_AT)
        assert not any("Fire" in p for p in result.document['principles']['fire'])


class TestRetention:
    def test_half_rounds_up(self):
        assert CategoryRetention('x', 8, 5).retention_percent == 63

    def test_rounding_down(self):
        assert CategoryRetention('x', 3, 1).retention_percent == 33

    def test_removed_count(self):
        assert CategoryRetention('x', 10, 6).removed_count == 4


# ─── Loading ──────────────────────────────────────────────────────────────

class TestLoadDocument:
    def test_valid(self, dataset_path):
        assert load_document(dataset_path) == make_document()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MalformedInputError):
            load_document(path)

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"principles": {"fire": ["\xff\xfe bad"]}}')
        with pytest.raises(MalformedInputError, match="UTF-8"):
            load_document(path)

    def test_missing_principles(self, tmp_path):
        path = tmp_path / "no_principles.json"
        path.write_text(json.dumps({"metadata": {}}), encoding="utf-8")
        with pytest.raises(MalformedInputError):
            load_document(path)

    def test_principles_not_mapping(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps({"principles": ["a"]}), encoding="utf-8")
        with pytest.raises(MalformedInputError):
            load_document(path)

    def test_top_level_not_object(self, tmp_path):
        path = tmp_path / "array.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(MalformedInputError):
            load_document(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(PipelineIOError):
            load_document(tmp_path / "absent.json")


# ─── Borderline review ────────────────────────────────────────────────────

class TestBorderlineCases:
    def test_capped_per_category(self):
        document = {"principles": {
            "fire": [
                "Boil water first.",
                "No punctuation in this sentence here",
                "Another without punctuation here ok",
                "Fourth one missing the punctuation",
                "Clean sentence with an ending.",
            ],
            "water": list(CORE_PRINCIPLES['water']),
        }}
        cases = find_borderline_cases(document)
        assert cases == {"fire": document["principles"]["fire"][:3]}

    def test_read_only(self):
        document = make_document()
        snapshot = copy.deepcopy(document)
        find_borderline_cases(document)
        assert document == snapshot

    def test_scans_original_entries(self):
        cases = find_borderline_cases(make_document())
        assert cases == {"fire": ["No punctuation at the end of this one"]}


# ─── Writing ──────────────────────────────────────────────────────────────

class TestWriteCleanedDataset:
    def test_backup_then_overwrite(self, dataset_path):
        original = load_document(dataset_path)
        cleaned = clean_document(original, cleaned_at=CLEANED_AT).document

        backup = write_cleaned_dataset(original, cleaned, dataset_path)

        assert backup == backup_path_for(dataset_path)
        assert backup.name == "survivalPrinciples.json.backup"
        assert json.loads(backup.read_text(encoding="utf-8")) == original
        assert json.loads(dataset_path.read_text(encoding="utf-8")) == cleaned

    def test_backup_is_pretty_printed(self, dataset_path):
        original = load_document(dataset_path)
        backup = write_cleaned_dataset(original, original, dataset_path)
        assert backup.read_text(encoding="utf-8").startswith('{\n  "metadata"')

    def test_failed_backup_leaves_original(self, dataset_path):
        before = dataset_path.read_text(encoding="utf-8")
        original = load_document(dataset_path)
        calls = []

        def failing_write(path, payload):
            calls.append(path)
            raise PipelineIOError("disk full")

        with patch("clean_principles.write_json", side_effect=failing_write):
            with pytest.raises(PipelineIOError):
                write_cleaned_dataset(original, {"principles": {}}, dataset_path)

        assert calls == [backup_path_for(dataset_path)]
        assert dataset_path.read_text(encoding="utf-8") == before


# ─── End to end ───────────────────────────────────────────────────────────

class TestRunCleaning:
    def test_cleans_in_place(self, dataset_path, capsys):
        result = run_cleaning(dataset_path)

        written = json.loads(dataset_path.read_text(encoding="utf-8"))
        assert written == result.document
        assert written['metadata']['totalPrinciples'] == 10
        assert json.loads(backup_path_for(dataset_path).read_text(encoding="utf-8")) == make_document()

        out = capsys.readouterr().out
        assert "fire: 10 → 6 (60% retained)" in out
        assert "Total: 14 → 10 principles" in out
        assert "BORDERLINE CASES" in out
        assert '"No punctuation at the end of this one"' in out

    def test_dry_run_writes_nothing(self, dataset_path):
        before = dataset_path.read_text(encoding="utf-8")
        run_cleaning(dataset_path, dry_run=True)
        assert dataset_path.read_text(encoding="utf-8") == before
        assert not backup_path_for(dataset_path).exists()

    def test_malformed_input_writes_nothing(self, tmp_path):
        path = tmp_path / "survivalPrinciples.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(MalformedInputError):
            run_cleaning(path)
        assert not backup_path_for(path).exists()

    def test_main_exits_on_error(self, tmp_path, monkeypatch):
        path = tmp_path / "broken.json"
        path.write_text("not json", encoding="utf-8")
        monkeypatch.setattr(sys, "argv", ["clean_principles.py", "--input", str(path)])
        with pytest.raises(SystemExit) as excinfo:
            clean_principles.main()
        assert excinfo.value.code == 1

    def test_main_exits_on_undecodable_file(self, tmp_path, monkeypatch):
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe")
        monkeypatch.setattr(sys, "argv", ["clean_principles.py", "--input", str(path)])
        with pytest.raises(SystemExit) as excinfo:
            clean_principles.main()
        assert excinfo.value.code == 1
        assert not backup_path_for(path).exists()
