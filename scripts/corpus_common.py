#!/usr/bin/env python3
"""Shared paths, I/O helpers and error types for the survival principles tooling."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

PROJECT_ROOT = Path(__file__).resolve().parent.parent
REFERENCE_DIR = PROJECT_ROOT / "survival-reference"
DATA_DIR = PROJECT_ROOT / "src" / "data"
PRINCIPLES_PATH = DATA_DIR / "survivalPrinciples.json"

BACKUP_SUFFIX = ".backup"
SOURCE_NAME = "SAS Survival Handbook"

# Pipeline stages, used to label fatal errors
STAGE_EXTRACTION = "extraction"
STAGE_CATEGORIZATION = "categorization"
STAGE_CLASSIFICATION = "classification"
STAGE_MERGE = "merge"
STAGE_IO = "file I/O"


class PipelineError(RuntimeError):
    """A fatal pipeline failure, tagged with the stage it happened in."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage


class MalformedInputError(PipelineError):
    """The knowledge base document is not valid JSON or lacks a principles mapping."""

    def __init__(self, message: str):
        super().__init__(STAGE_IO, message)


class PipelineIOError(PipelineError):
    def __init__(self, message: str):
        super().__init__(STAGE_IO, message)


class ExtractionError(PipelineError):
    """Raw text could not be produced from a source PDF."""

    def __init__(self, message: str):
        super().__init__(STAGE_EXTRACTION, message)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def backup_path_for(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PipelineIOError(f"cannot read {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"{path} is not valid UTF-8: {exc}") from exc


def write_text(path: Path, content: str) -> None:
    """Replace ``path`` in one step: write a sibling temp file, then rename it over."""
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise PipelineIOError(f"cannot write {path}: {exc}") from exc


def read_json(path: Path) -> Any:
    text = read_text(path)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"{path} is not valid JSON: {exc}") from exc


def dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_json(path: Path, payload: Any) -> None:
    write_text(path, dump_json(payload))


def count_principles(principles: Dict[str, list]) -> int:
    return sum(len(items) for items in principles.values())
