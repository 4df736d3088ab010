"""Output and exit-code helpers for a finished check."""

from __future__ import annotations

import json
from typing import Any, Dict, List, TextIO

from .page import CheckResult, Defect

EXIT_OK = 0
EXIT_DEFECTS = 1
EXIT_ERROR = 2
EXIT_CANCELLED = 3


def format_defect(defect: Defect) -> str:
    return f"{defect.url}: {defect.message}"


def write_report(defects: List[Defect], output: TextIO) -> None:
    """Write one line per defect; nothing at all when the list is empty."""
    for defect in defects:
        output.write(format_defect(defect) + "\n")


def result_to_dict(result: CheckResult) -> Dict[str, Any]:
    """Convert a check result to a JSON-serializable dict."""
    return {
        "root": result.record.root,
        "state": result.record.state.value,
        "cancelled": result.cancelled,
        "fetched": result.record.fetches,
        "defects": [
            {"url": defect.url, "message": defect.message}
            for defect in result.defects
        ],
    }


def write_json_report(result: CheckResult, output: TextIO) -> None:
    output.write(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False) + "\n")


def exit_code(defects: List[Defect], cancelled: bool) -> int:
    """Cancellation wins over defects; defects win over a clean run."""
    if cancelled:
        return EXIT_CANCELLED
    if defects:
        return EXIT_DEFECTS
    return EXIT_OK
