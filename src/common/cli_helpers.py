"""Common CLI helper utilities."""

from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from common.local_io import write_json_local


def setup_logging() -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def parse_date(value: str, field_name: str = "date") -> date:
    """Parse a date string for argparse arguments.

    Args:
        value: Date string in YYYY-MM-DD format.
        field_name: Name of the field for error messages.

    Returns:
        Parsed date object.

    Raises:
        argparse.ArgumentTypeError: If the value is not a valid date.
    """
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{field_name} must be YYYY-MM-DD") from exc


def parse_years_forward(value: str) -> int:
    """Parse a years-forward offset for argparse arguments."""
    try:
        years = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("years-forward must be an integer") from exc
    if not 0 <= years <= 10:
        raise argparse.ArgumentTypeError("years-forward must be between 0 and 10")
    return years


def save_json_local(
    payload: dict[str, Any],
    prefix: str,
    timestamp: datetime,
    output_dir: str = "output",
) -> Path:
    """Write a CLI result to `<output_dir>/<prefix>_<YYYY_MM_DD_HH_MM>.json`.

    Args:
        payload: JSON-serializable dictionary.
        prefix: Filename prefix (e.g., "daily_curation_2026-01-05").
        timestamp: Run time stamped into the filename.
        output_dir: Directory to save to (default: "output").

    Returns:
        Path to the created file.
    """
    filename = f"{prefix}_{timestamp.strftime('%Y_%m_%d_%H_%M')}.json"
    return write_json_local(payload, Path(output_dir) / filename)
