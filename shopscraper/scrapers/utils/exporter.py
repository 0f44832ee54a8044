"""Persist scraped records to JSON or CSV."""

import csv
import json
from dataclasses import fields
from pathlib import Path
from typing import Sequence, Union

import structlog

from shopscraper.scrapers.base import Record

logger = structlog.get_logger(__name__)

RECORD_FIELDS = [f.name for f in fields(Record)]


def save_records(records: Sequence[Record], path: Union[str, Path]) -> Path:
    """Write records to ``path``; the format follows the file extension.

    CSV output quotes every value and doubles embedded quotes.

    Args:
        records: Records to write
        path: Destination ending in .json or .csv

    Returns:
        The written path

    Raises:
        ValueError: If the extension is not supported
    """
    path = Path(path)
    ext = path.suffix.lower()

    if ext == ".json":
        path.write_text(
            json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    elif ext == ".csv":
        with path.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh, quoting=csv.QUOTE_ALL, lineterminator="\n")
            writer.writerow(RECORD_FIELDS)
            for record in records:
                row = record.to_dict()
                writer.writerow(["" if row[name] is None else row[name] for name in RECORD_FIELDS])
    else:
        raise ValueError(f"Unsupported output format: {path.suffix or path.name}")

    logger.info("records_saved", path=str(path), count=len(records))
    return path
