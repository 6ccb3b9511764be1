"""Adapters from raw store rows to the typed records the engines consume.

Rows arrive as plain dicts with the store's column names (``activity_date``,
``activity_type``, ``deal_id`` and so on). Every coercion here degrades to a
neutral value instead of raising, so a half-filled row never breaks a report.
Only :func:`load_records_file` raises, because a missing or malformed file is
a caller problem rather than a data-quality one.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, TypeVar

import yaml
from loguru import logger

from .models import (
    ActivityKind,
    ActivityRecord,
    ContactType,
    DealFinancialInputs,
    DealRecord,
    DealStage,
    Venue,
)

E = TypeVar("E", bound=Enum)

_TRUTHY = {"true", "t", "yes", "y", "1", "on"}

# Form-style keys accepted alongside the dataclass field names
_INPUT_ALIASES: dict[str, str] = {
    "askingPrice": "asking_price",
    "downPayment": "down_payment_pct",
    "down_payment": "down_payment_pct",
    "sellerNotePercent": "seller_note_pct",
    "seller_note_percent": "seller_note_pct",
    "sbaRate": "sba_rate_annual_pct",
    "sba_rate": "sba_rate_annual_pct",
    "sbaTerm": "sba_term_years",
    "sba_term": "sba_term_years",
    "sellerNoteRate": "seller_note_rate_annual_pct",
    "seller_note_rate": "seller_note_rate_annual_pct",
    "sellerNoteTerm": "seller_note_term_years",
    "seller_note_term": "seller_note_term_years",
}


class RecordsFileError(Exception):
    """Raised when a records file cannot be read or has the wrong shape."""

    pass


# ----------------------------------------------------------------------
# Scalar coercion
# ----------------------------------------------------------------------
def safe_float(value: Any, default: float = 0.0) -> float:
    """Convert loosely formatted numbers ("1,250,000", "$3.5e6") to float.

    None, blanks, non-numeric text, NaN and infinities all yield ``default``.
    """
    if value is None:
        return default
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return default
    else:
        text = str(value).replace(",", "").replace("$", "").strip()
        if not text:
            return default
        try:
            number = float(text)
        except ValueError:
            return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def safe_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    return str(value).strip().lower() in _TRUTHY


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse ISO-8601 strings, dates and datetimes; anything else is None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Unparseable activity timestamp: {!r}", value)
        return None


def coerce_enum(enum_cls: type[E], value: Any, fallback: E) -> E:
    """Map a raw category onto ``enum_cls``, falling back for unknown values.

    Matches member values exactly first, then values and names
    case-insensitively with surrounding whitespace ignored.
    """
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return fallback
    text = str(value).strip()
    for member in enum_cls:
        if member.value == text:
            return member
    lowered = text.lower()
    for member in enum_cls:
        if str(member.value).lower() == lowered or member.name.lower() == lowered:
            return member
    logger.warning("Unknown {} value {!r}; using {}", enum_cls.__name__, value, fallback.value)
    return fallback


def _optional_enum(enum_cls: type[E], value: Any, fallback: E) -> Optional[E]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_enum(enum_cls, value, fallback)


def _optional_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ----------------------------------------------------------------------
# Row adapters
# ----------------------------------------------------------------------
def activity_from_row(row: Mapping[str, Any]) -> ActivityRecord:
    """Build an :class:`ActivityRecord` from an ``activities`` table row."""
    description = row.get("description")
    if "description_length" in row:
        description_length = int(safe_float(row.get("description_length")))
    else:
        description_length = len(description) if isinstance(description, str) else 0

    return ActivityRecord(
        timestamp=parse_timestamp(row.get("activity_date", row.get("timestamp"))),
        is_outbound=safe_bool(row.get("is_outbound")),
        got_response=safe_bool(row.get("got_response")),
        is_public_share=safe_bool(row.get("is_public_share")),
        generated_lead=safe_bool(row.get("generated_lead")),
        activity_kind=coerce_enum(
            ActivityKind,
            row.get("activity_type", row.get("activity_kind")),
            ActivityKind.NOTE,
        ),
        contact_type=_optional_enum(ContactType, row.get("contact_type"), ContactType.OTHER),
        venue=_optional_enum(Venue, row.get("venue"), Venue.OTHER),
        associated_deal_id=_optional_id(row.get("deal_id", row.get("associated_deal_id"))),
        description_length=max(description_length, 0),
    )


def deal_from_row(row: Mapping[str, Any]) -> DealRecord:
    """Build a :class:`DealRecord` from a ``deals`` table row."""
    return DealRecord(
        stage=coerce_enum(DealStage, row.get("stage"), DealStage.IDENTIFIED),
        deal_id=_optional_id(row.get("id", row.get("deal_id"))),
    )


def inputs_from_mapping(values: Mapping[str, Any]) -> DealFinancialInputs:
    """Build :class:`DealFinancialInputs` from form or store values.

    Keys that are missing keep the dataclass defaults; keys that are present
    but unusable coerce to 0.
    """
    known = set(DealFinancialInputs.__dataclass_fields__)
    kwargs: dict[str, float] = {}
    for key, raw in values.items():
        name = _INPUT_ALIASES.get(key, key)
        if name in known:
            kwargs[name] = safe_float(raw)
    return DealFinancialInputs(**kwargs)


def activities_from_rows(rows: Iterable[Mapping[str, Any]]) -> list[ActivityRecord]:
    return [activity_from_row(row) for row in rows if isinstance(row, Mapping)]


def deals_from_rows(rows: Iterable[Mapping[str, Any]]) -> list[DealRecord]:
    return [deal_from_row(row) for row in rows if isinstance(row, Mapping)]


# ----------------------------------------------------------------------
# File loading
# ----------------------------------------------------------------------
def load_records_file(path: Path) -> tuple[list[ActivityRecord], list[DealRecord]]:
    """Load activities and deals from a JSON or YAML export.

    The file holds a mapping with ``activities`` and ``deals`` lists of rows.
    Either list may be omitted.

    Raises:
        RecordsFileError: If the file is unreadable, has an unsupported
            suffix or is not shaped as described.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".yaml", ".yml"):
        raise RecordsFileError(f"Unsupported records file type '{suffix}' (use .json, .yaml or .yml)")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f) if suffix == ".json" else yaml.safe_load(f)
    except FileNotFoundError as e:
        raise RecordsFileError(f"Records file not found: {path}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise RecordsFileError(f"Invalid records file {path}: {e}") from e
    except OSError as e:
        raise RecordsFileError(f"Failed to read {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise RecordsFileError(f"Records file {path} must contain a mapping with 'activities' and 'deals'")

    activity_rows = data.get("activities") or []
    deal_rows = data.get("deals") or []
    if not isinstance(activity_rows, list) or not isinstance(deal_rows, list):
        raise RecordsFileError(f"'activities' and 'deals' in {path} must be lists")

    activities = activities_from_rows(activity_rows)
    deals = deals_from_rows(deal_rows)
    logger.info("Loaded {} activities and {} deals from {}", len(activities), len(deals), path)
    return activities, deals


__all__ = [
    "RecordsFileError",
    "activities_from_rows",
    "activity_from_row",
    "coerce_enum",
    "deal_from_row",
    "deals_from_rows",
    "inputs_from_mapping",
    "load_records_file",
    "parse_timestamp",
    "safe_bool",
    "safe_float",
]
