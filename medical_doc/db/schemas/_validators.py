"""Field validators shared by the record schemas."""
from __future__ import annotations

from datetime import date
from typing import Annotated, Optional

from pydantic import AfterValidator


def strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def iso_date(value: str) -> str:
    """Accept ``YYYY-MM-DD`` only; dates are compared as strings when sorting."""
    value = value.strip()
    if len(value) != 10:
        raise ValueError(f"expected a YYYY-MM-DD date, got {value!r}")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"expected a YYYY-MM-DD date, got {value!r}")
    return value


def optional_iso_date(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return iso_date(value)


RequiredText = Annotated[str, AfterValidator(strip_required)]
IsoDate = Annotated[str, AfterValidator(iso_date)]
OptionalIsoDate = Annotated[Optional[str], AfterValidator(optional_iso_date)]
