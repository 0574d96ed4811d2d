"""Value normalization helpers shared by readers, canonicalizer and merge.

All helpers accept raw cell values (str, numbers, dates or None) and return
plain strings; an empty string means "no value".
"""
import math
import re
import warnings
from datetime import date, datetime, time
from typing import Any, Optional

import pandas as pd

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_NON_DIGIT = re.compile(r"\D")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PHONE_DIGITS = 10


def cell_text(value: Any) -> str:
    """Render a raw cell value as trimmed text.
    
    Spreadsheet readers hand back numbers and datetimes; they are rendered
    the way a person would type them (no trailing ``.0``, ISO dates).
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, datetime):
        if (value.hour, value.minute, value.second) == (0, 0, 0):
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def norm_key(label: Any) -> str:
    """Lowercase a column label and drop everything but [a-z0-9].
    
    "Patient Name", "patient_name" and "PATIENT-NAME" all become "patientname".
    """
    return _NON_ALNUM.sub("", cell_text(label).lower())


def norm_name(value: Any) -> str:
    """Normalize a person name for identity matching."""
    return _NON_ALNUM.sub("", cell_text(value).lower())


def digits_only(value: Any) -> str:
    """Strip every non-digit character."""
    return _NON_DIGIT.sub("", cell_text(value))


def norm_phone(value: Any) -> str:
    """Return exactly 10 digits, or empty.
    
    Longer numbers (country code, extensions glued on) keep their last 10
    digits; anything shorter than 10 digits is not a usable phone.
    """
    digits = digits_only(value)
    if len(digits) < PHONE_DIGITS:
        return ""
    return digits[-PHONE_DIGITS:]


def norm_date(value: Any) -> str:
    """Return YYYY-MM-DD when the value parses as a date.
    
    Values already in ISO form are kept verbatim; values that do not parse
    are returned trimmed but otherwise untouched, never discarded.
    """
    if isinstance(value, (datetime, date)) and value is not pd.NaT:
        return value.strftime("%Y-%m-%d")
    text = cell_text(value)
    if not text:
        return ""
    if _ISO_DATE.match(text):
        return text
    parsed = _parse_date(text)
    return parsed if parsed is not None else text


def _parse_date(text: str) -> Optional[str]:
    """Generic date parse through pandas; None when the text is not a date."""
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.strftime("%Y-%m-%d")
