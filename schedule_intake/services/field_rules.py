"""Header synonym table and ordered fallback rules for canonical fields.

Two stages resolve each canonical field from a raw row:

1. ``FIELD_SYNONYMS`` - ordered header variants, compared by ``norm_key``.
   The first synonym carrying a non-blank value wins.
2. ``FALLBACK_RULES`` - consulted only for fields the synonyms left empty.
   Each rule is a pure function ``(raw_row) -> value | None``; rules run in
   table order and the first non-None result short-circuits the rest.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from schedule_intake.services.normalize import (
    PHONE_DIGITS,
    cell_text,
    digits_only,
    norm_key,
    norm_phone,
)

RawRow = Dict[str, Any]


FIELD_SYNONYMS: Dict[str, List[str]] = {
    "patient_name": [
        "patient_name", "patientname", "name", "fullname", "patient", "client",
    ],
    "health_number": [
        "healthnumber", "health_number", "ahn", "uhc", "hin", "phn",
    ],
    "appointment_reason": [
        "reason", "appointment_reason", "appointmentreason", "visitreason",
        "type", "service",
    ],
    "appointment_day": [
        "appointment_day", "appointmentdate", "appointment_date", "date", "day",
        "apptdate", "time_and_date",
    ],
    "appointment_time": [
        "appointment_time", "time", "appttime", "starttime", "start_time",
        "time_and_date",
    ],
    "doctor_name": [
        "doctor", "doctor_name", "providername", "provider", "physician",
    ],
}

PHONE_HINTS = ("phone", "phonenumber", "cell", "mobile", "contact")

_COMBINED_SEPARATOR = re.compile(r"\s*[-:]\s*")


def build_lookup(raw: RawRow) -> Dict[str, Any]:
    """Index raw values by normalized label; later columns win on collision."""
    return {norm_key(label): value for label, value in raw.items()}


def lookup_synonyms(lookup: Dict[str, Any], synonyms: List[str]) -> str:
    """Return the first non-blank value among the synonyms, or ''."""
    for synonym in synonyms:
        value = cell_text(lookup.get(norm_key(synonym)))
        if value:
            return value
    return ""


def _columns(raw: RawRow) -> Iterator[Tuple[str, str, Any]]:
    """Yield (label, normalized label, value) in raw-row order."""
    for label, value in raw.items():
        yield label, norm_key(label), value


def _first_value(raw: RawRow, predicate: Callable[[str], bool]) -> Optional[str]:
    """Trimmed value of the first column whose normalized label matches."""
    for _, nk, value in _columns(raw):
        if predicate(nk):
            return cell_text(value)
    return None


# ========== Combined "Patient/Description" column ==========

def split_combined_description(raw: RawRow) -> Tuple[Optional[str], Optional[str]]:
    """Split a combined patient/description cell into (name, reason).
    
    "Jane Smith - Follow-up" and "Jane Smith: Follow-up" split on the first
    separator. Without a separator the first two words are the name and the
    rest is the reason; a single word is just a name.
    """
    for _, nk, value in _columns(raw):
        if "patient" not in nk or "description" not in nk:
            continue
        text = cell_text(value)
        if not text:
            continue
        if _COMBINED_SEPARATOR.search(text):
            name, reason = _COMBINED_SEPARATOR.split(text, maxsplit=1)
            return name.strip() or None, reason.strip() or None
        tokens = text.split()
        if len(tokens) >= 2:
            return " ".join(tokens[:2]), " ".join(tokens[2:]) or None
        return text, None
    return None, None


def combined_description_name(raw: RawRow) -> Optional[str]:
    return split_combined_description(raw)[0]


def combined_description_reason(raw: RawRow) -> Optional[str]:
    return split_combined_description(raw)[1]


# ========== Phone ==========

def detected_phone_column(raw: RawRow) -> Optional[str]:
    """Phone from the LAST column whose label looks like a phone/contact."""
    detected = None
    for _, nk, value in _columns(raw):
        if any(hint in nk for hint in PHONE_HINTS):
            detected = value
    return norm_phone(detected) or None


def area_code_split(raw: RawRow) -> Optional[str]:
    """Phone split over an area-code column and a number column."""
    area = _first_value(
        raw, lambda nk: nk == "areacode" or "areacode" in nk or nk == "area"
    )
    number = _first_value(
        raw, lambda nk: "phone" in nk or nk == "phonenumber" or nk == "number"
    )
    combined = digits_only(area) + digits_only(number)
    if len(combined) < PHONE_DIGITS:
        return None
    return combined[-PHONE_DIGITS:]


def concern_digits(raw: RawRow) -> Optional[str]:
    """Phone typed into the free-text "Concern" column."""
    value = _first_value(raw, lambda nk: nk == "concern")
    return norm_phone(value) or None


def any_long_digit_run(raw: RawRow) -> Optional[str]:
    """Last resort: the first column carrying 10 or more digits."""
    for _, _, value in _columns(raw):
        phone = norm_phone(value)
        if phone:
            return phone
    return None


# ========== Reason / doctor ==========

def concern_column(raw: RawRow) -> Optional[str]:
    return _first_value(raw, lambda nk: nk == "concern") or None


def type_column(raw: RawRow) -> Optional[str]:
    return _first_value(raw, lambda nk: nk == "type") or None


def provider_column(raw: RawRow) -> Optional[str]:
    return _first_value(raw, lambda nk: nk == "provider") or None


# ========== Insurance / primary id ==========

def is_insurance_label(nk: str) -> bool:
    """Labels used for insurance or primary patient identifiers ("Ins #", "Primary ID")."""
    return (
        nk == "ins"
        or "insurance" in nk
        or "primaryid" in nk
        or "healthnumber" in nk
        or nk == "hin"
        or nk.endswith("id")
    )


def insurance_like_column(raw: RawRow) -> Optional[str]:
    """Digits of the first insurance-like column that carries any."""
    for _, nk, value in _columns(raw):
        if is_insurance_label(nk):
            digits = digits_only(value)
            if digits:
                return digits
    return None


@dataclass(frozen=True)
class FallbackRule:
    """A named heuristic that may supply one canonical field."""
    name: str
    resolve: Callable[[RawRow], Optional[str]]


FALLBACK_RULES: Dict[str, List[FallbackRule]] = {
    "patient_name": [
        FallbackRule("combined_description", combined_description_name),
    ],
    "phone": [
        FallbackRule("detected_phone_column", detected_phone_column),
        FallbackRule("area_code_split", area_code_split),
        FallbackRule("concern_digits", concern_digits),
        FallbackRule("any_long_digit_run", any_long_digit_run),
    ],
    "appointment_reason": [
        FallbackRule("combined_description", combined_description_reason),
        FallbackRule("concern_column", concern_column),
        FallbackRule("type_column", type_column),
    ],
    "doctor_name": [
        FallbackRule("provider_column", provider_column),
    ],
    "insurance_number": [
        FallbackRule("insurance_like_column", insurance_like_column),
    ],
}


def apply_fallbacks(field_name: str, raw: RawRow) -> Tuple[Optional[str], Optional[str]]:
    """Run the fallback chain for one field.
    
    Returns:
        (value, rule name) of the first rule that produced a value,
        or (None, None) when every rule came up empty
    """
    for rule in FALLBACK_RULES.get(field_name, []):
        value = rule.resolve(raw)
        if value:
            return value, rule.name
    return None, None
