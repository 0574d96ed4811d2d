"""Field canonicalizer: raw spreadsheet rows -> CanonicalRecord."""
from typing import Any, Dict, Tuple

import structlog

from schedule_intake.models.canonical_record import CanonicalRecord, DATA_FIELDS
from schedule_intake.services.field_rules import (
    FIELD_SYNONYMS,
    RawRow,
    apply_fallbacks,
    build_lookup,
    lookup_synonyms,
)
from schedule_intake.services.normalize import (
    cell_text,
    digits_only,
    norm_date,
    norm_phone,
)

logger = structlog.get_logger(__name__)


def normalize_field(field_name: str, value: Any) -> str:
    """Apply the per-field normalization used for every canonical record."""
    if field_name == "phone":
        return norm_phone(value)
    if field_name in ("health_number", "insurance_number"):
        return digits_only(value)
    if field_name == "appointment_day":
        return norm_date(value)
    return cell_text(value)


def split_day_time(day: str) -> Tuple[str, str]:
    """Split a "<date> <time>" day value on its first space into (date, time)."""
    if " " not in day:
        return day, ""
    date_part, time_part = day.split(" ", 1)
    return norm_date(date_part), time_part.strip()


class FieldCanonicalizer:
    """Maps one raw row into the fixed canonical record shape.
    
    Resolution per field:
    1. Synonym lookup on normalized header labels (FIELD_SYNONYMS)
    2. Ordered fallback rules for whatever is still empty (FALLBACK_RULES)
    3. Normalization post-pass (phone, digits, dates, date+time split)
    
    Never raises: unmatched fields stay empty.
    """
    
    def canonicalize(self, raw: RawRow) -> CanonicalRecord:
        """Build a CanonicalRecord (without id) from a raw row."""
        lookup = build_lookup(raw)
        values: Dict[str, str] = {name: "" for name in DATA_FIELDS}
        
        for field_name, synonyms in FIELD_SYNONYMS.items():
            values[field_name] = lookup_synonyms(lookup, synonyms)
        
        for field_name in DATA_FIELDS:
            if values[field_name]:
                continue
            value, rule_name = apply_fallbacks(field_name, raw)
            if value is not None:
                values[field_name] = value
                logger.debug("fallback_rule_applied", field=field_name, rule=rule_name)
        
        return self._post_process(values)
    
    def _post_process(self, values: Dict[str, str]) -> CanonicalRecord:
        """Normalize values and split combined date+time cells."""
        normalized = {
            name: normalize_field(name, value) for name, value in values.items()
        }
        
        day, time_part = split_day_time(normalized["appointment_day"])
        normalized["appointment_day"] = day
        if time_part and not normalized["appointment_time"]:
            normalized["appointment_time"] = time_part
        
        return CanonicalRecord(**normalized)

