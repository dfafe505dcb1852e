"""
Encoding of AI metadata into Google Drive custom file properties.

Drive caps each property at 124 bytes for key and value together, and
only allows a limited character set in keys. Values that do not fit are
split across numbered keys.
"""
import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

PROPERTY_PREFIX = "AI_"
MAX_PROPERTY_BYTES = 120  # Drive allows 124; keep a small margin
MAX_SPLIT_PARTS = 5
GENERATED_AT_KEY = "AI_Generated_At"
GENERATED_BY_KEY = "AI_Generated_By"
GENERATED_BY_VALUE = "MetadataEnhancer"

_INVALID_KEY_CHARS = re.compile(r"[^a-zA-Z0-9.!@$%^&*()\-_/]")


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def sanitize_property_key(field_name: str) -> str:
    """Prefix a field name with ``AI_`` and replace characters Drive rejects."""
    return _INVALID_KEY_CHARS.sub("_", f"{PROPERTY_PREFIX}{field_name}")


def stringify_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def split_property(key: str, value: str) -> Dict[str, str]:
    """
    Fit one key/value pair into Drive's property budget.
    
    Returns ``{key: value}`` when it fits. Otherwise the value is spread over
    ``key_1`` .. ``key_5``; each part is found by shrinking the candidate to
    80% until it fits. Text beyond the last part is dropped.
    """
    if _byte_len(key) + _byte_len(value) <= MAX_PROPERTY_BYTES:
        return {key: value}
    
    parts: Dict[str, str] = {}
    remaining = value
    part_index = 1
    while remaining and part_index <= MAX_SPLIT_PARTS:
        part_key = f"{key}_{part_index}"
        max_value_bytes = MAX_PROPERTY_BYTES - _byte_len(part_key)
        
        cut_point = len(remaining)
        candidate = remaining
        while _byte_len(candidate) > max_value_bytes and cut_point > 0:
            cut_point = int(cut_point * 0.8)
            candidate = remaining[:cut_point]
        
        if cut_point == 0:
            break
        
        parts[part_key] = candidate
        remaining = remaining[cut_point:]
        part_index += 1
    return parts


def build_drive_properties(
    metadata: Dict[str, Any],
    generated_at: Optional[str] = None
) -> Dict[str, str]:
    """
    Convert AI metadata into a Drive ``properties`` mapping.
    
    Args:
        metadata: AI-generated metadata keyed by field name
        generated_at: ISO timestamp to stamp (defaults to now, UTC)
    
    Returns:
        Property mapping ready for ``files.update``
    """
    properties: Dict[str, str] = {}
    for field_name, value in metadata.items():
        key = sanitize_property_key(field_name)
        properties.update(split_property(key, stringify_value(value)))
    
    timestamp = generated_at or datetime.now(timezone.utc).isoformat()
    if _byte_len(GENERATED_AT_KEY + timestamp) <= MAX_PROPERTY_BYTES:
        properties[GENERATED_AT_KEY] = timestamp
    if _byte_len(GENERATED_BY_KEY + GENERATED_BY_VALUE) <= MAX_PROPERTY_BYTES:
        properties[GENERATED_BY_KEY] = GENERATED_BY_VALUE
    return properties


def properties_have_changes(new_properties: Dict[str, str], existing_properties: Dict[str, str]) -> bool:
    """
    True when writing ``new_properties`` would change what Drive holds.
    
    The generation timestamp is ignored, otherwise every export would count
    as a change. Stale ``AI_`` keys that the new set no longer contains
    also count as a change.
    """
    for key, value in new_properties.items():
        if key == GENERATED_AT_KEY:
            continue
        if existing_properties.get(key) != value:
            return True
    
    for key in existing_properties:
        if key.startswith(PROPERTY_PREFIX) and key not in new_properties:
            return True
    return False
