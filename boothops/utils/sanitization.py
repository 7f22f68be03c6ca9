import re
from typing import Any, Optional

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
HTML_TAGS = re.compile(r"<[^>]*>")


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Clean plain-text input before it is stored.
    Strips markup tags and control characters but keeps the text itself
    unescaped; HTML output escapes at render time.
    Returns None if input is None; blank strings become None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    value = HTML_TAGS.sub("", CONTROL_CHARS.sub("", value)).strip()
    if not value:
        return None
    return value


def sanitize_fields(data: dict[str, Any], fields: list[str]) -> dict[str, Any]:
    """Return a copy of `data` with the named plain-text fields cleaned"""
    cleaned = dict(data)
    for field in fields:
        if field in cleaned and isinstance(cleaned[field], str):
            cleaned[field] = sanitize_string(cleaned[field])
    return cleaned
