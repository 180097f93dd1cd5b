import re
from typing import Optional


def strip_control_characters(value: Optional[str]) -> Optional[str]:
    """Remove ASCII control characters (tabs and newlines are kept) and trim whitespace"""
    if value is None:
        return None
    return re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", value).strip()


def escape_like(value: str) -> str:
    """Escape LIKE wildcards in user supplied search text (use with escape='\\\\')"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
