# File: app/core/validators.py
import re
from typing import Any, Optional

TAG_RE = re.compile(r"<[^>]*>")
EMAIL_RE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$", re.IGNORECASE)


def clean_text(value: Any, max_length: int = 200) -> str:
    """Strip HTML tags and surrounding whitespace, then truncate."""
    text = str(value or "").strip()
    stripped = TAG_RE.sub("", text).strip()
    return stripped[:max_length]


def clean_optional_text(value: Any, max_length: int = 200) -> Optional[str]:
    return clean_text(value, max_length) or None


def normalize_email(value: Any) -> Optional[str]:
    """Lower-cased e-mail if it looks valid, otherwise None."""
    email = str(value or "").strip().lower()
    if EMAIL_RE.match(email) and len(email) <= 254:
        return email
    return None
