from __future__ import annotations

import hashlib

FINGERPRINT_CHARS = 100


def normalize_input(text: str | None) -> str:
    return (text or "").strip()


def fingerprint(text: str, length: int = FINGERPRINT_CHARS) -> str:
    """First ``length`` characters of ``text``, used only as a comparison key."""
    if length < 1:
        raise ValueError("fingerprint length must be positive")
    return text[:length]


def short_hash(value: str | None) -> str:
    normalized = (value or "").strip()
    if not normalized:
        return ""
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:12]
