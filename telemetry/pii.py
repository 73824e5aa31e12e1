from __future__ import annotations

import hashlib
import re
from typing import Any, Dict

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
# Encoded password hashes as produced by server.security.hash_password.
PASSWORD_HASH_RE = re.compile(r"\bpbkdf2_sha256\$\d+\$[A-Za-z0-9+/=]+\$[A-Za-z0-9+/=]+")

# Keys whose values are never logged.
SENSITIVE_FIELDS = {
    "password",
    "password_hash",
    "pgpassword",
    "dsn",
}
SENSITIVE_MARKERS = ("password", "secret", "token")

REDACTED = "[REDACTED]"


def _hash_token(text: str) -> str:
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"[HASH:{digest}]"


def scrub_text(text: str) -> str:
    """Hash emails and drop password hashes from free text."""
    if not text:
        return text
    scrubbed = PASSWORD_HASH_RE.sub(REDACTED, text)
    return EMAIL_RE.sub(lambda m: f"[EMAIL_{_hash_token(m.group(0))}]", scrubbed)


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    if lowered in SENSITIVE_FIELDS:
        return True
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


def scrub_value(value: Any) -> Any:
    """Scrub a generic value (query parameters included) before logging."""
    if isinstance(value, str):
        return scrub_text(value)
    if isinstance(value, dict):
        return sanitize_log_payload(value)
    if isinstance(value, (list, tuple)):
        return [scrub_value(item) for item in value]
    return value


def sanitize_log_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        return {}

    cleaned: Dict[str, Any] = {}
    for key, value in payload.items():
        if value is not None and _is_sensitive_key(str(key)):
            cleaned[key] = REDACTED
            continue
        cleaned[key] = scrub_value(value)
    return cleaned
