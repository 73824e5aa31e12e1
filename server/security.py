from __future__ import annotations

import base64
import hashlib
import os
from typing import Optional

ALGORITHM = "pbkdf2_sha256"
ITERATIONS = 390000
SALT_BYTES = 16


def hash_password(password: str, *, salt: Optional[bytes] = None, iterations: int = ITERATIONS) -> str:
    """Encode a password as ``algorithm$iterations$salt$digest`` for the users table."""
    salt = salt if salt is not None else os.urandom(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=32)
    encoded_salt = base64.b64encode(salt).decode("ascii")
    encoded_digest = base64.b64encode(digest).decode("ascii")
    return f"{ALGORITHM}${iterations}${encoded_salt}${encoded_digest}"
