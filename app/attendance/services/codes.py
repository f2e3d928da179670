from __future__ import annotations

import logging
import secrets

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password

logger = logging.getLogger(__name__)

# No 0/O or 1/I/L so codes can be read aloud or off a projector.
CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
MIN_CODE_LENGTH = 6
MAX_CODE_LENGTH = 10


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _code_length(length: int | None) -> int:
    if length is None:
        length = getattr(settings, "ATTENDANCE_CODE_LENGTH", 8)
    return max(MIN_CODE_LENGTH, min(MAX_CODE_LENGTH, int(length)))


def generate_code(length: int | None = None) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(_code_length(length)))


def hash_code(code: str) -> str:
    return make_password(normalize_code(code))


def verify_code(code: str, code_hash: str) -> bool:
    normalized = normalize_code(code)
    if not normalized or not code_hash:
        return False
    try:
        return bool(check_password(normalized, code_hash))
    except (TypeError, ValueError):
        logger.warning("Attendance code hash could not be checked", exc_info=True)
        return False
