import secrets
from typing import Optional

from coursegate.utils.settings import JOIN_CODE_ALPHABET, JOIN_CODE_LENGTH


def generate_join_code(length: int = JOIN_CODE_LENGTH) -> str:
    """Generate a human-typable course code.

    Excludes ambiguous characters (0/O, 1/I).
    """
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def normalize_join_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def join_code_matches(candidate: Optional[str], current: Optional[str]) -> bool:
    """Case-insensitive comparison; blank codes never match."""
    wanted = normalize_join_code(candidate)
    return bool(wanted) and wanted == normalize_join_code(current)
