"""
Portfolio Code Generator

Codes look like PORT-7X3K: a fixed prefix plus 4 symbols from a 32-character
alphabet without 0/O/1/I, so they survive being read aloud or retyped.
"""

import random
import re
import secrets
from typing import Optional

CODE_PREFIX = "PORT-"
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 4

_CODE_RE = re.compile(rf"^{CODE_PREFIX}[{CODE_ALPHABET}]{{{CODE_LENGTH}}}$")
_system_random = secrets.SystemRandom()


def generate_portfolio_code(rng: Optional[random.Random] = None) -> str:
    """
    Draw a fresh code uniformly from the 32^4 code space.

    Args:
        rng: Randomness source; defaults to the OS CSPRNG

    Returns:
        Code such as "PORT-7X3K"
    """
    source = rng or _system_random
    body = "".join(source.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
    return f"{CODE_PREFIX}{body}"


def normalize_portfolio_code(raw_code: str) -> str:
    """Trim, uppercase and add the PORT- prefix when the caller left it off."""
    normalized = (raw_code or "").strip().upper()
    if not normalized:
        return ""
    if not normalized.startswith(CODE_PREFIX):
        normalized = f"{CODE_PREFIX}{normalized}"
    return normalized


def is_valid_portfolio_code(code: str) -> bool:
    return bool(_CODE_RE.match(code or ""))
