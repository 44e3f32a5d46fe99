import random
import string
from datetime import datetime, timezone

from ftfy import fix_text

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def sanitize_text(text: str) -> str:
    """
    Clean text by removing null bytes, non-printable characters, and fixing encoding issues.
    """
    # Fix text encoding issues
    text = fix_text(text)
    # PostgreSQL text columns reject NUL
    text = text.replace('\x00', ' ')
    text = ''.join(c for c in text if c.isprintable() or c in {'\n', '\t'})
    return text.strip()


def generate_visitor_id(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """Build an id like ``VIS_20250131_k3j9x0aa`` (UTC date, 8 base36 chars)."""
    now = now or utcnow()
    rng = rng or random
    suffix = ''.join(rng.choice(BASE36_ALPHABET) for _ in range(8))
    return f"VIS_{now.astimezone(timezone.utc).strftime('%Y%m%d')}_{suffix}"
