"""De-identified correlation tokens for doctor notifications.

A token looks like ``PEDI-2026-10-19-7QX2K9AB``: the UTC date plus eight
uppercase alphanumerics. It never embeds patient or summary data and is not
suitable as a security-sensitive identifier.
"""

from __future__ import annotations

import random
import re
import string
from datetime import datetime, timezone

DEFAULT_PREFIX = "PEDI"
TOKEN_LENGTH = 8
_ALPHABET = string.ascii_uppercase + string.digits

_rng = random.Random()


def generate_deidentified_id(
    prefix: str = DEFAULT_PREFIX,
    *,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """Return ``PREFIX-YYYY-MM-DD-XXXXXXXX`` for the current UTC date."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    source = rng or _rng
    token = "".join(source.choice(_ALPHABET) for _ in range(TOKEN_LENGTH))
    return f"{prefix}-{moment:%Y-%m-%d}-{token}"


def deidentified_id_pattern(prefix: str = DEFAULT_PREFIX) -> re.Pattern[str]:
    """Compiled pattern matching tokens produced with *prefix*."""
    return re.compile(rf"^{re.escape(prefix)}-\d{{4}}-\d{{2}}-\d{{2}}-[A-Z0-9]{{{TOKEN_LENGTH}}}$")
