from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date


TokenRenderer = Callable[[int, date], str]

# Longest tokens first: the alternation is tried left to right, so "%YYYY" must
# precede "%YY".
SCHEMA_TOKENS: tuple[tuple[str, TokenRenderer], ...] = (
    ("%COUNTER", lambda counter, today: str(counter)),
    ("%YYYY", lambda counter, today: f"{today.year:04d}"),
    ("%YY", lambda counter, today: f"{today.year % 100:02d}"),
    ("%MM", lambda counter, today: f"{today.month:02d}"),
)

_RENDERERS: dict[str, TokenRenderer] = dict(SCHEMA_TOKENS)
_TOKEN_RE = re.compile("|".join(re.escape(token) for token, _ in SCHEMA_TOKENS))


def render_business_id(schema: str, counter: int, today: date) -> str:
    """Substitute every schema token in a single pass.

    Replacement text is never re-scanned, so a counter or year that happens to
    contain a ``%`` sequence cannot trigger a second substitution.
    """

    return _TOKEN_RE.sub(lambda match: _RENDERERS[match.group(0)](counter, today), schema)
