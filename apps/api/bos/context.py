from __future__ import annotations

import re
from contextvars import ContextVar, Token
from dataclasses import dataclass

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_CORRELATION_ID_RE = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


@dataclass
class RequestContext:
    request_id: str
    correlation_id: str
    user_id: str | None = None


def normalize_correlation_id(raw: str | None) -> str | None:
    """Accept a caller-supplied correlation id only if it is a short token."""

    if raw is None:
        return None
    value = raw.strip()
    if not _CORRELATION_ID_RE.match(value):
        return None
    return value


def set_correlation_id(value: str | None) -> Token[str | None]:
    return correlation_id_var.set(value)


def reset_correlation_id(token: Token[str | None]) -> None:
    correlation_id_var.reset(token)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()
