from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple
from urllib.parse import quote

from coinbase_client.core.errors import ValidationError

DEFAULT_PAGE_LIMIT = 100


def encode_params(params: Iterable[Tuple[str, Any]]) -> str:
    """Render ``key=value`` pairs in the given order, skipping ``None`` values."""
    parts = []
    for key, value in params:
        if value is None:
            continue
        parts.append(f"{key}={quote(str(value), safe='-_.~:')}")
    return "&".join(parts)


def configure_pagination(
    before: Optional[str] = None,
    after: Optional[str] = None,
    limit: Optional[int] = None,
    max_limit: int = DEFAULT_PAGE_LIMIT,
) -> str:
    """Build the cursor fragment in fixed ``before``, ``after``, ``limit`` order.

    ``limit`` above ``max_limit`` is clamped.  Only one cursor may be given;
    the exchange pages in one direction per request.
    """
    if before is not None and after is not None:
        raise ValidationError("pass either before or after, not both")
    if limit is not None:
        if limit < 1:
            raise ValidationError(f"limit must be positive, got {limit}")
        limit = min(limit, max_limit)
    return encode_params((("before", before), ("after", after), ("limit", limit)))


def build_path(path: str, *fragments: str) -> str:
    query = "&".join(fragment for fragment in fragments if fragment)
    return f"{path}?{query}" if query else path


def segment(value: str) -> str:
    """Percent-encode a single path segment, ``/`` and ``?`` included."""
    return quote(str(value), safe="-_.~:")
