from __future__ import annotations

from datetime import datetime, timezone


def next_document_number(prefix: str, existing: list[str], width: int, now: datetime | None = None) -> str:
    """Next ``PREFIX-YYMM-NNNN`` number following the highest existing sequence.

    The sequence continues across months; only the YYMM part tracks the date.
    """
    now = now or datetime.now(timezone.utc)
    highest = 0
    for number in existing:
        tail = number.rsplit("-", 1)[-1]
        if tail.isdigit():
            highest = max(highest, int(tail))
    return f"{prefix}-{now:%y%m}-{highest + 1:0{width}d}"
