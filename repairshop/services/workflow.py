"""Task-status aggregation for the assessment approval workflow.

Tasks are plain dicts with at least a ``status`` key. Every function here is
pure; callers persist the results.
"""

from __future__ import annotations

from typing import Iterable

from repairshop.models.enums import ClientStatus, TaskStatus


def _statuses(tasks: Iterable[dict]) -> list[str]:
    return [t.get("status", TaskStatus.PROPOSED.value) for t in tasks]


def derive_client_status(tasks: Iterable[dict]) -> ClientStatus:
    """Client-facing status as a function of the task statuses alone."""
    statuses = _statuses(tasks)
    proposed = statuses.count(TaskStatus.PROPOSED.value)
    if proposed == len(statuses):
        return ClientStatus.PENDING_REVIEW
    if proposed:
        return ClientStatus.REVIEWED

    accepted = statuses.count(TaskStatus.ACCEPTED.value)
    if accepted == len(statuses):
        return ClientStatus.FULLY_ACCEPTED
    if accepted == 0:
        return ClientStatus.REJECTED
    return ClientStatus.PARTIALLY_ACCEPTED


def all_resolved(tasks: Iterable[dict]) -> bool:
    statuses = _statuses(tasks)
    return bool(statuses) and TaskStatus.PROPOSED.value not in statuses


def accepted_tasks(tasks: Iterable[dict]) -> list[dict]:
    return [t for t in tasks if t.get("status") == TaskStatus.ACCEPTED.value]


def should_create_work_order(before: list[dict], after: list[dict]) -> bool:
    """True exactly when the last proposed task was just resolved with at least one accepted."""
    return not all_resolved(before) and all_resolved(after) and bool(accepted_tasks(after))
