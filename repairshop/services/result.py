"""Uniform operation result: success flag, message, optional data and error code."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm.exc import StaleDataError

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    success: bool
    message: str
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ServiceResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, error: str | None = None, data: Any = None) -> "ServiceResult":
        return cls(success=False, message=message, data=data, error=error)


class OperationFailed(Exception):
    """Expected business failure raised from inside a service operation."""

    def __init__(self, message: str, error: str | None = None):
        super().__init__(message)
        self.message = message
        self.error = error


def service_operation(failure_message: str):
    """Decorator for async service functions taking the session first.

    Any exception rolls the session back and is returned as a failed
    ServiceResult. A stale versioned write becomes a CONFLICT failure.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(db, *args, **kwargs):
            try:
                return await func(db, *args, **kwargs)
            except OperationFailed as exc:
                await db.rollback()
                return ServiceResult.fail(exc.message, exc.error)
            except StaleDataError:
                await db.rollback()
                logger.warning("Concurrent modification in %s", func.__name__)
                return ServiceResult.fail(
                    "record was modified by another request, reload and try again", "CONFLICT",
                )
            except Exception:
                await db.rollback()
                logger.exception("%s failed", func.__name__)
                return ServiceResult.fail(failure_message, "SERVER_ERROR")
        return wrapper
    return decorator
