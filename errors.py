"""Error taxonomy shared by the extractors and contest feeds.

The fetcher raises raw transport errors (``HTTPStatusError``, aiohttp and
timeout errors). Each extractor classifies them at its own boundary into an
``ExtractionError`` subclass.
"""
from __future__ import annotations

import enum
import functools
import logging
from typing import Any, Callable


logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    PARSE_FAILURE = "parse_failure"
    INVALID_INPUT = "invalid_input"


class ErrorPolicy(str, enum.Enum):
    """How an operation reacts to its own internal failures."""

    DEGRADE = "degrade"
    PROPAGATE = "propagate"


class HTTPStatusError(Exception):
    def __init__(self, status: int, url: str) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status
        self.url = url


class ExtractionError(Exception):
    kind: ErrorKind = ErrorKind.UNAVAILABLE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def http_status(self) -> int:
        if self.kind is ErrorKind.NOT_FOUND:
            return 404
        if self.kind is ErrorKind.INVALID_INPUT:
            return 400
        return 500

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


class NotFound(ExtractionError):
    kind = ErrorKind.NOT_FOUND


class Timeout(ExtractionError):
    kind = ErrorKind.TIMEOUT


class RateLimited(ExtractionError):
    kind = ErrorKind.RATE_LIMITED


class Unavailable(ExtractionError):
    kind = ErrorKind.UNAVAILABLE


class ParseFailure(ExtractionError):
    kind = ErrorKind.PARSE_FAILURE


class InvalidInput(ExtractionError):
    kind = ErrorKind.INVALID_INPUT


class ContestFeedError(ExtractionError):
    """A whole contest source failed; the aggregated feed must fail too."""

    kind = ErrorKind.UNAVAILABLE

    def __init__(self, platform: str, message: str) -> None:
        super().__init__(message)
        self.platform = platform


def with_policy(
    policy: ErrorPolicy,
    *,
    default: Callable[[], Any] | None = None,
    classify: Callable[[Exception], ExtractionError] | None = None,
):
    """Declare how an async operation handles its own failures.

    ``DEGRADE`` logs and returns ``default()``. ``PROPAGATE`` logs and
    re-raises, translated through ``classify`` when given.
    """
    if policy is ErrorPolicy.DEGRADE and default is None:
        raise ValueError("DEGRADE needs a default")

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as exc:
                if policy is ErrorPolicy.DEGRADE:
                    logger.warning("%s degraded to default: %r", func.__name__, exc)
                    return default()
                if isinstance(exc, InvalidInput):
                    raise
                if isinstance(exc, (HTTPStatusError, ExtractionError, TimeoutError)):
                    logger.warning("%s failed: %r", func.__name__, exc)
                else:
                    logger.exception("%s failed", func.__name__)
                if classify is None:
                    raise
                raise classify(exc) from exc

        return wrapper

    return decorator
