from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    CONFIG_ERROR = "CONFIG_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FETCH_ERROR = "FETCH_ERROR"
    CACHE_ERROR = "CACHE_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    OUTPUT_ERROR = "OUTPUT_ERROR"


_FATAL_CODES = frozenset({ErrorCode.CONFIG_ERROR, ErrorCode.OUTPUT_ERROR})


class BlocklistError(Exception):
    """Raised for every expected failure in a merge run.

    ``code`` tells callers what went wrong; ``context`` holds the chain of
    messages, outermost first, that ``str()`` joins for display. Only
    configuration and output failures are fatal: everything else is logged
    by the merge engine and the run carries on.
    """

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context: list[str] = []

    @property
    def recoverable(self) -> bool:
        return self.code not in _FATAL_CODES

    def with_context(self, message: str) -> BlocklistError:
        """Prepend an outer context message and return ``self`` for re-raising."""
        self.context.insert(0, message)
        return self

    def __str__(self) -> str:
        return ": ".join([*self.context, self.message])

    def log_fields(self) -> dict[str, object]:
        """Structured fields for a log event describing this error."""
        return {
            "code": str(self.code),
            "error": str(self),
            "recoverable": self.recoverable,
        }
