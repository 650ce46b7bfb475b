from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic_core import core_schema

from blockmerge.errors import BlocklistError, ErrorCode

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler

_FORBIDDEN_CHARS = frozenset('/"')


@dataclass(frozen=True, order=True, slots=True)
class Host:
    """A domain name that is safe to write into any supported output format.

    This is not full RFC validation: only the characters that would break a
    line-oriented output grammar are rejected (whitespace, ``/`` and ``"``).
    No lowercasing or trimming happens here; callers strip the source line.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or any(c.isspace() or c in _FORBIDDEN_CHARS for c in self.value):
            raise BlocklistError(
                ErrorCode.VALIDATION_ERROR,
                f"{self.value} is not a valid domain name",
            )

    @classmethod
    def validate(cls, raw: str) -> Host:
        return cls(raw)

    def __str__(self) -> str:
        return self.value

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        from_str = core_schema.no_info_after_validator_function(
            _host_from_str, core_schema.str_schema()
        )
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(cls), from_str]
            ),
            serialization=core_schema.to_string_ser_schema(),
        )


def _host_from_str(raw: str) -> Host:
    # pydantic only turns ValueError into a field error
    try:
        return Host.validate(raw)
    except BlocklistError as exc:
        raise ValueError(exc.message) from exc
