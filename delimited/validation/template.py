"""Template Literals

A template is the literal shape a composite string must have before any
segment is decoded: segment shapes interleaved with exact delimiter text.

- ``interleave`` places the delimiter between adjacent parts
- ``TemplateLiteral`` compiles interleaved parts into one anchored matcher
- ``split_segments`` reverses the interleaving by exact literal splitting
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Sequence, TypeVar, Union

from delimited.errors import ErrorCode, Ok, Result
from .builders import invalid_type, structural_mismatch
from .errors import ValidationError
from .segments import Segment

T = TypeVar("T")

TemplatePart = Union[Segment, str]

DEFAULT_TEMPLATE_MESSAGE = "Invalid input: must match template"


def interleave(parts: Sequence[T], delimiter: T) -> tuple[T, ...]:
    """Type-preserving equivalent of ``delimiter.join(parts)``.

    Returns ``2n - 1`` elements for ``n`` parts (none for no parts).
    """
    out: list[T] = []
    for index, part in enumerate(parts):
        if index:
            out.append(delimiter)
        out.append(part)
    return tuple(out)


def split_segments(value: str, delimiter: str) -> list[str]:
    """Split on exact occurrences of ``delimiter``.

    An empty delimiter splits into single characters. Empty pieces at the
    edges or between adjacent delimiters are kept.
    """
    if delimiter == "":
        return list(value)
    return value.split(delimiter)


@dataclass(frozen=True, slots=True)
class TemplateParams:
    """Error configuration for structural mismatches."""
    message: str = DEFAULT_TEMPLATE_MESSAGE
    format: str | None = None

    @classmethod
    def coerce(cls, params: str | TemplateParams | None) -> TemplateParams:
        if params is None: return cls()
        if isinstance(params, str): return cls(message=params)
        if isinstance(params, cls): return params
        raise TypeError(f"Expected str or TemplateParams, got {type(params).__name__}")


@dataclass(frozen=True, slots=True)
class TemplateLiteral:
    """Whole-string matcher for a sequence of segment shapes and literal text.

    Usage:
        template = TemplateLiteral((integer(), ",", integer()))
        template.safe_parse("7,11")   # Ok("7,11")
        template.safe_parse("7/11")   # Err(ValidationError(...))
    """
    parts: tuple[TemplatePart, ...]
    params: TemplateParams = field(default_factory=TemplateParams)
    _compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for part in self.parts:
            if not isinstance(part, (Segment, str)):
                raise TypeError(f"Template parts must be segments or strings, got {type(part).__name__}")
        object.__setattr__(self, "_compiled", re.compile(self.pattern))

    @property
    def pattern(self) -> str:
        """Unanchored regex for the whole template."""
        return "".join(re.escape(p) if isinstance(p, str) else f"(?:{p.pattern})" for p in self.parts)

    def matches(self, value: Any) -> bool:
        return isinstance(value, str) and self._compiled.fullmatch(value) is not None

    def safe_parse(self, value: Any) -> Result[str, ValidationError]:
        if not isinstance(value, str):
            return invalid_type(value, code=ErrorCode.E2030_STRUCTURAL_MISMATCH)
        if self._compiled.fullmatch(value) is None:
            return structural_mismatch(value, self._compiled.pattern, self.params.message,
                template_format=self.params.format)
        return Ok(value)
