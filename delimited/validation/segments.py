"""Segment Validators

A segment validates and decodes one piece of raw text independently of any
other piece. Segments are the building blocks composite validators run
positionally over a delimited string.

Every segment exposes:
- ``safe_parse(raw)`` returning ``Ok(value)`` or ``Err(ValidationError)``
- ``parse(raw)`` returning the value or raising ``ValidationError``
- ``pattern``, an unanchored regex fragment describing the literal shape of
  text the segment accepts, used to compose templates

Segments are immutable; ``check`` and ``describe`` return new segments.

Usage:
    from delimited.validation.segments import integer, text, choice

    age = integer(min_value=18, max_value=120)
    age.safe_parse("42")    # Ok(42)
    age.safe_parse("17")    # Err(ValidationError(...))
    status = choice("active", "inactive")
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from delimited.config import get_settings
from delimited.errors import AppError, Err, ErrorCode, Ok, Result
from .builders import invalid_type
from .coercion import (
    CoercionRule,
    DEFAULT_COERCER,
    ISO8601ToDate,
    StringToBool,
    StringToDecimal,
    StringToEnum,
    StringToFloat,
    StringToInt,
    alternation,
)
from .errors import CollectAllAccumulator, ValidationError, ValidationErrorDetail
from .validators import AtomicValidator, EmailValidator, NumericRange, StringLength

T = TypeVar("T")

ANY_TEXT_PATTERN = r"[\s\S]*"


@dataclass(frozen=True, kw_only=True)
class Segment(ABC, Generic[T]):
    """Base class for segment validators.

    Subclasses implement ``safe_parse``. Constraints attached with ``check``
    run against the accepted value, collecting every failure.
    """
    checks: tuple[AtomicValidator, ...] = ()
    message: str | None = None

    @property
    @abstractmethod
    def pattern(self) -> str:
        """Unanchored regex fragment matching the literal shape of accepted text."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short description used as the constraint name of decode failures."""

    @abstractmethod
    def safe_parse(self, raw: Any) -> Result[T, ValidationError]:
        """Validate raw text, returning the value or the reasons it was rejected."""

    def constraints(self) -> tuple[AtomicValidator, ...]:
        """Built-in constraints followed by the ones attached with ``check``."""
        return self.checks

    def parse(self, raw: Any) -> T:
        """Parse raw text, raising ``ValidationError`` on failure."""
        return self.safe_parse(raw).unwrap()

    def check(self, *validators: AtomicValidator) -> Segment[T]:
        """Return a copy with extra constraints on the decoded value."""
        return replace(self, checks=(*self.checks, *validators))

    def describe(self, message: str) -> Segment[T]:
        """Return a copy whose failures all use ``message``."""
        return replace(self, message=message)

    def _apply_constraints(self, value: T) -> Result[T, ValidationError]:
        accumulator = CollectAllAccumulator(max_errors=get_settings().MAX_ERRORS)
        codes = []
        for validator in self.constraints():
            if (result := validator.validate(value)).is_valid:
                continue
            codes.append(result.error_code)
            keep_going = accumulator.add_error(ValidationErrorDetail(
                field_path="$",
                constraint=result.constraint or validator.constraint_name,
                actual_value=value,
                message=self.message or result.error_message or "Validation failed",
            ))
            if not keep_going:
                break

        if not accumulator.has_errors():
            return Ok(value)
        code = codes[0] if len(codes) == 1 and codes[0] else ErrorCode.E2005_CONSTRAINT_VIOLATION
        return Err(accumulator.to_validation_error(self.message or f"Value failed {self.name} constraints", code=code))


@dataclass(frozen=True, kw_only=True)
class DecodedSegment(Segment[T]):
    """Segment that decodes the raw text first, then checks the decoded value."""

    @abstractmethod
    def _decode(self, raw: str) -> Result[T, AppError]:
        """Turn raw text into a value, or explain why it cannot."""

    def safe_parse(self, raw: Any) -> Result[T, ValidationError]:
        if not isinstance(raw, str):
            return invalid_type(raw)

        match self._decode(raw):
            case Err(error):
                return Err(self._decode_error(raw, error))
            case Ok(value):
                return self._apply_constraints(value)

    def _decode_error(self, raw: str, error: AppError) -> ValidationError:
        message = self.message or error.message
        return ValidationError(
            message=message,
            details=[ValidationErrorDetail(field_path="$", constraint=self.name, actual_value=raw, message=message)],
            code=error.code,
        )


# ============================================================================
# Text Segments
# ============================================================================

@dataclass(frozen=True)
class TextSegment(DecodedSegment[str]):
    """Free text, optionally bounded in length."""
    min_length: int | None = None
    max_length: int | None = None

    @property
    def pattern(self) -> str:
        if self.min_length is None and self.max_length is None:
            return ANY_TEXT_PATTERN
        return rf"[\s\S]{{{self.min_length or 0},{'' if self.max_length is None else self.max_length}}}"

    @property
    def name(self) -> str:
        return "text"

    def constraints(self) -> tuple[AtomicValidator, ...]:
        if self.min_length is None and self.max_length is None:
            return self.checks
        return (StringLength(self.min_length, self.max_length), *self.checks)

    def _decode(self, raw: str) -> Result[str, AppError]:
        return Ok(raw)


@dataclass(frozen=True)
class LiteralSegment(DecodedSegment[str]):
    """Exactly one fixed piece of text."""
    value: str

    @property
    def pattern(self) -> str:
        return re.escape(self.value)

    @property
    def name(self) -> str:
        return f"literal[{self.value!r}]"

    def _decode(self, raw: str) -> Result[str, AppError]:
        if raw == self.value:
            return Ok(raw)
        return Err(AppError(code=ErrorCode.E2005_CONSTRAINT_VIOLATION,
            message=f"Expected {self.value!r}, got {raw!r}", metadata={"expected": self.value}))


@dataclass(frozen=True)
class ChoiceSegment(DecodedSegment[str]):
    """One of a fixed set of strings."""
    options: tuple[str, ...]
    case_sensitive: bool = True

    @property
    def pattern(self) -> str:
        return alternation(list(self.options), case_insensitive=not self.case_sensitive)

    @property
    def name(self) -> str:
        return f"one_of[{', '.join(self.options)}]"

    def _decode(self, raw: str) -> Result[str, AppError]:
        for option in self.options:
            if option == raw or (not self.case_sensitive and option.lower() == raw.lower()):
                return Ok(option)
        return Err(AppError(code=ErrorCode.E2005_CONSTRAINT_VIOLATION,
            message=f"Value '{raw}' is not one of: {', '.join(self.options)}", metadata={"expected": list(self.options)}))


# ============================================================================
# Coerced Segments
# ============================================================================

@dataclass(frozen=True)
class CoercedSegment(DecodedSegment[T]):
    """Text decoded through an explicit coercion rule."""
    rule: CoercionRule

    @property
    def pattern(self) -> str:
        return self.rule.pattern

    @property
    def name(self) -> str:
        return self.rule.target_type.__name__

    def _decode(self, raw: str) -> Result[T, AppError]:
        return self.rule.coerce(raw)


# ============================================================================
# Pydantic Bridge
# ============================================================================

@dataclass(frozen=True)
class TypedSegment(DecodedSegment[T]):
    """Text validated by pydantic against any type it understands.

    The literal shape cannot be derived from an arbitrary type, so callers
    supply ``shape`` when the segment is used inside a template.
    """
    target: Any
    shape: str = ANY_TEXT_PATTERN
    _adapter: TypeAdapter = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_adapter", TypeAdapter(self.target))

    @property
    def pattern(self) -> str:
        return self.shape

    @property
    def name(self) -> str:
        return getattr(self.target, "__name__", repr(self.target))

    def _decode(self, raw: str) -> Result[T, AppError]:
        try:
            return Ok(self._adapter.validate_python(raw))
        except PydanticValidationError as e:
            return Err(AppError(code=ErrorCode.E2002_INVALID_FORMAT, message="Validation failed", cause=e))

    def _decode_error(self, raw: str, error: AppError) -> ValidationError:
        if not isinstance(error.cause, PydanticValidationError):
            return super()._decode_error(raw, error)
        converted = ValidationError.from_pydantic(error.cause, code=error.code)
        if self.message:
            converted.details = [replace(d, message=self.message) for d in converted.details]
            converted.message = self.message
        return converted


# ============================================================================
# Factories
# ============================================================================

def text(min_length: int | None = None, max_length: int | None = None) -> TextSegment:
    return TextSegment(min_length=min_length, max_length=max_length)


def literal(value: str) -> LiteralSegment:
    return LiteralSegment(value)


def choice(*options: str, case_sensitive: bool = True) -> ChoiceSegment:
    if not options:
        raise ValueError("choice() needs at least one option")
    return ChoiceSegment(tuple(options), case_sensitive=case_sensitive)


def _bounded(segment: Segment, min_value, max_value) -> Segment:
    if min_value is None and max_value is None:
        return segment
    return segment.check(NumericRange(min_value, max_value))


def integer(min_value: int | None = None, max_value: int | None = None) -> Segment[int]:
    return _bounded(CoercedSegment(StringToInt()), min_value, max_value)


def number(min_value: float | None = None, max_value: float | None = None) -> Segment[float]:
    return _bounded(CoercedSegment(StringToFloat()), min_value, max_value)


def decimal(min_value=None, max_value=None) -> Segment:
    return _bounded(CoercedSegment(StringToDecimal()), min_value, max_value)


def boolean(**values) -> Segment[bool]:
    return CoercedSegment(StringToBool(**values))


def iso_date() -> Segment:
    return CoercedSegment(ISO8601ToDate())


def enum(enum_class: type[Enum], *, by_value: bool = True, case_insensitive: bool = True) -> Segment:
    return CoercedSegment(StringToEnum(enum_class, by_value=by_value, case_insensitive=case_insensitive))


def email() -> Segment[str]:
    return TextSegment().check(EmailValidator())


def coerced(target_type: type[T]) -> Segment[T]:
    """Segment for any type the default coercer has a rule for."""
    return CoercedSegment(DEFAULT_COERCER.rule_for(target_type))


def typed(target: Any, shape: str = ANY_TEXT_PATTERN) -> TypedSegment:
    return TypedSegment(target, shape)
