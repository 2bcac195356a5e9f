"""Compositional Value Constraints

Atomic validators check an already-decoded segment value (an ``int`` after
integer decoding, a ``str`` for free text). They combine via AND/OR/NOT
combinators and attach to segments with ``Segment.check``.

Features:
- Frozen dataclass validators for immutability
- Regex compiled once per validator
- Rich validation metadata for error context
- Lazy evaluation for OR, short-circuit evaluation for AND
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from email.utils import parseaddr
from typing import Any, Callable

from delimited.errors import ErrorCode

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of a single constraint check."""
    is_valid: bool
    error_message: str | None = None
    error_code: ErrorCode | None = None
    constraint: str | None = None
    expected: Any = None
    actual: Any = None

    @classmethod
    def valid(cls) -> ValidationResult: return cls(is_valid=True)

    @classmethod
    def invalid(cls, message: str, code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC, *,
                constraint: str | None = None, expected: Any = None, actual: Any = None) -> ValidationResult:
        return cls(is_valid=False, error_message=message, error_code=code, constraint=constraint,
            expected=expected, actual=actual)


def _wrong_type(value: Any, expected: str) -> ValidationResult:
    return ValidationResult.invalid(f"Expected {expected}, got {type(value).__name__}", ErrorCode.E2004_INVALID_TYPE,
        constraint=expected, expected=expected, actual=type(value).__name__)


class AtomicValidator(ABC):
    """Base class for value constraints.

    Validators are immutable and composable via operators:
    - & (AND): both must pass
    - | (OR): at least one must pass
    - ~ (NOT): negates the validator
    """

    @abstractmethod
    def validate(self, value: Any) -> ValidationResult:
        """Validate a value. Returns ValidationResult."""

    @property
    @abstractmethod
    def constraint_name(self) -> str:
        """Human-readable constraint name for error messages."""

    def __call__(self, value: Any) -> ValidationResult: return self.validate(value)

    def __and__(self, other: AtomicValidator) -> And: return And(self, other)

    def __or__(self, other: AtomicValidator) -> Or: return Or(self, other)

    def __invert__(self) -> Not: return Not(self)

    def with_message(self, message: str) -> WithMessage: return WithMessage(self, message)


# ============================================================================
# String Constraints
# ============================================================================

@dataclass(frozen=True, slots=True)
class StringLength(AtomicValidator):
    """Validate string length constraints."""
    min_length: int | None = None
    max_length: int | None = None

    @property
    def constraint_name(self) -> str:
        if self.min_length is not None and self.max_length is not None:
            return f"length[{self.min_length},{self.max_length}]"
        if self.min_length is not None: return f"min_length[{self.min_length}]"
        if self.max_length is not None: return f"max_length[{self.max_length}]"
        return "string_length"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _wrong_type(value, "string")
        length = len(value)
        if self.min_length is not None and length < self.min_length:
            return ValidationResult.invalid(f"String length {length} is less than minimum {self.min_length}",
                ErrorCode.E2003_OUT_OF_RANGE, constraint=self.constraint_name,
                expected=f">= {self.min_length} characters", actual=f"{length} characters")
        if self.max_length is not None and length > self.max_length:
            return ValidationResult.invalid(f"String length {length} exceeds maximum {self.max_length}",
                ErrorCode.E2003_OUT_OF_RANGE, constraint=self.constraint_name,
                expected=f"<= {self.max_length} characters", actual=f"{length} characters")
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class NonEmpty(AtomicValidator):
    """Validate that a string is not empty (optionally ignoring whitespace)."""
    strip_whitespace: bool = True

    @property
    def constraint_name(self) -> str:
        return "non_empty"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _wrong_type(value, "string")
        if not (value.strip() if self.strip_whitespace else value):
            return ValidationResult.invalid("String cannot be empty", ErrorCode.E2001_REQUIRED_VALUE_MISSING,
                constraint=self.constraint_name, expected="non-empty string", actual=value)
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class RegexPattern(AtomicValidator):
    """Validate a whole string against a regex."""
    pattern: str
    flags: int = 0
    description: str | None = None
    _compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_compiled", re.compile(self.pattern, self.flags))

    @property
    def constraint_name(self) -> str:
        return self.description or f"pattern[{self.pattern}]"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _wrong_type(value, "string")
        if not self._compiled.fullmatch(value):
            return ValidationResult.invalid(f"Value does not match pattern: {self.description or self.pattern}",
                ErrorCode.E2002_INVALID_FORMAT, constraint=self.constraint_name,
                expected=f"match pattern '{self.pattern}'", actual=value[:50] + ("..." if len(value) > 50 else ""))
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class OneOf(AtomicValidator):
    """Validate value is one of the allowed options."""
    options: frozenset
    case_sensitive: bool = True

    def __init__(self, *options: Any, case_sensitive: bool = True):
        object.__setattr__(self, "options", frozenset(options)); object.__setattr__(self, "case_sensitive", case_sensitive)

    @property
    def constraint_name(self) -> str:
        opts = sorted(map(str, self.options))[:5]
        suffix = f"... +{len(self.options) - 5}" if len(self.options) > 5 else ""
        return f"one_of[{', '.join(opts)}{suffix}]"

    def validate(self, value: Any) -> ValidationResult:
        if self.case_sensitive or not isinstance(value, str): found = value in self.options
        else: found = value.lower() in {str(o).lower() for o in self.options}
        if not found:
            allowed = sorted(map(str, self.options))
            return ValidationResult.invalid(f"Value '{value}' is not one of: {', '.join(allowed)}",
                ErrorCode.E2005_CONSTRAINT_VIOLATION, constraint=self.constraint_name, expected=allowed, actual=value)
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class EmailValidator(AtomicValidator):
    """Validate email address format."""
    allow_display_name: bool = False

    @property
    def constraint_name(self) -> str:
        return "email"

    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str): return _wrong_type(value, "string")
        check_value = parseaddr(value)[1] if self.allow_display_name else value
        if not check_value or not _EMAIL_PATTERN.match(check_value):
            return ValidationResult.invalid(f"Invalid email format: {value}", ErrorCode.E2010_INVALID_EMAIL,
                constraint=self.constraint_name, expected="valid email address", actual=value)
        return ValidationResult.valid()


# ============================================================================
# Numeric Constraints
# ============================================================================

@dataclass(frozen=True, slots=True)
class NumericRange(AtomicValidator):
    """Validate numeric range constraints."""
    min_value: float | int | None = None
    max_value: float | int | None = None
    exclusive_min: bool = False
    exclusive_max: bool = False

    @property
    def constraint_name(self) -> str:
        parts = []
        if self.min_value is not None: parts.append(f"{'>' if self.exclusive_min else '>='}{self.min_value}")
        if self.max_value is not None: parts.append(f"{'<' if self.exclusive_max else '<='}{self.max_value}")
        return f"range[{', '.join(parts)}]" if parts else "numeric"

    def validate(self, value: Any) -> ValidationResult:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)): return _wrong_type(value, "number")

        if self.min_value is not None:
            if self.exclusive_min and value <= self.min_value:
                return ValidationResult.invalid(f"Value {value} must be greater than {self.min_value}",
                    ErrorCode.E2003_OUT_OF_RANGE, constraint=self.constraint_name, expected=f"> {self.min_value}", actual=value)
            if not self.exclusive_min and value < self.min_value:
                return ValidationResult.invalid(f"Value {value} must be at least {self.min_value}",
                    ErrorCode.E2003_OUT_OF_RANGE, constraint=self.constraint_name, expected=f">= {self.min_value}", actual=value)

        if self.max_value is not None:
            if self.exclusive_max and value >= self.max_value:
                return ValidationResult.invalid(f"Value {value} must be less than {self.max_value}",
                    ErrorCode.E2003_OUT_OF_RANGE, constraint=self.constraint_name, expected=f"< {self.max_value}", actual=value)
            if not self.exclusive_max and value > self.max_value:
                return ValidationResult.invalid(f"Value {value} must be at most {self.max_value}",
                    ErrorCode.E2003_OUT_OF_RANGE, constraint=self.constraint_name, expected=f"<= {self.max_value}", actual=value)

        return ValidationResult.valid()


# ============================================================================
# Combinators
# ============================================================================

@dataclass(frozen=True, slots=True)
class And(AtomicValidator):
    """AND combinator: both validators must pass (short-circuit on first failure)."""
    left: AtomicValidator
    right: AtomicValidator

    @property
    def constraint_name(self) -> str:
        return f"({self.left.constraint_name} AND {self.right.constraint_name})"

    def validate(self, value: Any) -> ValidationResult:
        if not (left_result := self.left.validate(value)).is_valid: return left_result
        return self.right.validate(value)


@dataclass(frozen=True, slots=True)
class Or(AtomicValidator):
    """OR combinator: at least one validator must pass (lazy evaluation)."""
    left: AtomicValidator
    right: AtomicValidator

    @property
    def constraint_name(self) -> str:
        return f"({self.left.constraint_name} OR {self.right.constraint_name})"

    def validate(self, value: Any) -> ValidationResult:
        if (left_result := self.left.validate(value)).is_valid: return ValidationResult.valid()
        if (right_result := self.right.validate(value)).is_valid: return ValidationResult.valid()
        return ValidationResult.invalid(f"Neither constraint satisfied: {left_result.error_message} OR {right_result.error_message}",
            ErrorCode.E2000_VALIDATION_GENERIC, constraint=self.constraint_name, actual=value)


@dataclass(frozen=True, slots=True)
class Not(AtomicValidator):
    """NOT combinator: negates validator."""
    validator: AtomicValidator
    message: str | None = None

    @property
    def constraint_name(self) -> str:
        return f"NOT({self.validator.constraint_name})"

    def validate(self, value: Any) -> ValidationResult:
        if self.validator.validate(value).is_valid:
            return ValidationResult.invalid(self.message or f"Value should not satisfy: {self.validator.constraint_name}",
                ErrorCode.E2005_CONSTRAINT_VIOLATION, constraint=self.constraint_name, actual=value)
        return ValidationResult.valid()


@dataclass(frozen=True, slots=True)
class WithMessage(AtomicValidator):
    """Wrapper to override error message."""
    validator: AtomicValidator
    message: str

    @property
    def constraint_name(self) -> str:
        return self.validator.constraint_name

    def validate(self, value: Any) -> ValidationResult:
        if (result := self.validator.validate(value)).is_valid: return result
        return ValidationResult.invalid(self.message, result.error_code or ErrorCode.E2000_VALIDATION_GENERIC,
            constraint=result.constraint, expected=result.expected, actual=result.actual)


# ============================================================================
# Custom Validator
# ============================================================================

@dataclass(frozen=True, slots=True)
class CustomValidator(AtomicValidator):
    """Constraint from a plain predicate.

    Usage:
        even = CustomValidator(lambda n: n % 2 == 0, name="even", message="Must be even")
    """
    predicate: Callable[[Any], bool]
    name: str = "custom"
    message: str | None = None

    @property
    def constraint_name(self) -> str:
        return self.name

    def validate(self, value: Any) -> ValidationResult:
        try:
            if self.predicate(value): return ValidationResult.valid()
        except Exception as e:
            return ValidationResult.invalid(f"Validation error: {e}", ErrorCode.E2000_VALIDATION_GENERIC,
                constraint=self.name, actual=value)
        return ValidationResult.invalid(self.message or f"Value failed '{self.name}' check",
            ErrorCode.E2005_CONSTRAINT_VIOLATION, constraint=self.name, actual=value)


def custom(name: str, message: str | None = None) -> Callable[[Callable[[Any], bool]], CustomValidator]:
    """Decorator to create a constraint from a predicate function.

    Usage:
        @custom("even")
        def is_even(n: int) -> bool:
            return n % 2 == 0
    """
    return lambda fn: CustomValidator(fn, name=name, message=message)
