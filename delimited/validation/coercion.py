"""Explicit Opt-in Coercion System

Segments arrive as raw text. A coercion rule turns that text into a typed
value, and also describes the literal shape (a regex fragment) of the text
it is willing to decode so templates can be composed from rules.

Features:
- Type-safe coercion with Result types
- Literal shape per rule for template composition
- No silent data loss or implicit conversions
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Generic, TypeVar

from delimited.errors import AppError, Err, ErrorCode, Ok, Result

T = TypeVar("T")
S = TypeVar("S")

INTEGER_PATTERN = r"[-+]?\d+"
NUMBER_PATTERN = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?"
ISO_DATE_PATTERN = r"\d{4}-\d{2}-\d{2}"


def alternation(options: list[str], case_insensitive: bool = False) -> str:
    """Regex alternation of literal options, longest first so prefixes never win."""
    body = "|".join(re.escape(o) for o in sorted(set(options), key=lambda o: (-len(o), o)))
    return f"(?i:{body})" if case_insensitive else f"(?:{body})"


@dataclass(frozen=True, slots=True)
class CoercionRule(ABC, Generic[S, T]):
    """Base class for coercion rules.

    Each rule defines:
    - Target type it coerces to
    - Literal shape of text it accepts
    - The actual coercion logic
    """

    @property
    @abstractmethod
    def target_type(self) -> type[T]:
        """Type this rule coerces to."""

    @property
    @abstractmethod
    def pattern(self) -> str:
        """Regex fragment (unanchored) matching text this rule can decode."""

    @abstractmethod
    def coerce(self, value: Any) -> Result[T, AppError]:
        """Coerce value to target type. Returns Result."""

    def can_coerce(self, value: Any) -> bool:
        return self.coerce(value).is_ok()

    def __call__(self, value: Any) -> Result[T, AppError]:
        return self.coerce(value)

    def _wrong_type(self, value: Any) -> Err[AppError]:
        return Err(AppError(
            code=ErrorCode.E2004_INVALID_TYPE,
            message=f"Cannot coerce {type(value).__name__} to {self.target_type.__name__}",
            metadata={"source": type(value).__name__, "target": self.target_type.__name__},
        ))


@dataclass(frozen=True, slots=True)
class StringToInt(CoercionRule[str, int]):
    """Coerce string to integer."""
    allow_float_strings: bool = False

    @property
    def target_type(self) -> type[int]:
        return int

    @property
    def pattern(self) -> str:
        return NUMBER_PATTERN if self.allow_float_strings else INTEGER_PATTERN

    def coerce(self, value: Any) -> Result[int, AppError]:
        if not isinstance(value, str):
            return self._wrong_type(value)

        try:
            stripped = value.strip()
            if self.allow_float_strings:
                return Ok(int(float(stripped)))
            return Ok(int(stripped))
        except ValueError as e:
            return Err(AppError(
                code=ErrorCode.E2002_INVALID_FORMAT,
                message=f"Cannot coerce '{value}' to int: {e}",
                metadata={"value": value, "target": "int"},
            ))


@dataclass(frozen=True, slots=True)
class StringToFloat(CoercionRule[str, float]):
    """Coerce string to float."""

    @property
    def target_type(self) -> type[float]:
        return float

    @property
    def pattern(self) -> str:
        return NUMBER_PATTERN

    def coerce(self, value: Any) -> Result[float, AppError]:
        if not isinstance(value, str):
            return self._wrong_type(value)

        try:
            return Ok(float(value.strip()))
        except ValueError as e:
            return Err(AppError(
                code=ErrorCode.E2002_INVALID_FORMAT,
                message=f"Cannot coerce '{value}' to float: {e}",
                metadata={"value": value, "target": "float"},
            ))


@dataclass(frozen=True, slots=True)
class StringToDecimal(CoercionRule[str, Decimal]):
    """Coerce string to Decimal with precision preservation."""

    @property
    def target_type(self) -> type[Decimal]:
        return Decimal

    @property
    def pattern(self) -> str:
        return NUMBER_PATTERN

    def coerce(self, value: Any) -> Result[Decimal, AppError]:
        if not isinstance(value, str):
            return self._wrong_type(value)

        try:
            return Ok(Decimal(value.strip()))
        except InvalidOperation as e:
            return Err(AppError(
                code=ErrorCode.E2002_INVALID_FORMAT,
                message=f"Cannot coerce '{value}' to Decimal: {e}",
                metadata={"value": value, "target": "Decimal"},
            ))


@dataclass(frozen=True, slots=True)
class StringToBool(CoercionRule[str, bool]):
    """Coerce string to boolean.

    Truthy: "true", "1", "yes", "on", "y"
    Falsy: "false", "0", "no", "off", "n"
    """
    true_values: frozenset[str] = frozenset({"true", "1", "yes", "on", "y"})
    false_values: frozenset[str] = frozenset({"false", "0", "no", "off", "n"})

    def __post_init__(self):
        # Tokens match case-insensitively, so keep them lowercased.
        object.__setattr__(self, "true_values", frozenset(v.lower() for v in self.true_values))
        object.__setattr__(self, "false_values", frozenset(v.lower() for v in self.false_values))

    @property
    def target_type(self) -> type[bool]:
        return bool

    @property
    def pattern(self) -> str:
        return alternation([*self.true_values, *self.false_values], case_insensitive=True)

    def coerce(self, value: Any) -> Result[bool, AppError]:
        if not isinstance(value, str):
            return self._wrong_type(value)

        lower = value.strip().lower()
        if lower in self.true_values:
            return Ok(True)
        if lower in self.false_values:
            return Ok(False)

        return Err(AppError(
            code=ErrorCode.E2002_INVALID_FORMAT,
            message=f"Cannot coerce '{value}' to bool. Valid values: {sorted(self.true_values | self.false_values)}",
            metadata={"value": value, "target": "bool"},
        ))


@dataclass(frozen=True, slots=True)
class ISO8601ToDate(CoercionRule[str, date]):
    """Coerce ISO8601 string (YYYY-MM-DD) to date."""

    @property
    def target_type(self) -> type[date]:
        return date

    @property
    def pattern(self) -> str:
        return ISO_DATE_PATTERN

    def coerce(self, value: Any) -> Result[date, AppError]:
        if not isinstance(value, str):
            return self._wrong_type(value)

        try:
            return Ok(date.fromisoformat(value.strip()))
        except ValueError as e:
            return Err(AppError(
                code=ErrorCode.E2012_INVALID_DATE,
                message=f"Cannot coerce '{value}' to date: {e}",
                metadata={"value": value, "target": "date", "format": "ISO8601"},
            ))


@dataclass(frozen=True, slots=True)
class StringToEnum(CoercionRule[str, Enum]):
    """Coerce string to Enum by name or value."""
    enum_class: type[Enum]
    by_value: bool = True
    case_insensitive: bool = True

    @property
    def target_type(self) -> type[Enum]:
        return self.enum_class

    @property
    def pattern(self) -> str:
        options = [m.name for m in self.enum_class]
        if self.by_value:
            options += [str(m.value) for m in self.enum_class]
        return alternation(options, case_insensitive=self.case_insensitive)

    def _find_member(self, value: str) -> Enum:
        check_value = value.strip().upper() if self.case_insensitive else value.strip()

        for member in self.enum_class:
            name = member.name.upper() if self.case_insensitive else member.name
            if name == check_value:
                return member

        if self.by_value:
            for member in self.enum_class:
                member_val = str(member.value)
                if self.case_insensitive:
                    member_val = member_val.upper()
                if member_val == check_value:
                    return member

        raise ValueError(f"No enum member matches: {value}")

    def coerce(self, value: Any) -> Result[Enum, AppError]:
        if not isinstance(value, str):
            return self._wrong_type(value)

        try:
            return Ok(self._find_member(value))
        except ValueError:
            valid = [m.name for m in self.enum_class]
            return Err(AppError(
                code=ErrorCode.E2002_INVALID_FORMAT,
                message=f"Cannot coerce '{value}' to {self.enum_class.__name__}. Valid: {valid}",
                metadata={"value": value, "target": self.enum_class.__name__},
            ))


@dataclass(frozen=True, slots=True)
class ExplicitCoercion:
    """Registry of coercion rules keyed by target type.

    Usage:
        coercer = ExplicitCoercion()
        coercer.rule_for(int)  # StringToInt()
        coercer.coerce("123", int)  # Ok(123)
    """
    rules: tuple[CoercionRule, ...] = field(default_factory=lambda: (
        StringToInt(),
        StringToFloat(),
        StringToDecimal(),
        StringToBool(),
        ISO8601ToDate(),
    ))

    def add_rule(self, rule: CoercionRule) -> ExplicitCoercion:
        """Add a coercion rule, returning new instance. Later rules win."""
        return ExplicitCoercion(rules=(*self.rules, rule))

    def rule_for(self, target_type: type[T]) -> CoercionRule:
        for rule in reversed(self.rules):
            if rule.target_type is target_type:
                return rule
        raise LookupError(f"No coercion rule registered for {target_type.__name__}")

    def coerce(self, value: Any, target_type: type[T]) -> Result[T, AppError]:
        try:
            rule = self.rule_for(target_type)
        except LookupError as e:
            return Err(AppError(code=ErrorCode.E2004_INVALID_TYPE, message=str(e),
                metadata={"target": target_type.__name__}))
        return rule.coerce(value)


DEFAULT_COERCER = ExplicitCoercion()


def coerce(value: Any, target_type: type[T]) -> Result[T, AppError]:
    """Convenience function using default coercer."""
    return DEFAULT_COERCER.coerce(value, target_type)
