"""Validation Error System

Structured errors with JSON-style paths, constraints, actual values and
suggested fixes. Every failure a segment, template or composite reports is a
``ValidationError`` carrying one or more ``ValidationErrorDetail`` records.

Paths are rooted at ``$`` for a single value. Composite validators re-root
segment details under the segment index, so a failure in the second segment
reads ``[1]`` and a failure inside a nested composite reads ``[1][0]``.

Error Format:
{
    "error": {
        "type": "validation_error",
        "code": "E2031_SEGMENT_VALIDATION_FAILED",
        "kind": "segment",
        "message": "2 segments failed validation",
        "errors": [
            {
                "field": "[1]",
                "segment": 1,
                "constraint": "range[<=12]",
                "value": 13,
                "message": "Value 13 must be at most 12"
            }
        ]
    }
}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

from delimited.errors import AppError, ErrorCode, ErrorContext


class ErrorKind(str, Enum):
    """Which stage of validation rejected the input."""
    VALUE = "value"
    STRUCTURAL = "structural"
    SEGMENT = "segment"
    PREDICATE = "predicate"


_KIND_BY_CODE = {
    ErrorCode.E2030_STRUCTURAL_MISMATCH: ErrorKind.STRUCTURAL,
    ErrorCode.E2032_SEGMENT_COUNT_MISMATCH: ErrorKind.STRUCTURAL,
    ErrorCode.E2031_SEGMENT_VALIDATION_FAILED: ErrorKind.SEGMENT,
    ErrorCode.E2033_PREDICATE_REJECTED: ErrorKind.PREDICATE,
}


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """Detailed validation error for a single value.

    - field_path: path to the offending value (e.g., "$", "[1]", "[2][0]")
    - constraint: constraint violated (e.g., "integer", "max_length[5]")
    - actual_value: the value that failed
    - message: human-readable error message
    - suggested_fix: actionable suggestion, when one is known
    - segment: index of the segment the detail belongs to, if any
    """
    field_path: str
    constraint: str
    actual_value: Any = None
    message: str = ""
    suggested_fix: str | None = None
    segment: int | None = None

    def rebase(self, index: int) -> ValidationErrorDetail:
        """Re-root this detail under a segment index."""
        if self.field_path in ("", "$"): path = f"[{index}]"
        elif self.field_path.startswith("["): path = f"[{index}]{self.field_path}"
        else: path = f"[{index}].{self.field_path}"
        return ValidationErrorDetail(field_path=path, constraint=self.constraint, actual_value=self.actual_value,
            message=self.message, suggested_fix=self.suggested_fix, segment=index)

    def to_dict(self) -> dict[str, Any]:
        result = {"field": self.field_path, "constraint": self.constraint, "message": self.message}
        if self.segment is not None: result["segment"] = self.segment
        if self.actual_value is not None: result["value"] = self.actual_value
        if self.suggested_fix: result["suggested_fix"] = self.suggested_fix
        return result

    @classmethod
    def from_pydantic_error(cls, error: dict[str, Any]) -> ValidationErrorDetail:
        """Create from a Pydantic validation error dict."""
        return cls(field_path=cls._format_path(error.get("loc", ())), constraint=error.get("type", "validation_error"),
            actual_value=error.get("input"), message=error.get("msg", "Validation failed"),
            suggested_fix=cls._generate_suggested_fix(error))

    @staticmethod
    def _format_path(loc: Sequence[str | int]) -> str:
        """Format Pydantic location tuple as a path."""
        if not loc: return "$"
        parts = []
        for segment in loc:
            if isinstance(segment, int): parts.append(f"[{segment}]")
            elif parts: parts.append(f".{segment}")
            else: parts.append(str(segment))
        return "".join(parts)

    @staticmethod
    def _generate_suggested_fix(error: dict[str, Any]) -> str | None:
        err_type = error.get("type", "")
        ctx = error.get("ctx", {})

        fix_generators = {
            "string_too_short": lambda: f"Value must be at least {ctx.get('min_length', '?')} characters",
            "string_too_long": lambda: f"Truncate to {ctx.get('max_length', '?')} characters or less",
            "string_pattern_mismatch": lambda: f"Value must match pattern: {ctx.get('pattern', '?')}",
            "greater_than": lambda: f"Use a value greater than {ctx.get('gt', '?')}",
            "greater_than_equal": lambda: f"Use a value of {ctx.get('ge', '?')} or more",
            "less_than": lambda: f"Use a value less than {ctx.get('lt', '?')}",
            "less_than_equal": lambda: f"Use a value of {ctx.get('le', '?')} or less",
            "enum": lambda: f"Valid options: {ctx.get('expected', '?')}",
            "literal_error": lambda: f"Valid options: {ctx.get('expected', '?')}",
            "date_parsing": lambda: "Provide ISO8601 date (e.g., '2024-01-15')",
            "date_from_datetime_parsing": lambda: "Provide ISO8601 date (e.g., '2024-01-15')",
            "int_parsing": lambda: "Provide a valid integer number",
            "float_parsing": lambda: "Provide a valid decimal number",
            "decimal_parsing": lambda: "Provide a valid decimal number",
            "bool_parsing": lambda: "Provide true or false",
            "uuid_parsing": lambda: "Provide a valid UUID (e.g., '550e8400-e29b-41d4-a716-446655440000')",
            "value_error": lambda: ctx.get("error") and str(ctx["error"]),
        }

        if err_type in fix_generators: return fix_generators[err_type]()
        return None


@dataclass
class ValidationError(Exception):
    """Validation error with structured details.

    Returned inside ``Err`` by ``safe_parse``/``safe_validate`` and raised by
    ``parse``/``validate``. ``code`` identifies the failure kind; ``details``
    lists every offending value.
    """
    message: str
    details: list[ValidationErrorDetail]
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.details: return self.message
        if len(self.details) == 1: return f"{(d := self.details[0]).field_path}: {d.message}"
        return f"{self.message} ({len(self.details)} errors)"

    @property
    def kind(self) -> ErrorKind:
        return _KIND_BY_CODE.get(self.code, ErrorKind.VALUE)

    @property
    def field_errors(self) -> dict[str, list[ValidationErrorDetail]]:
        """Group errors by field path."""
        result: dict[str, list[ValidationErrorDetail]] = {}
        for detail in self.details: result.setdefault(detail.field_path, []).append(detail)
        return result

    @property
    def first_error(self) -> ValidationErrorDetail | None: return self.details[0] if self.details else None

    @property
    def failed_segments(self) -> list[int]:
        """Indices of segments with at least one detail, in order."""
        return sorted({d.segment for d in self.details if d.segment is not None})

    def get_errors_for_field(self, field_path: str) -> list[ValidationErrorDetail]:
        return [d for d in self.details if d.field_path == field_path]

    def to_app_error(self, origin: str = "") -> AppError:
        """Flatten into an AppError."""
        if len(self.details) == 1:
            d = self.details[0]
            return AppError(code=self.code, message=f"{d.field_path}: {d.message}", context=ErrorContext(origin=origin),
                metadata={"field": d.field_path, "constraint": d.constraint, "value": d.actual_value,
                    "suggested_fix": d.suggested_fix, **self.metadata})

        return AppError(code=self.code, message=f"{self.message}: {len(self.details)} errors",
            context=ErrorContext(origin=origin),
            metadata={"error_count": len(self.details), "errors": [d.to_dict() for d in self.details], **self.metadata})

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"type": "validation_error", "code": self.code.name, "kind": self.kind.value,
            "message": self.message, "error_count": len(self.details),
            "errors": [d.to_dict() for d in self.details], **({"metadata": self.metadata} if self.metadata else {})}}

    @classmethod
    def from_pydantic(cls, exc: Exception, *, code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC) -> ValidationError:
        """Create from a Pydantic ValidationError."""
        if not hasattr(exc, "errors"):
            return cls(message=str(exc), details=[], code=code)
        return cls(message="Validation failed",
            details=[ValidationErrorDetail.from_pydantic_error(err) for err in exc.errors()], code=code)


@dataclass
class CollectAllAccumulator:
    """Gathers error details up to max_errors (None is unbounded)."""
    _errors: list[ValidationErrorDetail] = field(default_factory=list)
    max_errors: int | None = 50

    def add_error(self, detail: ValidationErrorDetail) -> bool:
        """Add error detail. Returns True if should continue, False if the cap is reached."""
        if self.max_errors is None:
            self._errors.append(detail)
            return True
        if len(self._errors) < self.max_errors: self._errors.append(detail)
        return len(self._errors) < self.max_errors

    def extend(self, details: Sequence[ValidationErrorDetail]) -> bool:
        """Add several details, stopping as soon as the cap is reached."""
        for detail in details:
            if not self.add_error(detail): return False
        return True

    def get_errors(self) -> list[ValidationErrorDetail]: return self._errors.copy()

    def has_errors(self) -> bool: return len(self._errors) > 0

    def to_validation_error(self, message: str = "Validation failed", *,
                            code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC, **metadata) -> ValidationError | None:
        """Convert to ValidationError if errors exist."""
        if not self.has_errors(): return None
        return ValidationError(message=message, details=self.get_errors(), code=code, metadata=metadata)
