"""Composite Error Builders

Ergonomic constructors for the failure kinds a composite validator reports.
Each builder returns ``Err(ValidationError)`` with the matching code.
"""
from typing import Any, Sequence

from delimited.errors import Err, ErrorCode
from .errors import ValidationError, ValidationErrorDetail


def invalid_type(value: Any, expected: str = "string", *,
                 code: ErrorCode = ErrorCode.E2004_INVALID_TYPE) -> Err[ValidationError]:
    """Input is not of the type a validator decodes from."""
    message = f"Expected {expected}, got {type(value).__name__}"
    return Err(ValidationError(
        message=message,
        details=[ValidationErrorDetail(field_path="$", constraint=expected,
            actual_value=type(value).__name__, message=message)],
        code=code,
    ))


def structural_mismatch(
    value: str,
    expected_pattern: str,
    message: str,
    *,
    template_format: str | None = None,
) -> Err[ValidationError]:
    """Input does not have the interleaved literal shape."""
    metadata = {"pattern": expected_pattern}
    if template_format is not None:
        metadata["format"] = template_format
    return Err(ValidationError(
        message=message,
        details=[ValidationErrorDetail(field_path="$", constraint="template", actual_value=value,
            message=message, suggested_fix=f"Value must match template: {template_format or expected_pattern}")],
        code=ErrorCode.E2030_STRUCTURAL_MISMATCH,
        metadata=metadata,
    ))


def segment_count_mismatch(value: str, delimiter: str, expected: int, actual: int) -> Err[ValidationError]:
    """Splitting on the delimiter produced the wrong number of pieces."""
    message = f"Expected {expected} segments separated by {delimiter!r}, found {actual}"
    return Err(ValidationError(
        message=message,
        details=[ValidationErrorDetail(field_path="$", constraint=f"segments[{expected}]", actual_value=value,
            message=message, suggested_fix=f"Segment values must not contain the delimiter {delimiter!r}")],
        code=ErrorCode.E2032_SEGMENT_COUNT_MISMATCH,
        metadata={"expected_segments": expected, "actual_segments": actual, "delimiter": delimiter},
    ))


def segment_failures(failures: Sequence[tuple[int, ValidationError]]) -> Err[ValidationError]:
    """One or more segments failed their own validator.

    Details are re-rooted under each segment index. Every segment's own code,
    message and metadata are kept under ``metadata["segment_errors"]``.
    """
    failed = [index for index, _ in failures]
    noun = "segment" if len(failed) == 1 else "segments"
    return Err(ValidationError(
        message=f"{len(failed)} {noun} failed validation",
        details=[detail.rebase(index) for index, error in failures for detail in error.details],
        code=ErrorCode.E2031_SEGMENT_VALIDATION_FAILED,
        metadata={
            "failed_segments": failed,
            "segment_errors": {
                index: {"code": error.code.name, "message": error.message, **error.metadata}
                for index, error in failures
            },
        },
    ))


def predicate_rejected(values: tuple, message: str, path: Sequence[str | int] = ()) -> Err[ValidationError]:
    """Cross-field check returned False for the decoded values."""
    return Err(ValidationError(
        message=message,
        details=[ValidationErrorDetail(field_path=ValidationErrorDetail._format_path(tuple(path)),
            constraint="cross_field_check", actual_value=values, message=message)],
        code=ErrorCode.E2033_PREDICATE_REJECTED,
    ))
