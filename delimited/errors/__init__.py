"""Monadic Error Handling System

Type-safe outcome handling in the style of Rust's Result type.

Key components:
- Result[T, E]: container for success/failure
- AppError: flattened error record with tracing context
- ErrorCode: hierarchical error code taxonomy

Usage:
    from delimited.errors import Ok, Err

    match segment.safe_parse("42"):
        case Ok(value):
            print(f"Parsed: {value}")
        case Err(error):
            log.debug("segment_rejected", code=error.code.name)
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
    collect_results,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    "collect_results",
]
