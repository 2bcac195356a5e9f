"""Composite Delimited-String Validation

Combines independent segment validators into one validator for strings of
the form ``seg0 <delim> seg1 <delim> ... seg[n-1]``, then applies a
cross-field check over the decoded values.

One validation call moves through these states:

    START --(template mismatch)--> STRUCTURAL_FAILURE
    START --(template match)--> SPLIT
    SPLIT --(piece count != segment count)--> STRUCTURAL_FAILURE
    SPLIT --(segments run, never short-circuited)--> outcomes
        any Err  --> SEGMENT_FAILURE (all failing positions reported)
        all Ok   --> PREDICATE
    PREDICATE --(False)--> PREDICATE_FAILURE
    PREDICATE --(True)--> SUCCESS
    PREDICATE --(raises)--> exception propagates to the caller

Usage:
    from delimited import refine_template_literal, integer

    day_month = refine_template_literal(
        [integer(min_value=1), integer(min_value=1, max_value=12)],
        ",",
        lambda values: values[0] <= days_in_month(values[1]),
        check_params="Day is out of range for month",
    )
    day_month.safe_validate("7,11")    # Ok((7, 11))
    day_month.safe_validate("31,11")   # Err(... E2033_PREDICATE_REJECTED ...)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from delimited.config import get_settings
from delimited.errors import Ok, Result, collect_results
from delimited.logging import validation_logger
from .builders import predicate_rejected, segment_count_mismatch, segment_failures
from .errors import ValidationError
from .segments import Segment
from .template import TemplateLiteral, TemplateParams, interleave, split_segments

log = validation_logger()

Check = Callable[[tuple], bool]

DEFAULT_CHECK_MESSAGE = "Invalid input"


@dataclass(frozen=True, slots=True)
class CheckParams:
    """Error configuration for cross-field check rejections."""
    message: str = DEFAULT_CHECK_MESSAGE
    path: tuple[str | int, ...] = ()

    @classmethod
    def coerce(cls, params: str | CheckParams | None) -> CheckParams:
        if params is None: return cls()
        if isinstance(params, str): return cls(message=params)
        if isinstance(params, cls): return params
        raise TypeError(f"Expected str or CheckParams, got {type(params).__name__}")


def run_segments(segments: Sequence[Segment], pieces: Sequence[str]) -> tuple[Result[Any, ValidationError], ...]:
    """Parse each piece with the segment at the same position.

    Every pair is evaluated even after a failure.
    """
    if len(pieces) != len(segments):
        raise ValueError(f"Got {len(pieces)} pieces for {len(segments)} segments")
    return tuple(segment.safe_parse(piece) for segment, piece in zip(segments, pieces))


def refine(
    outcomes: Sequence[Result[Any, ValidationError]],
    check: Check,
    params: CheckParams,
) -> Result[tuple, ValidationError]:
    """Aggregate segment outcomes, then apply the cross-field check.

    The check only runs when every segment succeeded, and is not guarded:
    an exception it raises reaches the caller unchanged.
    """
    collected = collect_results(list(outcomes))
    if collected.is_err():
        return segment_failures(collected.unwrap_err())

    values = tuple(collected.unwrap())
    if not check(values):
        return predicate_rejected(values, params.message, params.path)
    return Ok(values)


def _preview(value: str) -> str | None:
    if not get_settings().LOG_INPUTS:
        return None
    return value[:50] + ("..." if len(value) > 50 else "")


@dataclass(frozen=True)
class CompositeValidator(Segment[tuple]):
    """Validator for delimiter-joined strings of independently validated segments.

    Immutable once built and safe to share between threads. It is itself a
    segment, so composites can be nested inside other composites.
    """
    segments: tuple[Segment, ...]
    delimiter: str
    predicate: Check
    template_params: TemplateParams = field(default_factory=TemplateParams)
    check_params: CheckParams = field(default_factory=CheckParams)
    template: TemplateLiteral = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if isinstance(self.segments, (str, bytes)) or not isinstance(self.segments, Sequence):
            raise TypeError(f"segments must be a sequence of Segment, got {type(self.segments).__name__}")
        for index, segment in enumerate(self.segments):
            if not isinstance(segment, Segment):
                raise TypeError(f"segments[{index}] must be a Segment, got {type(segment).__name__}")
        if not isinstance(self.delimiter, str):
            raise TypeError(f"delimiter must be a string, got {type(self.delimiter).__name__}")
        if not callable(self.predicate):
            raise TypeError("check must be callable")

        object.__setattr__(self, "segments", tuple(self.segments))
        object.__setattr__(self, "template_params", TemplateParams.coerce(self.template_params))
        object.__setattr__(self, "check_params", CheckParams.coerce(self.check_params))
        object.__setattr__(self, "template",
            TemplateLiteral(interleave(self.segments, self.delimiter), self.template_params))

        log.debug("composite_built", segment_count=len(self.segments), delimiter=self.delimiter,
            template_format=self.template_params.format)

    @property
    def pattern(self) -> str:
        return self.template.pattern

    @property
    def name(self) -> str:
        return f"composite[{len(self.segments)}]"

    def split(self, value: str) -> list[str]:
        """Pieces of an already template-matched value.

        No delimiter is interleaved for fewer than two segments, so the value
        is then taken whole (or not at all) instead of being split.
        """
        if not self.segments:
            return []
        if len(self.segments) == 1:
            return [value]
        return split_segments(value, self.delimiter)

    def safe_parse(self, raw: Any) -> Result[tuple, ValidationError]:
        if (matched := self.template.safe_parse(raw)).is_err():
            log.debug("composite_structural_mismatch", template_format=self.template_params.format,
                input=_preview(raw) if isinstance(raw, str) else type(raw).__name__)
            return matched

        pieces = self.split(raw)
        if len(pieces) != len(self.segments):
            log.debug("composite_segment_count_mismatch", expected=len(self.segments), actual=len(pieces),
                input=_preview(raw))
            return segment_count_mismatch(raw, self.delimiter, len(self.segments), len(pieces))

        outcome = refine(run_segments(self.segments, pieces), self.predicate, self.check_params)
        if outcome.is_err():
            error = outcome.unwrap_err()
            log.debug("composite_rejected", kind=error.kind.value, code=error.code.name,
                failed_segments=error.failed_segments, input=_preview(raw))
            return outcome
        if self.checks:
            return self._apply_constraints(outcome.unwrap())
        return outcome

    def safe_validate(self, value: Any) -> Result[tuple, ValidationError]:
        """Validate a composite string without raising on invalid input."""
        return self.safe_parse(value)

    def validate(self, value: Any) -> tuple:
        """Validate a composite string, raising ``ValidationError`` on invalid input."""
        return self.parse(value)


def refine_template_literal(
    segments: Sequence[Segment],
    delimiter: str,
    check: Check,
    template_params: str | TemplateParams | None = None,
    check_params: str | CheckParams | None = None,
) -> CompositeValidator:
    """Build a composite validator.

    Args:
        segments: Ordered segment validators, one per delimited piece.
        delimiter: Exact text separating pieces; may be empty.
        check: Cross-field predicate over the tuple of decoded values.
        template_params: Message (or TemplateParams) for structural mismatches.
        check_params: Message (or CheckParams) for check rejections.
    """
    return CompositeValidator(
        segments=segments,
        delimiter=delimiter,
        predicate=check,
        template_params=template_params,
        check_params=check_params,
    )
