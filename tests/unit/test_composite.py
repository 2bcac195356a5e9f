"""
Unit tests for composite delimited-string validation.

Purpose
-------
Exercise the whole validation flow: structural matching, exact splitting,
positional segment validation with aggregated errors, and the cross-field
check that only runs once every segment has passed.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from delimited.errors import ErrorCode, Ok
from delimited.validation import (
    CheckParams,
    CompositeValidator,
    ErrorKind,
    TemplateParams,
    ValidationError,
    choice,
    email,
    integer,
    literal,
    refine,
    refine_template_literal,
    run_segments,
    text,
)


def always(_values):
    return True


# ============================================================================
# Validation Outcomes
# ============================================================================

@pytest.mark.unit
class TestDayMonth:
    """Test the four outcomes on a day,month validator."""

    def test_valid_date(self, day_month):
        assert day_month.safe_validate("7,11") == Ok((7, 11))

    def test_day_out_of_range_for_month(self, day_month):
        # Act
        error = day_month.safe_validate("31,11").unwrap_err()

        # Assert
        assert error.kind == ErrorKind.PREDICATE
        assert error.code == ErrorCode.E2033_PREDICATE_REJECTED
        assert error.message == "Day is out of range for month"
        assert error.details[0].field_path == "day"
        assert error.details[0].actual_value == (31, 11)

    def test_wrong_delimiter_is_structural(self, day_month):
        error = day_month.safe_validate("31/11").unwrap_err()

        assert error.kind == ErrorKind.STRUCTURAL
        assert error.code == ErrorCode.E2030_STRUCTURAL_MISMATCH
        assert error.message == "Expected DAY,MONTH"

    def test_segment_failure_is_attributed_to_position(self, day_month):
        error = day_month.safe_validate("7,13").unwrap_err()

        assert error.kind == ErrorKind.SEGMENT
        assert error.code == ErrorCode.E2031_SEGMENT_VALIDATION_FAILED
        assert error.failed_segments == [1]
        assert error.details[0].field_path == "[1]"
        assert error.details[0].segment == 1
        assert error.metadata["failed_segments"] == [1]

    def test_every_failing_segment_is_reported(self, day_month):
        error = day_month.safe_validate("0,13").unwrap_err()

        assert error.failed_segments == [0, 1]
        assert [d.field_path for d in error.details] == ["[0]", "[1]"]
        assert error.message == "2 segments failed validation"

    def test_validate_returns_tuple(self, day_month):
        assert day_month.validate("28,2") == (28, 2)

    def test_validate_raises_on_invalid_input(self, day_month):
        with pytest.raises(ValidationError) as exc_info:
            day_month.validate("31,11")

        assert exc_info.value.kind == ErrorKind.PREDICATE

    def test_non_string_input_is_structural(self, day_month):
        error = day_month.safe_validate(711).unwrap_err()
        assert error.kind == ErrorKind.STRUCTURAL


@pytest.mark.unit
class TestSegmentCount:
    """Test splitting that disagrees with the segment count."""

    def test_extra_delimiter_in_free_text(self):
        # Arrange
        pair = refine_template_literal([text(), text()], "|", always)

        # Act
        error = pair.safe_validate("a|b|c").unwrap_err()

        # Assert
        assert error.kind == ErrorKind.STRUCTURAL
        assert error.code == ErrorCode.E2032_SEGMENT_COUNT_MISMATCH
        assert error.metadata["expected_segments"] == 2
        assert error.metadata["actual_segments"] == 3

    def test_segments_are_not_run_on_count_mismatch(self, recording_predicate):
        pair = refine_template_literal([text(), text()], "|", recording_predicate)

        pair.safe_validate("a|b|c")

        assert recording_predicate.calls == []

    def test_exact_count_succeeds(self):
        pair = refine_template_literal([text(), text()], "|", always)
        assert pair.safe_validate("a|b") == Ok(("a", "b"))


@pytest.mark.unit
class TestSegmentErrorCodes:
    """Each failing segment keeps its own code next to the aggregate one."""

    def test_codes_of_every_failing_segment(self):
        # Arrange
        adult_contact = refine_template_literal([integer(18, 120), email()], ":", always)

        # Act
        error = adult_contact.safe_validate("15:not-an-email").unwrap_err()

        # Assert
        assert error.code == ErrorCode.E2031_SEGMENT_VALIDATION_FAILED
        segment_errors = error.metadata["segment_errors"]
        assert segment_errors[0]["code"] == "E2003_OUT_OF_RANGE"
        assert segment_errors[1]["code"] == "E2010_INVALID_EMAIL"

    def test_codes_survive_serialisation(self):
        adult_contact = refine_template_literal([integer(18, 120), email()], ":", always)

        payload = adult_contact.safe_validate("15:not-an-email").unwrap_err().to_dict()

        assert payload["error"]["metadata"]["segment_errors"][1]["code"] == "E2010_INVALID_EMAIL"

    def test_only_failing_segments_are_listed(self):
        error = refine_template_literal([integer(), integer(max_value=5)], ",", always).safe_validate("1,9").unwrap_err()

        assert list(error.metadata["segment_errors"]) == [1]
        assert error.metadata["segment_errors"][1]["code"] == "E2003_OUT_OF_RANGE"


# ============================================================================
# Cross-field Check
# ============================================================================

@pytest.mark.unit
class TestCrossFieldCheck:
    """Test when and how the cross-field check runs."""

    def test_check_receives_decoded_values(self, recording_predicate):
        validator = refine_template_literal([integer(), text()], ":", recording_predicate)

        validator.safe_validate("5:five")

        assert recording_predicate.calls == [(5, "five")]

    def test_check_skipped_when_any_segment_fails(self, recording_predicate):
        validator = refine_template_literal([integer(max_value=3), integer()], ":", recording_predicate)

        result = validator.safe_validate("9:1")

        assert result.is_err()
        assert recording_predicate.calls == []

    def test_check_called_once_per_validation(self, recording_predicate):
        validator = refine_template_literal([integer()], ":", recording_predicate)

        validator.safe_validate("1")
        validator.safe_validate("2")

        assert recording_predicate.calls == [(1,), (2,)]

    def test_exception_from_check_propagates(self):
        """A raising check is a programming error and must reach the caller."""
        boom = RuntimeError("boom")

        def explode(_values):
            raise boom

        validator = refine_template_literal([text()], "|", explode)

        with pytest.raises(RuntimeError) as exc_info:
            validator.validate("test")
        assert exc_info.value is boom

        with pytest.raises(RuntimeError):
            validator.safe_validate("test")

    def test_default_check_message(self):
        validator = refine_template_literal([text()], "|", lambda values: False)

        error = validator.safe_validate("x").unwrap_err()

        assert error.message == "Invalid input"
        assert error.details[0].field_path == "$"

    def test_check_params_path(self):
        validator = refine_template_literal([text()], "|", lambda values: False,
            check_params=CheckParams("nope", path=("range", 0)))

        assert validator.safe_validate("x").unwrap_err().details[0].field_path == "range[0]"


# ============================================================================
# Delimiters and Shapes
# ============================================================================

@pytest.mark.unit
class TestDelimiters:
    """Test delimiter edge cases."""

    def test_empty_delimiter_splits_characters(self):
        validator = refine_template_literal([literal("a"), literal("b")], "", always)

        assert validator.safe_validate("ab") == Ok(("a", "b"))
        assert validator.split("ab") == ["a", "b"]

    def test_empty_delimiter_count_mismatch(self):
        validator = refine_template_literal([text(), text()], "", always)

        error = validator.safe_validate("abc").unwrap_err()

        assert error.code == ErrorCode.E2032_SEGMENT_COUNT_MISMATCH

    def test_single_segment_with_empty_delimiter(self):
        validator = refine_template_literal([integer()], "", always)

        assert validator.safe_validate("42") == Ok((42,))
        assert validator.split("42") == ["42"]

    def test_single_segment_keeps_delimiter_in_value(self):
        validator = refine_template_literal([text()], "|", always)

        assert validator.safe_validate("a|b") == Ok(("a|b",))
        assert validator.safe_validate("") == Ok(("",))

    def test_multi_character_delimiter(self):
        validator = refine_template_literal([text(), integer(), choice("x", "y")], "::", always)

        assert validator.safe_validate("hello::42::y") == Ok(("hello", 42, "y"))

    def test_unicode_delimiter(self):
        validator = refine_template_literal([text(), text()], "💻", always)
        assert validator.safe_validate("hello💻world") == Ok(("hello", "world"))

    def test_long_delimiter(self):
        delimiter = "-" * 1000
        validator = refine_template_literal([integer(), integer()], delimiter, always)

        assert validator.safe_validate(f"1{delimiter}2") == Ok((1, 2))

    def test_regex_metacharacter_delimiter(self):
        validator = refine_template_literal([integer(), integer()], ".", always)

        assert validator.safe_validate("1.2") == Ok((1, 2))
        assert validator.safe_validate("1x2").unwrap_err().kind == ErrorKind.STRUCTURAL

    def test_no_segments_accepts_only_empty_string(self, recording_predicate):
        validator = refine_template_literal([], "|", recording_predicate)

        assert validator.safe_validate("") == Ok(())
        assert recording_predicate.calls == [()]
        assert validator.safe_validate("x").unwrap_err().kind == ErrorKind.STRUCTURAL

    def test_template_params_format(self):
        validator = refine_template_literal([integer(), integer()], ",", always,
            template_params=TemplateParams("Bad shape", format="dd,mm"))

        error = validator.safe_validate("nope").unwrap_err()

        assert error.message == "Bad shape"
        assert error.metadata["format"] == "dd,mm"


@pytest.mark.unit
class TestRoundTrip:
    """Joining valid raw pieces and validating yields the decoded pieces."""

    @pytest.mark.parametrize("segments,raws,expected", [
        ([text(), text()], ["a", "b"], ("a", "b")),
        ([integer(), integer(), integer()], ["1", "-2", "3"], (1, -2, 3)),
        ([text(min_length=1), choice("on", "off")], ["lamp", "off"], ("lamp", "off")),
        ([literal("v"), integer()], ["v", "2"], ("v", 2)),
    ])
    @pytest.mark.parametrize("delimiter", [",", "::", "💻"])
    def test_join_then_validate(self, segments, raws, expected, delimiter):
        validator = refine_template_literal(segments, delimiter, always)
        joined = delimiter.join(raws)

        assert validator.split(joined) == raws
        assert validator.safe_validate(joined) == Ok(expected)

    def test_validation_is_repeatable(self, day_month):
        for value in ("7,11", "31,11", "31/11", "0,13"):
            assert day_month.safe_validate(value) == day_month.safe_validate(value)


# ============================================================================
# Composition
# ============================================================================

@pytest.mark.unit
class TestNesting:
    """Composites are segments and can be nested."""

    @pytest.fixture
    def span(self) -> CompositeValidator:
        inner = refine_template_literal([integer(), integer(max_value=10)], "-", lambda v: v[0] < v[1])
        return refine_template_literal([text(min_length=1), inner], ":", always)

    def test_nested_success(self, span):
        assert span.safe_validate("range:1-5") == Ok(("range", (1, 5)))

    def test_inner_check_failure_is_rebased(self, span):
        error = span.safe_validate("range:5-1").unwrap_err()

        assert error.kind == ErrorKind.SEGMENT
        assert error.failed_segments == [1]
        assert error.details[0].field_path == "[1]"

    def test_inner_segment_failure_path(self, span):
        error = span.safe_validate("range:1-11").unwrap_err()

        assert error.details[0].field_path == "[1][1]"
        assert error.details[0].segment == 1

    def test_inner_count_mismatch_code_is_kept(self):
        inner = refine_template_literal([text(), text()], "-", always)
        outer = refine_template_literal([text(min_length=1), inner], ":", always)

        error = outer.safe_validate("x:a-b-c").unwrap_err()

        assert error.failed_segments == [1]
        assert error.metadata["segment_errors"][1]["code"] == "E2032_SEGMENT_COUNT_MISMATCH"
        assert error.metadata["segment_errors"][1]["expected_segments"] == 2

    def test_composite_with_extra_checks(self):
        from delimited.validation import CustomValidator

        validator = refine_template_literal([integer(), integer()], ",", always).check(
            CustomValidator(lambda v: sum(v) < 10, name="small_sum"))

        assert validator.safe_validate("1,2") == Ok((1, 2))
        assert validator.safe_validate("5,6").unwrap_err().details[0].constraint == "small_sum"


@pytest.mark.unit
class TestUserRecord:
    """A realistic name:age:email:status record."""

    @pytest.fixture
    def user(self) -> CompositeValidator:
        return refine_template_literal(
            [text(3, 20), integer(18, 120), email(), choice("active", "inactive", "suspended")],
            ":",
            lambda v: not (v[3] == "suspended" and v[2].endswith("@example.com")),
            template_params=TemplateParams(format="name:age:email:status"),
            check_params="Suspended accounts cannot use example.com addresses",
        )

    def test_valid_record(self, user):
        assert user.validate("john_doe:25:john@example.com:active") == (
            "john_doe", 25, "john@example.com", "active")

    def test_underage(self, user):
        error = user.safe_validate("kid:15:kid@example.com:active").unwrap_err()

        assert error.failed_segments == [1]
        assert error.details[0].constraint == "range[>=18, <=120]"

    def test_suspended_example_address(self, user):
        error = user.safe_validate("admin:30:admin@example.com:suspended").unwrap_err()
        assert error.kind == ErrorKind.PREDICATE

    def test_wrong_shape(self, user):
        assert user.safe_validate("invalid-format").unwrap_err().kind == ErrorKind.STRUCTURAL

    def test_error_serialisation(self, user):
        payload = user.safe_validate("kid:15:not-an-email:active").unwrap_err().to_dict()

        assert payload["error"]["code"] == "E2031_SEGMENT_VALIDATION_FAILED"
        assert payload["error"]["kind"] == "segment"
        assert [e["segment"] for e in payload["error"]["errors"]] == [1, 2]


# ============================================================================
# Building Blocks
# ============================================================================

@pytest.mark.unit
class TestRunSegmentsAndRefine:
    """Test the runner and refiner directly."""

    def test_runner_evaluates_every_pair(self):
        outcomes = run_segments([integer(), integer(), integer()], ["x", "2", "y"])

        assert [o.is_ok() for o in outcomes] == [False, True, False]

    def test_runner_rejects_length_mismatch(self):
        with pytest.raises(ValueError):
            run_segments([integer()], ["1", "2"])

    def test_refine_success(self):
        result = refine((Ok(1), Ok(2)), lambda v: True, CheckParams())
        assert result == Ok((1, 2))

    def test_refine_rejected(self):
        result = refine((Ok(1),), lambda v: False, CheckParams("no"))

        assert result.unwrap_err().code == ErrorCode.E2033_PREDICATE_REJECTED

    def test_check_params_coercion(self):
        assert CheckParams.coerce(None) == CheckParams()
        assert CheckParams.coerce("msg").message == "msg"
        with pytest.raises(TypeError):
            CheckParams.coerce(3)


@pytest.mark.unit
class TestConstruction:
    """Test argument checks when building a composite."""

    def test_rejects_non_segment(self):
        with pytest.raises(TypeError):
            refine_template_literal([text(), "x"], ",", always)

    def test_rejects_string_as_segment_list(self):
        with pytest.raises(TypeError):
            refine_template_literal("ab", ",", always)

    def test_rejects_non_string_delimiter(self):
        with pytest.raises(TypeError):
            refine_template_literal([text()], 5, always)

    def test_rejects_non_callable_check(self):
        with pytest.raises(TypeError):
            refine_template_literal([text()], ",", None)

    def test_segments_are_frozen(self, day_month):
        with pytest.raises(AttributeError):
            day_month.delimiter = ";"

    def test_shared_between_threads(self, day_month):
        inputs = ["7,11", "31,11", "31/11", "0,13"] * 25

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(day_month.safe_validate, inputs))

        assert results == [day_month.safe_validate(v) for v in inputs]
