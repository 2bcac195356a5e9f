"""Declarative Delimited-String Validation

Segments validate one piece of text each; composites validate whole
delimiter-joined strings built from segments, with a cross-field check over
the decoded values.

Key Features:
- Parse-don't-validate segments returning Result types
- Literal shapes per segment, composed into whole-string templates
- Exact literal splitting, including the empty-delimiter case
- Collect-all per-segment errors re-rooted under the segment index
- Composites are segments, so they nest

Usage:
    from delimited.validation import (
        TemplateParams, refine_template_literal, text, integer, email, choice,
    )

    user = refine_template_literal(
        [text(3, 20), integer(18, 120), email(), choice("active", "inactive")],
        ":",
        lambda values: not (values[0] == "admin" and values[1] < 21),
        template_params=TemplateParams(format="name:age:email:status"),
        check_params="Admins must be 21 or older",
    )
    result = user.safe_validate("john:25:john@example.com:active")
    if result.is_err():
        return error_response(result.unwrap_err().to_dict())
    name, age, mail, status = result.unwrap()
"""

from .errors import (
    ErrorKind,
    ValidationError,
    ValidationErrorDetail,
    CollectAllAccumulator,
)

from .validators import (
    ValidationResult,
    AtomicValidator,
    StringLength,
    NonEmpty,
    RegexPattern,
    OneOf,
    EmailValidator,
    NumericRange,
    And,
    Or,
    Not,
    WithMessage,
    CustomValidator,
    custom,
)

from .coercion import (
    CoercionRule,
    StringToInt,
    StringToFloat,
    StringToDecimal,
    StringToBool,
    ISO8601ToDate,
    StringToEnum,
    ExplicitCoercion,
    DEFAULT_COERCER,
    coerce,
)

from .segments import (
    Segment,
    DecodedSegment,
    TextSegment,
    LiteralSegment,
    ChoiceSegment,
    CoercedSegment,
    TypedSegment,
    text,
    literal,
    choice,
    integer,
    number,
    decimal,
    boolean,
    iso_date,
    enum,
    email,
    coerced,
    typed,
)

from .template import (
    TemplateLiteral,
    TemplateParams,
    interleave,
    split_segments,
)

from .composite import (
    CheckParams,
    CompositeValidator,
    refine,
    refine_template_literal,
    run_segments,
)

__all__ = [
    # Errors
    "ErrorKind",
    "ValidationError",
    "ValidationErrorDetail",
    "CollectAllAccumulator",
    # Value constraints
    "ValidationResult",
    "AtomicValidator",
    "StringLength",
    "NonEmpty",
    "RegexPattern",
    "OneOf",
    "EmailValidator",
    "NumericRange",
    "And",
    "Or",
    "Not",
    "WithMessage",
    "CustomValidator",
    "custom",
    # Coercion
    "CoercionRule",
    "StringToInt",
    "StringToFloat",
    "StringToDecimal",
    "StringToBool",
    "ISO8601ToDate",
    "StringToEnum",
    "ExplicitCoercion",
    "DEFAULT_COERCER",
    "coerce",
    # Segments
    "Segment",
    "DecodedSegment",
    "TextSegment",
    "LiteralSegment",
    "ChoiceSegment",
    "CoercedSegment",
    "TypedSegment",
    "text",
    "literal",
    "choice",
    "integer",
    "number",
    "decimal",
    "boolean",
    "iso_date",
    "enum",
    "email",
    "coerced",
    "typed",
    # Templates
    "TemplateLiteral",
    "TemplateParams",
    "interleave",
    "split_segments",
    # Composites
    "CheckParams",
    "CompositeValidator",
    "refine",
    "refine_template_literal",
    "run_segments",
]
