"""delimited: validate delimiter-joined strings segment by segment."""
__version__ = "0.1.0"

from delimited.errors import Ok, Err, Result, ErrorCode
from delimited.validation import (
    CheckParams,
    CompositeValidator,
    TemplateParams,
    ValidationError,
    boolean,
    choice,
    decimal,
    email,
    enum,
    integer,
    iso_date,
    literal,
    number,
    refine_template_literal,
    text,
    typed,
)

__all__ = [
    "__version__",
    "Ok",
    "Err",
    "Result",
    "ErrorCode",
    "CheckParams",
    "CompositeValidator",
    "TemplateParams",
    "ValidationError",
    "boolean",
    "choice",
    "decimal",
    "email",
    "enum",
    "integer",
    "iso_date",
    "literal",
    "number",
    "refine_template_literal",
    "text",
    "typed",
]
