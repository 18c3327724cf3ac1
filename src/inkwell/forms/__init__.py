"""Validation of untrusted user input (search parameters, forms, uploads)."""

from inkwell.forms.validator import (
    COMMENT_FORM_SCHEMA,
    CONTACT_FORM_SCHEMA,
    NEWSLETTER_SCHEMA,
    SCHEMAS,
    SEARCH_QUERY_SCHEMA,
    URL_PARAMS_SCHEMA,
    FieldRule,
    FormSchema,
    InputResult,
    contains_dangerous_content,
    validate_file_upload,
    validate_input,
)

__all__ = [
    "FieldRule",
    "FormSchema",
    "InputResult",
    "validate_input",
    "validate_file_upload",
    "contains_dangerous_content",
    "SCHEMAS",
    "SEARCH_QUERY_SCHEMA",
    "CONTACT_FORM_SCHEMA",
    "COMMENT_FORM_SCHEMA",
    "NEWSLETTER_SCHEMA",
    "URL_PARAMS_SCHEMA",
]
