"""
Validation of untrusted end-user input.

Forms are described by ``FormSchema`` objects made of ``FieldRule`` entries.
Validation never raises for bad input: it returns an ``InputResult`` holding
either the cleaned values or every error message. A schema whose rules
contradict each other raises ``SchemaConfigError`` when it is built.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from inkwell.content.sanitizer import sanitize_line
from inkwell.core.errors import ErrorCode, SchemaConfigError

FIELD_KINDS = ("str", "int", "list", "email", "url")

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9_%+-]+(?:\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)
URL_PATTERN = re.compile(
    r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"
)
SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
SAFE_FILENAME = re.compile(r"^[A-Za-z0-9._-]+$")

DANGEROUS_PATTERNS = [
    re.compile(r"<script[^>]*>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"\bon\w+\s*=", re.IGNORECASE),
    re.compile(r"<iframe[^>]*>", re.IGNORECASE),
    re.compile(r"<object[^>]*>", re.IGNORECASE),
    re.compile(r"<embed[^>]*>", re.IGNORECASE),
    re.compile(r"<link[^>]*>", re.IGNORECASE),
    re.compile(r"<meta[^>]*>", re.IGNORECASE),
    re.compile(r"\beval\s*\(", re.IGNORECASE),
    re.compile(r"\bFunction\s*\("),
    re.compile(r"\bsetTimeout\s*\(", re.IGNORECASE),
    re.compile(r"\bsetInterval\s*\(", re.IGNORECASE),
]

DEFAULT_UPLOAD_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp", "application/pdf"}
)
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def contains_dangerous_content(text: str) -> bool:
    """Detect script tags, event handlers, embeds and dynamic evaluation."""
    if not isinstance(text, str):
        return False
    return any(p.search(text) for p in DANGEROUS_PATTERNS)


@dataclass(frozen=True)
class FieldRule:
    """Constraints for one form field."""

    name: str
    kind: str = "str"
    required: bool = True
    label: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_value: int | None = None
    max_value: int | None = None
    pattern: str | None = None
    choices: tuple[str, ...] | None = None
    max_items: int | None = None
    item_pattern: str | None = None
    sanitize: bool = False
    reject_dangerous: bool = False
    default: Any = None

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaConfigError("Field rule needs a name")
        if self.kind not in FIELD_KINDS:
            raise SchemaConfigError(
                f"Field '{self.name}': unknown kind '{self.kind}' (expected one of {', '.join(FIELD_KINDS)})"
            )
        for low, high, what in (
            (self.min_length, self.max_length, "length"),
            (self.min_value, self.max_value, "value"),
        ):
            if low is not None and low < 0 and what == "length":
                raise SchemaConfigError(f"Field '{self.name}': negative min_length")
            if low is not None and high is not None and low > high:
                raise SchemaConfigError(
                    f"Field '{self.name}': min {what} {low} exceeds max {what} {high}"
                )
        for regex in (self.pattern, self.item_pattern):
            if regex is None:
                continue
            try:
                re.compile(regex)
            except re.error as e:
                raise SchemaConfigError(f"Field '{self.name}': bad pattern {regex!r}: {e}") from e
        if self.choices is not None and not self.choices:
            raise SchemaConfigError(f"Field '{self.name}': empty choices")

    @property
    def display_name(self) -> str:
        return self.label or self.name.replace("_", " ").capitalize()


@dataclass(frozen=True)
class FormSchema:
    """A named set of field rules."""

    name: str
    rules: tuple[FieldRule, ...]

    def __post_init__(self) -> None:
        if not self.rules:
            raise SchemaConfigError(f"Schema '{self.name}' has no fields")
        names = [r.name for r in self.rules]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise SchemaConfigError(
                f"Schema '{self.name}' repeats fields: {', '.join(duplicates)}"
            )


@dataclass(frozen=True)
class InputResult:
    """Either cleaned values (success) or the list of error messages."""

    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    errors: tuple[str, ...] = ()
    codes: tuple[ErrorCode, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {
            "success": False,
            "errors": list(self.errors),
            "codes": [c.value for c in self.codes],
        }


class _Collector:
    def __init__(self) -> None:
        self.errors: list[str] = []
        self.codes: list[ErrorCode] = []

    def add(self, message: str, code: ErrorCode = ErrorCode.INVALID_FIELD) -> None:
        self.errors.append(message)
        self.codes.append(code)

    def result(self, data: dict[str, Any]) -> InputResult:
        if self.errors:
            return InputResult(
                success=False, errors=tuple(self.errors), codes=tuple(self.codes)
            )
        return InputResult(success=True, data=data)


def _check_string(rule: FieldRule, value: str, out: _Collector) -> str | None:
    name = rule.display_name
    before = len(out.errors)

    if rule.min_length is not None and len(value) < rule.min_length:
        out.add(f"{name} must be at least {rule.min_length} characters", ErrorCode.LENGTH_VIOLATION)
    if rule.max_length is not None and len(value) > rule.max_length:
        out.add(f"{name} is too long (max {rule.max_length} characters)", ErrorCode.LENGTH_VIOLATION)
    if rule.reject_dangerous and contains_dangerous_content(value):
        out.add(f"{name} contains invalid content", ErrorCode.DANGEROUS_CONTENT)
    if rule.kind == "email" and (not EMAIL_PATTERN.fullmatch(value) or ".." in value):
        out.add(f"{name} is not a valid email address")
    if rule.kind == "url" and not URL_PATTERN.fullmatch(value):
        out.add(f"{name} is not a valid URL")
    if rule.pattern is not None and not re.fullmatch(rule.pattern, value):
        out.add(f"{name} has an invalid format")
    if rule.choices is not None and value not in rule.choices:
        out.add(f"{name} must be one of: {', '.join(rule.choices)}")

    if len(out.errors) > before:
        return None
    if rule.sanitize:
        limit = rule.max_length if rule.max_length is not None else len(value)
        return sanitize_line(value, max_length=limit)
    return value.strip()


def _check_int(rule: FieldRule, value: Any, out: _Collector) -> int | None:
    name = rule.display_name
    if isinstance(value, bool):
        out.add(f"{name} must be a whole number", ErrorCode.TYPE_MISMATCH)
        return None
    try:
        number = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError, OverflowError):
        out.add(f"{name} must be a whole number", ErrorCode.TYPE_MISMATCH)
        return None
    if isinstance(value, float) and not value.is_integer():
        out.add(f"{name} must be a whole number", ErrorCode.TYPE_MISMATCH)
        return None
    if rule.min_value is not None and number < rule.min_value:
        out.add(f"{name} must be at least {rule.min_value}")
        return None
    if rule.max_value is not None and number > rule.max_value:
        out.add(f"{name} must be at most {rule.max_value}")
        return None
    return number


def _check_list(rule: FieldRule, value: Any, out: _Collector) -> list[str] | None:
    name = rule.display_name
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        out.add(f"{name} must be a list of strings", ErrorCode.TYPE_MISMATCH)
        return None
    if rule.max_items is not None and len(value) > rule.max_items:
        out.add(f"{name} has too many entries (max {rule.max_items})")
        return None
    items = [v.strip() for v in value]
    if rule.item_pattern is not None and not all(re.fullmatch(rule.item_pattern, v) for v in items):
        out.add(f"{name} has an invalid format")
        return None
    if rule.sanitize:
        items = [sanitize_line(v) for v in items]
    return items


def validate_input(schema: FormSchema, data: dict[str, Any] | None) -> InputResult:
    """Validate and clean a submitted form against ``schema``.

    Every rule is checked; all error messages are returned together.
    """
    if data is None:
        data = {}
    out = _Collector()
    if not isinstance(data, dict):
        out.add("Input must be a mapping of field names to values", ErrorCode.TYPE_MISMATCH)
        return out.result({})

    cleaned: dict[str, Any] = {}
    for rule in schema.rules:
        value = data.get(rule.name)
        if value is None or (isinstance(value, str) and not value.strip()):
            if rule.required:
                out.add(f"{rule.display_name} is required", ErrorCode.MISSING_FIELD)
            elif rule.default is not None:
                cleaned[rule.name] = rule.default
            continue

        if rule.kind == "int":
            result = _check_int(rule, value, out)
        elif rule.kind == "list":
            result = _check_list(rule, value, out)
        elif not isinstance(value, str):
            out.add(f"{rule.display_name} must be text", ErrorCode.TYPE_MISMATCH)
            continue
        else:
            result = _check_string(rule, value, out)

        if result is not None:
            cleaned[rule.name] = result

    return out.result(cleaned)


def validate_file_upload(
    filename: str,
    size: int,
    mime_type: str,
    allowed_types: frozenset[str] = DEFAULT_UPLOAD_TYPES,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> InputResult:
    """Validate upload metadata.

    Filenames with path separators or traversal sequences are rejected
    outright; there is no safe fallback name to strip them down to.
    """
    if max_bytes <= 0:
        raise SchemaConfigError("max_bytes must be positive")
    if not allowed_types:
        raise SchemaConfigError("allowed_types cannot be empty")

    out = _Collector()

    if not isinstance(filename, str) or not filename:
        out.add("Filename is required", ErrorCode.MISSING_FIELD)
    elif any(token in filename for token in ("/", "\\", "..", "\x00")):
        out.add("Filename cannot contain path separators or traversal sequences")
    elif len(filename) > 255:
        out.add("Filename too long", ErrorCode.LENGTH_VIOLATION)
    elif not SAFE_FILENAME.fullmatch(filename):
        out.add("Invalid filename format")

    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        out.add("File size must be greater than 0")
    elif size > max_bytes:
        out.add(
            f"File size too large (max {max_bytes // (1024 * 1024) or max_bytes} "
            f"{'MB' if max_bytes >= 1024 * 1024 else 'bytes'})",
            ErrorCode.FILE_TOO_LARGE,
        )

    if mime_type not in allowed_types:
        out.add(f"Invalid file type: {mime_type}", ErrorCode.UNSUPPORTED_FILE_TYPE)

    return out.result({"filename": filename, "size": size, "type": mime_type})


SEARCH_QUERY_SCHEMA = FormSchema(
    name="search",
    rules=(
        FieldRule("q", label="Search query", min_length=1, max_length=200, sanitize=True, reject_dangerous=True),
        FieldRule("category", required=False, pattern=SLUG_PATTERN),
        FieldRule("tags", kind="list", required=False, max_items=10, item_pattern=SLUG_PATTERN),
        FieldRule("limit", kind="int", required=False, min_value=1, max_value=100, default=10),
        FieldRule("offset", kind="int", required=False, min_value=0, default=0),
    ),
)

CONTACT_FORM_SCHEMA = FormSchema(
    name="contact",
    rules=(
        FieldRule("name", min_length=2, max_length=100, pattern=r"^[^<>]*$", sanitize=True),
        FieldRule("email", kind="email", max_length=254),
        FieldRule("subject", min_length=5, max_length=200, pattern=r"^[^<>]*$", sanitize=True),
        FieldRule("message", min_length=10, max_length=5000, reject_dangerous=True, sanitize=True),
        FieldRule("website", kind="url", required=False, max_length=2048),
    ),
)

COMMENT_FORM_SCHEMA = FormSchema(
    name="comment",
    rules=(
        FieldRule("author", label="Author name", min_length=2, max_length=100, pattern=r"^[^<>]*$", sanitize=True),
        FieldRule("email", kind="email", max_length=254),
        FieldRule("website", kind="url", required=False, max_length=2048),
        FieldRule("content", label="Comment", min_length=5, max_length=2000, reject_dangerous=True, sanitize=True),
        FieldRule("post_slug", label="Post slug", pattern=SLUG_PATTERN),
    ),
)

NEWSLETTER_SCHEMA = FormSchema(
    name="newsletter",
    rules=(
        FieldRule("email", kind="email", max_length=254),
        FieldRule("name", required=False, min_length=2, max_length=100, pattern=r"^[^<>]*$", sanitize=True),
    ),
)

URL_PARAMS_SCHEMA = FormSchema(
    name="url-params",
    rules=(
        FieldRule("slug", pattern=SLUG_PATTERN),
        FieldRule("page", kind="int", required=False, min_value=1, default=1),
        FieldRule("category", required=False, pattern=SLUG_PATTERN),
    ),
)

SCHEMAS = {
    schema.name: schema
    for schema in (
        SEARCH_QUERY_SCHEMA,
        CONTACT_FORM_SCHEMA,
        COMMENT_FORM_SCHEMA,
        NEWSLETTER_SCHEMA,
        URL_PARAMS_SCHEMA,
    )
}
