"""
Translation of request validation failures into the public error envelope.
Produces one human-readable message per offending field, keyed by its dotted JSON path.
"""
import re
from typing import Any, Dict, Iterable, Mapping, Tuple

REQUEST_SECTIONS = ("body", "query", "path", "header", "cookie")

# Templates keyed by pydantic error type
TYPE_MESSAGES: Dict[str, str] = {
    "missing": "{label} is required",
    "greater_than": "{label} must be a positive number",
    "greater_than_equal": "{label} cannot be negative",
    "float_parsing": "{label} must be a number",
    "float_type": "{label} must be a number",
    "int_parsing": "{label} must be a number",
    "int_type": "{label} must be a number",
    "int_from_float": "{label} must be an integer",
    "finite_number": "{label} must be a finite number",
    "string_type": "{label} must be a string",
    "list_type": "{label} must be a list",
    "model_attributes_type": "{label} must be an object",
    "dict_type": "{label} must be an object",
    "json_invalid": "Request body is not valid JSON",
}

# (field name, error type) -> message, for fields whose wording is not derivable from the name
_field_messages: Dict[Tuple[str, str], str] = {}


def register_field_messages(messages: Mapping[Tuple[str, str], str]) -> None:
    """Registers field specific messages that take precedence over TYPE_MESSAGES."""
    _field_messages.update(messages)


def humanize(field: str) -> str:
    """interestRate -> 'Interest rate'"""
    words = re.sub(r"(?<!^)(?=[A-Z])", " ", field).replace("_", " ")
    return words.lower().capitalize()


def error_path(loc: Iterable[Any]) -> str:
    parts = list(loc)
    if parts and parts[0] in REQUEST_SECTIONS:
        section = parts.pop(0)
        if not parts:
            return section
    return ".".join(str(part) for part in parts)


def _field_name(loc: Iterable[Any]) -> str:
    names = [part for part in loc if isinstance(part, str)]
    return names[-1] if names else "body"


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Converts pydantic error dicts into {path: message}.
    The first error reported for a path wins, matching how clients render one message per input.
    """
    formatted: Dict[str, str] = {}
    for error in errors:
        loc = error.get("loc", ())
        path = error_path(loc)
        if path in formatted:
            continue

        field = _field_name(loc)
        error_type = error.get("type", "")
        label = "Request body" if field in REQUEST_SECTIONS else humanize(field)

        template = _field_messages.get((field, error_type)) or TYPE_MESSAGES.get(error_type)
        if template is None:
            formatted[path] = f"{label}: {error.get('msg', 'invalid value')}"
            continue

        formatted[path] = template.format(label=label)
    return formatted
