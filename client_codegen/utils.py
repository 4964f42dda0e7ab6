"""
Utility functions for the client types generator.
"""

import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z]+(?![a-z])|[A-Z][a-z]*|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace(".", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(_normalize_separators(text))


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "FIRST_NAME" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"
        "OK" -> "Ok"

    Args:
        text: The text to convert (snake_case, camelCase, UPPER_SNAKE_CASE, or space-separated)

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    return "".join(word.capitalize() for word in _split_into_words(text) if word)


def snake_case(text: str) -> str:
    """Convert PascalCase, camelCase, kebab-case or spaced text to snake_case.

    Examples:
        "ShowResult" -> "show_result"
        "X-Request-ID" -> "x_request_id"
        "storage service" -> "storage_service"
    """
    return "_".join(word.lower() for word in _split_into_words(text) if word)


def go_identifier(text: str) -> str:
    """Convert text to an exported Go identifier, keeping common initialisms upper case.

    Examples:
        "id" -> "ID"
        "request_url" -> "RequestURL"
        "name" -> "Name"
    """
    words = _split_into_words(text)
    return "".join(word.upper() if word.upper() in GO_INITIALISMS else word.capitalize() for word in words if word)


GO_INITIALISMS = {"ID", "URL", "URI", "HTTP", "JSON", "XML", "API", "UUID", "IP", "TCP", "UDP", "SQL", "TTL"}
