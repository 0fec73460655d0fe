"""
Naming helpers shared by the generators and the naming-conflict phase.
"""

import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens) to spaces."""
    return text.replace("_", " ").replace("-", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, kebab-case or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "ai-agent" -> "AiAgent"
        "userProfile" -> "UserProfile"
    """
    if not text:
        return ""
    words = _split_into_words(_normalize_separators(text))
    return "".join(word.capitalize() for word in words if word)


def to_kebab_case(text: str) -> str:
    """Convert a model or service name to the kebab-case stem used for file names.

    Examples:
        "UserProfile" -> "user-profile"
        "user_profile" -> "user-profile"
        "APIKey" -> "a-p-i-key"
    """
    if not text:
        return ""
    words = _split_into_words(_normalize_separators(text))
    return "-".join(word.lower() for word in words if word)


def to_camel_case(text: str) -> str:
    """Convert text to camelCase ("user_profile" -> "userProfile")."""
    pascal = snake_to_pascal_case(text)
    return pascal[:1].lower() + pascal[1:]


def pluralize(text: str) -> str:
    """Naive English plural used for route paths and SDK accessors."""
    if not text:
        return ""
    if text.endswith("y") and text[-2:-1] not in ("a", "e", "i", "o", "u"):
        return text[:-1] + "ies"
    if text.endswith(("s", "x", "z", "ch", "sh")):
        return text + "es"
    return text + "s"
