"""Theme Tokens.

A theme is a flat token-name to raw-value map. It is emitted as root-scope
custom properties ahead of node rendering; ``var(--token)`` references in
style objects resolve at display time, not here.
"""

import re
from typing import Any, Mapping

from ..core.errors import Issue, ValidationError

TOKEN_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")
FORBIDDEN_VALUE_PATTERN = re.compile(r"[;{}<>]|url\s*\(|expression\s*\(", re.IGNORECASE)
MAX_TOKEN_VALUE_LENGTH = 256

DEFAULT_THEME: dict[str, str] = {
    "background": "#ffffff",
    "foreground": "#0a0a0a",
    "primary": "#171717",
    "primaryForeground": "#fafafa",
    "secondary": "#f5f5f5",
    "secondaryForeground": "#171717",
    "muted": "#f5f5f5",
    "mutedForeground": "#737373",
    "accent": "#f5f5f5",
    "accentForeground": "#171717",
    "destructive": "#dc2626",
    "border": "#e5e5e5",
    "radius": "0.5rem",
    "fontSans": "Inter, sans-serif",
    "fontHeading": "Inter, sans-serif",
}


def token_name(name: str) -> str:
    """Convert a camelCase token name to its kebab-case custom property name."""
    kebab = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", name)
    kebab = re.sub(r"([A-Z])([A-Z][a-z])", r"\1-\2", kebab)
    return kebab.lower()


def validate_theme(variables: Mapping[str, Any]) -> dict[str, str]:
    """
    Validate theme variables.

    Returns:
        Plain dict copy of the variables

    Raises:
        ValidationError: Bad token name or unsafe value
    """
    if not isinstance(variables, Mapping):
        raise ValidationError("Invalid theme", [Issue("vars", "must be an object")])

    issues = []
    seen: dict[str, str] = {}
    for name, value in variables.items():
        location = f"vars.{name}"
        if not isinstance(name, str) or not TOKEN_NAME_PATTERN.match(token_name(name)):
            issues.append(Issue(location, "token name must be [a-z0-9-] once kebab-cased"))
            continue
        prop = token_name(name)
        if prop in seen:
            issues.append(Issue(location, f"token name collides with {seen[prop]!r} as --{prop}"))
            continue
        seen[prop] = name
        if not isinstance(value, str):
            issues.append(Issue(location, "token value must be a string"))
            continue
        if len(value) > MAX_TOKEN_VALUE_LENGTH:
            issues.append(Issue(location, f"token value longer than {MAX_TOKEN_VALUE_LENGTH}"))
        elif FORBIDDEN_VALUE_PATTERN.search(value):
            issues.append(Issue(location, "token value contains forbidden characters"))

    if issues:
        raise ValidationError("Invalid theme", issues)
    return dict(variables)


def compile_theme(variables: Mapping[str, str]) -> dict[str, str]:
    """Map theme variables to root custom properties (``--primary-foreground``)."""
    return {f"--{token_name(name)}": value for name, value in sorted(variables.items())}


def theme_stylesheet(variables: Mapping[str, str]) -> str:
    """Render theme variables as a ``:root{...}`` rule."""
    body = ";".join(f"{name}:{value}" for name, value in compile_theme(variables).items())
    return f":root{{{body}}}"


__all__ = [
    "DEFAULT_THEME",
    "token_name",
    "validate_theme",
    "compile_theme",
    "theme_stylesheet",
]
