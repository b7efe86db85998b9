"""
Shared utilities for API routes.
"""


def sanitize_for_log(value: str, max_length: int = 200) -> str:
    """
    Sanitize user input before logging to prevent log injection attacks.

    Escapes newlines and removes control characters that could interfere
    with log parsing or monitoring systems.

    Args:
        value: The string to sanitize
        max_length: Maximum length before truncation (default: 200)

    Returns:
        Sanitized string safe for logging
    """
    if not value:
        return value

    sanitized = value.replace("\n", "\\n").replace("\r", "\\r")

    # Keep spaces and tabs, drop other non-printables
    sanitized = "".join(c for c in sanitized if c.isprintable() or c in " \t")

    if len(sanitized) > max_length:
        return sanitized[:max_length] + "..."

    return sanitized
