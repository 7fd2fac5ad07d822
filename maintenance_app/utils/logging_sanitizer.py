"""
Logging Sanitizer Utility

Strips credentials out of request payloads and records before they are logged.
Users carry their password inside the stored document, so every record that is
logged passes through here first.
"""

from typing import Dict, Any, List
from werkzeug.datastructures import MultiDict


# Fields that should never be logged
SENSITIVE_FIELDS = {
    'password',
    'pass',
    'new_password',
    'current_password',
    'confirm_password',
    'secret',
    'secret_key',
    'token',
    'api_key',
    'apikey',
    'ai_api_key',
    'authorization',
    'access_token',
    'session',
}


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize a dictionary by replacing sensitive field values with redaction text.

    Args:
        data: Dictionary to sanitize
        redact_text: Text to use for redacted values (default: '[REDACTED]')

    Returns:
        Sanitized copy; nested dictionaries and lists of dictionaries are
        walked as well.

    Example:
        >>> sanitize_dict({'email': 'ana@loja.com', 'password': 'segredo'})
        {'email': 'ana@loja.com', 'password': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, redact_text)
        elif isinstance(value, list):
            sanitized[key] = sanitize_list(value, redact_text)
        else:
            sanitized[key] = value

    return sanitized


def sanitize_list(items: List[Any], redact_text: str = '[REDACTED]') -> List[Any]:
    """Sanitize every dictionary inside a list, leaving other items untouched."""
    return [
        sanitize_dict(item, redact_text) if isinstance(item, dict) else item
        for item in items
    ]


def sanitize_form_data(form_data: MultiDict, redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize Flask request.form / request.args data for safe logging.
    """
    return sanitize_dict(dict(form_data), redact_text)


def sanitize_exception_message(exception: Exception) -> str:
    """
    Hide exception messages that mention a sensitive field name.
    """
    message = str(exception)

    if any(field in message.lower() for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"

    return message
