"""
Redacts credentials from request payloads before they are logged.
"""

from typing import Any, Dict

# Keys whose values never reach a log line (compared case-insensitively)
SENSITIVE_FIELDS = frozenset({
    'password',
    'password_confirmation',
    'confirm_password',
    'current_password',
    'new_password',
    'token',
    'csrf_token',
    'remember_token',
})


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Copy of `data` with sensitive values replaced; nested dicts are walked too.

    Example:
        >>> sanitize_dict({'email': 'ana@example.com', 'password': 'secret123'})
        {'email': 'ana@example.com', 'password': '[REDACTED]'}
    """
    if not data:
        return data
    return {
        key: redact_text if str(key).lower() in SENSITIVE_FIELDS
        else sanitize_dict(value, redact_text) if isinstance(value, dict)
        else value
        for key, value in data.items()
    }
