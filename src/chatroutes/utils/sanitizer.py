# src/chatroutes/utils/sanitizer.py
"""
Masking of sensitive data before it reaches the logs.

Protects API keys, access/refresh tokens and passwords that travel through
the auth endpoints and the Authorization header.
"""

import re
from typing import Any, Dict


# Case-insensitive, matched both exactly and as a substring of the key.
# Extend with add_sensitive_keys().
SENSITIVE_KEYS = {
    # Пароли
    'password', 'passwd', 'pwd',
    # Токены
    'token', 'access_token', 'refresh_token', 'accesstoken', 'refreshtoken',
    'jwt', 'id_token',
    # Секреты и ключи
    'secret', 'api_key', 'apikey', 'private_key',
    # Аутентификация
    'authorization', 'auth', 'credentials',
    # Сессии и куки
    'cookie', 'session_id', 'sessionid',
}

SENSITIVE_PATTERNS = [
    # Authorization: ApiKey <key>
    (re.compile(r'(ApiKey\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # Authorization: Bearer <token>
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    # api_key=value / api-key: value
    (re.compile(r'(api[_-]?key[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    # token=value, refreshToken=value
    (re.compile(r'(token[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    # password=value
    (re.compile(r'(password[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
]


def mask_sensitive_data(data: Any, mask: str = "***REDACTED***") -> Any:
    """
    Recursively mask sensitive values in dicts, lists and strings.

    Args:
        data: Data to mask (dict, list, str or anything else)
        mask: Replacement string

    Returns:
        Copy of the data with sensitive values replaced

    Examples:
        >>> mask_sensitive_data({"Authorization": "ApiKey cr_live_123"})
        {'Authorization': '***REDACTED***'}

        >>> mask_sensitive_data({"email": "a@b.c", "password": "hunter22"})
        {'email': 'a@b.c', 'password': '***REDACTED***'}
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return _mask_string(data, mask)

    if isinstance(data, dict):
        return _mask_dict(data, mask)

    if isinstance(data, (list, tuple)):
        masked_items = [mask_sensitive_data(item, mask) for item in data]
        return type(data)(masked_items)

    # Остальные типы не трогаем
    return data


def _mask_dict(data: Dict[str, Any], mask: str) -> Dict[str, Any]:
    result = {}

    for key, value in data.items():
        key_lower = key.lower() if isinstance(key, str) else str(key).lower()

        if _is_sensitive_key(key_lower):
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)

    return result


def _mask_string(text: str, mask: str) -> str:
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = pattern.sub(replacement.replace('***REDACTED***', mask), result)
    return result


def _is_sensitive_key(key: str) -> bool:
    """Check a lower-cased key against SENSITIVE_KEYS (exact or substring)."""
    if key in SENSITIVE_KEYS:
        return True

    for sensitive_key in SENSITIVE_KEYS:
        if sensitive_key in key:
            return True

    return False


def mask_headers(headers: Dict[str, str], mask: str = "***REDACTED***") -> Dict[str, str]:
    """
    Mask sensitive HTTP headers.

    Examples:
        >>> mask_headers({"Authorization": "ApiKey abc", "Accept": "text/event-stream"})
        {'Authorization': '***REDACTED***', 'Accept': 'text/event-stream'}
    """
    return _mask_dict(dict(headers), mask)


def add_sensitive_keys(*keys: str) -> None:
    """
    Register additional sensitive keys (case-insensitive).

    Examples:
        >>> add_sensitive_keys('workspace_secret')
    """
    for key in keys:
        SENSITIVE_KEYS.add(key.lower())
