"""
Secret masking for configuration output.
"""


def mask_secret(value: str, visible_chars: int = 4) -> str:
    """
    Mask secret value for logging.

    Shows first and last few characters, masks the middle.

    Args:
        value: Secret to mask
        visible_chars: Number of visible characters at start/end

    Example:
        >>> mask_secret("cr_live_abcdef123456", visible_chars=4)
        'cr_l***3456'
        >>> mask_secret("short", visible_chars=4)
        '***'
    """
    if not value:
        return ""

    if len(value) <= (visible_chars * 2):
        return "***"

    return f"{value[:visible_chars]}***{value[-visible_chars:]}"
