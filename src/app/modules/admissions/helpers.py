"""
Helper functions for admissions.
"""

import secrets

APPLICATION_ID_PREFIX = "APP-"


def generate_application_id() -> str:
    """
    Generate a public application ID.

    Example: APP-3F9A1C7E
    """
    return f"{APPLICATION_ID_PREFIX}{secrets.token_hex(4).upper()}"


def mask_email(email: str) -> str:
    """
    Mask an email address for logs.

    Example: john.doe@example.com -> j***@example.com
    """
    if "@" not in email:
        return "***"

    local, domain = email.split("@", 1)
    masked_local = "*" if len(local) <= 1 else f"{local[0]}***"
    return f"{masked_local}@{domain}"
