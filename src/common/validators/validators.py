# File: common/validators/validators.py

import re
from typing import Any

from bson import ObjectId

# ========== Email Validation ==========

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$"
)

def is_valid_email(email: str) -> bool:
    """
    Validates an email address using regex.

    Args:
        email (str): The input email address.

    Returns:
        bool: True if valid, False otherwise.
    """
    return bool(EMAIL_REGEX.fullmatch(email.strip()))


# ========== Id Validation ==========

def is_valid_object_id(value: Any) -> bool:
    """True only for 24-char hex strings; ObjectId.is_valid alone also accepts 12-byte strings."""
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)
