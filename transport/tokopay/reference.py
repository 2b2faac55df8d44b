"""
Reference id correlation.

Tokopay echoes our reference id back on every callback, so the chat
recipient is encoded into it at order-creation time:

    payment_<recipient digits>_<creation time in millis>
"""

import re
from typing import Optional

REFERENCE_PREFIX = "payment"
REFERENCE_DELIMITER = "_"

_REFERENCE_PATTERN = re.compile(r"payment_([0-9]+)_([0-9]+)")


def encode_reference(recipient: str, creation_time_millis: int) -> str:
    """
    Build a reference id for a new order.

    Raises:
        ValueError: recipient is not a non-empty digit string, or the
            timestamp is negative
    """
    if not recipient or not recipient.isdigit() or not recipient.isascii():
        raise ValueError(f"Recipient must be digits only: {recipient!r}")
    if creation_time_millis < 0:
        raise ValueError("Creation time must be non-negative")

    return REFERENCE_DELIMITER.join(
        [REFERENCE_PREFIX, recipient, str(int(creation_time_millis))]
    )


def decode_reference(reference_id: str) -> Optional[str]:
    """Recover the recipient from a reference id, or None if it is not ours."""
    if not reference_id:
        return None

    match = _REFERENCE_PATTERN.fullmatch(reference_id)
    return match.group(1) if match else None
