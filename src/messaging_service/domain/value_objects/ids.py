from __future__ import annotations

DIRECT_KEY_SEPARATOR = ":"


def direct_key(a: str, b: str) -> str:
    """Order-independent key for the participant pair of a direct conversation.

    Only one active direct conversation may exist per key; the database
    enforces it with a partial unique index.
    """
    first, second = sorted((a, b))
    return f"{first}{DIRECT_KEY_SEPARATOR}{second}"
