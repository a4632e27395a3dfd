"""
Account identifier generation.

Ids are random hex tokens. They are not checked against existing accounts; at
16 bytes a collision is not a practical concern.
"""

import secrets

DEFAULT_ID_BYTES = 16


def generate_account_id(num_bytes: int = DEFAULT_ID_BYTES) -> str:
    """Generate a cryptographically random account id (2 hex chars per byte)"""
    if num_bytes <= 0:
        raise ValueError("num_bytes must be positive")
    return secrets.token_hex(num_bytes)
