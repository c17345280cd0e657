import secrets

# 12 random bytes rendered as 24 hex chars
ID_BYTES = 12


def generate_object_id() -> str:
    """Return an opaque 24-character hex identifier."""
    return secrets.token_hex(ID_BYTES)


def canonical_pair(first_id: str, second_id: str) -> tuple[str, str]:
    """Order-independent key for an unordered pair of ids."""
    return (first_id, second_id) if first_id <= second_id else (second_id, first_id)
