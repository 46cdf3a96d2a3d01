"""Entity id generation."""

import secrets
import string

ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 9


def generate_id(length: int = ID_LENGTH) -> str:
    """Return a random lowercase alphanumeric id.

    Ids only need to be unique within one tree, but they are random so an
    entity moved between documents does not collide with its new siblings.
    """
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def fresh_id(existing: set[str], length: int = ID_LENGTH) -> str:
    """Generate an id not already in existing."""
    while True:
        candidate = generate_id(length)
        if candidate not in existing:
            return candidate
