import uuid

from opencollab.errors import TokenGenerationError


def new_token() -> str:
    """
    Generate a session token.

    uuid4 draws its 122 random bits from os.urandom, the OS CSPRNG.
    Collisions are treated as impossible and not checked.

    Returns:
        Token in canonical 36-character UUID form

    Raises:
        TokenGenerationError: If the OS entropy source is unavailable
    """
    try:
        return str(uuid.uuid4())
    except (OSError, NotImplementedError) as e:
        raise TokenGenerationError("Failed to generate a session token", operation="new_token") from e


def is_token_shaped(value: str) -> bool:
    """Syntactic check only; the store decides whether a token is valid."""
    if not value or len(value) != 36:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True
