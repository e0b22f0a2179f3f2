import uuid


def new_session_id() -> str:
    """Random (version 4) UUID string."""
    return str(uuid.uuid4())


def resolve_session_id(token: str | None) -> str:
    """Reuse the caller's session token, or mint a new id when it is missing or blank."""
    if token and token.strip():
        return token
    return new_session_id()
