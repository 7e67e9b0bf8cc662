"""Authorship signatures for agent-written text."""


def sign(signature: str, body: str | None) -> str:
    """Prefix body with the profile signature; the signature alone when there is no body.

    Not idempotent: call exactly once per submission.
    """
    if body is None:
        return signature
    return f"{signature} {body}"
