"""PKCE (Proof Key for Code Exchange) utilities."""

import hmac
import secrets
from base64 import urlsafe_b64encode
from hashlib import sha256

S256 = "S256"
PLAIN = "plain"

SUPPORTED_METHODS = (S256, PLAIN)


def _s256(verifier: str) -> str:
    digest = sha256(verifier.encode("ascii")).digest()
    return urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce_pair() -> tuple[str, str]:
    """Generate a PKCE verifier and its S256 challenge.

    Returns:
        Tuple of (verifier, challenge), both base64url encoded strings
        - verifier: Random secret kept by client (64 bytes)
        - challenge: SHA-256 hash of verifier for authorization request
    """
    verifier_bytes = secrets.token_bytes(64)
    verifier = urlsafe_b64encode(verifier_bytes).rstrip(b"=").decode("ascii")
    return (verifier, _s256(verifier))


def verify_pkce(verifier: str | None, challenge: str, method: str | None) -> bool:
    """Check a token request's code verifier against the stored challenge.

    Args:
        verifier: code_verifier presented at token exchange
        challenge: code_challenge captured at authorization
        method: code_challenge_method, ``plain`` when omitted (RFC 7636)

    Returns:
        True if the verifier matches
    """
    if not verifier:
        return False
    try:
        computed = _s256(verifier) if (method or PLAIN) == S256 else verifier
    except UnicodeEncodeError:
        return False
    return hmac.compare_digest(computed.encode("utf-8"), challenge.encode("utf-8"))
