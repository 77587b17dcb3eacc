"""JWT token utilities."""

from collections.abc import Iterable
from typing import Any

import jwt
from jwcrypto import jwt as jwcrypto_jwt

from tollgate.domain.model.token import SigningCredential


class JWTError(Exception):
    """JWT-related error."""

    pass


def sign_token(claims: dict[str, Any], credential: SigningCredential) -> str:
    """Sign a claim set as a compact JWS.

    Args:
        claims: JSON-serializable claims
        credential: Signing key and algorithm

    Returns:
        Serialized JWT
    """
    header = {
        "typ": "JWT",
        "alg": credential.algorithm.value,
        "kid": credential.key_id,
    }
    token = jwcrypto_jwt.JWT(header=header, claims=claims)
    token.make_signed_token(credential.key)
    return token.serialize()


def verify_token(
    token: str,
    keys: Iterable[dict[str, Any]],
    issuer: str,
    algorithms: list[str],
    audience: str | None = None,
    leeway: int = 5,
) -> dict[str, Any]:
    """Verify a JWT against a set of JSON Web Keys and decode its claims.

    Keys whose ``kid`` matches the token header are tried first; when no
    key id matches, every key is tried.

    Args:
        token: Serialized JWT
        keys: JWK dicts (public RSA keys or symmetric keys)
        issuer: Required issuer
        algorithms: Accepted signature algorithms
        audience: Required audience, or None to skip the audience check
        leeway: Clock skew in seconds

    Returns:
        Decoded claims

    Raises:
        JWTError: If the token is malformed, expired or not verifiable
    """
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError:
        raise JWTError("Invalid token")

    algorithm = header.get("alg")
    if algorithm not in algorithms:
        raise JWTError("Unsupported token algorithm")

    # HS* tokens verify with symmetric keys, RS* with RSA keys
    kty = "oct" if algorithm.startswith("HS") else "RSA"
    keys = [k for k in keys if k.get("kty") == kty]
    kid = header.get("kid")
    candidates = [k for k in keys if kid and k.get("kid") == kid] or keys
    if not candidates:
        raise JWTError("No verification keys available")

    options = {"require": ["exp", "iss"], "verify_aud": audience is not None}
    for key in candidates:
        try:
            verification_key = jwt.PyJWK(key).key
        except jwt.PyJWTError:
            continue
        try:
            return jwt.decode(
                token,
                verification_key,
                algorithms=algorithms,
                issuer=issuer,
                audience=audience,
                leeway=leeway,
                options=options,
            )
        except jwt.InvalidSignatureError:
            continue
        except jwt.ExpiredSignatureError:
            raise JWTError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise JWTError(f"Invalid token: {e}")

    raise JWTError("Invalid token signature")
