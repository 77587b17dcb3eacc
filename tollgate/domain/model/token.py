"""Token descriptor and signing key models."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from jwcrypto import jwk

from tollgate.domain.value import SignatureAlgorithm


class ClaimBag(dict[str, Any]):
    """Claim set of an issued token.

    Values are scalars, lists for multi-valued claims, or nested dicts
    for grouped claims such as ``extensions``.
    """

    def add(self, claim_type: str, value: Any) -> None:
        """Add a claim value, turning repeated types into a distinct list."""
        existing = self.get(claim_type)
        if existing is None:
            self[claim_type] = value
        elif isinstance(existing, list):
            if value not in existing:
                existing.append(value)
        elif existing != value:
            self[claim_type] = [existing, value]

    def merge(self, other: Mapping[str, Any]) -> None:
        """Merge another claim mapping, combining nested dicts key by key."""
        for claim_type, value in other.items():
            current = self.get(claim_type)
            if isinstance(value, Mapping) and isinstance(current, dict):
                _merge_nested(current, value)
            elif isinstance(value, Mapping):
                nested: dict[str, Any] = {}
                _merge_nested(nested, value)
                self[claim_type] = nested
            elif isinstance(value, list):
                for item in value:
                    self.add(claim_type, item)
            else:
                self.add(claim_type, value)


def _merge_nested(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, Mapping):
            child = target.setdefault(key, {})
            if isinstance(child, dict):
                _merge_nested(child, value)
            else:
                target[key] = dict(value)
        else:
            target[key] = value


@dataclass(frozen=True)
class SigningCredential:
    """Key material selected to sign a token."""

    key_id: str
    algorithm: SignatureAlgorithm
    key: jwk.JWK


@dataclass
class SecurityTokenDescriptor:
    """Everything needed to sign an id token."""

    claims: ClaimBag
    not_before: datetime
    expires: datetime
    issued_at: datetime
    audience: str | None
    issuer: str
    signing_credential: SigningCredential

    # Carried for completeness; JWS has no compression
    compression: str | None = None
