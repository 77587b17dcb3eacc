"""External claim mappers.

Mappers translate internal claim types into the claim names of an
external token format. Several mappers may contribute to one format;
their output is merged by ``ClaimMapperRegistry``.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from tollgate.domain.model.principal import Claim
from tollgate.domain.model.token import ClaimBag
from tollgate.domain.value import ClaimTypes, JwtClaims

JWT_FORMAT = "jwt"


def _group(claims: Iterable[Claim], mapping: dict[str, str]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = defaultdict(list)
    for claim in claims:
        if not claim.type:
            raise ValueError("Claim type must not be empty")
        external = mapping.get(claim.type)
        if external and claim.value not in grouped[external]:
            grouped[external].append(claim.value)
    return grouped


def _collapse(values: list[str]) -> str | list[str]:
    return values[0] if len(values) == 1 else values


class ClaimMapper(ABC):
    """Maps internal claims to one external token format."""

    external_token_format: str = JWT_FORMAT

    @abstractmethod
    def map_to_external_claims(self, claims: Iterable[Claim]) -> dict[str, Any]:
        pass


class JwtClaimMapper(ClaimMapper):
    """Standard OpenID Connect / JWT claim names."""

    CLAIM_MAP = {
        ClaimTypes.SESSION_ID: JwtClaims.SESSION_ID,
        ClaimTypes.EMAIL: JwtClaims.EMAIL,
        ClaimTypes.ROLE: JwtClaims.ROLE,
        ClaimTypes.NAME: JwtClaims.NAME,
        ClaimTypes.REALM: JwtClaims.REALM,
        ClaimTypes.TELEPHONE: JwtClaims.PHONE_NUMBER,
        ClaimTypes.ACTOR: JwtClaims.ACTOR,
        ClaimTypes.SCOPE: JwtClaims.SCOPE,
        ClaimTypes.SECURITY_ID: JwtClaims.SUBJECT,
        ClaimTypes.NAME_IDENTIFIER: JwtClaims.SUBJECT,
    }

    def map_to_external_claim_type(self, claim_type: str) -> str | None:
        """External name of an internal claim type, None if unmapped.

        Raises:
            ValueError: If the claim type is empty
        """
        if not claim_type:
            raise ValueError("Claim type must not be empty")
        return self.CLAIM_MAP.get(claim_type)

    def map_to_external_claims(self, claims: Iterable[Claim]) -> dict[str, Any]:
        grouped = _group(claims, self.CLAIM_MAP)
        return {name: _collapse(values) for name, values in grouped.items()}


class ExtendedClaimMapper(ClaimMapper):
    """Product-specific claims under ``extensions.tollgate``."""

    CLAIM_MAP = {
        ClaimTypes.TEMPORARY: "temporary",
        ClaimTypes.LANGUAGE: "lang",
        ClaimTypes.PASSWORD_RESET: "pwd_reset",
        ClaimTypes.X509_SUBJECT: "x509sub",
        ClaimTypes.APPLICATION_IDENTIFIER: "appid",
        ClaimTypes.DEVICE_IDENTIFIER: "devid",
        ClaimTypes.USER_IDENTIFIER: "usrid",
    }

    def map_to_external_claims(self, claims: Iterable[Claim]) -> dict[str, Any]:
        grouped = _group(claims, self.CLAIM_MAP)
        if not grouped:
            return {}
        return {
            JwtClaims.EXTENSIONS: {
                "tollgate": {name: _collapse(values) for name, values in grouped.items()}
            }
        }


def _coded(value: str) -> dict[str, str]:
    """Split ``code^system`` into a coded value."""
    parts = value.split("^")
    coded = {"code": parts[0]}
    if len(parts) > 1 and parts[1]:
        coded["system"] = parts[1]
    return coded


class IheIuaClaimMapper(ClaimMapper):
    """IHE Internet User Authorization claims under ``extensions.ihe_iua``."""

    CLAIM_MAP = {
        ClaimTypes.SUBJECT_NAME: "subject_name",
        ClaimTypes.SUBJECT_ORGANIZATION: "subject_organization",
        ClaimTypes.SUBJECT_ORGANIZATION_ID: "subject_organization_id",
        ClaimTypes.NATIONAL_PROVIDER_ID: "national_provider_identifier",
        ClaimTypes.PERSON_ID: "person_id",
        ClaimTypes.FACILITY_ID: "home_community_id",
        ClaimTypes.SUBJECT_ROLE: "subject_role",
        ClaimTypes.PURPOSE_OF_USE: "purpose_of_use",
    }

    def map_to_external_claims(self, claims: Iterable[Claim]) -> dict[str, Any]:
        grouped = _group(claims, self.CLAIM_MAP)
        if not grouped:
            return {}

        iua: dict[str, Any] = {}
        for name, values in grouped.items():
            value = values[0]
            if name == "subject_organization_id" and not value.startswith("urn:"):
                iua[name] = f"urn:uuid:{value}"
            elif name in ("subject_role", "purpose_of_use"):
                iua[name] = _coded(value)
            else:
                iua[name] = value
        return {JwtClaims.EXTENSIONS: {"ihe_iua": iua}}


class ClaimMapperRegistry:
    """Claim mappers keyed by external token format, built once at startup."""

    def __init__(self, mappers: Iterable[ClaimMapper]) -> None:
        self._mappers: dict[str, list[ClaimMapper]] = defaultdict(list)
        for mapper in mappers:
            self._mappers[mapper.external_token_format.lower()].append(mapper)

    def get_mappers(self, token_format: str) -> list[ClaimMapper]:
        return list(self._mappers.get(token_format.lower(), []))

    def map_to_external(self, token_format: str, claims: Iterable[Claim]) -> ClaimBag:
        """Run every mapper of a format and merge their output."""
        claims = list(claims)
        bag = ClaimBag()
        for mapper in self.get_mappers(token_format):
            bag.merge(mapper.map_to_external_claims(claims))
        return bag
