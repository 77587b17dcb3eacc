"""Authorization code encoding and validation."""

from datetime import datetime, timedelta

import logfire
from pydantic import ValidationError as PydanticValidationError

from tollgate.config import OAuthSettings
from tollgate.domain.error import DecryptionError
from tollgate.domain.model.authorization import AuthorizationCode
from tollgate.domain.model.principal import ClaimsIdentity
from tollgate.domain.provider import SymmetricCryptoProvider
from tollgate.domain.value import CodeValidation

from .base import Service


def _same_sid(expected: str, identity: ClaimsIdentity | None) -> bool:
    if identity is None or identity.security_id is None:
        return False
    return identity.security_id.lower() == expected.lower()


class AuthorizationCodeService(Service):
    """Stateless authorization codes.

    A code is the JSON form of ``AuthorizationCode``, encrypted with the
    server's symmetric key. Nothing is stored server side: the validity
    window is the only replay control.
    """

    def __init__(
        self, crypto_provider: SymmetricCryptoProvider, oauth_settings: OAuthSettings
    ) -> None:
        self.crypto_provider = crypto_provider
        self.validity = timedelta(seconds=oauth_settings.authorization_code_validity_seconds)

    def encode(self, code: AuthorizationCode) -> str:
        """Serialize and encrypt a code."""
        payload = code.model_dump_json(by_alias=True, exclude_none=True)
        return self.crypto_provider.encrypt(payload)

    def decode(self, value: str) -> AuthorizationCode | None:
        """Decrypt and parse a code.

        Returns:
            The code, or None if the value is malformed or was tampered with
        """
        try:
            return AuthorizationCode.model_validate_json(self.crypto_provider.decrypt(value))
        except (DecryptionError, PydanticValidationError) as e:
            logfire.warn("Authorization code rejected", error=str(e))
            return None

    def validate(
        self,
        code: AuthorizationCode,
        now: datetime,
        device_identity: ClaimsIdentity | None,
        application_identity: ClaimsIdentity | None,
    ) -> CodeValidation:
        """Check a decoded code against the redeeming request.

        Rules, in order: the code must be within its validity window; a
        device-bound code needs the same device, and a code without a
        device rejects a device-authenticated request; the same applies
        to the application.
        """
        if now - code.issued_at > self.validity:
            return CodeValidation.EXPIRED

        if code.device_sid:
            if not _same_sid(code.device_sid, device_identity):
                return CodeValidation.MISMATCHED_DEVICE
        elif device_identity is not None:
            return CodeValidation.MISMATCHED_DEVICE

        if code.application_sid:
            if not _same_sid(code.application_sid, application_identity):
                return CodeValidation.MISMATCHED_APPLICATION
        elif application_identity is not None:
            return CodeValidation.MISMATCHED_APPLICATION

        return CodeValidation.OK
