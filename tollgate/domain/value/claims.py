"""Claim type names and protocol field names."""


class ClaimTypes:
    """Internal claim types carried by identities and sessions."""

    NAME = "urn:tollgate:claim:name"
    ACTOR = "urn:tollgate:claim:actor"
    EMAIL = "urn:tollgate:claim:email"
    ROLE = "urn:tollgate:claim:role"
    REALM = "urn:tollgate:claim:realm"
    TELEPHONE = "urn:tollgate:claim:telephone"
    SECURITY_ID = "urn:tollgate:claim:sid"
    NAME_IDENTIFIER = "urn:tollgate:claim:nameidentifier"
    SESSION_ID = "urn:tollgate:claim:session"
    SCOPE = "urn:tollgate:claim:scope"
    LANGUAGE = "urn:tollgate:claim:lang"
    TEMPORARY = "urn:tollgate:claim:temporary"
    PASSWORD_RESET = "urn:tollgate:claim:pwd_reset"
    X509_SUBJECT = "urn:tollgate:claim:x509sub"
    APPLICATION_IDENTIFIER = "urn:tollgate:claim:appid"
    DEVICE_IDENTIFIER = "urn:tollgate:claim:devid"
    USER_IDENTIFIER = "urn:tollgate:claim:usrid"
    PURPOSE_OF_USE = "urn:tollgate:claim:pou"
    OVERRIDE = "urn:tollgate:claim:override"
    GRANTED_POLICY = "urn:tollgate:claim:policy"

    # IHE Internet User Authorization
    FACILITY_ID = "urn:tollgate:claim:facility"
    SUBJECT_ORGANIZATION = "urn:tollgate:claim:iua:subject_organization"
    SUBJECT_ORGANIZATION_ID = "urn:tollgate:claim:iua:subject_organization_id"
    SUBJECT_NAME = "urn:tollgate:claim:iua:subject_name"
    SUBJECT_ROLE = "urn:tollgate:claim:iua:subject_role"
    NATIONAL_PROVIDER_ID = "urn:tollgate:claim:iua:npi"
    PERSON_ID = "urn:tollgate:claim:iua:person_id"


class JwtClaims:
    """Claim names as they appear in issued tokens."""

    NAME = "name"
    ACTOR = "actor"
    SUBJECT = "sub"
    SESSION_ID = "sid"
    NONCE = "nonce"
    ACCESS_TOKEN_HASH = "at_hash"
    TOKEN_ID = "jti"
    ROLE = "role"
    EMAIL = "email"
    REALM = "realm"
    PHONE_NUMBER = "phone_number"
    SCOPE = "scope"
    APPLICATION_IDENTIFIER = "appid"
    DEVICE_IDENTIFIER = "devid"
    USER_IDENTIFIER = "usrid"
    EXTENSIONS = "extensions"


class FormFields:
    """Form and query field names accepted by the endpoints."""

    GRANT_TYPE = "grant_type"
    SCOPE = "scope"
    CLIENT_ID = "client_id"
    CLIENT_SECRET = "client_secret"
    CODE = "code"
    CODE_VERIFIER = "code_verifier"
    CODE_CHALLENGE = "code_challenge"
    CODE_CHALLENGE_METHOD = "code_challenge_method"
    REFRESH_TOKEN = "refresh_token"
    USERNAME = "username"
    PASSWORD = "password"
    CHALLENGE = "challenge"
    CHALLENGE_RESPONSE = "response"
    MFA_CODE = "mfa_code"
    UI_LOCALES = "ui_locales"
    NONCE = "nonce"
    STATE = "state"
    REDIRECT_URI = "redirect_uri"
    RESPONSE_TYPE = "response_type"
    RESPONSE_MODE = "response_mode"
    PROMPT = "prompt"
    LOGIN_HINT = "login_hint"
    ID_TOKEN_HINT = "id_token_hint"
    LOGOUT_HINT = "logout_hint"
    POST_LOGOUT_REDIRECT_URI = "post_logout_redirect_uri"


class Headers:
    """HTTP headers read by the endpoints."""

    AUTHORIZATION = "authorization"
    DEVICE_AUTHORIZATION = "x-device-authorization"
    CLIENT_CLAIM = "x-tollgate-client-claim"
    REQUEST_ID = "x-request-id"
    FORWARDED_FOR = "x-forwarded-for"
