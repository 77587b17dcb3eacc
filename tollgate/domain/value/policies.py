"""Well-known security policy identifiers.

Policies form an OID hierarchy: holding a policy grants every policy
beneath it.
"""

UNRESTRICTED_ALL = "1.3.6.1.4.1.33349.3.1.5.9.2"

LOGIN = f"{UNRESTRICTED_ALL}.1"
LOGIN_PASSWORD_ONLY = f"{LOGIN}.0"
LOGIN_AS_SERVICE = f"{LOGIN}.2"

OVERRIDE_POLICY_PERMISSION = f"{UNRESTRICTED_ALL}.600"

# OAuth flows
OAUTH_LOGIN = f"{LOGIN_AS_SERVICE}.0"
OAUTH_CLIENT_CREDENTIALS_FLOW = f"{OAUTH_LOGIN}.1"
OAUTH_CLIENT_CREDENTIALS_FLOW_WITHOUT_DEVICE = f"{OAUTH_CLIENT_CREDENTIALS_FLOW}.0"
OAUTH_PASSWORD_FLOW = f"{OAUTH_LOGIN}.2"
OAUTH_PASSWORD_FLOW_WITHOUT_DEVICE = f"{OAUTH_PASSWORD_FLOW}.0"
OAUTH_CODE_FLOW = f"{OAUTH_LOGIN}.3"
OAUTH_CODE_FLOW_WITHOUT_DEVICE = f"{OAUTH_CODE_FLOW}.0"
OAUTH_RESET_FLOW = f"{OAUTH_LOGIN}.4"
OAUTH_RESET_FLOW_WITHOUT_DEVICE = f"{OAUTH_RESET_FLOW}.0"

# Scope abbreviation prefix for encoded tokens
UNRESTRICTED_ALL_ABBREVIATION = "ua"
