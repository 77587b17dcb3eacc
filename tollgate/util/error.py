"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Configuration error, e.g. no usable signing key."""

    pass


class KeyMaterialError(ConfigurationError):
    """Configured key material could not be loaded."""

    pass
