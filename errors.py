"""
Exceptions raised by the LDAP write support modules
"""


class WriteSupportError(Exception):
    """Base exception for write support errors."""
    pass


class ConfigurationError(WriteSupportError):
    """Raised when the configuration cannot be used for a run."""
    pass


class ResolutionError(WriteSupportError):
    """Raised when a user or group cannot be mapped to or from a DN."""
    pass


class UnsupportedAssociationError(WriteSupportError):
    """Raised when group membership is stored in a way we cannot write."""
    pass


class ServerNotAvailableError(WriteSupportError):
    """Raised when no bound LDAP connection is available."""
    pass


class HintError(WriteSupportError):
    """
    A rejected change with a short hint suitable for showing to the user.
    """

    def __init__(self, message: str, hint: str = "", code: int = 0):
        super().__init__(message)
        self.hint = hint or message
        self.code = code
