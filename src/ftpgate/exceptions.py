"""Custom exception hierarchy for ftpgate."""


class FtpGateError(Exception):
    """Base exception for all ftpgate errors."""


class TransportError(FtpGateError):
    """Raised when the transport executor cannot complete a call."""


class TransientTransportError(TransportError):
    """Raised for transport failures that may succeed if re-issued (network blips, busy server)."""


class MalformedResponseError(TransportError):
    """Raised when a transport response does not have the expected shape."""


class ConfigurationError(FtpGateError):
    """Raised when a server or policy configuration is invalid."""


class ServerNotConfiguredError(ConfigurationError):
    """Raised when no file server record is available."""


class AuthenticationRequiredError(FtpGateError):
    """Raised when a session is opened without a user identity."""
