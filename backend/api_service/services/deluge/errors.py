class DelugeError(Exception):
    """Base class for every failure of a torrent acquisition run."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None and str(self.cause) not in self.message:
            return f"{self.message}: {self.cause}"
        return self.message


class InvalidRequestError(DelugeError):
    """The caller supplied an empty or whitespace-only torrent URL."""


class ConfigurationError(DelugeError):
    """Daemon credentials are missing from the environment."""


class TransportError(DelugeError):
    """The request could not be sent or the response could not be read."""


class DecodeError(DelugeError):
    """The daemon answered with something that is not an RPC envelope."""


class AuthenticationError(DelugeError):
    """The daemon rejected the login call."""


class DownloadError(DelugeError):
    """The daemon could not fetch the torrent URL."""


class ProtocolError(DelugeError):
    """The daemon returned a result the workflow cannot interpret."""


class RegistrationError(DelugeError):
    """The daemon rejected registration of the staged torrent."""
