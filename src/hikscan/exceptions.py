"""Exception hierarchy for hikscan."""


class HikscanError(Exception):
    """Base exception for all hikscan errors."""
    pass


class AddressError(HikscanError, ValueError):
    """Raised for malformed IP addresses or CIDR ranges."""
    pass


class ConfigError(HikscanError):
    """Raised when environment configuration cannot be loaded."""
    pass


class CryptoError(HikscanError, ValueError):
    """Raised for invalid keys or inputs to the legacy crypto helpers."""
    pass


class HTTPClientError(HikscanError):
    """Raised when the raw HTTP client cannot complete a request."""
    pass


class SADPError(HikscanError):
    """Base exception for SADP protocol operations."""
    pass


class CommandError(SADPError, ValueError):
    """Raised when a SADP command cannot be built or routed."""
    pass


class UnknownCommandError(CommandError):
    """Raised when a command name is not in the catalog."""
    pass


class MissingFieldError(CommandError):
    """Raised when a command is missing a required option."""

    def __init__(self, command: str, field: str, label: str):
        self.command = command
        self.field = field
        super().__init__(f"{label} required for {command} command")


class TransportError(SADPError, OSError):
    """Raised when a socket cannot be opened, written or read."""
    pass


class SADPTimeoutError(SADPError, TimeoutError):
    """Raised when no SADP response arrives before the deadline."""
    pass
