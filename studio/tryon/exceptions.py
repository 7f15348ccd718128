"""Custom exceptions for the try-on application."""


class TryOnError(Exception):
    """Base class for all try-on errors."""
    pass


class RequestValidationError(TryOnError):
    """Raised when a generation request is missing its image or prompt, or the image is unreadable."""
    pass


class ProviderNetworkError(TryOnError):
    """Raised by a provider adapter when the upstream could not be reached."""
    pass


class ProviderConfigurationError(TryOnError):
    """Raised when the configured generation provider is unknown or lacks credentials."""
    pass


class CameraAccessDenied(TryOnError):
    """Raised when the camera cannot be opened (permission denied or no device)."""
    pass


class AuthenticationError(TryOnError):
    """Raised when a bearer token is missing, expired or malformed."""
    pass
