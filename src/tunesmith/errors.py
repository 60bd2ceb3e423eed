from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class ValidationError(UserError):
    """Raised when user input fails validation."""


class InvalidRequestError(ValidationError):
    """Raised when a request is missing required data."""


class EmptyPromptError(ValidationError):
    """Raised when a suggestion prompt is blank."""

    def __init__(self, message: str = "Missing prompt") -> None:
        super().__init__(message)


class AuthStateMismatchError(ValidationError):
    """Raised when the OAuth state returned by the provider does not match the one we issued."""

    def __init__(self, message: str = "Invalid OAuth state") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class NotAuthenticatedError(AuthenticationError):
    """Raised when the caller has no live session."""


class RefreshFailedError(AuthenticationError):
    """Raised when an expired access token could not be renewed.

    The session is kept; the user has to log in again explicitly.
    """


class UpstreamError(UserError):
    """Base class for failures reported by an external provider."""


class TokenExchangeFailedError(UpstreamError):
    """Raised when the provider rejects the authorization code."""


class ProfileFetchFailedError(UpstreamError):
    """Raised when the provider profile endpoint rejects the new access token."""


class ProviderUnreachableError(UpstreamError):
    """Raised when the text-completion provider cannot be reached at all."""


class InvalidModelResponseError(UpstreamError):
    """Raised when no track list can be recovered from the model output."""


class PlaylistCreateFailedError(UpstreamError):
    """Raised when the provider refuses to create the playlist."""


class AddTracksFailedError(UpstreamError):
    """Raised when the provider refuses to add items to a created playlist."""
