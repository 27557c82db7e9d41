"""Custom exception classes for the Learning Hub backend.

This module defines application-specific exceptions following Google Python
Style Guide. Each top-level category carries the HTTP status used when the
exception reaches the API boundary.
"""

from typing import Optional


class LearningHubError(Exception):
    """Base exception for all Learning Hub errors."""

    status_code = 500

    def __init__(self, message: str):
        """Initialize the exception.

        Args:
            message: Message safe to show to the caller.
        """
        self.message = message
        super().__init__(message)


class ValidationError(LearningHubError):
    """Raised when input is missing or malformed."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        """Initialize the exception.

        Args:
            message: Description of the problem.
            field: Name of the offending input field, if any.
        """
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)


class ConflictError(LearningHubError):
    """Raised when a record would duplicate an existing email, code or id."""

    status_code = 409


class NotFoundError(LearningHubError):
    """Raised when a requested record does not exist."""

    status_code = 404


class AuthenticationError(LearningHubError):
    """Raised when credentials are missing or invalid."""

    status_code = 401


class PermissionDeniedError(LearningHubError):
    """Raised when the caller lacks the required role."""

    status_code = 403


class UpstreamError(LearningHubError):
    """Raised when the store or the identity provider fails.

    The message returned to the caller is generic; details are logged.
    """

    status_code = 500
    public_message = "An unexpected error occurred. Please try again."
    # When True the specific message is safe to return to the caller
    expose = False


class CodeGenerationExhausted(UpstreamError):
    """Raised when no unique invite code was found within the attempt bound."""

    public_message = "Failed to generate unique invite code. Please try again."

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"No unique invite code found after {attempts} attempts"
        )


# --- Registration flow ---


class InvalidCode(NotFoundError):
    """Raised when an invitation code is unknown or expired."""

    def __init__(self, message: str = "Invalid or expired invitation code"):
        super().__init__(message)


class EmailMismatch(ValidationError):
    """Raised when the email does not match the invitation."""

    def __init__(self):
        super().__init__("Email does not match the invitation", field="email")


class AlreadyConsumed(ConflictError):
    """Raised when the invitation has already been used to register."""

    def __init__(self):
        super().__init__("This invitation has already been used")


class PasswordMismatch(ValidationError):
    """Raised when the password confirmation differs."""

    def __init__(self):
        super().__init__("Passwords do not match", field="confirm_password")


class PasswordTooShort(ValidationError):
    """Raised when the password is below the minimum length."""

    def __init__(self, min_length: int):
        self.min_length = min_length
        super().__init__(
            f"Password must be at least {min_length} characters long",
            field="password",
        )


class RegistrationFailed(UpstreamError):
    """Raised when a registration step fails after validation passed.

    The reason is composed by the registration flow and is safe to show.
    """

    expose = True

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Registration failed: {reason}")
