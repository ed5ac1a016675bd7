from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = "DomainError"
    status_code = 400

    def details(self) -> Dict[str, Any]:
        """Extra fields included in the caller-facing error body."""
        return {}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "ValidationError"

    def __init__(self, message: str, *, fields: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.fields = dict(fields or {})

    def details(self) -> Dict[str, Any]:
        return {"fields": self.fields} if self.fields else {}


class InvalidFormatError(ValidationError):
    kind = "InvalidFormat"


class InvalidInputError(ValidationError):
    kind = "InvalidInput"


class AuthenticationError(DomainError):
    """Raised when a caller cannot be authenticated."""

    kind = "Unauthenticated"
    status_code = 401


class InvalidCredentialError(AuthenticationError):
    """Signed credential has a bad signature, a malformed payload or is expired."""

    kind = "InvalidCredential"


class InvalidCredentialsError(DomainError):
    """Password supplied for a sensitive change does not match."""

    kind = "InvalidCredentials"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "Forbidden"
    status_code = 403


class NotFoundError(DomainError):
    kind = "NotFound"
    status_code = 404


class AlreadyRegisteredError(DomainError):
    kind = "AlreadyRegistered"
    status_code = 409


class DuplicateIdentityError(AlreadyRegisteredError):
    kind = "DuplicateIdentity"


class DuplicateExternalIdError(AlreadyRegisteredError):
    kind = "DuplicateExternalId"


class PartialRegistrationFailure(DomainError):
    """Only one side of an identity/profile pair was written.

    Nothing is rolled back; an admin has to reconcile the pair manually.
    """

    kind = "PartialRegistrationFailure"
    status_code = 500

    def __init__(self, message: str, *, identity_created: bool, profile_created: bool):
        super().__init__(message)
        self.identity_created = identity_created
        self.profile_created = profile_created

    def details(self) -> Dict[str, Any]:
        return {"identityCreated": self.identity_created, "profileCreated": self.profile_created}


class StudentNotEnrolledError(DomainError):
    kind = "StudentNotEnrolled"

    def __init__(self, message: str, *, student_external_id: str, course_code: str):
        super().__init__(message)
        self.student_external_id = student_external_id
        self.course_code = course_code

    def details(self) -> Dict[str, Any]:
        return {"studentExternalId": self.student_external_id, "courseCode": self.course_code}
