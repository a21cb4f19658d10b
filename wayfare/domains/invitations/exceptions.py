"""
Domain-specific exceptions for agency invitations.
"""

from wayfare.shared.exceptions import BaseHTTPException


class InvitationException(BaseHTTPException):
    """Base exception for invitation-related errors."""

    status_code = 400


class InvitationNotFoundError(InvitationException):
    status_code = 404
    message = "Invitation not found"


class AlreadyMemberError(InvitationException):
    status_code = 409
    message = "User is already a member of this agency"


class DuplicateInvitationError(InvitationException):
    """Raised when a pending invitation already exists for the agency and email."""

    status_code = 409
    message = "Invitation already sent to this email"


class InvitationStateError(InvitationException):
    """Raised when an invitation is no longer pending."""

    status_code = 409
    message = "Invitation is no longer valid"


class InvitationExpiredError(InvitationException):
    status_code = 410
    message = "Invitation has expired"


class InvitationEmailMismatchError(InvitationException):
    status_code = 403
    message = "Invitation email does not match your account"
