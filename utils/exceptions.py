"""
Custom exception classes for the booking service.
Provides specific error types instead of generic exceptions.
"""


class DatabaseError(Exception):
    """Base exception for Supabase table and storage operations."""

    pass


class AppointmentNotFoundError(DatabaseError):
    """Raised when an appointment record does not exist."""

    pass


class UnavailabilityNotFoundError(DatabaseError):
    """Raised when an unavailability record does not exist."""

    pass


class GalleryImageNotFoundError(DatabaseError):
    """Raised when a gallery image record does not exist."""

    pass


class BookingSubmissionError(DatabaseError):
    """Raised when not every duration block of a booking could be saved."""

    pass


class StorageError(DatabaseError):
    """Raised when a file upload to the storage bucket fails."""

    pass


class SlotNotAvailableError(Exception):
    """Raised when the chosen start time is no longer bookable."""

    pass


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


class AuthenticationError(Exception):
    """Raised on wrong credentials or an expired session."""

    pass


class AuthorizationError(Exception):
    """Raised when a session's role does not allow an operation."""

    pass
