"""
Domain errors raised by the citizen-services components.
Each maps to one HTTP status in app.main.
"""
from fastapi import status


class CitizenServicesError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CitizenServicesError):
    """Bad input shape or a reference to an ineligible user"""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(CitizenServicesError):
    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(CitizenServicesError):
    status_code = status.HTTP_403_FORBIDDEN


class RetrievalError(CitizenServicesError):
    """Backing store unreachable or query failed"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
