"""Error taxonomy shared by services and HTTP handlers.

Services raise these; ``create_app`` registers a handler that renders them
as ``{"error": message}`` JSON with the matching status code.
"""
from typing import List, Optional


class HuntError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {'error': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(HuntError):
    """Malformed or missing input, or a request the current data rejects."""
    status_code = 400


class InvalidState(HuntError):
    """Operation attempted from the wrong team, timer or request status."""
    status_code = 400


class NotFound(HuntError):
    status_code = 404


class Conflict(HuntError):
    """Duplicate unique key, or a concurrent write won the race."""
    status_code = 409


class Unauthorized(HuntError):
    status_code = 401
