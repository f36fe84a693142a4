"""
Error taxonomy for the recolor API.

Every error carries the HTTP status it surfaces as and renders to the
``{message, error?}`` body the frontend expects.
"""
from typing import Any, Dict, Optional


class RecolorError(Exception):
    """Base class for all errors surfaced to the HTTP caller"""

    status_code = 500

    def __init__(self, message: str, error: Any = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


class BadRequest(RecolorError):
    """Missing or invalid client input; raised before any external call"""

    status_code = 400


class ValidationError(RecolorError):
    """Schema mismatch on a ledger write"""

    status_code = 400


class NotFound(RecolorError):
    """Referenced entity is absent"""

    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[str] = None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class UploadError(RecolorError):
    """Upload could not be stored"""

    status_code = 500


class UnsupportedMediaType(UploadError):
    status_code = 415


class PayloadTooLarge(UploadError):
    status_code = 413


class ProviderError(RecolorError):
    """Non-2xx, timeout or malformed response from the inference provider"""

    status_code = 500

    def __init__(self, message: str, status: Optional[int] = None, error: Any = None):
        super().__init__(message, error=error)
        self.status = status


class InvalidModelOutput(RecolorError):
    """Provider answered but no usable result URL could be extracted"""

    status_code = 500

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload
