from typing import Optional


class ContentServiceError(Exception):
    """Raised when the content service cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DocumentNotFoundError(ContentServiceError):
    def __init__(self, document_type: str, uid: str):
        super().__init__(f"No {document_type} document with uid {uid!r}", 404)
        self.document_type = document_type
        self.uid = uid


class MalformedResponseError(ContentServiceError):
    """The content service answered with a payload that does not match the schema."""


class InvalidCursorError(ContentServiceError):
    """A pagination cursor does not point at the configured content service."""


class LoadInProgressError(Exception):
    """A page of the listing is already being fetched."""
