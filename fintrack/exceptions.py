"""
FinTrack - Error Taxonomy

PURPOSE: Typed failures for the document import pipeline
SCOPE: Upload validation, text extraction, and persistence errors
DEPENDENCIES: enum
"""

from enum import Enum


class ValidationKind(str, Enum):
    NO_FILE = 'NO_FILE'
    WRONG_MEDIA_TYPE = 'WRONG_MEDIA_TYPE'
    PAYLOAD_TOO_LARGE = 'PAYLOAD_TOO_LARGE'


class ExtractionKind(str, Enum):
    BACKEND_FAILURE = 'BACKEND_FAILURE'
    EMPTY_OUTPUT = 'EMPTY_OUTPUT'


class FinTrackError(Exception):
    """Base exception for all import failures surfaced to the caller."""

    stage = 'internal'

    def __init__(self, message: str, kind: Enum = None):
        super().__init__(message)
        self.message = message
        self.kind = kind

    def to_dict(self) -> dict:
        return {
            'stage': self.stage,
            'kind': self.kind.value if self.kind else None,
            'message': self.message,
        }


class ValidationError(FinTrackError):
    """Raised when the uploaded file is missing, too large, or of the wrong type."""

    stage = 'upload'


class ExtractionError(FinTrackError):
    """Raised when no usable text could be recovered from a document."""

    stage = 'extraction'


class PersistenceError(FinTrackError):
    """Raised when a batch of transactions could not be stored; nothing was saved."""

    stage = 'persistence'
