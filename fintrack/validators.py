"""
FinTrack - Data Validation

PURPOSE: Data validation and business rule enforcement
SCOPE: Upload checks and manual transaction entry
DEPENDENCIES: pydantic, config.py
"""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .config import config
from .exceptions import ValidationError, ValidationKind
from .models import CandidateTransaction, ImportMode, RawDocument, TransactionType


def validate_upload(document: Optional[RawDocument], mode: ImportMode) -> None:
    """Reject uploads that should never reach text extraction."""
    if document is None or not document.data:
        raise ValidationError("No file uploaded", ValidationKind.NO_FILE)

    if document.size > config.MAX_UPLOAD_BYTES:
        size_mb = document.size / (1024 * 1024)
        raise ValidationError(
            f"File too large ({size_mb:.2f} MB). Maximum: {config.MAX_UPLOAD_MB} MB",
            ValidationKind.PAYLOAD_TOO_LARGE,
        )

    if mode == ImportMode.STATEMENT and not config.is_pdf(document.media_type):
        raise ValidationError("Statement imports require a PDF file", ValidationKind.WRONG_MEDIA_TYPE)


class TransactionCreate(BaseModel):
    """Request body for a manually entered transaction."""
    type: TransactionType
    amount: Decimal = Field(gt=0)
    category: str = Field(min_length=1)
    description: Optional[str] = None
    date: datetime.date

    @field_validator('category', 'description')
    @classmethod
    def strip_whitespace(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator('category')
    @classmethod
    def category_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Category is required")
        return value

    def to_candidate(self) -> CandidateTransaction:
        return CandidateTransaction(
            amount=self.amount,
            category=self.category,
            description=self.description or '',
            date=self.date,
            type=self.type,
        )
