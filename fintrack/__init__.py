"""
FinTrack Package

PURPOSE: Package initialization for the FinTrack import service
SCOPE: Module imports and package configuration
"""

__version__ = "1.0.0"
__description__ = "Personal finance tracker with receipt OCR and statement import"

# Package imports for easier access
from .config import config
from .database import DatabaseManager
from .exceptions import ExtractionError, FinTrackError, PersistenceError, ValidationError
from .managers import CategoryManager, TransactionManager
from .models import CandidateTransaction, ImportMode, ImportResult, RawDocument, Transaction, TransactionType
from .ocr_processor import TextExtractor
from .parsers import ReceiptParser, StatementParser, classify_line, infer_category
from .services import ImportService

__all__ = [
    "config",
    "DatabaseManager",
    "TransactionManager",
    "CategoryManager",
    "TextExtractor",
    "ReceiptParser",
    "StatementParser",
    "classify_line",
    "infer_category",
    "ImportService",
    "CandidateTransaction",
    "Transaction",
    "TransactionType",
    "ImportMode",
    "ImportResult",
    "RawDocument",
    "FinTrackError",
    "ValidationError",
    "ExtractionError",
    "PersistenceError",
]
