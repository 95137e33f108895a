"""
FinTrack - Import Service

PURPOSE: Orchestrate document uploads into stored transactions
SCOPE: Upload validation, extractor and parser dispatch, atomic persistence
DEPENDENCIES: ocr_processor, parsers, managers, validators
"""

import logging

from .exceptions import ExtractionError, ExtractionKind
from .ocr_processor import TextExtractor
from .parsers import ReceiptParser, StatementParser
from .managers import TransactionManager
from .models import ImportMode, ImportResult, RawDocument
from .validators import validate_upload

logger = logging.getLogger(__name__)


class ImportService:
    """Main service for turning an uploaded document into stored transactions."""

    def __init__(self, transaction_manager: TransactionManager, extractor: TextExtractor = None):
        self.transaction_manager = transaction_manager
        self.extractor = extractor or TextExtractor()
        self.parsers = {
            ImportMode.RECEIPT: ReceiptParser(),
            ImportMode.STATEMENT: StatementParser(),
        }

    async def submit_import(self, owner_id: str, document: RawDocument, mode: ImportMode) -> ImportResult:
        """Validate, extract, parse, and persist one document.

        Raises ValidationError, ExtractionError, or PersistenceError. A document
        with no recognizable transactions is a successful import of zero rows,
        and so is a statement whose text layer is empty. An empty receipt is
        still an EMPTY_OUTPUT error.
        """
        mode = ImportMode(mode)
        validate_upload(document, mode)

        try:
            text = await self.extractor.extract(document.data, document.media_type)
        except ExtractionError as e:
            # A statement without a text layer holds no rows; receipts report it
            if mode == ImportMode.STATEMENT and e.kind is ExtractionKind.EMPTY_OUTPUT:
                logger.info(f"Statement {document.filename or 'upload'} has no text, nothing to import")
                return ImportResult(imported=0, items=[])
            raise
        candidates = self.parsers[mode].parse(text)

        if not candidates:
            logger.info(f"No transactions found in {document.filename or 'upload'} ({mode.value})")
            return ImportResult(imported=0, items=[])

        created = await self.transaction_manager.create_batch(owner_id, candidates)
        logger.info(f"Imported {len(created)} transactions from {document.filename or 'upload'} ({mode.value})")
        return ImportResult(imported=len(created), items=created)
