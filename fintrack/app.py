"""
FinTrack - Main FastAPI Application

PURPOSE: FastAPI routes, endpoints, and application setup
SCOPE: HTTP API layer and request/response handling
DEPENDENCIES: FastAPI, all fintrack modules
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .config import config
from .database import DatabaseManager
from .exceptions import ExtractionKind, FinTrackError, ValidationKind
from .managers import CategoryManager, TransactionManager
from .models import ImportMode, RawDocument, TransactionFilter, TransactionType
from .ocr_processor import TextExtractor
from .services import ImportService
from .validators import TransactionCreate

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationKind.NO_FILE: 400,
    ValidationKind.WRONG_MEDIA_TYPE: 400,
    ValidationKind.PAYLOAD_TOO_LARGE: 413,
    ExtractionKind.BACKEND_FAILURE: 422,
    ExtractionKind.EMPTY_OUTPUT: 400,
}


def money_json(payload):
    """Encode a report payload with amounts as strings, matching stored transactions."""
    return jsonable_encoder(payload, custom_encoder={Decimal: str})


async def get_owner_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Identity of the caller, supplied by the fronting auth layer."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


def create_app(db_file: str = None, extractor: TextExtractor = None) -> FastAPI:
    """Build the application around one database file."""
    db_file = db_file or config.DB_FILE

    app = FastAPI(title="FinTrack")

    # Initialize service instances
    db_manager = DatabaseManager(db_file)
    transaction_manager = TransactionManager(db_file)
    category_manager = CategoryManager(db_file)
    import_service = ImportService(transaction_manager, extractor)

    @app.on_event("startup")
    async def startup_event():
        """Initialize the application on startup."""
        await db_manager.initialize_database()
        logger.info("Database initialized successfully.")

    @app.exception_handler(FinTrackError)
    async def fintrack_error_handler(request: Request, exc: FinTrackError):
        status_code = ERROR_STATUS.get(exc.kind, 500)
        logger.warning(f"{request.url.path} failed at {exc.stage} stage: {exc.message}")
        return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})

    # ============================================================================
    # DOCUMENT UPLOAD ENDPOINTS
    # ============================================================================

    async def _import_upload(owner_id: str, file: Optional[UploadFile], mode: ImportMode):
        if file is None:
            document = None
        else:
            document = RawDocument(
                data=await file.read(),
                media_type=file.content_type or '',
                filename=file.filename or '',
            )
        result = await import_service.submit_import(owner_id, document, mode)
        return result.to_dict()

    @app.post("/uploads/receipt")
    async def upload_receipt(file: Optional[UploadFile] = File(None), owner_id: str = Depends(get_owner_id)):
        """Upload a receipt image or PDF and import every amount line as an expense."""
        return await _import_upload(owner_id, file, ImportMode.RECEIPT)

    @app.post("/uploads/statement")
    async def upload_statement(file: Optional[UploadFile] = File(None), owner_id: str = Depends(get_owner_id)):
        """Upload a tabular bank statement PDF."""
        return await _import_upload(owner_id, file, ImportMode.STATEMENT)

    # ============================================================================
    # TRANSACTION ENDPOINTS
    # ============================================================================

    @app.post("/transactions")
    async def create_transaction(body: TransactionCreate, owner_id: str = Depends(get_owner_id)):
        """Create a transaction entered by hand."""
        transaction = await transaction_manager.create_transaction(owner_id, body.to_candidate())
        return transaction.to_dict()

    @app.get("/transactions")
    async def list_transactions(
        date_from: Optional[date] = Query(None, alias="from"),
        date_to: Optional[date] = Query(None, alias="to"),
        type: Optional[TransactionType] = Query(None),
        category: Optional[str] = Query(None),
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100),
        owner_id: str = Depends(get_owner_id),
    ):
        """List transactions, newest first."""
        filters = TransactionFilter(date_from=date_from, date_to=date_to, type=type, category=category)
        items, total = await transaction_manager.query_transactions(owner_id, filters, page, page_size)
        return {
            "items": [item.to_dict() for item in items],
            "page": page,
            "page_size": page_size,
            "total": total,
        }

    @app.get("/transactions/summary")
    async def transaction_summary(
        date_from: Optional[date] = Query(None, alias="from"),
        date_to: Optional[date] = Query(None, alias="to"),
        owner_id: str = Depends(get_owner_id),
    ):
        """Totals by type, and expense totals by category."""
        filters = TransactionFilter(date_from=date_from, date_to=date_to)
        expenses = TransactionFilter(date_from=date_from, date_to=date_to, type=TransactionType.EXPENSE)
        return money_json({
            "by_type": await transaction_manager.aggregate(owner_id, filters, 'type'),
            "by_category": await transaction_manager.aggregate(owner_id, expenses, 'category'),
        })

    @app.get("/transactions/trends")
    async def transaction_trends(
        date_from: Optional[date] = Query(None, alias="from"),
        date_to: Optional[date] = Query(None, alias="to"),
        owner_id: str = Depends(get_owner_id),
    ):
        """Monthly income and expense totals."""
        filters = TransactionFilter(date_from=date_from, date_to=date_to)
        return money_json({"monthly_trends": await transaction_manager.monthly_trends(owner_id, filters)})

    @app.get("/transactions/stats")
    async def transaction_stats(owner_id: str = Depends(get_owner_id)):
        """Figures for the current month."""
        return money_json(await transaction_manager.monthly_stats(owner_id))

    # Declared after the fixed /transactions/* paths so they match first
    @app.get("/transactions/{transaction_id}")
    async def get_transaction(transaction_id: int, owner_id: str = Depends(get_owner_id)):
        """Get one of the caller's transactions by ID."""
        transaction = await transaction_manager.get_transaction(owner_id, transaction_id)
        if not transaction:
            raise HTTPException(status_code=404, detail="Transaction not found")
        return transaction.to_dict()

    # ============================================================================
    # UTILITY ENDPOINTS
    # ============================================================================

    @app.get("/categories")
    async def get_categories():
        """Get all available categories."""
        return await category_manager.get_all_categories()

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring."""
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    return app


app = create_app()


# ============================================================================
# APPLICATION ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
