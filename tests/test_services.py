from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from fintrack.exceptions import (
    ExtractionError,
    ExtractionKind,
    PersistenceError,
    ValidationError,
    ValidationKind,
)
from fintrack.managers import TransactionManager
from fintrack.models import ImportMode, RawDocument, TransactionType
from fintrack.ocr_processor import TesseractBackend, TextExtractor
from fintrack.services import ImportService

from tests.helpers import FakeBackend

STATEMENT_TEXT = "\n".join([
    "Date    Description    Category    Amount    Type",
    "2024-01-15    Coffee Shop    Dining    -4.50    EXPENSE",
    "2024-01-31    ACME Payroll    Salary    2,500.00    INCOME",
])


def _service(manager: TransactionManager, ocr_text: str = "", pdf_text: str = "", **kwargs) -> ImportService:
    extractor = TextExtractor(
        ocr_backend=kwargs.get("ocr_backend", FakeBackend("ocr", text=ocr_text)),
        pdf_backend=kwargs.get("pdf_backend", FakeBackend("pdf", text=pdf_text)),
    )
    return ImportService(manager, extractor)


def _stored(manager: TransactionManager, owner_id: str = "user-1") -> int:
    return asyncio.run(manager.query_transactions(owner_id))[1]


def test_receipt_import_persists_expenses(manager: TransactionManager) -> None:
    service = _service(manager, ocr_text="Whole Foods Market\nOrganic food 23.10\nThank you")
    document = RawDocument(data=b"jpeg-bytes", media_type="image/jpeg", filename="receipt.jpg")

    result = asyncio.run(service.submit_import("user-1", document, ImportMode.RECEIPT))

    assert result.imported == 1
    record = result.items[0]
    assert record.id is not None
    assert record.owner_id == "user-1"
    assert record.amount == Decimal("23.10")
    assert record.category == "Groceries"
    assert record.type is TransactionType.EXPENSE
    assert _stored(manager) == 1


def test_statement_import_persists_rows(manager: TransactionManager) -> None:
    service = _service(manager, pdf_text=STATEMENT_TEXT)
    document = RawDocument(data=b"%PDF-1.7", media_type="application/pdf")

    result = asyncio.run(service.submit_import("user-1", document, ImportMode.STATEMENT))

    assert result.imported == 2
    assert [(r.description, r.amount, r.type) for r in result.items] == [
        ("Coffee Shop", Decimal("4.50"), TransactionType.EXPENSE),
        ("ACME Payroll", Decimal("2500.00"), TransactionType.INCOME),
    ]


def test_document_without_transactions_imports_zero(manager: TransactionManager) -> None:
    service = _service(manager, ocr_text="Thank you for visiting", pdf_text="Account summary")

    receipt = asyncio.run(service.submit_import(
        "user-1", RawDocument(data=b"png", media_type="image/png"), ImportMode.RECEIPT
    ))
    statement = asyncio.run(service.submit_import(
        "user-1", RawDocument(data=b"%PDF", media_type="application/pdf"), ImportMode.STATEMENT
    ))

    assert (receipt.imported, receipt.items) == (0, [])
    assert (statement.imported, statement.items) == (0, [])
    assert _stored(manager) == 0


@pytest.mark.parametrize(
    "document, mode, kind",
    [
        (None, ImportMode.RECEIPT, ValidationKind.NO_FILE),
        (RawDocument(data=b"", media_type="image/png"), ImportMode.RECEIPT, ValidationKind.NO_FILE),
        (RawDocument(data=b"png", media_type="image/png"), ImportMode.STATEMENT, ValidationKind.WRONG_MEDIA_TYPE),
        (
            RawDocument(data=b"x" * (10 * 1024 * 1024 + 1), media_type="application/pdf"),
            ImportMode.STATEMENT,
            ValidationKind.PAYLOAD_TOO_LARGE,
        ),
    ],
)
def test_invalid_uploads_never_reach_extraction(manager: TransactionManager, document, mode, kind) -> None:
    ocr = FakeBackend("ocr", text="Total: 1.00")
    pdf = FakeBackend("pdf", text=STATEMENT_TEXT)
    service = _service(manager, ocr_backend=ocr, pdf_backend=pdf)

    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(service.submit_import("user-1", document, mode))

    assert excinfo.value.kind is kind
    assert excinfo.value.stage == "upload"
    assert ocr.calls == [] and pdf.calls == []


def test_corrupt_image_is_backend_failure_and_saves_nothing(manager: TransactionManager) -> None:
    service = _service(manager, ocr_backend=TesseractBackend())
    document = RawDocument(data=b"\x00\x01corrupt", media_type="image/png")

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(service.submit_import("user-1", document, ImportMode.RECEIPT))

    assert excinfo.value.kind is ExtractionKind.BACKEND_FAILURE
    assert _stored(manager) == 0


def test_empty_extraction_is_reported_separately(manager: TransactionManager) -> None:
    service = _service(manager, pdf_text="   ")
    document = RawDocument(data=b"%PDF", media_type="application/pdf")

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(service.submit_import("user-1", document, ImportMode.RECEIPT))

    assert excinfo.value.kind is ExtractionKind.EMPTY_OUTPUT
    assert excinfo.value.stage == "extraction"


def test_statement_with_empty_text_layer_imports_zero(manager: TransactionManager) -> None:
    pdf = FakeBackend("pdf", text="")
    service = _service(manager, pdf_backend=pdf)
    document = RawDocument(data=b"%PDF", media_type="application/pdf")

    result = asyncio.run(service.submit_import("user-1", document, ImportMode.STATEMENT))

    assert (result.imported, result.items) == (0, [])
    assert pdf.calls == [b"%PDF"]
    assert _stored(manager) == 0


def test_statement_backend_failure_still_raises(manager: TransactionManager) -> None:
    service = _service(manager, pdf_backend=FakeBackend("pdf", error=RuntimeError("broken xref")))
    document = RawDocument(data=b"%PDF", media_type="application/pdf")

    with pytest.raises(ExtractionError) as excinfo:
        asyncio.run(service.submit_import("user-1", document, ImportMode.STATEMENT))

    assert excinfo.value.kind is ExtractionKind.BACKEND_FAILURE


def test_persistence_failure_propagates(manager: TransactionManager, monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing_batch(owner_id, candidates):
        raise PersistenceError("disk full")

    monkeypatch.setattr(manager, "create_batch", failing_batch)
    service = _service(manager, ocr_text="Total: $42.50")

    with pytest.raises(PersistenceError):
        asyncio.run(service.submit_import(
            "user-1", RawDocument(data=b"png", media_type="image/png"), ImportMode.RECEIPT
        ))
