"""
FinTrack - Document Parsers

PURPOSE: Turn extracted document text into candidate transactions
SCOPE: Amount detection, keyword categorization, receipt and statement parsing
DEPENDENCIES: re, decimal, dateutil, pydantic, logging
"""

import re
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Literal, Optional

from dateutil import parser as date_parser
from pydantic import BaseModel, ValidationError

from .config import CATEGORY_TAXONOMY, DEFAULT_CATEGORY
from .models import CandidateTransaction, TransactionType

logger = logging.getLogger(__name__)

_NUMBER = r'(\d+(?:\.\d{2})?)'

# Evaluated in order; the first rule yielding a positive amount wins.
AMOUNT_PATTERNS = (
    ('total', re.compile(r'total[:\s]*\$?' + _NUMBER, re.IGNORECASE)),
    ('amount', re.compile(r'amount[:\s]*\$?' + _NUMBER, re.IGNORECASE)),
    ('currency_code', re.compile(_NUMBER + r'\s*usd', re.IGNORECASE)),
    ('bare', re.compile(r'\$?' + _NUMBER)),
)

COLUMN_SEPARATOR = re.compile(r'\s{2,}|\t|\s\|\s')
_NON_NUMERIC = re.compile(r'[^0-9.\-]')
_LEADING_NUMBER = re.compile(r'-?(?:\d+(?:\.\d*)?|\.\d+)')


def split_lines(text: str) -> List[str]:
    """Split text into stripped, non-empty lines, keeping their order."""
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def classify_line(line: str) -> Optional[Decimal]:
    """Return the transaction amount a line encodes, or None for non-transaction lines."""
    for rule, pattern in AMOUNT_PATTERNS:
        match = pattern.search(line)
        if not match:
            continue
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation:
            continue
        if amount.is_finite() and amount > 0:
            logger.debug(f"Line matched '{rule}' rule: {amount}")
            return amount
    return None


def infer_category(line: str) -> str:
    """Assign a category by the first keyword group found in the line."""
    text_lower = line.lower()
    for category, keywords in CATEGORY_TAXONOMY:
        if any(keyword in text_lower for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


class ReceiptParser:
    """Parser for unstructured receipts; every amount line becomes an expense."""

    def parse(self, text: str, today: date = None) -> List[CandidateTransaction]:
        today = today or date.today()
        results = []

        for line in split_lines(text):
            amount = classify_line(line)
            if amount is None:
                continue
            results.append(CandidateTransaction(
                amount=amount,
                category=infer_category(line),
                description=line,
                date=today,
                type=TransactionType.EXPENSE,
            ))

        logger.info(f"Receipt parser found {len(results)} transactions")
        return results


class StatementRow(BaseModel):
    """The five leading columns of one bank statement row."""
    date_text: str
    description: str
    category: str
    amount_text: str
    type: Literal['INCOME', 'EXPENSE']


class StatementParser:
    """Parser for tabular statements with date, description, category, amount, and type columns."""

    MIN_COLUMNS = 5

    @staticmethod
    def tokenize(line: str) -> List[str]:
        return [part.strip() for part in COLUMN_SEPARATOR.split(line) if part.strip()]

    @staticmethod
    def parse_amount(amount_text: str) -> Optional[Decimal]:
        # Leading number only, so trailing debit markers like "4.50-" still parse
        match = _LEADING_NUMBER.match(_NON_NUMERIC.sub('', amount_text))
        if not match:
            return None
        try:
            amount = Decimal(match.group(0)).copy_abs()
        except InvalidOperation:
            return None
        if not amount.is_finite() or amount == 0:
            return None
        return amount

    @staticmethod
    def parse_date(date_text: str) -> Optional[date]:
        try:
            return date_parser.parse(date_text).date()
        except (ValueError, OverflowError):
            return None

    def parse_row(self, line: str) -> Optional[CandidateTransaction]:
        """Parse one statement line, returning None when the row is malformed."""
        parts = self.tokenize(line)
        if len(parts) < self.MIN_COLUMNS:
            return None

        try:
            row = StatementRow(
                date_text=parts[0],
                description=parts[1],
                category=parts[2],
                amount_text=parts[3],
                type=parts[4],
            )
        except ValidationError:
            return None

        amount = self.parse_amount(row.amount_text)
        if amount is None:
            logger.debug(f"Skipping row with unreadable amount: {row.amount_text!r}")
            return None

        trx_date = self.parse_date(row.date_text)
        if trx_date is None:
            logger.debug(f"Skipping row with unreadable date: {row.date_text!r}")
            return None

        return CandidateTransaction(
            amount=amount,
            category=row.category,
            description=row.description,
            date=trx_date,
            type=TransactionType(row.type),
        )

    def parse(self, text: str) -> List[CandidateTransaction]:
        results = []
        skipped = 0

        for line in split_lines(text):
            candidate = self.parse_row(line)
            if candidate is None:
                skipped += 1
                continue
            results.append(candidate)

        logger.info(f"Statement parser found {len(results)} transactions ({skipped} lines skipped)")
        return results
