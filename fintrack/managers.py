"""
FinTrack - Data Managers

PURPOSE: Data access layer for transactions and categories
SCOPE: Create, batch create, filtered queries, and aggregation
DEPENDENCIES: aiosqlite, decimal, datetime
"""

import calendar
import sqlite3
import aiosqlite
import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .exceptions import PersistenceError
from .models import CandidateTransaction, Transaction, TransactionFilter, TransactionType

logger = logging.getLogger(__name__)

GROUP_KEYS = ('type', 'category')

_INSERT_SQL = '''
    INSERT INTO transactions (owner_id, type, amount, category, description, date)
    VALUES (?, ?, ?, ?, ?, ?)
'''
_SELECT_COLUMNS = 'id, owner_id, type, amount, category, description, date, created_at'


class TransactionManager:
    """Handles transaction persistence and reporting queries."""

    def __init__(self, db_file: str):
        self.db_file = db_file

    async def create_transaction(self, owner_id: str, data: CandidateTransaction) -> Transaction:
        """Create a single transaction entered directly by the user."""
        created = await self.create_batch(owner_id, [data])
        return created[0]

    async def create_batch(self, owner_id: str, candidates: Iterable[CandidateTransaction]) -> List[Transaction]:
        """Persist all candidates in one SQL transaction; nothing is saved if any insert fails."""
        candidates = list(candidates)
        if not candidates:
            return []

        async with aiosqlite.connect(self.db_file) as conn:
            conn.row_factory = aiosqlite.Row
            try:
                ids = []
                for candidate in candidates:
                    cursor = await conn.execute(_INSERT_SQL, self._prepare_values(owner_id, candidate))
                    ids.append(cursor.lastrowid)
                await conn.commit()
            except (sqlite3.Error, AttributeError, TypeError, ValueError) as e:
                await conn.rollback()
                logger.error(f"Batch insert of {len(candidates)} transactions failed, rolled back: {e}")
                raise PersistenceError(
                    f"Could not save transactions, nothing was imported: {e}"
                ) from e

            placeholders = ','.join('?' * len(ids))
            cursor = await conn.execute(
                f'SELECT {_SELECT_COLUMNS} FROM transactions WHERE id IN ({placeholders}) ORDER BY id',
                ids
            )
            rows = await cursor.fetchall()

        logger.info(f"Stored {len(rows)} transactions for owner {owner_id}")
        return [self._row_to_transaction(row) for row in rows]

    async def get_transaction(self, owner_id: str, transaction_id: int) -> Optional[Transaction]:
        async with aiosqlite.connect(self.db_file) as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.execute(
                f'SELECT {_SELECT_COLUMNS} FROM transactions WHERE id = ? AND owner_id = ?',
                (transaction_id, owner_id)
            )
            row = await cursor.fetchone()
            return self._row_to_transaction(row) if row else None

    async def query_transactions(self, owner_id: str, filters: TransactionFilter = None,
                                 page: int = 1, page_size: int = 20) -> Tuple[List[Transaction], int]:
        """Get one page of the owner's transactions, newest first, plus the total match count."""
        where, params = self._build_where(owner_id, filters or TransactionFilter())

        async with aiosqlite.connect(self.db_file) as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.execute(f'SELECT COUNT(*) FROM transactions WHERE {where}', params)
            total = (await cursor.fetchone())[0]

            cursor = await conn.execute(f'''
                SELECT {_SELECT_COLUMNS} FROM transactions
                WHERE {where}
                ORDER BY date DESC, id DESC
                LIMIT ? OFFSET ?
            ''', params + [page_size, (page - 1) * page_size])
            items = [self._row_to_transaction(row) for row in await cursor.fetchall()]

        return items, total

    async def aggregate(self, owner_id: str, filters: TransactionFilter = None,
                        group_key: str = 'category') -> List[Dict[str, Any]]:
        """Sum amounts per group, largest first."""
        if group_key not in GROUP_KEYS:
            raise ValueError(f"Cannot group transactions by {group_key!r}")

        totals: Dict[str, Decimal] = {}
        for row in await self._fetch_amounts(owner_id, filters, group_key):
            totals[row[0]] = totals.get(row[0], Decimal('0')) + Decimal(row[1])

        return [
            {group_key: key, 'total': total}
            for key, total in sorted(totals.items(), key=lambda item: item[1], reverse=True)
        ]

    async def monthly_trends(self, owner_id: str, filters: TransactionFilter = None) -> List[Dict[str, Any]]:
        """Income and expense totals per YYYY-MM month, in chronological order."""
        months: Dict[str, Dict[str, Any]] = OrderedDict()
        rows = await self._fetch_amounts(owner_id, filters, 'type', extra_column='date')

        for trx_type, amount, trx_date in sorted(rows, key=lambda row: row[2]):
            month = trx_date[:7]
            entry = months.setdefault(month, {'month': month, 'income': Decimal('0'), 'expense': Decimal('0')})
            key = 'income' if trx_type == TransactionType.INCOME.value else 'expense'
            entry[key] += Decimal(amount)

        return list(months.values())

    async def monthly_stats(self, owner_id: str, today: date = None) -> Dict[str, Any]:
        """Summary figures for the calendar month containing ``today``."""
        today = today or date.today()
        days_in_month = calendar.monthrange(today.year, today.month)[1]
        month_filter = TransactionFilter(
            date_from=today.replace(day=1),
            date_to=today.replace(day=days_in_month),
        )

        by_type = {row['type']: row['total'] for row in await self.aggregate(owner_id, month_filter, 'type')}
        income = by_type.get(TransactionType.INCOME.value, Decimal('0'))
        expense = by_type.get(TransactionType.EXPENSE.value, Decimal('0'))
        savings = income - expense
        savings_rate = (savings / income * 100) if income > 0 else Decimal('0')

        expense_filter = TransactionFilter(
            date_from=month_filter.date_from, date_to=month_filter.date_to, type=TransactionType.EXPENSE
        )
        by_category = await self.aggregate(owner_id, expense_filter, 'category')

        return {
            'total_income': income,
            'total_expense': expense,
            'net_savings': savings,
            'savings_rate': round(savings_rate, 2),
            'biggest_expense_category': by_category[0]['category'] if by_category else 'N/A',
            'average_daily_spending': round(expense / days_in_month, 2),
        }

    async def _fetch_amounts(self, owner_id: str, filters: Optional[TransactionFilter],
                             group_key: str, extra_column: str = None) -> List[Tuple]:
        where, params = self._build_where(owner_id, filters or TransactionFilter())
        columns = f'{group_key}, amount' + (f', {extra_column}' if extra_column else '')
        async with aiosqlite.connect(self.db_file) as conn:
            cursor = await conn.execute(f'SELECT {columns} FROM transactions WHERE {where}', params)
            return [tuple(row) for row in await cursor.fetchall()]

    def _build_where(self, owner_id: str, filters: TransactionFilter) -> Tuple[str, List[Any]]:
        clauses = ['owner_id = ?']
        params: List[Any] = [owner_id]

        if filters.date_from:
            clauses.append('date >= ?')
            params.append(filters.date_from.isoformat())
        if filters.date_to:
            clauses.append('date <= ?')
            params.append(filters.date_to.isoformat())
        if filters.type:
            clauses.append('type = ?')
            params.append(TransactionType(filters.type).value)
        if filters.category:
            clauses.append('category = ?')
            params.append(filters.category)

        return ' AND '.join(clauses), params

    def _prepare_values(self, owner_id: str, candidate: CandidateTransaction) -> tuple:
        return (
            owner_id,
            candidate.type.value,
            str(candidate.amount),
            candidate.category,
            candidate.description or '',
            candidate.date.isoformat(),
        )

    def _row_to_transaction(self, row) -> Transaction:
        return Transaction(
            id=row['id'],
            owner_id=row['owner_id'],
            type=TransactionType(row['type']),
            amount=Decimal(row['amount']),
            category=row['category'],
            description=row['description'],
            date=date.fromisoformat(row['date']),
            created_at=row['created_at'],
        )


class CategoryManager:
    """Handles category lookups."""

    def __init__(self, db_file: str):
        self.db_file = db_file

    async def get_all_categories(self) -> List[str]:
        """Get all categories sorted by name."""
        async with aiosqlite.connect(self.db_file) as conn:
            cursor = await conn.execute('SELECT name FROM categories ORDER BY name')
            return [row[0] for row in await cursor.fetchall()]
