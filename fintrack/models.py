"""
FinTrack - Data Model

PURPOSE: Typed records passed between extraction, parsing, and storage
SCOPE: Candidate and persisted transactions, import requests and results
DEPENDENCIES: dataclasses, decimal, enum
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class TransactionType(str, Enum):
    INCOME = 'INCOME'
    EXPENSE = 'EXPENSE'


class ImportMode(str, Enum):
    RECEIPT = 'RECEIPT'
    STATEMENT = 'STATEMENT'


@dataclass(frozen=True)
class RawDocument:
    """An uploaded file held in memory for the duration of one import."""
    data: bytes
    media_type: str
    filename: str = ''

    @property
    def size(self) -> int:
        return len(self.data) if self.data else 0


@dataclass(frozen=True)
class CandidateTransaction:
    """A parsed, not yet persisted transaction."""
    amount: Decimal
    category: str
    description: str
    date: date
    type: TransactionType


@dataclass(frozen=True)
class Transaction:
    """A stored transaction owned by one user."""
    id: int
    owner_id: str
    type: TransactionType
    amount: Decimal
    category: str
    description: str
    date: date
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'type': self.type.value,
            'amount': str(self.amount),
            'category': self.category,
            'description': self.description,
            'date': self.date.isoformat(),
            'created_at': self.created_at,
        }


@dataclass(frozen=True)
class TransactionFilter:
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    type: Optional[TransactionType] = None
    category: Optional[str] = None


@dataclass
class ImportResult:
    imported: int = 0
    items: List[Transaction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'imported': self.imported,
            'items': [item.to_dict() for item in self.items],
        }
