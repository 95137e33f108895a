"""
FinTrack - Configuration and Constants

PURPOSE: Central configuration management for the application
SCOPE: Application settings, category taxonomy, and environment variables
DEPENDENCIES: None (foundational module)
"""

import os
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Tuple


DEFAULT_CATEGORY = 'Uncategorized'

# Order matters: the first group with a matching keyword wins.
CATEGORY_TAXONOMY: Tuple[Tuple[str, FrozenSet[str]], ...] = (
    ('Groceries', frozenset({'grocery', 'market', 'food', 'supermarket', 'store'})),
    ('Fuel', frozenset({'fuel', 'gas', 'petrol', 'station'})),
    ('Health', frozenset({'pharmacy', 'medicine', 'drug', 'health'})),
    ('Dining', frozenset({'restaurant', 'cafe', 'dining', 'food'})),
    ('Transportation', frozenset({'transport', 'taxi', 'uber', 'bus'})),
    ('Entertainment', frozenset({'entertainment', 'movie', 'cinema', 'game'})),
)


@dataclass(frozen=True)
class AppConfig:
    """Application configuration constants."""
    DB_FILE: str = field(default_factory=lambda: os.getenv('FINTRACK_DB_FILE', 'fintrack.db'))
    MAX_UPLOAD_MB: int = field(default_factory=lambda: int(os.getenv('FINTRACK_MAX_UPLOAD_MB', '10')))
    OCR_LANGUAGE: str = field(default_factory=lambda: os.getenv('FINTRACK_OCR_LANGUAGE', 'eng'))
    OCR_CONFIG: str = field(default_factory=lambda: os.getenv('FINTRACK_OCR_CONFIG', '--oem 3 --psm 6'))
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv('FINTRACK_LOG_LEVEL', 'INFO'))
    PDF_MEDIA_TYPES: FrozenSet[str] = frozenset({'application/pdf', 'application/x-pdf'})

    @property
    def MAX_UPLOAD_BYTES(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024

    @property
    def CATEGORY_NAMES(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in CATEGORY_TAXONOMY) + (DEFAULT_CATEGORY,)

    def is_pdf(self, media_type: str) -> bool:
        """Check whether a declared media type denotes a PDF document."""
        if not media_type:
            return False
        return media_type.split(';', 1)[0].strip().lower() in self.PDF_MEDIA_TYPES


# Global configuration instance
config = AppConfig()

# Set up logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
