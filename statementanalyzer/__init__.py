"""
Bank Statement Analyzer Package

Reconstructs a categorized transaction ledger from the positioned text of
bank statement PDFs.
"""

from .analyzer import StatementAnalyzer
from .config import ExtractionConfig
from .models import StatementFile, TextFragment, Transaction, TransactionCandidate
from .store import TransactionStore

__version__ = "1.0.0"
__author__ = "Bank Statement Analyzer Team"

__all__ = [
  "StatementAnalyzer",
  "ExtractionConfig",
  "StatementFile",
  "TextFragment",
  "Transaction",
  "TransactionCandidate",
  "TransactionStore",
]
