"""Session-scoped accumulation of transactions across upload batches."""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .classify import manual_entry, merge
from .models import StatementFile, Transaction

logger = logging.getLogger(__name__)


class TransactionStore:
  """Holds the deduplicated transactions of one session.

  The store is owned by its caller. Every mutation replaces the stored tuple
  in one step, so readers never observe a half-merged batch.
  """

  def __init__(self, transactions: Iterable[Transaction] = ()):
    self._transactions: Tuple[Transaction, ...] = tuple(merge([], transactions))

  @property
  def transactions(self) -> Tuple[Transaction, ...]:
    return self._transactions

  def __len__(self):
    return len(self._transactions)

  def __iter__(self):
    return iter(self._transactions)

  def keys(self):
    return {tx.key for tx in self._transactions}

  def merge(self, incoming: Iterable[Transaction]) -> List[Transaction]:
    """Merge ``incoming`` and return the transactions that were actually new."""
    incoming = list(incoming)
    before = self.keys()
    merged = merge(self._transactions, incoming)
    self._transactions = tuple(merged)
    added = list(merged[len(before):])
    logger.info(f"Store now holds {len(merged)} transactions ({len(added)} new, {len(incoming) - len(added)} duplicates)")
    return added

  def ingest(self, analyzer, files: Sequence[StatementFile], progress_callback=None) -> Tuple[List[Transaction], List[str]]:
    """Run ``analyzer`` over ``files`` and merge the batch once it is complete."""
    result = analyzer.ingest(files, progress_callback=progress_callback)
    return self.merge(result.transactions), result.errors

  def add_manual(self, date: str, description: str, amount, category: Optional[str] = None,
                 is_income: Optional[bool] = None, is_transfer: Optional[bool] = None) -> Optional[Transaction]:
    """Add a manual entry. Returns ``None`` when it duplicates a stored transaction."""
    entry = manual_entry(date, description, amount, category=category, is_income=is_income, is_transfer=is_transfer)
    added = self.merge([entry])
    return added[0] if added else None

  def replace(self, key: Tuple[str, str, float], transaction: Transaction) -> bool:
    """Swap the transaction stored under ``key`` for ``transaction``.

    Returns ``False``, leaving the store untouched, when ``key`` is not
    stored or when the replacement's key belongs to another stored
    transaction.
    """
    keys = self.keys()
    if key not in keys:
      return False
    if transaction.key != key and transaction.key in keys:
      logger.info(f"Replacement for {key} collides with stored {transaction.key}")
      return False
    self._transactions = tuple(transaction if tx.key == key else tx for tx in self._transactions)
    return True

  def remove(self, key: Tuple[str, str, float]) -> bool:
    kept = tuple(tx for tx in self._transactions if tx.key != key)
    removed = len(kept) != len(self._transactions)
    self._transactions = kept
    return removed

  def clear(self):
    self._transactions = ()
