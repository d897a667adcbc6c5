"""Income/transfer/category labelling and de-duplication.

Labelling is keyword based:

* a description naming an own-account movement is a transfer, and a
  transfer is never income;
* otherwise a positive amount is income when the description carries an
  income keyword, or when it is above ``UNCLASSIFIED_INCOME_THRESHOLD`` and
  shows no sign of being an expense;
* everything else gets the first category whose keywords appear in the
  description, or ``"Other"``.

De-duplication keys on ``(date, description, amount)``; the first record
with a given key wins.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .dates import normalize_date
from .exceptions import ManualEntryError
from .models import (
  CATEGORIES,
  INCOME_CATEGORY,
  MAX_DESCRIPTION_LENGTH,
  MIN_AMOUNT,
  OTHER_CATEGORY,
  Direction,
  Transaction,
  TransactionCandidate,
)
from .patterns import (
  CATEGORY_KEYWORDS,
  COMPANY_SUFFIX_RE,
  EXPENSE_INDICATORS,
  INCOME_KEYWORDS,
  TRANSFER_KEYWORDS,
  UNCLASSIFIED_INCOME_THRESHOLD,
)

logger = logging.getLogger(__name__)

MANUAL_SOURCE_REF = "Manual entry"


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
  return any(k in text for k in keywords)


def is_transfer(description: str) -> bool:
  return _contains_any((description or "").upper(), TRANSFER_KEYWORDS)


def is_income(description: str, amount: float) -> bool:
  """Income test for a transaction already known not to be a transfer."""
  if amount <= 0:
    return False
  desc = (description or "").upper()
  if _contains_any(desc, INCOME_KEYWORDS) or COMPANY_SUFFIX_RE.search(desc):
    return True
  return amount > UNCLASSIFIED_INCOME_THRESHOLD and not _contains_any(desc, EXPENSE_INDICATORS)


def assign_category(description: str) -> str:
  desc = (description or "").upper()
  for category, keywords in CATEGORY_KEYWORDS:
    if _contains_any(desc, keywords):
      return category
  return OTHER_CATEGORY


def classify_candidate(candidate: TransactionCandidate) -> Transaction:
  transfer = is_transfer(candidate.description)
  income = not transfer and is_income(candidate.description, candidate.amount)
  category = INCOME_CATEGORY if income else (OTHER_CATEGORY if transfer else assign_category(candidate.description))
  return Transaction(
    date=candidate.date,
    description=candidate.description,
    amount=candidate.amount,
    direction=candidate.direction,
    source_ref=candidate.source_ref,
    category=category,
    is_income=income,
    is_transfer=transfer,
  )


def classify_all(candidates: Iterable[TransactionCandidate]) -> List[Transaction]:
  return [classify_candidate(c) for c in candidates]


def deduplicate(transactions: Iterable[Transaction]) -> List[Transaction]:
  seen = set()
  kept: List[Transaction] = []
  for tx in transactions:
    if tx.key in seen:
      continue
    seen.add(tx.key)
    kept.append(tx)
  return kept


def merge(existing: Iterable[Transaction], incoming: Iterable[Transaction]) -> List[Transaction]:
  """Union of ``existing`` and ``incoming`` with duplicates dropped, existing first."""
  existing = list(existing)
  incoming = list(incoming)
  merged = deduplicate(existing + incoming)
  logger.debug(f"Merged {len(existing)} + {len(incoming)} transactions into {len(merged)}")
  return merged


def manual_entry(
  date: str,
  description: str,
  amount,
  category: Optional[str] = None,
  is_income: Optional[bool] = None,
  is_transfer: Optional[bool] = None,
) -> Transaction:
  """Build a user-entered transaction.

  Flags and category that are not supplied are derived the same way parsed
  transactions are labelled. Raises ``ManualEntryError`` for input that would
  break a transaction invariant.
  """
  description = (description or "").strip()[:MAX_DESCRIPTION_LENGTH]
  if not description:
    raise ManualEntryError("description is required")
  try:
    amount = round(float(amount), 2)
  except (TypeError, ValueError) as exc:
    raise ManualEntryError(f"invalid amount: {amount!r}") from exc
  if abs(amount) < MIN_AMOUNT:
    raise ManualEntryError(f"amount must be at least {MIN_AMOUNT} in magnitude")

  derived = classify_candidate(
    TransactionCandidate(
      date=normalize_date((date or "").strip()),
      description=description,
      amount=amount,
      direction=Direction.for_amount(amount),
      source_ref=MANUAL_SOURCE_REF,
    )
  )

  transfer = derived.is_transfer if is_transfer is None else bool(is_transfer)
  if is_income is not None:
    income = bool(is_income)
  elif category is not None:
    income = category == INCOME_CATEGORY
  else:
    income = derived.is_income and not transfer
  if transfer and income:
    raise ManualEntryError("a transfer cannot be income")

  if income:
    final_category = INCOME_CATEGORY
    if category not in (None, INCOME_CATEGORY):
      raise ManualEntryError(f"income must use the {INCOME_CATEGORY!r} category")
  elif category is not None:
    if category not in CATEGORIES and category != OTHER_CATEGORY:
      raise ManualEntryError(f"unknown category: {category!r}")
    final_category = category
  else:
    final_category = OTHER_CATEGORY if transfer else assign_category(description)

  return Transaction(
    date=derived.date,
    description=description,
    amount=amount,
    direction=derived.direction,
    source_ref=MANUAL_SOURCE_REF,
    category=final_category,
    is_income=income,
    is_transfer=transfer,
    is_manual=True,
  )
