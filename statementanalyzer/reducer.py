"""Turn a classified row into transaction candidates."""

import logging
from typing import List

from .models import MAX_DESCRIPTION_LENGTH, UNKNOWN_DATE, ClassifiedRow, Direction, TransactionCandidate

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "Transaction"


def row_description(classified: ClassifiedRow) -> str:
  parts = [t.text.strip() for t in classified.descriptions if t.text.strip()]
  description = " ".join(parts)[:MAX_DESCRIPTION_LENGTH].strip()
  if not description:
    description = classified.row.text[:MAX_DESCRIPTION_LENGTH].strip()
  return description or FALLBACK_DESCRIPTION


def reduce_row(classified: ClassifiedRow) -> List[TransactionCandidate]:
  """Emit one candidate per amount found in the row.

  All amounts of a row share the row's first date and its description. A row
  listing both a transaction amount and a running balance therefore yields
  two candidates; that over-generation is accepted so that genuine
  multi-amount rows are never missed.
  """
  if classified.rejected:
    return []
  amounts = classified.amounts
  if not amounts:
    return []

  dates = classified.dates
  date = dates[0].value if dates else UNKNOWN_DATE
  description = row_description(classified)
  row = classified.row
  source_ref = f"Page {row.page}, Row {row.index}"

  candidates = [
    TransactionCandidate(
      date=date,
      description=description,
      amount=tok.value,
      direction=Direction.for_amount(tok.value),
      source_ref=source_ref,
    )
    for tok in amounts
  ]
  if len(candidates) > 1:
    logger.debug(f"{source_ref}: {len(candidates)} amounts share one row")
  return candidates
