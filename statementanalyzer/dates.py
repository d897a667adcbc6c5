"""Date token normalization.

Statements print dates in many regional shapes. Everything is converted to
ISO ``YYYY-MM-DD``; a token that cannot be read is returned unchanged so the
transaction stays visible even though its date is unknown.
"""

import logging
import re
from datetime import date
from typing import Optional

from .patterns import MONTH_NUMBERS, match_date

logger = logging.getLogger(__name__)

_ISO_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _month_number(value: str) -> Optional[int]:
  if value.isdigit():
    return int(value)
  return MONTH_NUMBERS.get(value.lower()[:3])


def normalize_date(raw: str, default_year: Optional[int] = None) -> str:
  """Return ``raw`` as an ISO date string, or ``raw`` itself when unparseable.

  Numeric dates are always read day-first (``15/03/2025`` is 15 March).
  Year-less shapes (``15 Mar``, ``15/3``) take ``default_year``, falling back
  to the current year when it is not given.
  """
  if raw is None:
    return raw
  matched = match_date(raw)
  if matched is None:
    return raw

  pattern, m = matched
  if pattern.has_year:
    year = int(m.group("year"))
  else:
    year = default_year if default_year is not None else date.today().year
    logger.debug(f"Assuming year {year} for {raw!r}")

  month = _month_number(m.group("month"))
  if month is None:
    return raw
  try:
    return date(year, month, int(m.group("day"))).isoformat()
  except ValueError:
    logger.debug(f"Invalid calendar date {raw!r}")
    return raw


def is_iso_date(value) -> bool:
  """True when ``value`` is a normalized ``YYYY-MM-DD`` string."""
  if not isinstance(value, str) or not _ISO_RE.fullmatch(value):
    return False
  try:
    date.fromisoformat(value)
  except ValueError:
    return False
  return True
