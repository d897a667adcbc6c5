"""Amount token normalization."""

import logging
import math
import re
from typing import Optional

from .patterns import CURRENCY_SYMBOLS

logger = logging.getLogger(__name__)

_MARKER_RE = re.compile(r"cr|dr", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_STRIP_TABLE = str.maketrans("", "", CURRENCY_SYMBOLS + "r,+-" + " \t\u00a0")


def normalize_amount(raw: Optional[str], allow_zero: bool = False) -> Optional[float]:
  """Convert an amount token such as ``R1,234.56`` or ``500.00 DR`` to a signed float.

  A literal minus sign anywhere in the token, or a ``DR`` (debit) marker,
  makes the value negative. ``CR`` (credit) is the same as no marker. Returns
  ``None`` when the token is not a number, and for zero unless ``allow_zero``
  is set, since zero-value rows carry no financial signal.
  """
  if raw is None:
    return None
  s = str(raw).strip()
  if not s:
    return None

  negative = "-" in s or "dr" in s.lower()
  s = _MARKER_RE.sub("", s)
  s = s.translate(_STRIP_TABLE)

  if not _NUMBER_RE.fullmatch(s):
    logger.debug(f"Not an amount: {raw!r}")
    return None

  value = float(s)
  if not math.isfinite(value):
    return None
  value = round(value, 2)
  if value == 0 and not allow_zero:
    return None
  return -value if negative and value else value
