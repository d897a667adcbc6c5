"""Row-level token classification.

Each fragment of a row is tagged as a date, an amount, a description
fragment or unknown noise. Rows that are column headers or too sparse to be
a transaction are rejected before any tagging happens.
"""

import logging
from typing import List, Optional

from .amounts import normalize_amount
from .config import ExtractionConfig
from .dates import normalize_date
from .models import MIN_AMOUNT, ClassifiedRow, ClassifiedToken, Row, TokenKind
from .patterns import DECIMAL_RE, SHORT_CODE_RE, SUFFIX_RE, is_header_text, looks_like_amount, match_date

logger = logging.getLogger(__name__)

REJECT_HEADER = "header"
REJECT_TOO_SHORT = "too_short"
REJECT_TOO_SPARSE = "too_sparse"

# Word-level extractors split "15 Mar 2025" into separate fragments.
_DATE_SPAN_WIDTHS = (3, 2)


class TokenClassifier:
  """Tags the fragments of a row using the pattern libraries.

  In lenient mode, a row without a recognised date or amount gets a second,
  looser look: a token with digits becomes the date, and a bare
  ``digits.digits`` token becomes the amount. Those promotions raise recall
  at the cost of false positives, so they are off unless asked for.
  """

  def __init__(self, config: Optional[ExtractionConfig] = None):
    self.config = config or ExtractionConfig()

  def rejection_reason(self, row: Row) -> Optional[str]:
    text = row.text
    if is_header_text(text):
      return REJECT_HEADER
    if len(text) < self.config.min_row_chars:
      return REJECT_TOO_SHORT
    if len(row) < self.config.min_fragments:
      return REJECT_TOO_SPARSE
    return None

  def classify(self, row: Row) -> ClassifiedRow:
    reason = self.rejection_reason(row)
    if reason:
      logger.debug(f"Page {row.page}, Row {row.index} rejected ({reason}): {row.text!r}")
      return ClassifiedRow(row=row, rejected=reason)

    frags = list(row.fragments)
    tokens: List[Optional[ClassifiedToken]] = [None] * len(frags)

    self._mark_dates(frags, tokens)
    self._mark_amounts(frags, tokens)

    for i, frag in enumerate(frags):
      if tokens[i] is None:
        tokens[i] = ClassifiedToken(frag, self._text_kind(frag.text))

    if self.config.lenient:
      self._promote_date(tokens)
      self._promote_amount(tokens)

    return ClassifiedRow(row=row, tokens=tuple(tokens))

  # ------------------------------------------------------------------
  # Strict passes
  # ------------------------------------------------------------------
  def _date_token(self, frag, text: str) -> ClassifiedToken:
    return ClassifiedToken(frag, TokenKind.DATE, normalize_date(text, self.config.year))

  def _mark_dates(self, frags, tokens):
    found = False
    for i, frag in enumerate(frags):
      if match_date(frag.text):
        tokens[i] = self._date_token(frag, frag.text)
        found = True
    if found:
      return

    i = 0
    while i < len(frags):
      for width in _DATE_SPAN_WIDTHS:
        span = frags[i:i + width]
        if len(span) < width:
          continue
        joined = " ".join(f.text.strip() for f in span)
        if match_date(joined):
          for j, frag in enumerate(span):
            tokens[i + j] = self._date_token(frag, joined)
          i += width
          break
      else:
        i += 1

  def _mark_amounts(self, frags, tokens):
    i = 0
    while i < len(frags):
      frag = frags[i]
      if tokens[i] is not None or not looks_like_amount(frag.text):
        i += 1
        continue

      text = frag.text
      suffix = i + 1 < len(frags) and tokens[i + 1] is None and SUFFIX_RE.fullmatch(frags[i + 1].text.strip())
      if suffix:
        text = f"{text} {frags[i + 1].text.strip()}"

      value = normalize_amount(text)
      if value is not None and MIN_AMOUNT <= abs(value) <= self.config.max_amount:
        tokens[i] = ClassifiedToken(frag, TokenKind.AMOUNT, value)
        if suffix:
          tokens[i + 1] = ClassifiedToken(frags[i + 1], TokenKind.UNKNOWN)
          i += 1
      i += 1

  @staticmethod
  def _text_kind(text: str) -> TokenKind:
    t = text.strip()
    if len(t) <= 1 or t.isdigit() or SHORT_CODE_RE.fullmatch(t):
      return TokenKind.UNKNOWN
    return TokenKind.DESCRIPTION

  # ------------------------------------------------------------------
  # Lenient fallbacks
  # ------------------------------------------------------------------
  def _promote_date(self, tokens):
    if any(t.kind is TokenKind.DATE for t in tokens):
      return
    for i, tok in enumerate(tokens):
      text = tok.text.strip()
      if tok.kind is TokenKind.AMOUNT or not 2 <= len(text) <= 10:
        continue
      # Bare decimals are left for the amount fallback.
      if DECIMAL_RE.fullmatch(text):
        continue
      if any(ch.isdigit() for ch in text):
        tokens[i] = ClassifiedToken(tok.fragment, TokenKind.DATE, normalize_date(text, self.config.year), promoted=True)
        logger.debug(f"Promoted {text!r} to date")
        return

  def _promote_amount(self, tokens):
    if any(t.kind is TokenKind.AMOUNT for t in tokens):
      return
    for i, tok in enumerate(tokens):
      text = tok.text.strip()
      if tok.kind is TokenKind.DATE or not DECIMAL_RE.fullmatch(text):
        continue
      value = normalize_amount(text)
      if value is not None and MIN_AMOUNT <= abs(value) <= self.config.max_amount:
        tokens[i] = ClassifiedToken(tok.fragment, TokenKind.AMOUNT, value, promoted=True)
        logger.debug(f"Promoted {text!r} to amount")
        return
