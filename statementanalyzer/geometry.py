"""Group positioned text fragments into visual rows.

Two entry points:

* ``group_rows`` clusters fragments that share a baseline (within a vertical
  tolerance) into rows, top of the page first, each row ordered left to
  right.
* ``rows_from_text`` is the degraded path for text without coordinates. Each
  line becomes a row of whitespace-separated tokens; a dated line may absorb
  the line(s) after it when they look like its wrapped continuation.
"""

import logging
from typing import Iterable, List

from .models import Row, TextFragment
from .patterns import is_header_text, looks_like_amount, starts_with_date

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 5


def _make_row(fragments: List[TextFragment], page: int, index: int) -> Row:
  ordered = sorted(fragments, key=lambda f: f.x)
  return Row(fragments=tuple(ordered), page=page, index=index)


def group_rows(fragments: Iterable[TextFragment], tolerance: float = DEFAULT_TOLERANCE, page: int = 1) -> List[Row]:
  """Cluster ``fragments`` of one page into rows.

  Fragments are walked top to bottom (descending ``y``, ties broken by
  ``x``). A new row starts whenever a fragment sits more than ``tolerance``
  below the first fragment of the current row, so every fragment of a row is
  within ``tolerance`` of the row's anchor.
  """
  ordered = sorted(fragments, key=lambda f: (-f.y, f.x))
  rows: List[Row] = []
  current: List[TextFragment] = []

  for frag in ordered:
    if current and current[0].y - frag.y > tolerance:
      rows.append(_make_row(current, page, len(rows) + 1))
      current = []
    current.append(frag)

  if current:
    rows.append(_make_row(current, page, len(rows) + 1))

  logger.debug(f"Page {page}: grouped {len(ordered)} fragments into {len(rows)} rows")
  return rows


def _line_fragments(tokens: List[str], y: int) -> List[TextFragment]:
  return [TextFragment(text=t, x=i, y=y, width=len(t), height=1) for i, t in enumerate(tokens)]


def rows_from_text(text: str, page: int = 1, window: int = 2) -> List[Row]:
  """Approximate rows for a text blob with no coordinates.

  A line that starts with a date opens a row. Up to ``window - 1`` following
  lines are appended to it while the row has no amount yet, provided they do
  not start a new date and are not column headers. Every other line is a row
  of its own. Token order supplies the synthetic ``x``; line order supplies a
  descending synthetic ``y``.
  """
  lines = [ln.split() for ln in (text or "").splitlines()]
  lines = [toks for toks in lines if toks]
  total = len(lines)

  grouped: List[List[TextFragment]] = []
  open_lines = 0
  open_has_amount = False

  for i, tokens in enumerate(lines):
    y = total - i
    dated = starts_with_date(tokens)
    has_amount = any(looks_like_amount(t) for t in tokens)

    continues = (
      grouped
      and open_lines
      and open_lines < window
      and not open_has_amount
      and not dated
      and not is_header_text(" ".join(tokens))
    )
    if continues:
      offset = len(grouped[-1])
      # Keep the synthetic y of the opening line so the row stays flat.
      anchor_y = grouped[-1][0].y
      grouped[-1].extend(
        TextFragment(text=t, x=offset + j, y=anchor_y, width=len(t), height=1) for j, t in enumerate(tokens)
      )
      open_lines += 1
      open_has_amount = has_amount
      continue

    grouped.append(_line_fragments(tokens, y))
    open_lines = 1 if dated else 0
    open_has_amount = has_amount

  rows = [Row(fragments=tuple(frags), page=page, index=n) for n, frags in enumerate(grouped, start=1)]
  logger.debug(f"Page {page}: built {len(rows)} rows from {total} text lines")
  return rows
