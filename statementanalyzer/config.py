"""Tunable extraction settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from datetime import date
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "STATEMENT_ANALYZER_"


@dataclass(frozen=True)
class ExtractionConfig:
  """Knobs for the accuracy/recall trade-offs of the pipeline.

  ``row_tolerance`` is the vertical distance (in page units) within which
  fragments are considered part of the same row. Statement renderers vary in
  baseline jitter, so lenient mode widens it.

  ``default_year`` is applied to year-less dates such as ``15 Mar``. When left
  as ``None`` the current calendar year is used.

  ``lenient`` enables the fallback promotions in the token classifier that
  trade precision for recall.
  """

  row_tolerance: float = 5
  min_row_chars: int = 5
  min_fragments: int = 2
  max_amount: float = 500_000
  lenient: bool = False
  default_year: Optional[int] = None

  @classmethod
  def strict(cls, **overrides) -> "ExtractionConfig":
    return cls(**overrides)

  @classmethod
  def lenient_mode(cls, **overrides) -> "ExtractionConfig":
    settings = {"row_tolerance": 8, "lenient": True}
    settings.update(overrides)
    return cls(**settings)

  @property
  def year(self) -> int:
    return self.default_year if self.default_year is not None else date.today().year

  def with_overrides(self, **overrides) -> "ExtractionConfig":
    return replace(self, **{k: v for k, v in overrides.items() if v is not None})

  @classmethod
  def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ExtractionConfig":
    """Build a config from ``STATEMENT_ANALYZER_*`` environment variables.

    ``STATEMENT_ANALYZER_LENIENT`` selects the lenient preset; the remaining
    variables (``ROW_TOLERANCE``, ``MIN_ROW_CHARS``, ``MIN_FRAGMENTS``,
    ``MAX_AMOUNT``, ``DEFAULT_YEAR``) override individual fields. Values that
    do not parse are ignored with a warning.
    """
    env = os.environ if environ is None else environ
    lenient = env.get(ENV_PREFIX + "LENIENT", "").strip().lower() in ("1", "true", "yes", "on")
    base = cls.lenient_mode() if lenient else cls.strict()

    overrides = {}
    for name, cast in (
      ("row_tolerance", float),
      ("min_row_chars", int),
      ("min_fragments", int),
      ("max_amount", float),
      ("default_year", int),
    ):
      raw = env.get(ENV_PREFIX + name.upper())
      if raw is None or not raw.strip():
        continue
      try:
        overrides[name] = cast(raw.strip())
      except ValueError:
        logger.warning(f"Ignoring invalid {ENV_PREFIX + name.upper()}={raw!r}")
    return base.with_overrides(**overrides)
