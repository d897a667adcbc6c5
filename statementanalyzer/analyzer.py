"""Statement analyzer: decoded pages in, classified transactions out."""

import logging
from typing import Callable, Iterable, List, Optional, Sequence

from .classify import classify_all, deduplicate
from .config import ExtractionConfig
from .geometry import group_rows, rows_from_text
from .models import FileReport, IngestResult, Page, Row, StatementFile, TextFragment, Transaction, TransactionCandidate
from .reducer import reduce_row
from .tokens import TokenClassifier

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


def describe_error(name: str, exc: Exception) -> str:
  """Human-readable message for a statement that could not be read."""
  detail = str(exc).strip() or exc.__class__.__name__
  return f"{name}: could not read statement ({detail})"


class StatementAnalyzer:
  """Runs the extraction pipeline over decoded statement pages.

  The decoder is supplied by the hosting application and must expose
  ``decode(StatementFile) -> List[Page]``, where each page is either a list
  of ``TextFragment`` or, when positions are unavailable, a text blob. The
  analyzer itself holds no accumulated state; see ``TransactionStore``.
  """

  def __init__(self, decoder=None, config: Optional[ExtractionConfig] = None):
    self.decoder = decoder
    self.config = config or ExtractionConfig()
    self.classifier = TokenClassifier(self.config)

  # ------------------------------------------------------------------
  # Page level
  # ------------------------------------------------------------------
  def _reduce_rows(self, rows: Iterable[Row]) -> List[TransactionCandidate]:
    candidates: List[TransactionCandidate] = []
    rejected = 0
    for row in rows:
      classified = self.classifier.classify(row)
      if classified.rejected:
        rejected += 1
        continue
      candidates.extend(reduce_row(classified))
    logger.debug(f"{len(candidates)} candidates, {rejected} rows rejected")
    return candidates

  def parse_page(self, fragments: Sequence[TextFragment], page: int = 1) -> List[TransactionCandidate]:
    rows = group_rows(fragments, tolerance=self.config.row_tolerance, page=page)
    return self._reduce_rows(rows)

  def parse_text(self, text: str, page: int = 1) -> List[TransactionCandidate]:
    return self._reduce_rows(rows_from_text(text, page=page))

  def parse_pages(self, pages: Sequence[Page]) -> List[TransactionCandidate]:
    candidates: List[TransactionCandidate] = []
    for page_num, page in enumerate(pages, start=1):
      if isinstance(page, str):
        logger.info(f"Processing page {page_num} as plain text")
        found = self.parse_text(page, page=page_num)
      else:
        logger.info(f"Processing page {page_num} ({len(page)} fragments)")
        found = self.parse_page(page, page=page_num)
      logger.info(f"Page {page_num}: {len(found)} transaction candidates")
      candidates.extend(found)
    return candidates

  def extract(self, pages: Sequence[Page]) -> List[Transaction]:
    """Classified, de-duplicated transactions for one decoded document."""
    return deduplicate(classify_all(self.parse_pages(pages)))

  # ------------------------------------------------------------------
  # Batch level
  # ------------------------------------------------------------------
  def convert_single(self, statement: StatementFile) -> List[Transaction]:
    if self.decoder is None:
      raise RuntimeError("StatementAnalyzer needs a decoder to read files")
    pages = self.decoder.decode(statement)
    return self.extract(pages)

  def ingest(self, files: Sequence[StatementFile], progress_callback: Optional[ProgressCallback] = None) -> IngestResult:
    """Process a batch of files one after another.

    A file that fails to decode contributes one error string and does not
    stop the batch. A file that decodes but yields no transactions is a
    success with a count of zero.
    """
    if self.decoder is None:
      raise RuntimeError("StatementAnalyzer needs a decoder to read files")
    result = IngestResult()
    batch: List[Transaction] = []
    total_files = len(files)

    for i, statement in enumerate(files):
      if progress_callback:
        progress_callback(i * 100 // max(total_files, 1), f"Processing {statement.name}...")

      try:
        found = self.convert_single(statement)
      except Exception as e:
        message = describe_error(statement.name, e)
        logger.error(f"Error processing {statement.name}: {e}")
        result.errors.append(message)
        result.reports.append(FileReport(statement.name, "failed", error=message))
        continue

      if not found:
        logger.info(f"No transactions found in {statement.name}")
      result.reports.append(FileReport(statement.name, "parsed", transaction_count=len(found)))
      batch.extend(found)

    result.transactions = deduplicate(batch)
    if progress_callback:
      progress_callback(100, "Processing complete!")
    logger.info(f"Batch of {total_files} files: {len(result.transactions)} transactions, {len(result.errors)} errors")
    return result
