"""PDF and text decoders handed to ``StatementAnalyzer`` by the host application.

Every decoder exposes ``decode(StatementFile) -> List[Page]``. Coordinates are
rounded to whole units and flipped so that ``y`` grows towards the top of the
page, which is the orientation the row grouper expects.
"""

import io
import logging
from typing import Dict, List

from .exceptions import DecodeError
from .models import Page, StatementFile, TextFragment

logger = logging.getLogger(__name__)


class PdfPlumberDecoder:
  """Positioned words via pdfplumber.

  Words are split on blanks even inside one text run, so a line drawn as a
  single string still yields one fragment per word. Split dates such as
  ``15 Mar 2025`` are rejoined by the token classifier. A page with no
  extractable words falls back to its plain text.
  """

  def __init__(self, x_tolerance: float = 3, y_tolerance: float = 3):
    self.x_tolerance = x_tolerance
    self.y_tolerance = y_tolerance

  def decode(self, statement: StatementFile) -> List[Page]:
    import pdfplumber

    pages: List[Page] = []
    with pdfplumber.open(io.BytesIO(statement.data)) as pdf:
      for page_num, page in enumerate(pdf.pages, start=1):
        words = page.extract_words(
          x_tolerance=self.x_tolerance,
          y_tolerance=self.y_tolerance,
        )
        if words:
          height = float(page.height)
          pages.append([
            TextFragment(
              text=w["text"],
              x=round(w["x0"]),
              y=round(height - w["top"]),
              width=round(w["x1"] - w["x0"]),
              height=round(w["bottom"] - w["top"]),
            )
            for w in words
            if w["text"].strip()
          ])
        else:
          text = page.extract_text() or ""
          logger.info(f"{statement.name} page {page_num}: no positioned words, using plain text")
          pages.append(text)

    if not pages:
      raise DecodeError("document has no pages")
    return pages


class PyMuPDFDecoder:
  """Positioned words via PyMuPDF (``fitz``)."""

  def decode(self, statement: StatementFile) -> List[Page]:
    import fitz  # PyMuPDF

    try:
      doc = fitz.open(stream=statement.data, filetype="pdf")
    except Exception as e:
      raise DecodeError(f"not a readable PDF: {e}") from e

    with doc:
      if doc.needs_pass:
        raise DecodeError("document is password protected")
      pages: List[Page] = []
      for page in doc:
        height = page.rect.height
        pages.append([
          TextFragment(
            text=text,
            x=round(x0),
            y=round(height - y0),
            width=round(x1 - x0),
            height=round(y1 - y0),
          )
          for x0, y0, x1, y1, text, *_ in page.get_text("words")
          if text.strip()
        ])

    if not pages:
      raise DecodeError("document has no pages")
    return pages


class PlainTextDecoder:
  """Decodes already-extracted statement text (one page per form feed)."""

  def __init__(self, encoding: str = "utf-8"):
    self.encoding = encoding

  def decode(self, statement: StatementFile) -> List[Page]:
    try:
      text = statement.data.decode(self.encoding)
    except UnicodeDecodeError as e:
      raise DecodeError(f"not {self.encoding} text") from e
    return text.split("\f")


class AutoDecoder:
  """Chooses a decoder by file extension: ``.txt`` as text, anything else as PDF."""

  def __init__(self, pdf_decoder=None, text_decoder=None):
    self.pdf_decoder = pdf_decoder or PdfPlumberDecoder()
    self.text_decoder = text_decoder or PlainTextDecoder()

  def decode(self, statement: StatementFile) -> List[Page]:
    if statement.name.lower().endswith(".txt"):
      return self.text_decoder.decode(statement)
    return self.pdf_decoder.decode(statement)


DECODERS: Dict[str, type] = {
  "auto": AutoDecoder,
  "pdfplumber": PdfPlumberDecoder,
  "pymupdf": PyMuPDFDecoder,
  "text": PlainTextDecoder,
}


def get_decoder(name: str = "auto"):
  try:
    return DECODERS[name]()
  except KeyError:
    raise ValueError(f"Unknown decoder {name!r}. Choose from: {', '.join(sorted(DECODERS))}") from None
