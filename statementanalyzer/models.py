"""Data containers shared by every stage of the extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

MAX_DESCRIPTION_LENGTH = 100
MIN_AMOUNT = 0.01

CATEGORIES = (
  "Housing",
  "Insurance",
  "Medical",
  "Transport",
  "Food & Dining",
  "Utilities",
  "Banking",
  "Investment",
  "Shopping",
  "Entertainment",
  "Professional",
)
OTHER_CATEGORY = "Other"
INCOME_CATEGORY = "Income"
UNKNOWN_DATE = "Unknown"


@dataclass(frozen=True)
class TextFragment:
  """An atomic span of extracted text and its position on the page.

  ``y`` grows towards the top of the page, so the first line of a page has the
  largest ``y``.
  """

  text: str
  x: float
  y: float
  width: float = 0
  height: float = 0


@dataclass(frozen=True)
class Row:
  """Fragments judged to lie on one visual statement line, left to right."""

  fragments: Tuple[TextFragment, ...]
  page: int = 1
  index: int = 1

  @property
  def text(self) -> str:
    return " ".join(f.text.strip() for f in self.fragments if f.text.strip())

  def __len__(self):
    return len(self.fragments)


class TokenKind(Enum):
  DATE = "date"
  AMOUNT = "amount"
  DESCRIPTION = "description"
  UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClassifiedToken:
  """A fragment tagged by the token classifier.

  ``value`` holds the parsed amount (float) for amounts and the ISO date (or
  the raw text when it could not be parsed) for dates. ``promoted`` marks
  tokens produced by a lenient-mode fallback.
  """

  fragment: TextFragment
  kind: TokenKind
  value: Any = None
  promoted: bool = False

  @property
  def text(self) -> str:
    return self.fragment.text


@dataclass(frozen=True)
class ClassifiedRow:
  row: Row
  tokens: Tuple[ClassifiedToken, ...] = ()
  rejected: Optional[str] = None

  def of_kind(self, kind: TokenKind) -> List[ClassifiedToken]:
    return [t for t in self.tokens if t.kind is kind]

  @property
  def dates(self) -> List[ClassifiedToken]:
    return self.of_kind(TokenKind.DATE)

  @property
  def amounts(self) -> List[ClassifiedToken]:
    return self.of_kind(TokenKind.AMOUNT)

  @property
  def descriptions(self) -> List[ClassifiedToken]:
    return self.of_kind(TokenKind.DESCRIPTION)


class Direction(Enum):
  CREDIT = "credit"
  DEBIT = "debit"

  @classmethod
  def for_amount(cls, amount: float) -> "Direction":
    return cls.CREDIT if amount >= 0 else cls.DEBIT


@dataclass(frozen=True)
class TransactionCandidate:
  """A raw transaction emitted by the row reducer, before classification."""

  date: str
  description: str
  amount: float
  direction: Direction
  source_ref: str = ""

  def __post_init__(self):
    if abs(self.amount) < MIN_AMOUNT:
      raise ValueError(f"amount below {MIN_AMOUNT}: {self.amount!r}")
    if self.direction is not Direction.for_amount(self.amount):
      raise ValueError(f"direction {self.direction.value} does not match amount {self.amount}")
    if len(self.description) > MAX_DESCRIPTION_LENGTH:
      raise ValueError("description longer than %d characters" % MAX_DESCRIPTION_LENGTH)


@dataclass(frozen=True)
class Transaction:
  """A classified transaction. Never mutated; corrections replace it."""

  date: str
  description: str
  amount: float
  direction: Direction
  source_ref: str
  category: str
  is_income: bool
  is_transfer: bool
  is_manual: bool = False

  def __post_init__(self):
    if self.direction is not Direction.for_amount(self.amount):
      raise ValueError(f"direction {self.direction.value} does not match amount {self.amount}")
    if self.is_transfer and self.is_income:
      raise ValueError("a transfer can never be income")
    if self.is_income != (self.category == INCOME_CATEGORY):
      raise ValueError(f"category {self.category!r} inconsistent with is_income={self.is_income}")
    if not self.is_income and self.category not in CATEGORIES and self.category != OTHER_CATEGORY:
      raise ValueError(f"unknown category: {self.category!r}")

  @property
  def key(self) -> Tuple[str, str, float]:
    return (self.date, self.description, self.amount)

  def to_dict(self) -> Dict[str, Any]:
    return {
      "date": self.date,
      "description": self.description,
      "amount": self.amount,
      "direction": self.direction.value,
      "category": self.category,
      "is_income": self.is_income,
      "is_transfer": self.is_transfer,
      "is_manual": self.is_manual,
      "source_ref": self.source_ref,
    }


# A decoded page: positioned fragments, or a flat text blob in degraded mode.
Page = Union[List[TextFragment], str]


@dataclass(frozen=True)
class StatementFile:
  """Raw bytes of an uploaded statement and the name it was uploaded under."""

  name: str
  data: bytes

  @classmethod
  def from_path(cls, path: Union[str, Path]) -> "StatementFile":
    p = Path(path)
    return cls(name=p.name, data=p.read_bytes())


@dataclass(frozen=True)
class FileReport:
  name: str
  status: str
  transaction_count: int = 0
  error: Optional[str] = None

  @property
  def failed(self) -> bool:
    return self.status == "failed"


@dataclass
class IngestResult:
  transactions: List[Transaction] = field(default_factory=list)
  errors: List[str] = field(default_factory=list)
  reports: List[FileReport] = field(default_factory=list)
