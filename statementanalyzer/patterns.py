"""Pattern libraries: date shapes, amount shapes and keyword sets.

Everything here is data. The matching logic lives in ``tokens``, ``dates``,
``amounts`` and ``classify``.
"""

import re
from typing import List, NamedTuple, Optional, Pattern, Sequence, Tuple

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------
MONTHS_FULL = r"january|february|march|april|may|june|july|august|september|october|november|december"
MONTHS_ABBR = r"jan|feb|mar|apr|may|jun|jul|aug|sept|sep|oct|nov|dec"

MONTH_NUMBERS = {
  "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
  "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_ABBR = rf"(?P<month>{MONTHS_ABBR})\.?"
_FULL = rf"(?P<month>{MONTHS_FULL})"
_ANY_MONTH = rf"(?P<month>{MONTHS_FULL}|{MONTHS_ABBR})\.?"


class DatePattern(NamedTuple):
  name: str
  regex: Pattern
  has_year: bool


def _date(name: str, pattern: str, has_year: bool = True) -> DatePattern:
  return DatePattern(name, re.compile(pattern, re.IGNORECASE), has_year)


# Order matters: the first pattern that matches wins, for detection and for
# normalization alike. Numeric day/month ambiguity is always read day-first.
DATE_PATTERNS: Tuple[DatePattern, ...] = (
  _date("d_m_y", r"(?P<day>\d{1,2})[-/ ](?P<month>\d{1,2})[-/ ](?P<year>\d{4})"),
  _date("y_m_d", r"(?P<year>\d{4})[-/ ](?P<month>\d{1,2})[-/ ](?P<day>\d{1,2})"),
  _date("d_mmm_y", rf"(?P<day>\d{{1,2}})[ -]?{_ABBR}[ -]?(?P<year>\d{{4}})"),
  _date("mmm_d_y", rf"{_ANY_MONTH}[ -]?(?P<day>\d{{1,2}}),?[ ]?(?P<year>\d{{4}})"),
  _date("d_month_y", rf"(?P<day>\d{{1,2}})[ -]?{_FULL}[ -]?(?P<year>\d{{4}})"),
  _date("dd_mmm", rf"(?P<day>\d{{1,2}})[ -]?{_ANY_MONTH}", has_year=False),
  _date("d_m", r"(?P<day>\d{1,2})/(?P<month>\d{1,2})", has_year=False),
)


def match_date(text: str) -> Optional[Tuple[DatePattern, "re.Match"]]:
  """Return the first date pattern that matches the whole of ``text``."""
  candidate = text.strip().rstrip(",.")
  if not candidate:
    return None
  for pattern in DATE_PATTERNS:
    m = pattern.regex.fullmatch(candidate)
    if m:
      return pattern, m
  return None


def starts_with_date(tokens: Sequence[str]) -> bool:
  """True when the first one to three tokens form a date."""
  for width in (1, 2, 3):
    if len(tokens) >= width and match_date(" ".join(tokens[:width])):
      return True
  return False


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------
CURRENCY_SYMBOLS = "R$€£¥"

AMOUNT_RE = re.compile(
  r"""
  [+-]?\s*
  (?:[R$€£¥]\s*)?
  [+-]?\s*
  (?:\d{1,3}(?:[, ]\d{3})+|\d+)
  (?:\.\d{2})?
  (?:\s*-)?
  (?:\s*(?:CR|DR))?
  """,
  re.IGNORECASE | re.VERBOSE,
)

# A credit/debit marker printed in its own column next to the amount.
SUFFIX_RE = re.compile(r"CR|DR", re.IGNORECASE)

# Bare "digits.digits" shape used by the lenient amount fallback.
DECIMAL_RE = re.compile(r"\d+\.\d+")

# Codes such as "CR", "ZAR" or "EFT" are never descriptions on their own.
SHORT_CODE_RE = re.compile(r"[A-Za-z]{1,3}")


def looks_like_amount(text: str) -> bool:
  return bool(AMOUNT_RE.fullmatch(text.strip()))


# ---------------------------------------------------------------------------
# Row-level keyword sets
# ---------------------------------------------------------------------------
HEADER_KEYWORDS = (
  "date",
  "description",
  "amount",
  "balance",
  "debit",
  "credit",
  "transaction",
  "reference",
  "details",
  "account",
  "statement",
  "opening",
  "closing",
  "brought forward",
  "carried forward",
)


def is_header_text(text: str) -> bool:
  low = text.lower()
  return any(k in low for k in HEADER_KEYWORDS)


# ---------------------------------------------------------------------------
# Classification keyword sets (matched against the upper-cased description)
# ---------------------------------------------------------------------------
TRANSFER_KEYWORDS = (
  "TRANSFER",
  "TRF",
  "TFRF",
  "TRANSF",
  "IB PAYMENT",
  "IB TRANSFER",
  "INTERNET BANKING",
  "INT ACNT",
  "INTERNAL",
  "INTER ACCOUNT",
  "FUND TRANSFER",
  "FUNDS TRANSFER",
  "OWN ACCOUNT",
  "BETWEEN ACCOUNTS",
  "PAYMENT TO",
  "PAYMENT FROM",
  "DEBIT ORDER REVERSAL",
  "CREDIT REVERSAL",
)

INCOME_KEYWORDS = (
  # employment
  "SALARY", "WAGE", "PAYROLL",
  # business
  "PAYMENT", "INVOICE", "CLIENT", "CONTRACT", "FREELANCE", "CONSULTING",
  "DEPOSIT", "CREDIT",
  # investment
  "DIVIDEND", "INTEREST", "RETURN", "INVESTMENT", "PROFIT",
  # government and refunds
  "GRANT", "PENSION", "REFUND", "SASSA", "UIF",
  # generic inflows
  "INWARD", "INCOMING", "RECEIPT", "RECEIVED",
)

# Company suffixes only count as whole words ("CC" must not match "ACCESS").
COMPANY_SUFFIX_RE = re.compile(r"\b(?:PTY|LTD|CC|LIMITED)\b")

EXPENSE_INDICATORS = ("FEE", "CHARGE", "DEBIT", "WITHDRAWAL", "PURCHASE", "BUY", "SHOP")

# Positive amounts above this are income unless they look like an expense.
UNCLASSIFIED_INCOME_THRESHOLD = 100

# First match wins, so the order of this list is policy.
CATEGORY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
  ("Housing", (
    "RENT", "BOND", "HOME LOAN", "MORTGAGE", "LEVY", "LEVIES", "BODY CORPORATE",
    "RATES AND TAXES", "PROPERTY", "ESTATE AGENT",
  )),
  ("Insurance", (
    "INSURANCE", "ASSURANCE", "OLD MUTUAL", "SANLAM", "MOMENTUM", "LIBERTY",
    "OUTSURANCE", "SANTAM", "HOLLARD", "MIWAY", "KING PRICE", "POLICY", "FUNERAL",
  )),
  ("Medical", (
    "MEDICAL", "MED AID", "DISCOVERY HEALTH", "BONITAS", "PHARMACY", "CLICKS",
    "DIS-CHEM", "DISCHEM", "DOCTOR", "HOSPITAL", "NETCARE", "MEDICLINIC",
    "DENTIST", "PATHCARE", "LANCET", "OPTOMETRIST", "SPECSAVERS",
  )),
  ("Transport", (
    "FUEL", "PETROL", "ENGEN", "SHELL", "SASOL", "CALTEX", "TOTALENERGIES",
    "UBER", "BOLT", "GAUTRAIN", "TAXI", "E-TOLL", "SANRAL", "PARKING",
    "TOLL", "CAR WASH", "AVIS", "EUROPCAR",
  )),
  ("Food & Dining", (
    "WOOLWORTHS", "PICK N PAY", "PNP", "CHECKERS", "SHOPRITE", "SPAR",
    "FOOD LOVER", "RESTAURANT", "CAFE", "COFFEE", "KFC", "MCDONALD", "NANDO",
    "STEERS", "WIMPY", "SPUR", "DEBONAIRS", "MR D", "GROCER", "BAKERY", "BUTCHER",
  )),
  ("Utilities", (
    "ELECTRICITY", "ESKOM", "PREPAID", "WATER", "MUNICIPAL", "CITY OF",
    "VODACOM", "MTN", "CELL C", "TELKOM", "AFRIHOST", "FIBRE", "AIRTIME",
    "INTERNET",
  )),
  ("Banking", (
    "FEE", "FEES", "CHARGE", "SERVICE FEE", "ADMIN", "ATM", "CASH WITHDRAWAL",
    "SMS NOTIFICATION", "OVERDRAFT", "BANK CHARGES",
  )),
  ("Investment", (
    "INVESTMENT", "UNIT TRUST", "SATRIX", "EASYEQUITIES", "EASY EQUITIES",
    "ETF", "ALLAN GRAY", "CORONATION", "RETIREMENT ANNUITY", "TAX FREE",
    "SHARES", "CRYPTO", "LUNO",
  )),
  ("Shopping", (
    "TAKEALOT", "MAKRO", "GAME STORES", "MR PRICE", "PEP STORES", "ACKERMANS",
    "EDGARS", "TRUWORTHS", "ZARA", "AMAZON", "CASH CRUSADERS", "BUILDERS",
    "INCREDIBLE CONNECTION", "SHOP", "STORE", "MALL", "BOUTIQUE",
  )),
  ("Entertainment", (
    "NETFLIX", "SHOWMAX", "DSTV", "SPOTIFY", "APPLE.COM", "YOUTUBE", "CINEMA",
    "STER KINEKOR", "NU METRO", "COMPUTICKET", "TICKETPRO", "STEAM",
    "PLAYSTATION", "XBOX", "VIRGIN ACTIVE", "PLANET FITNESS", "GYM",
  )),
  ("Professional", (
    "ACCOUNTANT", "ATTORNEY", "LEGAL", "CONSULT", "SOFTWARE", "SUBSCRIPTION",
    "MICROSOFT", "GOOGLE", "ADOBE", "ZOOM", "SARS", "EFILING", "COURIER",
    "OFFICE", "STATIONERY", "CIPC",
  )),
]
