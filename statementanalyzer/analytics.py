"""Tabular views, totals and the projected annual income figure."""

import logging
import os
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .dates import is_iso_date
from .models import Transaction

logger = logging.getLogger(__name__)

COLUMNS = [
  "date",
  "description",
  "amount",
  "direction",
  "category",
  "is_income",
  "is_transfer",
  "is_manual",
  "source_ref",
]


def to_dataframe(transactions: Iterable[Transaction]) -> pd.DataFrame:
  rows = [tx.to_dict() for tx in transactions]
  return pd.DataFrame(rows, columns=COLUMNS)


def months_observed(transactions: Iterable[Transaction]) -> int:
  """Number of distinct calendar months among parsed (ISO) dates."""
  return len({tx.date[:7] for tx in transactions if is_iso_date(tx.date)})


def income_total(transactions: Iterable[Transaction]) -> float:
  return round(sum(tx.amount for tx in transactions if tx.is_income and not tx.is_transfer), 2)


def project_annual_income(transactions: Iterable[Transaction]) -> float:
  """Income scaled to a year: total income x 12 / distinct months observed.

  When income exists but no date could be parsed, the observed period is
  taken to be one month.
  """
  transactions = list(transactions)
  total = income_total(transactions)
  if not total:
    return 0.0
  months = max(months_observed(transactions), 1)
  return round(total * 12 / months, 2)


def filter_by_date_range(transactions: Iterable[Transaction], start: Optional[date] = None,
                         end: Optional[date] = None) -> List[Transaction]:
  """Transactions whose parsed date falls within ``[start, end]``.

  Transactions with an unparsed date are excluded whenever a bound is given.
  """
  transactions = list(transactions)
  if start is None and end is None:
    return transactions
  kept = []
  for tx in transactions:
    if not is_iso_date(tx.date):
      continue
    d = date.fromisoformat(tx.date)
    if start is not None and d < start:
      continue
    if end is not None and d > end:
      continue
    kept.append(tx)
  return kept


def summarize(transactions: Iterable[Transaction]) -> Dict[str, Any]:
  """Headline totals for a set of transactions."""
  transactions = list(transactions)
  df = to_dataframe(transactions)
  if df.empty:
    return {
      "transaction_count": 0,
      "total_income": 0.0,
      "total_expenses": 0.0,
      "total_transfers": 0.0,
      "net": 0.0,
      "by_category": {},
      "months_observed": 0,
      "projected_annual_income": 0.0,
    }

  income = df[df["is_income"] & ~df["is_transfer"]]
  transfers = df[df["is_transfer"]]
  expenses = df[~df["is_income"] & ~df["is_transfer"] & (df["amount"] < 0)]
  by_category = expenses.groupby("category")["amount"].sum().abs().round(2).sort_values(ascending=False)

  total_income = round(float(income["amount"].sum()), 2)
  total_expenses = round(float(-expenses["amount"].sum()), 2)
  return {
    "transaction_count": int(len(df)),
    "total_income": total_income,
    "total_expenses": total_expenses,
    "total_transfers": round(float(transfers["amount"].abs().sum()), 2),
    "net": round(total_income - total_expenses, 2),
    "by_category": {k: float(v) for k, v in by_category.items()},
    "months_observed": months_observed(transactions),
    "projected_annual_income": project_annual_income(transactions),
  }


def export(transactions: Iterable[Transaction], path: str) -> str:
  """Write transactions to ``.csv`` or ``.xlsx`` depending on the extension."""
  df = to_dataframe(transactions)
  ext = os.path.splitext(path)[1].lower()
  if ext == ".xlsx":
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
      df.to_excel(writer, sheet_name="Transactions", index=False)
  else:
    df.to_csv(path, index=False)
  logger.info(f"Saved {len(df)} transactions ➜ {path}")
  return path
