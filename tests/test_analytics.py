import os
import tempfile
import unittest
from datetime import date

import pandas as pd

from statementanalyzer.analytics import (
  COLUMNS,
  export,
  filter_by_date_range,
  months_observed,
  project_annual_income,
  summarize,
  to_dataframe,
)
from statementanalyzer.classify import classify_candidate
from statementanalyzer.models import Direction, TransactionCandidate


def tx(date_, description, amount):
  return classify_candidate(TransactionCandidate(
    date=date_,
    description=description,
    amount=amount,
    direction=Direction.for_amount(amount),
    source_ref='Page 1, Row 1',
  ))


TRANSACTIONS = [
  tx('2025-03-01', 'SALARY ACME PTY', 25000.0),
  tx('2025-03-02', 'MONTHLY SERVICE FEE', -65.0),
  tx('2025-03-15', 'WOOLWORTHS SANDTON', -450.0),
  tx('2025-03-18', 'IB TRANSFER TO SAVINGS', -2000.0),
  tx('2025-04-01', 'SALARY ACME PTY', 25000.0),
  tx('2025-04-03', 'CHECKERS RANDBURG', -100.0),
]


class SummaryTest(unittest.TestCase):
  def test_summarize(self):
    summary = summarize(TRANSACTIONS)
    self.assertEqual(summary['transaction_count'], 6)
    self.assertEqual(summary['total_income'], 50000.0)
    self.assertEqual(summary['total_expenses'], 615.0)
    self.assertEqual(summary['total_transfers'], 2000.0)
    self.assertEqual(summary['net'], 49385.0)
    self.assertEqual(summary['by_category'], {'Food & Dining': 550.0, 'Banking': 65.0})
    self.assertEqual(list(summary['by_category']), ['Food & Dining', 'Banking'])
    self.assertEqual(summary['months_observed'], 2)
    self.assertEqual(summary['projected_annual_income'], 300000.0)

  def test_summarize_empty(self):
    summary = summarize([])
    self.assertEqual(summary['transaction_count'], 0)
    self.assertEqual(summary['by_category'], {})
    self.assertEqual(summary['projected_annual_income'], 0.0)

  def test_projection_without_income(self):
    self.assertEqual(project_annual_income([tx('2025-03-15', 'SPAR', -20.0)]), 0.0)

  def test_projection_with_unparsed_dates_assumes_one_month(self):
    txs = [tx('Unknown', 'SALARY', 1000.0), tx('Unknown', 'BONUS PAYMENT', 500.0)]
    self.assertEqual(months_observed(txs), 0)
    self.assertEqual(project_annual_income(txs), 18000.0)

  def test_transfers_do_not_count_as_income(self):
    txs = [tx('2025-03-01', 'FUND TRANSFER FROM SAVINGS', 3000.0)]
    self.assertEqual(project_annual_income(txs), 0.0)


class FilterTest(unittest.TestCase):
  def test_date_range(self):
    kept = filter_by_date_range(TRANSACTIONS, date(2025, 3, 10), date(2025, 3, 31))
    self.assertEqual([t.description for t in kept], ['WOOLWORTHS SANDTON', 'IB TRANSFER TO SAVINGS'])

  def test_open_ended_ranges(self):
    self.assertEqual(len(filter_by_date_range(TRANSACTIONS, start=date(2025, 4, 1))), 2)
    self.assertEqual(len(filter_by_date_range(TRANSACTIONS, end=date(2025, 3, 1))), 1)

  def test_no_bounds_keeps_everything(self):
    txs = TRANSACTIONS + [tx('Unknown', 'SPAR', -20.0)]
    self.assertEqual(len(filter_by_date_range(txs)), 7)

  def test_unparsed_dates_excluded_when_bounded(self):
    txs = [tx('Unknown', 'SPAR', -20.0)]
    self.assertEqual(filter_by_date_range(txs, start=date(2000, 1, 1)), [])


class ExportTest(unittest.TestCase):
  def test_dataframe_columns(self):
    df = to_dataframe(TRANSACTIONS)
    self.assertEqual(list(df.columns), COLUMNS)
    self.assertEqual(len(df), 6)
    self.assertEqual(list(to_dataframe([]).columns), COLUMNS)

  def test_export_csv(self):
    with tempfile.TemporaryDirectory() as tmp:
      path = export(TRANSACTIONS, os.path.join(tmp, 'out.csv'))
      with open(path) as f:
        first_line = f.readline().strip()
      self.assertEqual(first_line, ','.join(COLUMNS))
      df = pd.read_csv(path)
      self.assertEqual(df['amount'].tolist(), [t.amount for t in TRANSACTIONS])

  def test_export_xlsx(self):
    with tempfile.TemporaryDirectory() as tmp:
      path = export(TRANSACTIONS, os.path.join(tmp, 'out.xlsx'))
      df = pd.read_excel(path, sheet_name='Transactions', engine='openpyxl')
      self.assertEqual(list(df.columns), COLUMNS)
      self.assertEqual(df['description'].tolist()[:2], ['SALARY ACME PTY', 'MONTHLY SERVICE FEE'])


if __name__ == '__main__':
  unittest.main()
