import argparse
import logging
import os
import sys

from .analytics import export, summarize
from .analyzer import StatementAnalyzer
from .config import ENV_PREFIX, ExtractionConfig
from .decoders import DECODERS, get_decoder
from .models import StatementFile
from .store import TransactionStore


def build_parser():
  parser = argparse.ArgumentParser(description='Extract transactions from bank statements')
  parser.add_argument('files', nargs='+', help='Statement PDFs (or .txt files with extracted text)')
  parser.add_argument('--output', help='Write transactions to a .csv or .xlsx file')
  parser.add_argument('--lenient', action='store_true', help='Promote ambiguous tokens to dates/amounts')
  parser.add_argument('--year', type=int, help='Year assumed for dates printed without one')
  parser.add_argument('--tolerance', type=float, help='Vertical tolerance for grouping fragments into rows')
  parser.add_argument('--decoder', default='auto', choices=sorted(DECODERS), help='How files are decoded')
  parser.add_argument('--log-level', default='INFO', help='Logging level')
  return parser


def build_config(args, environ=None):
  """Environment settings, then command line flags on top."""
  env = dict(os.environ if environ is None else environ)
  if args.lenient:
    env[ENV_PREFIX + "LENIENT"] = "1"
  return ExtractionConfig.from_env(env).with_overrides(row_tolerance=args.tolerance, default_year=args.year)


def main(argv=None):
  args = build_parser().parse_args(argv)
  logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s | %(message)s")

  config = build_config(args)

  files = []
  errors = []
  for path in args.files:
    try:
      files.append(StatementFile.from_path(path))
    except OSError as e:
      errors.append(f"{path}: {e.strerror or e}")

  analyzer = StatementAnalyzer(decoder=get_decoder(args.decoder), config=config)
  store = TransactionStore()
  _, batch_errors = store.ingest(analyzer, files)
  errors.extend(batch_errors)

  for tx in store:
    print(f"{tx.date:<12} {tx.description[:40]:<40} {tx.amount:>12.2f}  {tx.category}")

  summary = summarize(store)
  print(f"\n{summary['transaction_count']} transactions | income {summary['total_income']:.2f} | "
        f"expenses {summary['total_expenses']:.2f} | projected annual income {summary['projected_annual_income']:.2f}")

  if args.output:
    export(store, args.output)

  for message in errors:
    print(f"ERROR: {message}", file=sys.stderr)
  # Each unreadable input contributes exactly one error
  return 1 if len(errors) == len(args.files) else 0


if __name__ == '__main__':
  sys.exit(main())
