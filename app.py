import io
import logging
import os
import uuid
from datetime import date, datetime, timedelta

from flask import Flask, jsonify, request, send_file, session
from werkzeug.utils import secure_filename

from statementanalyzer.analytics import filter_by_date_range, summarize, to_dataframe
from statementanalyzer.analyzer import StatementAnalyzer
from statementanalyzer.config import ExtractionConfig
from statementanalyzer.decoders import AutoDecoder
from statementanalyzer.exceptions import ManualEntryError
from statementanalyzer.models import StatementFile
from statementanalyzer.store import TransactionStore

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ('.pdf', '.txt')
STORE_IDLE_TIMEOUT = timedelta(hours=2)


def create_app(decoder=None, config=None, clock=datetime.now):
  app = Flask(__name__)
  app.config['SECRET_KEY'] = os.environ.get('STATEMENT_ANALYZER_SECRET_KEY', 'change-this-in-production')
  app.config['MAX_CONTENT_LENGTH'] = 100 * 1024 * 1024  # 100MB max upload
  app.config['STORE_IDLE_TIMEOUT'] = STORE_IDLE_TIMEOUT

  analyzer = StatementAnalyzer(decoder=decoder or AutoDecoder(), config=config or ExtractionConfig.from_env())

  # One store per browser session, dropped once idle for STORE_IDLE_TIMEOUT
  stores = {}
  app.extensions['statement_stores'] = stores

  def cleanup_idle_stores(now):
    """Drop stores that have not been used within the idle timeout"""
    cutoff = now - app.config['STORE_IDLE_TIMEOUT']
    expired = [store_id for store_id, entry in stores.items() if entry['last_used'] < cutoff]
    for store_id in expired:
      del stores[store_id]
    if expired:
      logger.info(f"Dropped {len(expired)} idle session stores")

  def current_store():
    now = clock()
    cleanup_idle_stores(now)

    store_id = session.get('store_id')
    entry = stores.get(store_id) if store_id else None
    if entry is None:
      store_id = store_id or str(uuid.uuid4())
      session['store_id'] = store_id
      entry = stores[store_id] = {'store': TransactionStore(), 'last_used': now}
    entry['last_used'] = now
    return entry['store']

  def parse_day(name):
    value = request.args.get(name, '').strip()
    if not value:
      return None
    return date.fromisoformat(value)

  @app.route('/')
  def index():
    return jsonify({
      'success': True,
      'service': 'bank-statement-analyzer',
      'lenient': analyzer.config.lenient,
      'default_year': analyzer.config.year,
    })

  @app.route('/upload', methods=['POST'])
  def upload_files():
    if 'files' not in request.files:
      return jsonify({'success': False, 'error': 'No files uploaded'}), 400

    files = request.files.getlist('files')
    if not files or all(f.filename == '' for f in files):
      return jsonify({'success': False, 'error': 'No files selected'}), 400

    statements = []
    for file in files:
      if file and file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        statements.append(StatementFile(name=secure_filename(file.filename) or file.filename, data=file.read()))

    if not statements:
      return jsonify({'success': False, 'error': 'Please upload PDF statements'}), 400

    store = current_store()
    logger.info(f"Processing {len(statements)} uploaded files for session {session['store_id']}")
    result = analyzer.ingest(statements)
    added = store.merge(result.transactions)

    return jsonify({
      'success': True,
      'message': f'Extracted {len(result.transactions)} transactions ({len(added)} new)',
      'new_transactions': [tx.to_dict() for tx in added],
      'total_transactions': len(store),
      'files': [
        {'name': r.name, 'status': r.status, 'transactions': r.transaction_count, 'error': r.error}
        for r in result.reports
      ],
      'errors': result.errors,
    })

  @app.route('/transactions')
  def list_transactions():
    try:
      start, end = parse_day('start'), parse_day('end')
    except ValueError:
      return jsonify({'success': False, 'error': 'Dates must be YYYY-MM-DD'}), 400
    transactions = filter_by_date_range(current_store(), start, end)
    return jsonify({'success': True, 'transactions': [tx.to_dict() for tx in transactions]})

  @app.route('/transactions/manual', methods=['POST'])
  def add_manual_transaction():
    payload = request.get_json(silent=True) or {}
    store = current_store()
    try:
      entry = store.add_manual(
        payload.get('date', ''),
        payload.get('description', ''),
        payload.get('amount'),
        category=payload.get('category'),
        is_income=payload.get('is_income'),
        is_transfer=payload.get('is_transfer'),
      )
    except ManualEntryError as e:
      return jsonify({'success': False, 'error': str(e)}), 400

    if entry is None:
      return jsonify({'success': True, 'added': False, 'message': 'Duplicate of an existing transaction'})
    return jsonify({'success': True, 'added': True, 'transaction': entry.to_dict()}), 201

  @app.route('/summary')
  def get_summary():
    return jsonify({'success': True, 'summary': summarize(current_store())})

  @app.route('/download')
  def download_results():
    store = current_store()
    if not len(store):
      return jsonify({'error': 'No transactions to download'}), 404

    buffer = io.BytesIO()
    to_dataframe(store).to_csv(buffer, index=False)
    buffer.seek(0)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return send_file(
      buffer,
      as_attachment=True,
      download_name=f'transactions_{timestamp}_{len(store)}records.csv',
      mimetype='text/csv'
    )

  @app.route('/reset', methods=['POST'])
  def reset():
    current_store().clear()
    return jsonify({'success': True})

  return app


if __name__ == '__main__':
  logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
  create_app().run(debug=True, host='0.0.0.0', port=8080)
