#!/usr/bin/env python3
"""
Flask JSON front end for the inverted search database.
"""

import sys
import time

from flask import Flask, jsonify, request

from invsearch.database import Database
from invsearch.errors import AccessError, DatabaseStateError, ValidationError
from invsearch.paths import DEFAULT_BACKUP_PATH
from invsearch.registry import FileRegistry

app = Flask(__name__)

# Global database instance
database = None


def initialize_database(file_names, quiet: bool = False):
    """Validate the candidate files and set up a fresh database session."""
    global database
    registry = FileRegistry.from_candidates(file_names, quiet=quiet)
    database = Database(registry, quiet=quiet)
    print(f"[app] database initialized with {len(registry)} file(s)", file=sys.stderr)
    return database


def _error(message, status):
    return jsonify({'error': message}), status


@app.errorhandler(DatabaseStateError)
def handle_state_error(e):
    return _error(str(e), 409)


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return _error(str(e), 400)


@app.errorhandler(AccessError)
def handle_access_error(e):
    return _error(str(e), 404)


@app.before_request
def require_database():
    if request.endpoint not in (None, 'health', 'static') and database is None:
        return _error('Database not initialized', 500)


@app.route('/health')
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'database_initialized': database is not None,
        'database_ready': database is not None and database.ready,
    })


@app.route('/create', methods=['POST'])
def create():
    """Build the index from the registered files."""
    report = database.create()
    return jsonify(report.to_dict())


@app.route('/search')
def search():
    """Exact-word lookup."""
    word = request.args.get('word', '').strip()
    if not word:
        return _error('Empty query', 400)

    start_time = time.perf_counter()
    result = database.search(word)
    search_time = (time.perf_counter() - start_time) * 1000  # ms

    payload = result.to_dict()
    payload['searchTime'] = search_time
    return jsonify(payload)


@app.route('/database')
def display():
    """All entries, in the order they would be saved."""
    rows = database.rows()
    return jsonify({'rows': rows, 'totalWords': len(rows)})


@app.route('/save', methods=['POST'])
def save_backup():
    data = request.get_json(silent=True) or {}
    path = data.get('path') or DEFAULT_BACKUP_PATH
    records = database.save(path)
    return jsonify({'path': path, 'records': records})


@app.route('/load', methods=['POST'])
def load_backup():
    data = request.get_json(silent=True) or {}
    path = data.get('path')
    if not path:
        return _error('Missing backup path', 400)
    report = database.update(path)
    return jsonify(report.to_dict())


if __name__ == '__main__':
    initialize_database(sys.argv[1:])
    app.run(debug=True, host='0.0.0.0', port=5001)
