"""
Receipt Print Service - Main Application
========================================

HTTP front for printing receipts on USB ESC/POS printers.

Run: python -m receipt_print_service
"""

import logging
from typing import Any, Optional

from flask import Flask, request, jsonify
from flask_cors import CORS

from . import __version__
from .config import PORT, HOST, DEBUG, CORS_ORIGINS, PRINT_TIMEOUT, LOG_LEVEL
from .exceptions import EnumerationError, PrintError
from .logging_config import setup_logging
from .models import ReceiptContent
from .orchestrator import JobOrchestrator

logger = logging.getLogger(__name__)


class InvalidPrinterId(ValueError):
    pass


def _parse_printer_id(value: Any) -> Optional[int]:
    """printerId from the request body; None selects the first printer."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidPrinterId(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text.startswith('-') else text
        if digits.isdecimal():
            return int(text)
    raise InvalidPrinterId(value)


# =============================================================================
# Application Setup
# =============================================================================

def create_app(orchestrator: Optional[JobOrchestrator] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        orchestrator: Job orchestrator to use (a USB-backed one by default)
    """
    app = Flask(__name__)
    CORS(app, origins=CORS_ORIGINS, methods=['GET', 'POST'], supports_credentials=True)

    jobs = orchestrator or JobOrchestrator()
    app.extensions['receipt_print_orchestrator'] = jobs

    # =========================================================================
    # Health & Info Endpoints
    # =========================================================================

    @app.route('/api', methods=['GET'])
    def api_info():
        """API info (JSON)."""
        return jsonify({
            'service': 'Receipt Print Service',
            'version': __version__,
            'status': 'running',
            'endpoints': {
                'health': '/api/health',
                'printers': '/api/printers',
                'print': '/api/print',
            }
        })

    @app.route('/api/health', methods=['GET'])
    def health():
        """Health check."""
        return jsonify({'status': 'ok', 'message': 'ESC/POS printer server is running'})

    # =========================================================================
    # Printers
    # =========================================================================

    @app.route('/api/printers', methods=['GET'])
    def list_printers():
        """List attached USB printers."""
        try:
            devices = jobs.list_printers()
        except EnumerationError as e:
            logger.error("Error finding printers: %s", e)
            return jsonify({'success': False, 'error': str(e)}), 500

        if not devices:
            return jsonify({
                'success': True,
                'printers': [],
                'message': 'No USB printers found'
            })

        return jsonify({
            'success': True,
            'printers': [d.to_dict() for d in devices]
        })

    # =========================================================================
    # Printing
    # =========================================================================

    @app.route('/api/print', methods=['POST'])
    def print_receipt():
        """Print a receipt on the selected (or first) printer."""
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            data = {}

        content = ReceiptContent.from_dict(data.get('content'))
        if content.is_empty():
            return jsonify({'success': False, 'error': 'No content provided'}), 400

        try:
            printer_index = _parse_printer_id(data.get('printerId'))
        except InvalidPrinterId:
            return jsonify({'success': False, 'error': 'printerId must be an integer'}), 400

        try:
            job = jobs.print_job(content, printer_index)
        except PrintError as e:
            return jsonify({'success': False, 'error': e.message}), e.status_code

        return jsonify({
            'success': True,
            'message': 'Print job sent successfully',
            'job': job.to_dict(),
        })

    # =========================================================================
    # Errors
    # =========================================================================

    @app.errorhandler(Exception)
    def unexpected_error(e):
        code = getattr(e, 'code', None)
        if isinstance(code, int) and code < 500:
            return jsonify({'success': False, 'error': getattr(e, 'description', str(e))}), code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({'success': False, 'error': str(e)}), 500

    return app


# =============================================================================
# Main
# =============================================================================

def main():
    """Run the service."""
    setup_logging(LOG_LEVEL)
    app = create_app()

    print("=" * 60)
    print("  Receipt Print Service")
    print("=" * 60)
    print(f"  Version: {__version__}")
    print(f"  Port: {PORT}")
    print(f"  Print timeout: {PRINT_TIMEOUT:g}s")
    print(f"  CORS origins: {', '.join(CORS_ORIGINS) or '-'}")
    print("=" * 60)
    print("  API Endpoints:")
    print("    GET  /api                             - Service info")
    print("    GET  /api/health                      - Health check")
    print("    GET  /api/printers                    - List USB printers")
    print("    POST /api/print                       - Print a receipt")
    print("=" * 60)

    try:
        app.run(host=HOST, port=PORT, debug=DEBUG, threaded=True)
    finally:
        app.extensions['receipt_print_orchestrator'].shutdown()


if __name__ == '__main__':
    main()
