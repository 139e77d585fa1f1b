"""
Receipt Print Service
=====================

Prints structured receipts on USB ESC/POS receipt printers.

Usage:
    python -m receipt_print_service

API Endpoints:
    GET  /api/health             - Health check
    GET  /api/printers           - List attached USB printers
    POST /api/print              - Print a receipt
"""

__version__ = '1.0.0'
