#!/usr/bin/env python
"""
Receipt Print Service - Standalone Entry Point

Run directly:
    python main.py

Or with environment variables:
    RECEIPT_PRINT_PORT=3001 python main.py
"""

import os
import sys

# Ensure package is importable when running directly
if __name__ == '__main__':
    parent_dir = os.path.dirname(os.path.abspath(__file__))
    if parent_dir not in sys.path:
        sys.path.insert(0, parent_dir)

from receipt_print_service.app import main


if __name__ == '__main__':
    main()
