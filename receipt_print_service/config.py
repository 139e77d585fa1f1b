"""
Receipt Print Service Configuration
"""

import os

# =============================================================================
# Server Configuration
# =============================================================================

PORT = int(os.environ.get('RECEIPT_PRINT_PORT', os.environ.get('PORT', 3001)))
HOST = os.environ.get('RECEIPT_PRINT_HOST', '0.0.0.0')
DEBUG = os.environ.get('RECEIPT_PRINT_DEBUG', 'false').lower() == 'true'

LOG_LEVEL = os.environ.get('RECEIPT_PRINT_LOG_LEVEL', 'INFO').upper()

# Allowed cross-origin callers (comma separated)
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        'RECEIPT_PRINT_CORS_ORIGINS',
        'http://localhost:3000,https://your-nextjs-app.vercel.app',
    ).split(',')
    if origin.strip()
]

# =============================================================================
# Print Job Defaults
# =============================================================================

PRINT_TIMEOUT = float(os.environ.get('RECEIPT_PRINT_TIMEOUT', 10))  # seconds
CLOSE_GRACE = float(os.environ.get('RECEIPT_PRINT_CLOSE_GRACE', 2))  # seconds

# =============================================================================
# USB Transport
# =============================================================================

USB_PRINTER_CLASS = 7  # bInterfaceClass of USB printers
USB_WRITE_TIMEOUT = int(os.environ.get('RECEIPT_PRINT_USB_TIMEOUT', 5000))  # ms

# =============================================================================
# Receipt Layout
# =============================================================================

DEFAULT_HEADER = 'Receipt'
SEPARATOR = '-' * 24
TEXT_ENCODING = 'cp437'
