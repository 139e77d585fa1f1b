"""
Receipt Print Service Client
============================

Python SDK for interacting with the Receipt Print Service.

Usage:
    from receipt_print_service.client import PrintClient

    client = PrintClient('http://localhost:3001')

    # List printers
    printers = client.list_printers()

    # Print a receipt on the first printer
    result = client.print_receipt({
        'header': 'Coffee Corner',
        'body': {'main': '1x Espresso  2.50'},
        'footer': 'Thank you!',
    })
"""

import requests
from typing import Dict, Any, Optional, List


class PrintClient:
    """Client for the Receipt Print Service."""

    def __init__(self, base_url: str = 'http://localhost:3001', timeout: float = 30):
        """
        Initialize client.

        Args:
            base_url: Base URL of the print service
            timeout: Request timeout in seconds (keep above the print deadline)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, data: Dict = None) -> Dict[str, Any]:
        """Make API request."""
        url = f'{self.base_url}{endpoint}'
        if method not in ('GET', 'POST'):
            raise ValueError(f'Unknown method: {method}')

        try:
            if method == 'GET':
                response = requests.get(url, timeout=self.timeout)
            else:
                response = requests.post(url, json=data, timeout=self.timeout)

            return response.json()

        except requests.exceptions.Timeout:
            return {'success': False, 'error': 'Request timeout'}
        except requests.exceptions.ConnectionError:
            return {'success': False, 'error': f'Cannot connect to {self.base_url}'}
        except requests.exceptions.JSONDecodeError as e:
            return {'success': False, 'error': f'Invalid response: {e}'}

    # =========================================================================
    # Health
    # =========================================================================

    def health(self) -> Dict[str, Any]:
        """Check service health."""
        return self._request('GET', '/api/health')

    def is_online(self) -> bool:
        """Check if service is online."""
        return self.health().get('status') == 'ok'

    # =========================================================================
    # Printers
    # =========================================================================

    def list_printers(self) -> List[Dict[str, Any]]:
        """List attached USB printers."""
        result = self._request('GET', '/api/printers')
        return result.get('printers', [])

    # =========================================================================
    # Printing
    # =========================================================================

    def print_receipt(self, content: Dict[str, Any], printer_id: Optional[int] = None) -> Dict[str, Any]:
        """
        Print a receipt.

        Args:
            content: Receipt document (header, body{header, main, footer}, footer)
            printer_id: Index from list_printers() (first printer by default)

        Returns:
            Dict with success status and message or error
        """
        data: Dict[str, Any] = {'content': content}
        if printer_id is not None:
            data['printerId'] = printer_id
        return self._request('POST', '/api/print', data)
