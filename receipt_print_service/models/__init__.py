"""
Receipt Print Service Models
"""

from .printer import DeviceDescriptor
from .receipt import ReceiptContent, ReceiptBody
from .command import Command, CommandKind, CommandSequence
from .job import PrintJob

__all__ = [
    'DeviceDescriptor',
    'ReceiptContent',
    'ReceiptBody',
    'Command',
    'CommandKind',
    'CommandSequence',
    'PrintJob',
]
