"""
Receipt Print Service Handlers
==============================

Byte-level protocol encoders.
"""

from .escpos import ESCPOSEncoder

__all__ = ['ESCPOSEncoder']
