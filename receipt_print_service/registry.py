"""
Device Registry
===============

Enumerates USB printers attached to this host. Every call re-scans the bus:
printers get plugged and unplugged while the service runs.
"""

import logging
from typing import Callable, List, Optional, Sequence

import usb.core

from .config import USB_PRINTER_CLASS
from .exceptions import EnumerationError, NoPrintersFound, PrinterNotFound
from .models import DeviceDescriptor

logger = logging.getLogger(__name__)


def is_printer(device) -> bool:
    """True when any interface of the device has the USB printer class."""
    try:
        for configuration in device:
            for interface in configuration:
                if interface.bInterfaceClass == USB_PRINTER_CLASS:
                    return True
    except (usb.core.USBError, ValueError, NotImplementedError) as e:
        # Descriptor not readable (permissions, device vanished mid-scan)
        logger.debug("Skipping device %s: %s", _describe(device), e)
    return False


def _describe(device) -> str:
    try:
        return f'{device.idVendor:04x}:{device.idProduct:04x}'
    except (AttributeError, TypeError, ValueError):
        return repr(device)


class DeviceRegistry:
    """Lookup of candidate printers on the USB bus."""

    def __init__(self, find: Optional[Callable] = None):
        """
        Args:
            find: Bus scanner with the ``usb.core.find`` signature
                  (injectable for tests)
        """
        self._find = find or usb.core.find

    def enumerate(self) -> List[DeviceDescriptor]:
        """
        Scan the bus for printers.

        Returns:
            Descriptors in scan order (possibly empty)

        Raises:
            EnumerationError: the bus could not be scanned
        """
        try:
            devices = list(self._find(find_all=True, custom_match=is_printer))
        except usb.core.NoBackendError as e:
            raise EnumerationError(f'No USB backend available: {e}') from e
        except usb.core.USBError as e:
            raise EnumerationError(f'USB bus scan failed: {e}') from e

        descriptors = [
            DeviceDescriptor(
                index=index,
                vendor_id=device.idVendor,
                product_id=device.idProduct,
                bus=getattr(device, 'bus', None),
                address=getattr(device, 'address', None),
            )
            for index, device in enumerate(devices)
        ]
        logger.debug("Enumerated %d printer(s): %s", len(descriptors),
                     ', '.join(str(d) for d in descriptors) or '-')
        return descriptors

    def resolve(self, index: int = 0) -> DeviceDescriptor:
        """
        Resolve a selection index against a fresh enumeration.

        Raises:
            NoPrintersFound: no printer attached
            PrinterNotFound: index out of range
            EnumerationError: the bus could not be scanned
        """
        return self.resolve_from(self.enumerate(), index)

    @staticmethod
    def resolve_from(devices: Sequence[DeviceDescriptor], index: Optional[int] = 0) -> DeviceDescriptor:
        """Resolve ``index`` against an enumeration already obtained."""
        if not devices:
            raise NoPrintersFound()
        if index is None:
            index = 0
        if index < 0 or index >= len(devices):
            raise PrinterNotFound()
        return devices[index]
