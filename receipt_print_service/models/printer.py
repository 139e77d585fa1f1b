"""
Device Descriptor Model
=======================

Identity of a USB printer found during one enumeration pass.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple


@dataclass(frozen=True)
class DeviceDescriptor:
    """
    Vendor/product identity of a candidate printer.

    ``index`` is the position in the enumeration that produced the
    descriptor; a re-scan may assign different indices, so a descriptor is
    only meaningful for the pass it came from.
    """

    index: int
    vendor_id: int
    product_id: int

    # Bus location, when the scan reported it
    bus: Optional[int] = None
    address: Optional[int] = None

    @property
    def identity(self) -> Tuple[int, int, Optional[int], Optional[int]]:
        """Key identifying the physical device (used for exclusive access)."""
        return (self.vendor_id, self.product_id, self.bus, self.address)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the API representation."""
        return {
            'id': self.index,
            'vendorId': self.vendor_id,
            'productId': self.product_id,
        }

    def __str__(self) -> str:
        label = f'{self.vendor_id:04x}:{self.product_id:04x}'
        if self.bus is not None and self.address is not None:
            label += f' (bus {self.bus} addr {self.address})'
        return label
