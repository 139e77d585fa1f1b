"""
Receipt Content Model
=====================

Structured receipt document submitted to ``POST /api/print``.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any


def _text(value: Any) -> Optional[str]:
    """
    Normalize an optional text field from JSON.

    Falsy non-string values (false, 0, [], {}) count as absent.
    """
    if isinstance(value, str):
        return value
    if not value:
        return None
    return str(value)


@dataclass(frozen=True)
class ReceiptBody:
    """Middle section of a receipt."""

    header: Optional[str] = None
    main: Optional[str] = None
    footer: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional['ReceiptBody']:
        """Create from dictionary; anything that is not a dict means no body."""
        if not isinstance(data, dict):
            return None
        return cls(
            header=_text(data.get('header')),
            main=_text(data.get('main')),
            footer=_text(data.get('footer')),
        )


@dataclass(frozen=True)
class ReceiptContent:
    """Receipt document: header, optional body, optional footer."""

    header: Optional[str] = None
    body: Optional[ReceiptBody] = None
    footer: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'ReceiptContent':
        """
        Create from the request's ``content`` value.

        ``None``, an empty dict, or an empty string yield an empty document.
        A bare string is accepted as the header.
        """
        if isinstance(data, str):
            return cls(header=data or None)
        if not isinstance(data, dict):
            return cls()
        return cls(
            header=_text(data.get('header')),
            body=ReceiptBody.from_dict(data.get('body')),
            footer=_text(data.get('footer')),
        )

    def is_empty(self) -> bool:
        """True when the document carries no field at all."""
        return self.header is None and self.body is None and self.footer is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the request representation."""
        data: Dict[str, Any] = {}
        if self.header is not None:
            data['header'] = self.header
        if self.body is not None:
            data['body'] = {
                k: v for k, v in (
                    ('header', self.body.header),
                    ('main', self.body.main),
                    ('footer', self.body.footer),
                ) if v is not None
            }
        if self.footer is not None:
            data['footer'] = self.footer
        return data
