"""
ESC/POS Encoder
===============

Translates printer Commands into ESC/POS byte sequences for thermal
receipt printers (Epson, Star and compatibles).
"""

from ..config import TEXT_ENCODING
from ..models import Command, CommandKind


class ESCPOSEncoder:
    """Encoder for ESC/POS printers."""

    # ESC/POS commands
    ESC = b'\x1b'
    GS = b'\x1d'
    LF = b'\n'
    CUT = b'\x1d\x56\x00'  # Full cut
    FEED = b'\x1b\x64'  # Feed lines

    # Text formatting
    BOLD_ON = b'\x1b\x45\x01'
    BOLD_OFF = b'\x1b\x45\x00'
    UNDERLINE_ON = b'\x1b\x2d\x01'
    UNDERLINE_2DOT = b'\x1b\x2d\x02'
    UNDERLINE_OFF = b'\x1b\x2d\x00'
    CHAR_SIZE = b'\x1d\x21'  # GS ! n

    FONTS = {
        'a': b'\x1b\x4d\x00',
        'b': b'\x1b\x4d\x01',
        'c': b'\x1b\x4d\x02',
    }

    # Alignment
    ALIGNMENTS = {
        'lt': b'\x1b\x61\x00',
        'ct': b'\x1b\x61\x01',
        'rt': b'\x1b\x61\x02',
    }

    CUT_FEED_LINES = 3

    def __init__(self, encoding: str = TEXT_ENCODING):
        self.encoding = encoding

    def encode(self, command: Command) -> bytes:
        """
        Encode one command.

        Raises:
            ValueError: unknown command kind or parameter
        """
        kind = command.kind
        args = command.args

        if kind == CommandKind.SET_FONT:
            return self._lookup(self.FONTS, args[0], 'font')
        if kind == CommandKind.SET_ALIGN:
            return self._lookup(self.ALIGNMENTS, args[0], 'alignment')
        if kind == CommandKind.SET_STYLE:
            return self._style(args[0])
        if kind == CommandKind.SET_SIZE:
            return self._size(*args)
        if kind == CommandKind.WRITE_TEXT:
            return args[0].encode(self.encoding, errors='replace') + self.LF
        if kind == CommandKind.CUT:
            return self.FEED + bytes([self.CUT_FEED_LINES]) + self.CUT

        raise ValueError(f'Unknown command: {command!r}')

    def _style(self, style: str) -> bytes:
        """
        Bold/underline flags: 'b', 'u', 'u2', combinations like 'bu' or
        'bu2', and 'normal' to reset.
        """
        style = (style or 'normal').lower()
        if style == 'normal':
            return self.BOLD_OFF + self.UNDERLINE_OFF

        bold = 'b' in style
        rest = style.replace('b', '', 1)
        if rest == '':
            underline = self.UNDERLINE_OFF
        elif rest == 'u':
            underline = self.UNDERLINE_ON
        elif rest == 'u2':
            underline = self.UNDERLINE_2DOT
        else:
            raise ValueError(f'Unknown style: {style!r}')

        return (self.BOLD_ON if bold else self.BOLD_OFF) + underline

    def _size(self, width: int, height: int) -> bytes:
        if not (1 <= width <= 8 and 1 <= height <= 8):
            raise ValueError(f'Character size out of range: {width}x{height}')
        return self.CHAR_SIZE + bytes([((width - 1) << 4) | (height - 1)])

    @staticmethod
    def _lookup(table: dict, key: str, what: str) -> bytes:
        try:
            return table[key.lower()]
        except (KeyError, AttributeError):
            raise ValueError(f'Unknown {what}: {key!r}') from None
