"""
Printer Command Model
=====================

One atomic ESC/POS-style instruction. Order matters: alignment, style and
size commands change printer state used by the following WRITE_TEXT.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Any, List


class CommandKind(str, Enum):
    SET_FONT = 'SET_FONT'
    SET_ALIGN = 'SET_ALIGN'
    SET_STYLE = 'SET_STYLE'
    SET_SIZE = 'SET_SIZE'
    WRITE_TEXT = 'WRITE_TEXT'
    CUT = 'CUT'


@dataclass(frozen=True)
class Command:
    """Printer instruction with its kind-specific arguments."""

    kind: CommandKind
    args: Tuple[Any, ...] = ()

    @classmethod
    def set_font(cls, font: str = 'a') -> 'Command':
        return cls(CommandKind.SET_FONT, (font,))

    @classmethod
    def set_align(cls, align: str) -> 'Command':
        return cls(CommandKind.SET_ALIGN, (align,))

    @classmethod
    def set_style(cls, style: str) -> 'Command':
        return cls(CommandKind.SET_STYLE, (style,))

    @classmethod
    def set_size(cls, width: int, height: int) -> 'Command':
        return cls(CommandKind.SET_SIZE, (width, height))

    @classmethod
    def write_text(cls, text: str) -> 'Command':
        return cls(CommandKind.WRITE_TEXT, (text,))

    @classmethod
    def cut(cls) -> 'Command':
        return cls(CommandKind.CUT)

    def __repr__(self) -> str:
        if not self.args:
            return self.kind.value
        return f"{self.kind.value}({', '.join(repr(a) for a in self.args)})"


CommandSequence = List[Command]
