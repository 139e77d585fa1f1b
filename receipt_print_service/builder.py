"""
Command Builder
===============

Turns a ReceiptContent into the ordered command sequence sent to the
printer. No I/O; the same content always yields the same sequence.

Layout:
    font a, centered, bold, 1x1
    <header or "Receipt">
    ------------------------
    centered, normal
    <blank line>
    <body.header> <body.main> <body.footer>   (only non-empty ones)
    <blank line> ---- <footer>                (only with a footer)
    cut
"""

from typing import Optional

from .config import DEFAULT_HEADER, SEPARATOR
from .models import Command, CommandSequence, ReceiptContent

BLANK_LINE = '\n'


def build(content: ReceiptContent) -> CommandSequence:
    """
    Build the command sequence for a receipt.

    Args:
        content: Receipt document

    Returns:
        List of Commands, always ending with CUT
    """
    commands = [
        Command.set_font('a'),
        Command.set_align('ct'),
        Command.set_style('b'),
        Command.set_size(1, 1),
        Command.write_text(content.header or DEFAULT_HEADER),
        Command.write_text(SEPARATOR),
        Command.set_align('ct'),
        Command.set_style('normal'),
        Command.write_text(BLANK_LINE),
    ]

    body = content.body
    if body is not None:
        for text in (body.header, body.main, body.footer):
            if _present(text):
                commands.append(Command.write_text(text))

    if _present(content.footer):
        commands.extend([
            Command.write_text(BLANK_LINE),
            Command.write_text(SEPARATOR),
            Command.set_align('ct'),
            Command.write_text(content.footer),
        ])

    commands.append(Command.cut())
    return commands


def _present(text: Optional[str]) -> bool:
    return text is not None and text != ''
