"""
Tests for the ESC/POS encoder.
"""

import pytest

from receipt_print_service.handlers import ESCPOSEncoder
from receipt_print_service.models import Command


@pytest.fixture
def encoder():
    return ESCPOSEncoder()


def test_font_and_alignment(encoder):
    assert encoder.encode(Command.set_font('a')) == b'\x1b\x4d\x00'
    assert encoder.encode(Command.set_font('B')) == b'\x1b\x4d\x01'
    assert encoder.encode(Command.set_align('lt')) == b'\x1b\x61\x00'
    assert encoder.encode(Command.set_align('ct')) == b'\x1b\x61\x01'
    assert encoder.encode(Command.set_align('rt')) == b'\x1b\x61\x02'


def test_styles(encoder):
    assert encoder.encode(Command.set_style('b')) == b'\x1b\x45\x01\x1b\x2d\x00'
    assert encoder.encode(Command.set_style('normal')) == b'\x1b\x45\x00\x1b\x2d\x00'
    assert encoder.encode(Command.set_style('u')) == b'\x1b\x45\x00\x1b\x2d\x01'
    assert encoder.encode(Command.set_style('bu2')) == b'\x1b\x45\x01\x1b\x2d\x02'


def test_size(encoder):
    assert encoder.encode(Command.set_size(1, 1)) == b'\x1d\x21\x00'
    assert encoder.encode(Command.set_size(2, 3)) == b'\x1d\x21\x12'


def test_text_is_encoded_with_newline(encoder):
    assert encoder.encode(Command.write_text('Hi')) == b'Hi\n'
    assert encoder.encode(Command.write_text('\n')) == b'\n\n'


def test_unencodable_text_is_replaced(encoder):
    assert encoder.encode(Command.write_text('€5')) == b'?5\n'


def test_cut_feeds_then_cuts(encoder):
    assert encoder.encode(Command.cut()) == b'\x1b\x64\x03\x1d\x56\x00'


@pytest.mark.parametrize('command', [
    Command.set_font('z'),
    Command.set_align('middle'),
    Command.set_style('x'),
    Command.set_size(0, 1),
    Command.set_size(9, 1),
])
def test_invalid_parameters(encoder, command):
    with pytest.raises(ValueError):
        encoder.encode(command)
