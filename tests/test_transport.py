"""
Tests for the transport session state machine and the pyusb session.
"""

from unittest.mock import patch

import pytest
import usb.core

from receipt_print_service.exceptions import (
    CloseError,
    EndpointNotInitialized,
    OpenError,
    SessionStateError,
    TransferError,
)
from receipt_print_service.models import Command
from receipt_print_service.transport import SessionState, UsbSession

from tests.fakes import FakeEndpoint, FakeInterface, FakeSession, FakeUsbDevice, fake_find

SEQUENCE = [Command.set_align('ct'), Command.write_text('Hi'), Command.cut()]


# =============================================================================
# State machine (FakeSession)
# =============================================================================

def test_open_send_close(printer):
    session = FakeSession()
    assert session.state is SessionState.CLOSED

    session.open(printer)
    assert session.state is SessionState.OPEN
    assert session.is_ready()

    session.send(SEQUENCE)
    assert session.writes == [b'\x1b\x61\x01', b'Hi\n', b'\x1b\x64\x03\x1d\x56\x00']
    assert session.bytes_sent == 3 + 3 + 6

    session.close()
    assert session.state is SessionState.CLOSED
    assert session.releases == 1


def test_open_failure_marks_failed(printer):
    session = FakeSession(fail_open=PermissionError('Access denied'))
    with pytest.raises(OpenError, match='Access denied'):
        session.open(printer)
    assert session.state is SessionState.FAILED
    assert session.releases == 0


def test_session_is_single_use(printer):
    session = FakeSession()
    session.open(printer)
    session.close()
    with pytest.raises(SessionStateError):
        session.open(printer)


def test_send_requires_ready_endpoint(printer):
    session = FakeSession(endpoint=False)
    session.open(printer)
    assert not session.is_ready()

    with pytest.raises(EndpointNotInitialized):
        session.send(SEQUENCE)
    assert session.write_attempts == 0


def test_send_before_open(printer):
    with pytest.raises(TransferError):
        FakeSession().send(SEQUENCE)


def test_failed_write_stops_sequence(printer):
    session = FakeSession(fail_write_at=2)
    session.open(printer)
    with pytest.raises(TransferError, match='Command 2'):
        session.send(SEQUENCE)
    assert session.write_attempts == 2
    assert session.writes == [b'\x1b\x61\x01']


def test_close_failure(printer):
    session = FakeSession(fail_release=OSError('No such device'))
    session.open(printer)
    with pytest.raises(CloseError):
        session.close()
    assert session.state is SessionState.FAILED

    # Second close on the failed session is a no-op
    session.close()
    assert session.releases == 1


def test_close_without_open_is_noop():
    session = FakeSession()
    session.close()
    assert session.releases == 0


def test_abort_open_session(printer):
    session = FakeSession()
    session.open(printer)
    session.abort()
    assert session.state is SessionState.FAILED
    assert session.releases == 1

    with pytest.raises(TransferError):
        session.send(SEQUENCE)
    session.close()
    assert session.releases == 1


def test_abort_after_close_keeps_closed(printer):
    session = FakeSession()
    session.open(printer)
    session.close()
    session.abort()
    assert session.state is SessionState.CLOSED
    assert session.releases == 1


def test_abort_never_raises(printer):
    session = FakeSession(fail_release=OSError('gone'))
    session.open(printer)
    session.abort()
    assert session.state is SessionState.FAILED


def test_abort_before_open_blocks_open(printer):
    session = FakeSession()
    session.abort()
    with pytest.raises(SessionStateError):
        session.open(printer)


# =============================================================================
# UsbSession (pyusb)
# =============================================================================

@pytest.fixture
def usb_util():
    with patch('usb.util.claim_interface') as claim, \
            patch('usb.util.release_interface') as release, \
            patch('usb.util.dispose_resources') as dispose:
        yield {'claim': claim, 'release': release, 'dispose': dispose}


def _printer_device(*endpoints):
    endpoints = endpoints or (FakeEndpoint(0x81), FakeEndpoint(0x01))
    return FakeUsbDevice(0x04B8, 0x0E15, [FakeInterface(0, 7, endpoints)], bus=1, address=4)


def test_usb_session_roundtrip(printer, usb_util):
    device = _printer_device()
    out = device.interfaces[0].endpoints[1]
    session = UsbSession(find=fake_find([device]))

    session.open(printer)
    assert session.is_ready()
    assert device.detached == [0]
    usb_util['claim'].assert_called_once_with(device, 0)

    session.send(SEQUENCE)
    assert out.written == [b'\x1b\x61\x01', b'Hi\n', b'\x1b\x64\x03\x1d\x56\x00']
    assert device.interfaces[0].endpoints[0].written == []

    session.close()
    usb_util['release'].assert_called_once_with(device, 0)
    usb_util['dispose'].assert_called_once_with(device)
    assert device.attached == [0]
    assert session.state is SessionState.CLOSED


def test_usb_session_device_missing(printer, usb_util):
    session = UsbSession(find=fake_find([]))
    with pytest.raises(OpenError, match='not found'):
        session.open(printer)
    assert session.state is SessionState.FAILED
    usb_util['claim'].assert_not_called()


def test_usb_session_matches_bus_address(printer, usb_util):
    other = FakeUsbDevice(0x04B8, 0x0E15, bus=2, address=9)
    session = UsbSession(find=fake_find([other]))
    with pytest.raises(OpenError):
        session.open(printer)


def test_usb_session_claim_failure_releases(printer, usb_util):
    usb_util['claim'].side_effect = OSError('Resource busy')
    device = _printer_device()
    session = UsbSession(find=fake_find([device]))

    with pytest.raises(OpenError, match='Resource busy'):
        session.open(printer)
    assert session.state is SessionState.FAILED
    assert device.attached == [0]
    usb_util['dispose'].assert_called_once_with(device)


def test_usb_session_without_out_endpoint(printer, usb_util):
    device = _printer_device(FakeEndpoint(0x81))
    session = UsbSession(find=fake_find([device]))

    session.open(printer)
    assert not session.is_ready()
    with pytest.raises(EndpointNotInitialized):
        session.send(SEQUENCE)

    session.close()
    assert session.state is SessionState.CLOSED


def test_usb_session_short_write(printer, usb_util):
    out = FakeEndpoint(0x01)
    out.short_by = 1
    session = UsbSession(find=fake_find([_printer_device(out)]))
    session.open(printer)

    with pytest.raises(TransferError, match='Short write'):
        session.send(SEQUENCE)
    assert len(out.written) == 1


def test_usb_session_release_failure(printer, usb_util):
    usb_util['release'].side_effect = usb.core.USBError('No such device')
    session = UsbSession(find=fake_find([_printer_device()]))
    session.open(printer)

    with pytest.raises(CloseError):
        session.close()
    usb_util['dispose'].assert_called_once()
