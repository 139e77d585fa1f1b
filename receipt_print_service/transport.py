"""
Transport Session
=================

Exclusive, single-use connection to one physical printer.

States:
    closed -> opening -> open -> closing -> closed
    any non-terminal state -> failed

TransportSession implements the state machine and the send loop;
subclasses supply the device-specific claim/write/release steps.
UsbSession talks to USB printer-class devices through pyusb.
"""

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Iterable, List, Optional

import usb.core
import usb.util

from .config import USB_PRINTER_CLASS, USB_WRITE_TIMEOUT
from .exceptions import (
    CloseError,
    EndpointNotInitialized,
    OpenError,
    SessionStateError,
    TransferError,
)
from .handlers import ESCPOSEncoder
from .models import Command, DeviceDescriptor

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    CLOSED = 'closed'
    OPENING = 'opening'
    OPEN = 'open'
    CLOSING = 'closing'
    FAILED = 'failed'


class TransportSession(ABC):
    """Abstract base class for printer transport sessions."""

    def __init__(self, encoder: Optional[ESCPOSEncoder] = None):
        self.encoder = encoder or ESCPOSEncoder()
        self.descriptor: Optional[DeviceDescriptor] = None
        self.bytes_sent = 0
        self._state = SessionState.CLOSED
        self._used = False
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Device-specific steps
    # -------------------------------------------------------------------------

    @abstractmethod
    def _claim(self, descriptor: DeviceDescriptor) -> None:
        """
        Acquire the device handle and resolve the write endpoint.

        Must undo its own partial work before raising.
        """

    @abstractmethod
    def _endpoint_ready(self) -> bool:
        """True once the write endpoint handle exists."""

    @abstractmethod
    def _write(self, data: bytes) -> None:
        """Transfer one chunk of bytes to the device."""

    @abstractmethod
    def _release(self) -> None:
        """Release the device handle."""

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    def is_ready(self) -> bool:
        """Session is open and its endpoint handle is initialized."""
        return self._state is SessionState.OPEN and self._endpoint_ready()

    def open(self, descriptor: DeviceDescriptor) -> None:
        """
        Claim the device.

        Raises:
            SessionStateError: session already used
            OpenError: device could not be claimed (session is failed)
        """
        with self._lock:
            if self._used or self._state is not SessionState.CLOSED:
                raise SessionStateError(
                    f'Session is single-use (state: {self._state.value})'
                )
            self._used = True
            self._state = SessionState.OPENING
        self.descriptor = descriptor

        try:
            self._claim(descriptor)
        except OpenError:
            self._set_state(SessionState.FAILED)
            raise
        except Exception as e:
            self._set_state(SessionState.FAILED)
            raise OpenError(str(e) or e.__class__.__name__) from e

        with self._lock:
            aborted = self._state is not SessionState.OPENING
            if not aborted:
                self._state = SessionState.OPEN

        if aborted:
            # abort() ran while we were claiming; the handle is ours to drop
            self._release_quietly()
            raise OpenError('Session aborted while opening')

        logger.info("Opened printer %s", descriptor)

    def send(self, commands: Iterable[Command]) -> None:
        """
        Encode and write each command in order.

        The first failed write aborts the rest of the sequence.

        Raises:
            EndpointNotInitialized: open but the endpoint handle is missing
            TransferError: session not open, aborted, or a write failed
        """
        for position, command in enumerate(commands, start=1):
            if self._state is not SessionState.OPEN:
                raise TransferError(
                    f'Session not open (state: {self._state.value}) at command {position}'
                )
            if not self._endpoint_ready():
                raise EndpointNotInitialized()

            try:
                data = self.encoder.encode(command)
                self._write(data)
            except TransferError:
                raise
            except Exception as e:
                raise TransferError(
                    f'Command {position} ({command.kind.value}) failed: {e}'
                ) from e
            self.bytes_sent += len(data)

        logger.debug("Sent %d bytes to %s", self.bytes_sent, self.descriptor)

    def close(self) -> None:
        """
        Release the device.

        On a session that is not open (never opened, already closed, failed
        or aborted) this is a no-op.

        Raises:
            CloseError: release failed (session is failed)
        """
        with self._lock:
            state = self._state
            if state is SessionState.OPEN:
                self._state = SessionState.CLOSING

        if state is not SessionState.OPEN:
            logger.debug("Close skipped, session is %s", state.value)
            return

        try:
            self._release()
        except Exception as e:
            self._set_state(SessionState.FAILED)
            raise CloseError(str(e) or e.__class__.__name__) from e

        with self._lock:
            if self._state is SessionState.CLOSING:
                self._state = SessionState.CLOSED
        logger.info("Closed printer %s", self.descriptor)

    def abort(self) -> None:
        """
        Force the session into the failed state and release the device
        best-effort. Safe to call from another thread; never raises.
        """
        with self._lock:
            previous = self._state
            if previous is SessionState.CLOSED and self._used:
                return
            self._state = SessionState.FAILED

        # opening: the opener releases; closing: the closer is releasing
        if previous is SessionState.OPEN:
            logger.warning("Aborting session on %s", self.descriptor)
            self._release_quietly()

    def _set_state(self, state: SessionState) -> None:
        with self._lock:
            self._state = state

    def _release_quietly(self) -> None:
        try:
            self._release()
        except Exception as e:
            logger.warning("Release of %s failed: %s", self.descriptor, e)


SessionFactory = Callable[[], TransportSession]


def _is_bulk_out(endpoint) -> bool:
    return (
        usb.util.endpoint_direction(endpoint.bEndpointAddress) == usb.util.ENDPOINT_OUT
        and usb.util.endpoint_type(endpoint.bmAttributes) == usb.util.ENDPOINT_TYPE_BULK
    )


class UsbSession(TransportSession):
    """Session on a USB printer-class device (pyusb)."""

    def __init__(self, write_timeout: int = USB_WRITE_TIMEOUT,
                 find: Optional[Callable] = None,
                 encoder: Optional[ESCPOSEncoder] = None):
        """
        Args:
            write_timeout: Per-transfer timeout in milliseconds
            find: Device lookup with the ``usb.core.find`` signature
            encoder: Command encoder (ESC/POS by default)
        """
        super().__init__(encoder)
        self.write_timeout = write_timeout
        self._find = find or usb.core.find
        self._device = None
        self._interface: Optional[int] = None
        self._endpoint = None
        self._detached: List[int] = []

    def _claim(self, descriptor: DeviceDescriptor) -> None:
        criteria = {
            'idVendor': descriptor.vendor_id,
            'idProduct': descriptor.product_id,
        }
        if descriptor.bus is not None and descriptor.address is not None:
            criteria['bus'] = descriptor.bus
            criteria['address'] = descriptor.address

        device = self._find(**criteria)
        if device is None:
            raise OpenError(f'Printer {descriptor} not found')
        self._device = device

        try:
            interface = self._printer_interface(device)
            number = interface.bInterfaceNumber

            try:
                if device.is_kernel_driver_active(number):
                    device.detach_kernel_driver(number)
                    self._detached.append(number)
            except NotImplementedError:
                pass  # no kernel drivers on this platform

            usb.util.claim_interface(device, number)
            self._interface = number
            self._endpoint = usb.util.find_descriptor(interface, custom_match=_is_bulk_out)
        except Exception:
            self._release_quietly()
            raise

        if self._endpoint is None:
            logger.warning("No bulk OUT endpoint on %s", descriptor)

    @staticmethod
    def _printer_interface(device):
        try:
            configuration = device.get_active_configuration()
        except usb.core.USBError:
            configuration = None
        if configuration is None:
            device.set_configuration()
            configuration = device.get_active_configuration()

        interface = usb.util.find_descriptor(configuration, bInterfaceClass=USB_PRINTER_CLASS)
        if interface is None:
            raise OpenError('Device has no printer interface')
        return interface

    def _endpoint_ready(self) -> bool:
        return self._device is not None and self._endpoint is not None

    def _write(self, data: bytes) -> None:
        endpoint = self._endpoint
        if endpoint is None:
            raise EndpointNotInitialized()
        written = endpoint.write(data, timeout=self.write_timeout)
        if written != len(data):
            raise TransferError(f'Short write: {written} of {len(data)} bytes')

    def _release(self) -> None:
        device = self._device
        if device is None:
            return
        self._endpoint = None

        error = None
        if self._interface is not None:
            try:
                usb.util.release_interface(device, self._interface)
            except usb.core.USBError as e:
                error = e
        for number in self._detached:
            try:
                device.attach_kernel_driver(number)
            except (usb.core.USBError, NotImplementedError) as e:
                logger.debug("Could not re-attach kernel driver %d: %s", number, e)
        usb.util.dispose_resources(device)

        self._device = None
        self._interface = None
        self._detached = []

        if error is not None:
            raise CloseError(f'Failed to release interface: {error}')
