"""
Shared fixtures.
"""

import pytest

from receipt_print_service.app import create_app
from receipt_print_service.models import DeviceDescriptor, ReceiptBody, ReceiptContent
from receipt_print_service.orchestrator import JobOrchestrator

from tests.fakes import FakeRegistry, SessionSequence


@pytest.fixture
def printer():
    return DeviceDescriptor(index=0, vendor_id=0x04B8, product_id=0x0E15, bus=1, address=4)


@pytest.fixture
def second_printer():
    return DeviceDescriptor(index=1, vendor_id=0x0519, product_id=0x0003, bus=1, address=7)


@pytest.fixture
def content():
    return ReceiptContent(header='Hi', body=ReceiptBody(main='Thanks!'))


@pytest.fixture
def registry(printer, second_printer):
    return FakeRegistry([printer, second_printer])


@pytest.fixture
def sessions():
    return SessionSequence()


@pytest.fixture
def orchestrator(registry, sessions):
    return JobOrchestrator(registry=registry, session_factory=sessions,
                           timeout=2.0, close_grace=0.2)


@pytest.fixture
def client(orchestrator):
    app = create_app(orchestrator)
    app.config['TESTING'] = True
    return app.test_client()
