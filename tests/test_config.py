"""
Tests for environment-driven configuration.
"""

import importlib

import pytest

from receipt_print_service import config


@pytest.fixture
def reload_config(monkeypatch):
    def reload(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(config)

    yield reload
    monkeypatch.undo()
    importlib.reload(config)


def test_defaults(reload_config, monkeypatch):
    for name in ('RECEIPT_PRINT_DEBUG', 'RECEIPT_PRINT_PORT', 'PORT', 'RECEIPT_PRINT_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)
    cfg = reload_config()
    assert cfg.DEBUG is False
    assert cfg.PORT == 3001
    assert cfg.PRINT_TIMEOUT == 10


@pytest.mark.parametrize('value, expected', [('true', True), ('TRUE', True), ('false', False), ('1', False)])
def test_debug_flag(reload_config, value, expected):
    assert reload_config(RECEIPT_PRINT_DEBUG=value).DEBUG is expected


def test_port_falls_back_to_generic_variable(reload_config, monkeypatch):
    monkeypatch.delenv('RECEIPT_PRINT_PORT', raising=False)
    assert reload_config(PORT='8080').PORT == 8080


def test_cors_origins_from_comma_list(reload_config):
    cfg = reload_config(RECEIPT_PRINT_CORS_ORIGINS='http://a.test, ,http://b.test')
    assert cfg.CORS_ORIGINS == ['http://a.test', 'http://b.test']
