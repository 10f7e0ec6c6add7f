import pytest

from loguru import logger

import porthos


@pytest.fixture
def reset_log(monkeypatch):
    monkeypatch.setattr(porthos.log, '_CONFIGURED_LEVEL', None)

    yield

    # Put back a sink like the one loguru starts with.

    logger.remove()
    logger.add(porthos.log.sys.stderr)


def test_configure(reset_log, monkeypatch):

    monkeypatch.setattr(porthos.config, 'log_level', 'info')

    porthos.log.configure()
    assert porthos.log._CONFIGURED_LEVEL == 'INFO'

    porthos.log.configure('debug')
    assert porthos.log._CONFIGURED_LEVEL == 'DEBUG'


def test_configure_twice(reset_log):

    porthos.log.configure('WARNING')
    porthos.log.configure('warning')

    assert porthos.log._CONFIGURED_LEVEL == 'WARNING'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
