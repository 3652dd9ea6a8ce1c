"""
Shared pytest fixtures for the termchat test suite.

This file contains fixtures that are available to all test files.
"""
import logging

import pytest
from unittest.mock import Mock, PropertyMock, patch

from blessed import Terminal

from client.screen import Screen
from termchat import color
from termchat.color import Palette
from termchat.network import LoopbackClient
from termchat.session import Session


@pytest.fixture(autouse=True)
def plain_terminal():
    """
    Route colored output through a terminal that does no styling.

    Keeps assertions on rendered text independent of the test runner's tty.
    """
    term = Terminal(force_styling=None)
    color.use_terminal(term)
    yield term
    color.use_terminal(None)


@pytest.fixture
def term():
    """
    Non-styling terminal with a fixed 80x24 size.

    Returns:
        Terminal: blessed terminal
    """
    with patch.object(Terminal, 'width', new_callable=PropertyMock, return_value=80), \
            patch.object(Terminal, 'height', new_callable=PropertyMock, return_value=24):
        yield Terminal(force_styling=None)


@pytest.fixture
def screen(term):
    """Screen drawing on the fixed-size terminal"""
    return Screen(term)


@pytest.fixture
def clean_root_logger():
    """Restore root logger handlers after the test"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def palette():
    """Default palette"""
    return Palette()


@pytest.fixture
def mock_network():
    """
    Mock network client, connected.

    Returns:
        Mock: LoopbackClient-shaped mock
    """
    network = Mock(spec=LoopbackClient)
    network.connected = True
    network.address = 'irc.test:6667'
    network.nick = 'me'
    network.password = None
    return network


@pytest.fixture
def session(screen, mock_network):
    """
    Session with registered commands, a real screen and a mocked network.

    Returns:
        Session: ready to run commands and render
    """
    session = Session(screen=screen, network=mock_network, nick='me')
    session.register()
    return session


def pytest_configure(config):
    """
    Pytest configuration hook.

    Registers custom markers.
    """
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests (>1s)")
