"""
Shared fixtures for integration tests.

Integration tests validate multi-component workflows with minimal mocking.
Uses a real Session, Screen and threaded LoopbackClient.
"""

import pytest

from client.app import ChatApp
from termchat.network import LoopbackClient
from termchat.session import Session


@pytest.fixture
def loopback():
    """Offline network client running its own worker thread."""
    client = LoopbackClient(host='irc.test', port=6667, nick='me')
    yield client
    client.quit()


@pytest.fixture
def integration_session(screen, loopback):
    """Session wired to the loopback client, commands registered."""
    session = Session(screen=screen, network=loopback)
    session.register()
    return session


@pytest.fixture
def integration_app(integration_session):
    """Started chat app, status window painted."""
    app = ChatApp(integration_session)
    app.start()
    return app


@pytest.fixture
def settle(integration_session, loopback, integration_app):
    """Wait for the network thread, then run one loop tick."""
    def _settle():
        loopback.wait()
        integration_app.tick()
    return _settle
