#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import pytest
from unittest.mock import patch

from blessed.keyboard import Keystroke

from client.app import ChatApp, KEY_CTRL_N, KEY_CTRL_P, main
from termchat.channel import ChannelKind
from termchat.error import ViewError


def key(name, ucs=''):
    """Special key as produced by blessed"""
    return Keystroke(ucs, code=343, name=name)


def type_text(app, text):
    for char in text:
        app.dispatch(Keystroke(char))


@pytest.fixture
def app(session):
    """ChatApp around the test session"""
    return ChatApp(session)


@pytest.fixture
def channel(session):
    """Current channel #test with a few users"""
    channel = session.store.add('#test')
    for nick in ('me', 'alice', 'albert', 'bob'):
        channel.add_nick(nick)
    session.current_channel_name = '#test'
    return channel


class TestStart:
    """Test startup"""

    def test_start_paints_status(self, app, session):
        """Start registers commands and paints the status window"""
        app.start()
        assert session.running
        assert session.screen.top == 'status'
        assert session.screen.view('status').lines

    def test_auto_connect(self, session, mock_network):
        """Auto-connect issues connect once"""
        mock_network.connected = False
        session.auto_connect = True
        ChatApp(session).start()
        mock_network.connect.assert_called_once_with()

    def test_no_auto_connect(self, app, mock_network):
        """Without the flag nothing connects"""
        mock_network.connected = False
        app.start()
        mock_network.connect.assert_not_called()


class TestInput:
    """Test line editing and submission"""

    def test_typing(self, app):
        """Printable keys go to the input line"""
        type_text(app, 'hi')
        assert app.input_buffer == 'hi'

    def test_backspace(self, app):
        """Backspace removes the last character"""
        type_text(app, 'hi')
        app.dispatch(key('KEY_BACKSPACE', '\x7f'))
        assert app.input_buffer == 'h'

    def test_submit_command(self, app, mock_network):
        """Slash lines run commands"""
        type_text(app, '/J #test')
        app.dispatch(key('KEY_ENTER', '\n'))
        mock_network.join.assert_called_once_with('#test')
        assert app.input_buffer == ''
        assert list(app.input_history) == ['/J #test']

    def test_submit_unknown_command(self, app, session):
        """Unknown commands are silent"""
        app.run_command('/frobnicate now')
        assert session.store.status.drain() == []

    def test_command_error_is_shown(self, app, session):
        """Command failures are posted on the current channel"""
        app.run_command('/join')
        assert 'Error: usage: /join <#channel>' in session.store.status.drain()[-1]

    def test_submit_message(self, app, channel, mock_network):
        """Plain lines are sent to the current channel"""
        type_text(app, 'hello all')
        app.submit()
        mock_network.privmsg.assert_called_once_with('#test', 'hello all')
        assert channel.drain()[-1] == '<me> hello all'

    def test_message_in_status(self, app, session, mock_network):
        """Messages need a channel"""
        app.send_message('hello')
        mock_network.privmsg.assert_not_called()
        assert 'Error' in session.store.status.drain()[-1]

    def test_blank_submit(self, app):
        """Blank lines are ignored"""
        type_text(app, '   ')
        app.submit()
        assert not app.input_history


class TestHistory:
    """Test input history navigation"""

    def test_up_down(self, app):
        """Browse back and forth, restoring the draft"""
        app.input_history.extend(['one', 'two'])
        type_text(app, 'draft')
        app.history_up()
        assert app.input_buffer == 'two'
        app.history_up()
        assert app.input_buffer == 'one'
        app.history_down()
        assert app.input_buffer == 'two'
        app.history_down()
        assert app.input_buffer == 'draft'
        assert app.history_pos == -1


class TestTabCompletion:
    """Test nick completion"""

    def test_complete_and_cycle(self, app, channel):
        """Tab completes and cycles through matches"""
        type_text(app, 'hey al')
        app.dispatch(key('KEY_TAB', '\t'))
        assert app.input_buffer == 'hey albert'
        app.dispatch(key('KEY_TAB', '\t'))
        assert app.input_buffer == 'hey alice'
        app.dispatch(key('KEY_TAB', '\t'))
        assert app.input_buffer == 'hey albert'

    def test_no_match(self, app, channel):
        """No match leaves the input alone"""
        type_text(app, 'zz')
        app.complete_nick()
        assert app.input_buffer == 'zz'


class TestWindowKeys:
    """Test focus and scrolling bindings"""

    def test_next_prev(self, app, session):
        """Ctrl+N and Ctrl+P cycle windows"""
        session.store.add('#a')
        session.store.add('#b')
        app.start()
        app.dispatch(Keystroke(KEY_CTRL_N))
        assert session.current_channel_name == '#a'
        app.dispatch(Keystroke(KEY_CTRL_P))
        app.dispatch(Keystroke(KEY_CTRL_P))
        assert session.current_channel_name == '#b'

    def test_escape_focuses_status(self, app, session):
        """Esc returns to the status window"""
        session.store.add('#a')
        app.start()
        session.set_current('#a')
        app.dispatch(key('KEY_ESCAPE', '\x1b'))
        assert session.current_channel_name == 'status'
        assert session.screen.top == 'status'

    def test_scroll(self, app, session):
        """Page keys scroll the current view"""
        app.start()
        view = session.screen.view('status')
        for i in range(40):
            view.write('line %d' % i)
        app.dispatch(key('KEY_PGUP'))
        assert view.offset == app.scroll_lines
        app.dispatch(key('KEY_PGDOWN'))
        assert view.offset == 0


class TestNetworkBetweenTicks:
    """Test key bindings reaching channels the loop has not rendered yet"""

    def test_scroll_after_join(self, app, session):
        """Page Up on a channel joined since the last tick"""
        app.start()
        session.events.on_join('#new', 'me')
        app.dispatch(key('KEY_PGUP'))
        assert '#new' in session.screen.view_names()
        app.tick()
        assert session.screen.top == '#new'

    def test_next_window_after_private_message(self, app, session):
        """Ctrl+N onto a private window opened since the last tick"""
        app.start()
        session.events.on_message('me', 'bob', 'hi')
        app.dispatch(Keystroke(KEY_CTRL_N))
        assert session.screen.top == 'bob'
        app.tick()
        assert session.screen.view('bob').lines[-1].endswith('<bob> hi')

    def test_clear_after_join(self, app, session):
        """/clear on a channel joined since the last tick"""
        app.start()
        session.events.on_join('#new', 'me')
        app.run_command('/clear')
        assert session.screen.view('#new').lines == []


class TestTick:
    """Test the per-tick pass"""

    def test_tick_renders_new_channels(self, app, session):
        """Channels added from elsewhere get views"""
        app.start()
        session.events.on_message('me', 'alice', 'psst')
        app.tick()
        assert session.screen.top == 'alice'
        assert session.screen.view('alice').lines[-1].endswith('<alice> psst')

    def test_tabs_show_flags(self, app, session):
        """Unread and highlight markers"""
        session.store.add('#a').unread = True
        session.store.add('#b', ChannelKind.NORMAL).highlight = True
        assert app.tabs() == '[1:status] [2:#a*] [3:#b!]'

    def test_title(self, app, channel):
        """Title shows channel, nick and topic"""
        channel.topic = 'testing'
        title = app.title()
        assert '#test' in title and 'me (connected)' in title and 'testing' in title

    def test_render_fault_propagates(self, app, session):
        """Surface faults escape the tick"""
        app.start()
        channel = session.store.add('#test')
        channel.resize(80, 1)
        with pytest.raises(ViewError):
            app.tick()


class TestMain:
    """Test the entry point"""

    def test_config_error(self, tmp_path, capsys, clean_root_logger):
        """Bad configuration exits with 1"""
        path = tmp_path / 'bad.json'
        path.write_text('{oops')
        assert main([str(path)]) == 1
        assert 'Configuration error' in capsys.readouterr().err

    def test_render_fault_exits_1(self, tmp_path, clean_root_logger):
        """Render faults end the process with status 1"""
        path = tmp_path / 'c.json'
        path.write_text('{"log_file": "%s"}' % (tmp_path / 'x.log'))
        with patch('client.app.ChatApp.run', side_effect=ViewError('boom')), \
                patch('client.app.Screen') as screen_cls:
            assert main([str(path)]) == 1
        screen_cls.return_value.close.assert_called_once_with()
