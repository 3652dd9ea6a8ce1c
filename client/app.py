#!/usr/bin/env python3
"""termchat - a terminal chat client in the spirit of irssi and BitchX.

Usage:
    termchat [config.json]

Keybindings:
    - Enter: Send message or run /command
    - Tab: Complete nicks in the current channel
    - Esc: Switch to the status window
    - Ctrl+N / Ctrl+P, Alt+Right / Alt+Left: Next / previous window
    - Up/Down: Navigate input history
    - Page Up/Down: Scroll the current window
    - Ctrl+C: Quit
"""

import sys
import asyncio
import logging
import argparse
from collections import deque

from common import get_config
from common.config import DEFAULT_CONFIG_FILE
from termchat import Session, __version__
from termchat.color import use_terminal
from termchat.error import CommandError, ConfigError, RenderError

from .screen import Screen


KEY_CTRL_N = '\x0e'
KEY_CTRL_P = '\x10'
KEY_ALT_RIGHT = '\x1b[1;3C'
KEY_ALT_LEFT = '\x1b[1;3D'


class ChatApp:
    """Session loop: reads keys, runs commands and repaints on each tick.

    Everything here runs on the asyncio loop thread. Network threads only
    touch channel state, which the next tick picks up.

    Attributes:
        session (Session): Chat session
        screen (Screen): View surfaces
        input_buffer (str): Current input line being typed
        input_history (deque): Sent lines for up/down navigation
        history_pos (int): Current position in input history, -1 when not browsing
        scroll_lines (int): Lines moved by Page Up/Down
        tick_interval (float): Seconds between repaints
    """
    logger = logging.getLogger(__name__)

    def __init__(self, session, history_size=100, scroll_lines=10, tick_interval=0.1):
        self.session = session
        self.screen = session.screen
        self.term = session.screen.term

        self.input_buffer = ''
        self.input_history = deque(maxlen=history_size)
        self.history_pos = -1
        self._temp_input = ''
        self.tab_completion_matches = []
        self.tab_completion_index = 0
        self.tab_completion_start = 0

        self.scroll_lines = scroll_lines
        self.tick_interval = tick_interval
        self.last_size = None

        self.key_bindings = {
            'KEY_ENTER': self.submit,
            'KEY_TAB': self.complete_nick,
            'KEY_ESCAPE': self.focus_status,
            'KEY_BACKSPACE': self.backspace,
            'KEY_DELETE': self.backspace,
            'KEY_UP': self.history_up,
            'KEY_DOWN': self.history_down,
            'KEY_PGUP': self.scroll_up,
            'KEY_PGDOWN': self.scroll_down,
        }
        self.sequence_bindings = {
            KEY_CTRL_N: self.session.next_channel,
            KEY_CTRL_P: self.session.prev_channel,
            KEY_ALT_RIGHT: self.session.next_channel,
            KEY_ALT_LEFT: self.session.prev_channel,
        }

    def start(self):
        """Register commands, paint the status window and auto-connect."""
        self.session.register()
        self.session.running = True
        self.tick()
        if self.session.auto_connect:
            self.logger.info('send auto connect command')
            self.run_command('/connect')

    def tick(self):
        """Pick up resizes and queued state changes, then redraw.

        Raises:
            RenderError: A view could not be created or updated
        """
        size = self.screen.size()
        if size != self.last_size:
            self.last_size = size
            self.session.renderer.resize()
            self.screen.invalidate()
        self.session.renderer.render_pending()
        self.screen.draw(self.title(), self.tabs(), self.prompt())

    def title(self):
        channel = self.session.current_channel()
        state = 'connected' if self.session.network.connected else 'offline'
        parts = ['termchat %s' % __version__, channel.name,
                 '%s (%s)' % (self.session.nick, state)]
        if channel.topic:
            parts.append(channel.topic)
        return ' | '.join(parts)

    def tabs(self):
        tabs = []
        for i, channel in enumerate(self.session.store, 1):
            marker = '!' if channel.highlight else '*' if channel.unread else ''
            tab = '[%d:%s%s]' % (i, channel.name, marker)
            if channel.name == self.session.current_channel_name:
                tab = self.term.bold(tab)
            tabs.append(tab)
        return ' '.join(tabs)

    def prompt(self):
        width = self.term.width - 2
        visible = self.input_buffer[-width:] if width > 0 else ''
        return '> ' + visible

    async def handle_input(self):
        """Main loop: poll keys and tick until the session stops."""
        with self.term.cbreak(), self.term.hidden_cursor():
            while self.session.running:
                key = self.term.inkey(timeout=self.tick_interval)
                if key:
                    self.dispatch(key)
                self.tick()
                await asyncio.sleep(0)

    def dispatch(self, key):
        """Run the binding for `key`, or insert it into the input line."""
        handler = self.key_bindings.get(key.name) if key.is_sequence else None
        if handler is None:
            handler = self.sequence_bindings.get(str(key))
        if handler is not None:
            handler()
        elif not key.is_sequence and str(key).isprintable():
            self.input_buffer += str(key)
            self.tab_completion_matches = []

    def submit(self):
        """Send the input line as a command or a message."""
        text = self.input_buffer.strip()
        self.input_buffer = ''
        self.tab_completion_matches = []
        if not text:
            return
        self.input_history.append(text)
        self.history_pos = -1
        if text.startswith('/'):
            self.run_command(text)
        else:
            self.send_message(text)

    def run_command(self, text):
        parts = text[1:].split()
        if not parts:
            return
        try:
            self.session.commands.run(parts[0].lower(), parts[1:])
        except CommandError as ex:
            self.logger.info('command %s failed: %s', parts[0], ex)
            self.error(ex)

    def send_message(self, text):
        try:
            self.session.say(self.session.current_channel(), text)
        except CommandError as ex:
            self.error(ex)

    def error(self, ex):
        channel = self.session.current_channel()
        channel.post(channel.palette.colorize('red', '* Error: %s' % ex))

    def focus_status(self):
        self.session.set_current(self.session.store.status.name)

    def backspace(self):
        if self.input_buffer:
            self.input_buffer = self.input_buffer[:-1]
            self.tab_completion_matches = []

    def complete_nick(self):
        """Complete the word before the cursor against the current channel's nicks.

        Pressing Tab again cycles through the matches.
        """
        if not self.input_buffer:
            return

        if self.tab_completion_matches:
            self.tab_completion_index = (self.tab_completion_index + 1) % len(self.tab_completion_matches)
            match = self.tab_completion_matches[self.tab_completion_index]
            self.input_buffer = self.input_buffer[:self.tab_completion_start] + match
            return

        start = len(self.input_buffer)
        while start > 0 and not self.input_buffer[start - 1].isspace():
            start -= 1
        partial = self.input_buffer[start:]
        if not partial:
            return

        matches = self.session.current_channel().complete(partial)
        if matches:
            self.tab_completion_matches = matches
            self.tab_completion_index = 0
            self.tab_completion_start = start
            self.input_buffer = self.input_buffer[:start] + matches[0]

    def history_up(self):
        if not self.input_history:
            return
        if self.history_pos == -1:
            self._temp_input = self.input_buffer
            self.history_pos = len(self.input_history) - 1
        elif self.history_pos > 0:
            self.history_pos -= 1
        self.input_buffer = self.input_history[self.history_pos]

    def history_down(self):
        if not self.input_history or self.history_pos == -1:
            return
        self.history_pos += 1
        if self.history_pos >= len(self.input_history):
            self.input_buffer = self._temp_input
            self.history_pos = -1
        else:
            self.input_buffer = self.input_history[self.history_pos]

    def scroll_up(self):
        self.scroll(self.scroll_lines)

    def scroll_down(self):
        self.scroll(-self.scroll_lines)

    def scroll(self, delta):
        view = self.session.renderer.ensure_view(self.session.current_channel())
        self.screen.scroll(view.name, delta)

    async def run(self):
        """Run the session loop until /exit or Ctrl+C."""
        with self.term.fullscreen():
            self.start()
            await self.handle_input()


def main(argv=None):
    """Main entry point.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    parser = argparse.ArgumentParser(
        prog='termchat',
        description='Terminal chat client'
    )
    parser.add_argument(
        'config',
        nargs='?',
        default=DEFAULT_CONFIG_FILE,
        help='path to the JSON configuration file (default: %(default)s)'
    )
    args = parser.parse_args(argv)

    try:
        conf, kwargs = get_config(args.config)
    except ConfigError as ex:
        print(f'Configuration error: {ex}', file=sys.stderr)
        return 1

    tui = conf.get('tui', {})
    screen = Screen()
    use_terminal(screen.term)
    session = Session(screen=screen, **kwargs)
    app = ChatApp(
        session,
        history_size=tui.get('history', 100),
        scroll_lines=tui.get('scroll_lines', 10)
    )

    try:
        asyncio.run(app.run())
        return 0
    except KeyboardInterrupt:
        session.quit()
        return 0
    except RenderError as ex:
        logging.getLogger(__name__).exception('render fault, exiting')
        print(f'\nFatal error: {ex}', file=sys.stderr)
        return 1
    finally:
        screen.close()


if __name__ == '__main__':
    sys.exit(main())
