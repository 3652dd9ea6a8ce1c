#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Slash commands typed at the input line.

Commands are resolved by name, then by alias, in registration order.
A token that matches nothing resolves to `EmptyCommand`, which does
nothing, so unknown input is absorbed silently.
"""
import logging
import collections

from .channel import ChannelKind
from .error import CommandError, DuplicateCommandError


CHANNEL_PREFIXES = ('#', '&')

CommandMetadata = collections.namedtuple(
    'CommandMetadata', ['name', 'description', 'aliases'])


class Command:
    """Base class for commands.

    Subclasses set `name`, `description` and `aliases` and implement
    `exec`. Failures are raised as `termchat.error.CommandError`.
    """
    logger = logging.getLogger(__name__)

    name = ''
    description = ''
    aliases = ()

    def __init__(self, session):
        self.session = session

    def __repr__(self):
        return '<command "%s">' % self.name

    @property
    def metadata(self):
        return CommandMetadata(self.name, self.description, tuple(self.aliases))

    def matches(self, token):
        return token == self.name or token in self.aliases

    def exec(self, args):
        raise NotImplementedError

    def post(self, text, channel=None):
        """Queue a line on `channel` (default: the current channel)."""
        if channel is None:
            channel = self.session.current_channel()
        channel.post(text)

    def usage(self, text):
        return CommandError('usage: /%s %s' % (self.name, text))


class EmptyCommand(Command):
    description = 'does nothing'

    def exec(self, args):
        return None


class ExitCommand(Command):
    name = 'exit'
    description = 'quit termchat'
    aliases = ('quit', 'q')

    def exec(self, args):
        self.session.quit(' '.join(args))


class ConnectCommand(Command):
    name = 'connect'
    description = 'connect to the configured server'
    aliases = ('c',)

    def exec(self, args):
        network = self.session.network
        status = self.session.store.status
        if network.connected:
            self.post('* Already connected to %s' % network.address, status)
            return
        self.post('* Connecting to %s' % network.address, status)
        network.connect()


class StatusCommand(Command):
    name = 'status'
    description = 'switch to the status window'
    aliases = ('s',)

    def exec(self, args):
        self.session.renderer.focus(self.session.store.status.name)


class HelpCommand(Command):
    name = 'help'
    description = 'list commands'
    aliases = ('h', '?')

    def exec(self, args):
        status = self.session.store.status
        self.post('* Commands:', status)
        for command in self.session.commands:
            meta = command.metadata
            aliases = ' (%s)' % ', '.join('/' + a for a in meta.aliases) if meta.aliases else ''
            self.post('  /%s%s - %s' % (meta.name, aliases, meta.description), status)
        self.session.renderer.focus(status.name)


class JoinCommand(Command):
    name = 'join'
    description = 'join a channel: /join <#channel>'
    aliases = ('j',)

    def exec(self, args):
        if not args:
            raise self.usage('<#channel>')
        self.session.network.require_connection()
        for name in args:
            self.session.network.join(name)


class PartCommand(Command):
    name = 'part'
    description = 'leave a channel: /part [#channel] [reason]'
    aliases = ('p', 'leave')

    def exec(self, args):
        args = list(args)
        # A first word that is not a channel starts the reason
        if args and (args[0] in self.session.store or args[0].startswith(CHANNEL_PREFIXES)):
            name = args.pop(0)
        else:
            name = self.session.current_channel_name
        channel = self.session.store.get(name)
        if channel is None:
            raise CommandError('no such channel: %s' % name)
        if channel.status:
            raise CommandError('the status window cannot be closed')
        if channel.private:
            self.session.store.remove(name)
            if self.session.current_channel_name == name:
                self.session.current_channel_name = self.session.store.status.name
            return
        self.session.network.require_connection()
        self.session.network.part(name, ' '.join(args))


class QueryCommand(Command):
    name = 'query'
    description = 'open a private chat: /query <nick> [message]'
    aliases = ('msg', 'm')

    def exec(self, args):
        if not args:
            raise self.usage('<nick> [message]')
        nick, text = args[0], ' '.join(args[1:])
        channel = self.session.store.add(nick, ChannelKind.PRIVATE)
        self.session.current_channel_name = channel.name
        if text:
            self.session.say(channel, text)


class ClearCommand(Command):
    name = 'clear'
    description = 'clear the current window'
    aliases = ('cls',)

    def exec(self, args):
        view = self.session.renderer.ensure_view(self.session.current_channel())
        self.session.screen.clear_view(view.name)


class LogoCommand(Command):
    name = 'logo'
    description = 'print the logo'

    def exec(self, args):
        from .render import LOGO
        for line in LOGO:
            self.post(line)


class VersionCommand(Command):
    name = 'version'
    description = 'print the version'
    aliases = ('v',)

    def exec(self, args):
        from . import __version__
        self.post('* termchat %s' % __version__)


class NickCommand(Command):
    name = 'nick'
    description = 'change your nick: /nick <nick>'
    aliases = ('n',)

    def exec(self, args):
        if not args:
            raise self.usage('<nick>')
        network = self.session.network
        network.change_nick(args[0])
        if not network.connected:
            self.session.nick = args[0]
            self.post('* Nick set to %s' % args[0], self.session.store.status)


class PassCommand(Command):
    name = 'pass'
    description = 'set the server password: /pass <password>'

    def exec(self, args):
        if not args:
            raise self.usage('<password>')
        self.session.network.password = args[0]
        self.post('* Server password set', self.session.store.status)


class RawCommand(Command):
    name = 'raw'
    description = 'send a raw line to the server: /raw <line>'
    aliases = ('quote',)

    def exec(self, args):
        if not args:
            raise self.usage('<line>')
        self.session.network.require_connection()
        self.session.network.send_raw(' '.join(args))


class NamesCommand(Command):
    name = 'names'
    description = 'list the nicks in the current channel'
    aliases = ('who',)

    def exec(self, args):
        channel = self.session.current_channel()
        if channel.status:
            raise CommandError('the status window has no nick list')
        self.post(channel.nick_list_string(colored=True), channel)
        self.post(channel.nick_metrics_string(), channel)


BUILTIN_COMMANDS = (
    ExitCommand,
    ConnectCommand,
    StatusCommand,
    HelpCommand,
    JoinCommand,
    PartCommand,
    QueryCommand,
    ClearCommand,
    LogoCommand,
    VersionCommand,
    NickCommand,
    PassCommand,
    RawCommand,
    NamesCommand,
)


class CommandRegistry:
    """Ordered command table bound to one session.

    Attributes
    ----------
    session : `termchat.session.Session`
    commands : `list` of `Command`
    empty : `EmptyCommand`
        Returned by `resolve` when nothing matches.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, session):
        self.session = session
        self.commands = []
        self.empty = EmptyCommand(session)

    def __iter__(self):
        return iter(self.commands)

    def __len__(self):
        return len(self.commands)

    def register(self, command_classes=BUILTIN_COMMANDS):
        """Build the command table. Later calls are ignored.

        Raises
        ------
        `termchat.error.DuplicateCommandError`
            If a name or alias is claimed twice.
        """
        if self.commands:
            self.logger.debug('commands already registered')
            return self
        commands = [cls(self.session) for cls in command_classes]
        seen = {}
        for command in commands:
            for token in (command.name,) + tuple(command.aliases):
                if token in seen:
                    raise DuplicateCommandError('%r is claimed by both /%s and /%s' % (
                        token, seen[token].name, command.name))
                seen[token] = command
        self.commands = commands
        self.logger.info('registered %d commands', len(commands))
        return self

    def resolve(self, token):
        for command in self.commands:
            if command.matches(token):
                return command
        self.logger.debug('unknown command %r', token)
        return self.empty

    def run(self, token, args=()):
        return self.resolve(token).exec(list(args))


def register(session):
    """Register the built-in commands on `session` and return the registry."""
    if session.commands is None:
        session.commands = CommandRegistry(session)
    return session.commands.register()
