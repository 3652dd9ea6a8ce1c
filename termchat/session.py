#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import logging

from .channel import ChannelStore, STATUS_CHANNEL
from .color import Palette
from .command import register
from .error import ChannelError, CommandError
from .network import NetworkEvents
from .render import RenderCoordinator


class Session:
    """Chat session context, created once and shared by reference.

    Attributes
    ----------
    screen : `client.screen.Screen` or compatible
        View surface API.
    network : `termchat.network.NetworkClient`
        Outbound network requests.
    palette : `termchat.color.Palette`
    store : `termchat.channel.ChannelStore`
    commands : `None` or `termchat.command.CommandRegistry`
        Set by `register`.
    renderer : `termchat.render.RenderCoordinator`
    events : `termchat.network.NetworkEvents`
        Inbound event handler bound to `network`.
    current_channel_name : `str`
    auto_connect : `bool`
        Connect once at startup.
    nick : `str`
        Our nick, used to recognize our own joins and private messages.
    running : `bool`
    """
    logger = logging.getLogger(__name__)

    def __init__(self, screen, network, palette=None, nick=None,
                 auto_connect=False, status_name=STATUS_CHANNEL):
        self.screen = screen
        self.network = network
        self.palette = palette or Palette()
        self.store = ChannelStore(self.palette, status_name)
        self.current_channel_name = self.store.status.name
        self.auto_connect = auto_connect
        self.nick = nick or network.nick
        self.running = False
        self.commands = None
        self.renderer = RenderCoordinator(self)
        self.events = NetworkEvents(self)
        network.bind(self.events)

    def register(self):
        return register(self)

    def current_channel(self):
        return self.store.get(self.current_channel_name, self.store.status)

    def set_current(self, name):
        channel = self.store.get(name)
        if channel is None:
            raise ChannelError('no such channel: %s' % name)
        self.renderer.focus_channel(channel)

    def next_channel(self):
        self.set_current(self.store.neighbour(self.current_channel_name, 1))

    def prev_channel(self):
        self.set_current(self.store.neighbour(self.current_channel_name, -1))

    def say(self, channel, text):
        """Send `text` to `channel` and echo it locally."""
        if channel.status:
            raise CommandError('not in a channel, try /join <#channel>')
        self.network.privmsg(channel.name, text)
        user = channel.find_user(self.nick)
        name = user.display(colored=True) if user else self.nick
        channel.post('<%s> %s' % (name, text))

    def quit(self, message=''):
        self.logger.info('quit requested')
        self.running = False
        if self.network.connected:
            self.network.quit(message)
