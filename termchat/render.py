#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Render coordinator: creates channel views and keeps them painted."""
import logging

from .channel import ChannelKind
from .error import UnknownViewError


LOGO = [
    r" _                          _           _   ",
    r"| |_ ___ _ __ _ __ ___   ___| |__   __ _| |_ ",
    r"| __/ _ \ '__| '_ ` _ \ / __| '_ \ / _` | __|",
    r"| ||  __/ |  | | | | | | (__| | | | (_| | |_ ",
    r" \__\___|_|  |_| |_| |_|\___|_| |_|\__,_|\__|",
]

# Blank lines written at the top of a new view.
SEED_NORMAL = '\n\n\n'
SEED_PRIVATE = '\n\n'


def paint_status(coordinator, channel, view):
    from . import __version__
    palette = channel.palette
    for line in LOGO:
        view.write(palette.colorize('green', line))
    view.write('')
    view.write('  Version: %s' % __version__)
    view.write('')
    view.write('* Type /help for a list of commands, /connect to connect.')


def paint_normal(coordinator, channel, view):
    view.write(channel.palette.colorize('green', '* Now talking on %s' % channel.name))
    if channel.topic:
        view.write('* Topic: %s' % channel.topic)


def paint_private(coordinator, channel, view):
    view.write(channel.palette.colorize('green', '* Private chat with %s' % channel.name))


class RenderCoordinator:
    """Creates, styles and paints the view of each channel.

    All methods must be called from the UI loop thread.

    Attributes
    ----------
    session : `termchat.session.Session`
    painters : `dict` of (`ChannelKind`, `function`)
        Paint routine for each channel kind, called once when a view is
        first created.
    """
    logger = logging.getLogger(__name__)

    PAINTERS = {
        ChannelKind.STATUS: paint_status,
        ChannelKind.PRIVATE: paint_private,
        ChannelKind.NORMAL: paint_normal,
    }

    def __init__(self, session, painters=None):
        self.session = session
        self.painters = dict(self.PAINTERS)
        if painters:
            self.painters.update(painters)

    @property
    def screen(self):
        return self.session.screen

    def render(self, channel, update=False):
        """Make sure the view of `channel` exists.

        Styling and the paint routine run only when the view is created
        by this call; rendering an existing view just updates its
        geometry. With `update` set the paint routine is skipped.

        Raises
        ------
        `termchat.error.RenderError`
            If the screen cannot create or update the view.
        """
        if not channel.max_width or not channel.max_height:
            channel.resize(*self.screen.size())

        view, existed = self.screen.get_or_create_view(
            channel.name, -1, -1, channel.max_width, channel.max_height - 2)
        if existed:
            return view

        self.logger.debug('created view for %s', channel)
        if not channel.status:
            view.autoscroll = True
            view.wrap = True
            view.frame = False
            if channel.private:
                channel.topic = 'Private Chat: %s' % channel.name
                view.write(SEED_PRIVATE)
            else:
                view.write(SEED_NORMAL)

        view.wrap = True

        if not update:
            self.painters[channel.kind](self, channel, view)

        if channel.private:
            self.focus_channel(channel)

        return view

    def ensure_view(self, channel):
        """Return the view of `channel`, rendering it now if the loop has not.

        Network threads add channels between ticks, so key bindings and
        commands can reach a channel before `render_pending` has.
        """
        try:
            return self.screen.view(channel.name)
        except UnknownViewError:
            view = self.render(channel)
            channel.ready = True
            return view

    def focus(self, name):
        """Raise the view of channel `name` and make it current."""
        channel = self.session.store.get(name)
        if channel is None:
            raise UnknownViewError('unknown view %s' % name)
        self.focus_channel(channel)

    def focus_channel(self, channel):
        """Raise the view of `channel`, creating it if needed, and make it current."""
        self.ensure_view(channel)
        self.screen.set_view_on_top(channel.name)
        self.session.current_channel_name = channel.name
        channel.unread = False
        channel.highlight = False

    def render_pending(self):
        """One loop tick worth of rendering.

        Creates views for new channels, moves queued lines into views,
        drops views of channels that left the store and keeps the current
        channel on top.
        """
        store = self.session.store
        names = set()
        for channel in store:
            names.add(channel.name)
            if not channel.ready:
                self.render(channel)
                channel.ready = True
            lines = channel.drain()
            if lines:
                view = self.screen.view(channel.name)
                for line in lines:
                    view.write(line)

        for name in self.screen.view_names():
            if name not in names:
                self.logger.debug('dropping view %s', name)
                self.screen.delete_view(name)

        # Looked up in the live store: a join may land during this tick
        current = store.get(self.session.current_channel_name, store.status)
        if (self.screen.top != current.name
                or self.session.current_channel_name != current.name):
            self.focus_channel(current)

    def resize(self):
        """Re-read the terminal size and update every view's geometry."""
        width, height = self.screen.size()
        for channel in self.session.store:
            channel.resize(width, height)
            if channel.ready:
                self.render(channel, update=True)
