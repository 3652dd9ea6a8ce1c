#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import enum
import logging
import threading
import collections

from .color import Palette
from .error import ChannelError
from .user import User


STATUS_CHANNEL = 'status'


class ChannelKind(enum.Enum):
    STATUS = 'status'
    PRIVATE = 'private'
    NORMAL = 'normal'


class Channel:
    """Channel state shared between the network threads and the UI loop.

    The user collection is guarded by a lock on every read and write.
    Scalar fields (topic, flags) are plain attributes; the UI loop picks
    up changes on its next tick.

    Attributes
    ----------
    name : `str`
        Channel name, unique in the store.
    kind : `ChannelKind`
        Fixed at creation.
    topic : `str`
    topic_set_by : `str`
    ready : `bool`
        The view surface has been created and painted.
    unread : `bool`
        New lines arrived while the channel was not focused.
    highlight : `bool`
        Our nick was mentioned while the channel was not focused.
    max_width : `int`
    max_height : `int`
    palette : `termchat.color.Palette`
    """
    logger = logging.getLogger(__name__)

    def __init__(self, name, kind=ChannelKind.NORMAL, palette=None):
        self.name = name
        self._kind = ChannelKind(kind)
        self.topic = ''
        self.topic_set_by = ''
        self.ready = False
        self.unread = False
        self.highlight = False
        self.max_width = 0
        self.max_height = 0
        self.palette = palette or Palette()
        self._users = []
        self._backlog = collections.deque()
        self._lock = threading.Lock()

    def __str__(self):
        return '<channel "%s">' % self.name

    __repr__ = __str__

    @property
    def kind(self):
        return self._kind

    @property
    def status(self):
        return self._kind is ChannelKind.STATUS

    @property
    def private(self):
        return self._kind is ChannelKind.PRIVATE

    def users(self):
        """Snapshot of the user collection."""
        with self._lock:
            return tuple(self._users)

    def __len__(self):
        with self._lock:
            return len(self._users)

    def _find(self, nick):
        for user in self._users:
            if user.nick == nick:
                return user
        return None

    def find_user(self, nick):
        """Return the user named `nick` or `None`."""
        with self._lock:
            return self._find(nick)

    def add_nick(self, nick, mode=None):
        """Add a user unless one with the same nick is already present.

        `nick` may carry a NAMES style mode prefix ('@alice'). An explicit
        `mode` overrides the prefix.

        Returns
        -------
        `termchat.user.User`
            The new user, or the one that was already there.
        """
        prefix, nick = User.parse(nick)
        with self._lock:
            user = self._find(nick)
            if user is None:
                user = User(nick, prefix if mode is None else mode)
                self._users.append(user)
            return user

    def remove_nick(self, nick):
        """Remove the user named `nick`. Returns the removed user or `None`."""
        with self._lock:
            user = self._find(nick)
            if user is not None:
                self._users.remove(user)
            return user

    def set_mode(self, nick, mode):
        with self._lock:
            user = self._find(nick)
            if user is None:
                return False
            user.mode = mode
            return True

    def rename_nick(self, old, new):
        """Rename a user in place. A stale entry for `new` is dropped."""
        with self._lock:
            user = self._find(old)
            if user is None:
                return None
            stale = self._find(new)
            if stale is not None and stale is not user:
                self._users.remove(stale)
            renamed = User(new, user.mode)
            self._users[self._users.index(user)] = renamed
            return renamed

    def clear_users(self):
        with self._lock:
            del self._users[:]

    def complete(self, prefix):
        """Nicks starting with `prefix`, sorted."""
        return sorted(u.nick for u in self.users() if u.nick.startswith(prefix))

    def nick_list_string(self, colored=False):
        users = sorted(self.users(), key=lambda u: u.nick)
        return '%s\n%s\n%s\n' % (
            self.palette.colorize('green', '== NICK LIST START'),
            ', '.join(u.display(colored) for u in users),
            self.palette.colorize('green', '== NICK LIST END'),
        )

    def nick_metrics_string(self):
        # 09:41 * termchat: #python: Total of 213 nicks [0 ops, 0 halfops, 0 voices, 213 normal]
        users = self.users()
        tally = collections.Counter(u.rank for u in users)
        return '%s termchat: %s: Total of %d nicks [%d ops, %d halfops, %d voices, %d normal]\n' % (
            self.palette.colorize('green', '**'), self.name, len(users),
            tally['op'], tally['halfop'], tally['voice'], tally['normal'])

    def post(self, line):
        """Queue a line for the view. Safe to call from any thread."""
        self._backlog.append(line)

    def drain(self):
        """Remove and return every queued line, oldest first."""
        lines = []
        while True:
            try:
                lines.append(self._backlog.popleft())
            except IndexError:
                return lines

    def resize(self, width, height):
        self.max_width, self.max_height = width, height


class ChannelStore:
    """Ordered, thread-safe map of channel name to `Channel`.

    The status channel is created with the store and cannot be removed.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, palette=None, status_name=STATUS_CHANNEL):
        self.palette = palette or Palette()
        self._channels = {}
        self._lock = threading.Lock()
        self.status = self.add(status_name, ChannelKind.STATUS)

    def __str__(self):
        return '<channels %s>' % ', '.join(self.names())

    def __len__(self):
        with self._lock:
            return len(self._channels)

    def __contains__(self, name):
        with self._lock:
            return name in self._channels

    def __iter__(self):
        with self._lock:
            channels = list(self._channels.values())
        return iter(channels)

    def get(self, name, default=None):
        with self._lock:
            return self._channels.get(name, default)

    def add(self, name, kind=ChannelKind.NORMAL):
        """Return the channel named `name`, creating it if needed.

        The kind of an existing channel is never changed.
        """
        with self._lock:
            channel = self._channels.get(name)
            if channel is None:
                channel = Channel(name, kind, self.palette)
                self._channels[name] = channel
                self.logger.info('added %s (%s)', channel, channel.kind.value)
            elif channel.kind is not ChannelKind(kind):
                self.logger.debug('%s already exists as %s', channel,
                                  channel.kind.value)
            return channel

    def remove(self, name):
        with self._lock:
            channel = self._channels.get(name)
            if channel is None:
                return None
            if channel.status:
                raise ChannelError('the status channel cannot be removed')
            del self._channels[name]
        self.logger.info('removed %s', channel)
        return channel

    def names(self):
        with self._lock:
            return list(self._channels)

    def neighbour(self, name, step):
        """Name of the channel `step` places after `name`, wrapping around."""
        names = self.names()
        try:
            pos = names.index(name)
        except ValueError:
            return self.status.name
        return names[(pos + step) % len(names)]
