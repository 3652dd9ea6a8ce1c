#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Seam between the chat core and the network layer.

The core never speaks a wire protocol. It drives a `NetworkClient` for
outbound requests, and the client reports what happened on the server by
calling a `NetworkEvents` instance from its own I/O thread(s).
"""
import queue
import logging
import importlib
import threading
from abc import ABC, abstractmethod
from datetime import datetime

from .channel import ChannelKind
from .error import ConfigError, NotConnectedError
from .user import User


class NetworkClient(ABC):
    """Outbound half of a chat network connection.

    Attributes
    ----------
    host : `str`
    port : `int`
    nick : `str`
        Nick requested at connect time.
    password : `None` or `str`
        Server password sent at connect time.
    ssl : `bool`
    connected : `bool`
    events : `None` or `NetworkEvents`
        Receiver for inbound events.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, host='localhost', port=6667, nick='termchat',
                 password=None, ssl=False):
        self.host = host
        self.port = port
        self.nick = nick
        self.password = password
        self.ssl = ssl
        self.connected = False
        self.events = None

    @property
    def address(self):
        return '%s:%d' % (self.host, self.port)

    def bind(self, events):
        self.events = events

    def require_connection(self):
        if not self.connected:
            raise NotConnectedError('not connected to %s' % self.address)

    @abstractmethod
    def connect(self):
        """Open the connection. Must not block the caller."""

    @abstractmethod
    def join(self, name):
        pass

    @abstractmethod
    def part(self, name, reason=''):
        pass

    @abstractmethod
    def change_nick(self, nick):
        pass

    @abstractmethod
    def privmsg(self, target, text):
        pass

    @abstractmethod
    def send_raw(self, line):
        pass

    @abstractmethod
    def quit(self, message=''):
        pass


class NetworkEvents:
    """Inbound events, applied to the session's channel state.

    Every method may be called from a network thread. Methods only touch
    channel state and channel backlogs; view surfaces are left to the UI
    loop.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, session):
        self.session = session

    @property
    def store(self):
        return self.session.store

    def deliver(self, channel, text, mention=False):
        """Queue a timestamped line on `channel` and update its flags."""
        channel.post('%s %s' % (datetime.now().strftime('%H:%M'), text))
        if channel.name != self.session.current_channel_name:
            channel.unread = True
            if mention:
                channel.highlight = True

    def notice(self, text):
        self.deliver(self.store.status, '* %s' % text)

    def on_connect(self, address):
        self.logger.info('connected to %s', address)
        self.notice('Connected to %s' % address)

    def on_disconnect(self, reason=''):
        self.logger.info('disconnected: %s', reason)
        self.notice('Disconnected%s' % (': %s' % reason if reason else ''))

    def on_join(self, name, nick):
        if nick == self.session.nick:
            channel = self.store.add(name, ChannelKind.NORMAL)
            channel.add_nick(nick)
            self.session.current_channel_name = name
            self.deliver(channel, '* Now talking on %s' % name)
            return
        channel = self.store.get(name)
        if channel is None:
            self.logger.warning('join: %s not found', name)
            return
        channel.add_nick(nick)
        self.deliver(channel, '* %s has joined %s' % (nick, name))

    def on_part(self, name, nick, reason=''):
        if nick == self.session.nick:
            self.store.remove(name)
            if self.session.current_channel_name == name:
                self.session.current_channel_name = self.store.status.name
            self.notice('You have left %s' % name)
            return
        channel = self.store.get(name)
        if channel is None:
            self.logger.warning('part: %s not found', name)
            return
        channel.remove_nick(nick)
        self.deliver(channel, '* %s has left %s%s' % (
            nick, name, ' (%s)' % reason if reason else ''))

    def on_quit(self, nick, reason=''):
        for channel in self.store:
            if channel.remove_nick(nick) is not None:
                self.deliver(channel, '* %s has quit%s' % (
                    nick, ' (%s)' % reason if reason else ''))

    def on_nick(self, old, new):
        if old == self.session.nick:
            self.session.nick = new
            self.notice('You are now known as %s' % new)
        for channel in self.store:
            if channel.rename_nick(old, new) is not None:
                self.deliver(channel, '* %s is now known as %s' % (old, new))

    def on_mode(self, name, nick, mode):
        channel = self.store.get(name)
        if channel is None or not channel.set_mode(nick, mode):
            self.logger.warning('mode: %s not found in %s', nick, name)
            return
        self.deliver(channel, '* %s mode is now [%s]' % (nick, mode or '-'))

    def on_topic(self, name, topic, set_by=''):
        channel = self.store.get(name)
        if channel is None:
            self.logger.warning('topic: %s not found', name)
            return
        channel.topic = topic
        channel.topic_set_by = set_by
        if set_by:
            self.deliver(channel, '* %s changed the topic to: %s' % (set_by, topic))
        else:
            self.deliver(channel, '* Topic for %s: %s' % (name, topic))

    def on_names(self, name, tokens, done=True):
        """Add NAMES reply tokens; print the listing once the reply is complete."""
        channel = self.store.get(name)
        if channel is None:
            self.logger.warning('names: %s not found', name)
            return
        for token in tokens:
            # NAMES carries the current mode, also for users already known
            mode, nick = User.parse(token)
            channel.add_nick(nick, mode)
            channel.set_mode(nick, mode)
        if done:
            channel.post(channel.nick_list_string(colored=True))
            channel.post(channel.nick_metrics_string())

    def on_message(self, target, sender, text):
        if target == self.session.nick:
            channel = self.store.add(sender, ChannelKind.PRIVATE)
        else:
            channel = self.store.get(target, self.store.status)
        user = channel.find_user(sender)
        name = user.display(colored=True) if user else sender
        mention = bool(self.session.nick) and self.session.nick in text
        self.deliver(channel, '<%s> %s' % (name, text), mention=mention)

    def on_notice(self, text):
        self.notice(text)


class LoopbackClient(NetworkClient):
    """Offline client that answers its own requests.

    Requests are queued to a worker thread which replays them as inbound
    events, the same way a real client's reader thread would.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._queue = queue.Queue()
        self._worker = None

    def _start(self):
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(
                target=self._run, name='loopback-%s' % self.address, daemon=True)
            self._worker.start()

    def _run(self):
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                handler, args = item
                if self.events is not None:
                    getattr(self.events, handler)(*args)
            except Exception:
                self.logger.exception('loopback event %r failed', item)
            finally:
                self._queue.task_done()

    def _emit(self, handler, *args):
        self._queue.put((handler, args))

    def wait(self):
        """Block until every queued event has been delivered."""
        self._queue.join()

    def connect(self):
        self._start()
        self.connected = True
        self.logger.info('loopback connect to %s as %s', self.address, self.nick)
        self._emit('on_connect', self.address)

    def join(self, name):
        self.require_connection()
        self._emit('on_join', name, self.nick)
        self._emit('on_names', name, ['@' + self.nick])

    def part(self, name, reason=''):
        self.require_connection()
        self._emit('on_part', name, self.nick, reason)

    def change_nick(self, nick):
        old, self.nick = self.nick, nick
        if self.connected:
            self._emit('on_nick', old, nick)

    def privmsg(self, target, text):
        self.require_connection()
        self.logger.debug('privmsg %s: %s', target, text)

    def send_raw(self, line):
        self.require_connection()
        self._emit('on_notice', '-> %s' % line)

    def quit(self, message=''):
        if self.connected:
            self.connected = False
            self._emit('on_disconnect', message)
        if self._worker is not None:
            self._queue.put(None)
            self._worker = None


def client_class(path):
    """Resolve a 'package.module:ClassName' path to a `NetworkClient` subclass."""
    module_name, sep, attr = path.partition(':')
    if not sep or not attr:
        raise ConfigError('network client must be "module:Class", got %r' % path)
    try:
        cls = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as ex:
        raise ConfigError('cannot load network client %r: %s' % (path, ex)) from ex
    if not (isinstance(cls, type) and issubclass(cls, NetworkClient)):
        raise ConfigError('%r is not a NetworkClient' % path)
    return cls
