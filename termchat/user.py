#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from .color import palette_index, colorize


OP = '@'
HALFOP = '%'
VOICE = '+'
NORMAL = ''

MODES = (OP, HALFOP, VOICE)


class User:
    """Channel participant.

    Attributes
    ----------
    nick : `str`
        Nick, unique within a channel.
    mode : `str`
        '@' (op), '%' (halfop), '+' (voice) or '' (normal).
    color : `int`
        Palette index used to draw the nick.
    """

    def __init__(self, nick, mode=NORMAL, color=None):
        self.nick = nick
        self.mode = mode
        self.color = palette_index(nick) if color is None else color

    @staticmethod
    def parse(token):
        """Split a NAMES style token into (mode, nick).

        >>> User.parse('@alice')
        ('@', 'alice')
        >>> User.parse('bob')
        ('', 'bob')
        """
        if token and token[0] in MODES:
            return token[0], token[1:]
        return NORMAL, token

    @property
    def rank(self):
        """Tally bucket of the mode: 'op', 'halfop', 'voice' or 'normal'."""
        if self.mode == OP:
            return 'op'
        if self.mode == HALFOP:
            return 'halfop'
        if self.mode == VOICE:
            return 'voice'
        return 'normal'

    def display(self, colored=False):
        text = '%s%s' % (self.mode, self.nick)
        if colored:
            return colorize(self.color, text)
        return text

    def __str__(self):
        return self.display()

    def __repr__(self):
        return '<user "%s%s">' % (self.mode, self.nick)
