#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Palette helpers for 256-color terminals."""
import random
import logging
from hashlib import md5

from blessed import Terminal


logger = logging.getLogger(__name__)

# Range of the 256-color palette used for nick colors. It skips the 16
# system colors and the grayscale ramp at the end.
NICK_COLOR_MIN = 22
NICK_COLOR_MAX = 231

DEFAULT_COLORS = {
    'black': 0,
    'red': 1,
    'green': 2,
    'yellow': 3,
    'blue': 4,
    'magenta': 5,
    'cyan': 6,
    'white': 7,
    'grey': 8,
}

_terminal = None


def get_terminal():
    """Return the terminal used for color output, creating it on first use."""
    global _terminal
    if _terminal is None:
        _terminal = Terminal()
    return _terminal


def use_terminal(term):
    """Make `term` the terminal used for color output.

    The front end calls this once so that colored strings match the
    capabilities of the terminal it draws on.
    """
    global _terminal
    _terminal = term


def palette_index(key, low=NICK_COLOR_MIN, high=NICK_COLOR_MAX):
    """Map `key` onto a palette index in [low, high].

    The mapping is a stable hash, so the same nick gets the same color
    in every session.
    """
    if high < low:
        raise ValueError('empty palette range %d..%d' % (low, high))
    digest = md5(key.encode('utf-8')).digest()
    return low + int.from_bytes(digest[:4], 'big') % (high - low + 1)


def random_index(low=NICK_COLOR_MIN, high=NICK_COLOR_MAX):
    """Pick a random palette index in [low, high]."""
    return random.randint(low, high)


def colorize(index, text):
    """Wrap `text` in the escape sequences for palette color `index`."""
    return get_terminal().color(index)(text)


class Palette:
    """Named palette colors loaded from the `colors` configuration section.

    Attributes
    ----------
    colors : `dict` of (`str`, `int`)
        Color name to palette index.
    """

    def __init__(self, colors=None):
        self.colors = dict(DEFAULT_COLORS)
        if colors:
            self.colors.update(colors)

    def __getitem__(self, name):
        return self.colors[name]

    def __contains__(self, name):
        return name in self.colors

    def index(self, name, default=None):
        if name not in self.colors:
            logger.debug('unknown palette color %r', name)
            return default
        return self.colors[name]

    def colorize(self, name, text):
        index = self.index(name)
        if index is None:
            return text
        return colorize(index, text)
