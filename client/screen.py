#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Named view surfaces drawn with blessed.

Layout::

    +-----------------------------------------------+
    | title bar: channel name and topic             |
    |-----------------------------------------------|  (framed views only)
    |                                               |
    |            top view (scrollable)              |
    |                                               |
    | tab bar: [1:status] [2:#python*] [3:alice!]   |
    | > input line                                  |
    +-----------------------------------------------+
"""
import logging

from blessed import Terminal

from termchat.error import ViewError, UnknownViewError


class View:
    """A named, scrollable buffer of lines.

    Attributes
    ----------
    name : `str`
    geometry : (`int`, `int`, `int`, `int`)
        x0, y0, x1, y1 as requested by the last `get_or_create_view`.
    lines : `list` of `str`
    wrap : `bool`
    autoscroll : `bool`
        Jump back to the bottom whenever a line is written.
    frame : `bool`
    offset : `int`
        Lines scrolled up from the bottom.
    version : `int`
        Bumped on every change, used to skip redundant redraws.
    """

    def __init__(self, name, x0, y0, x1, y1):
        self.name = name
        self.geometry = (x0, y0, x1, y1)
        self.lines = []
        self.wrap = False
        self.autoscroll = False
        self.frame = True
        self.offset = 0
        self.version = 0

    def __repr__(self):
        return '<view "%s">' % self.name

    def write(self, text):
        """Append `text`; each newline starts a new line."""
        lines = text.split('\n')
        if text.endswith('\n'):
            lines.pop()
        self.lines.extend(lines)
        if self.autoscroll:
            self.offset = 0
        self.version += 1

    def clear(self):
        del self.lines[:]
        self.offset = 0
        self.version += 1

    def scroll(self, delta):
        self.offset = max(0, min(self.offset + delta, max(0, len(self.lines) - 1)))
        self.version += 1


class Screen:
    """View surface API on top of a blessed terminal.

    Views are kept in z-order; the last one is on top and is the one
    drawn. All methods must be called from the UI loop thread.
    """
    logger = logging.getLogger(__name__)

    def __init__(self, term=None):
        self.term = term or Terminal()
        self._views = {}
        self._order = []
        self._last_frame = None

    def size(self):
        return self.term.width, self.term.height

    def get_or_create_view(self, name, x0, y0, x1, y1):
        """Return (view, existed) for view `name`, setting its geometry.

        Raises
        ------
        `termchat.error.ViewError`
            Empty name or empty geometry.
        """
        if not name:
            raise ViewError('views need a name')
        if x0 >= x1 or y0 >= y1:
            raise ViewError('invalid dimensions for view %s: %r' % (
                name, (x0, y0, x1, y1)))
        view = self._views.get(name)
        if view is not None:
            view.geometry = (x0, y0, x1, y1)
            return view, True
        view = View(name, x0, y0, x1, y1)
        self._views[name] = view
        self._order.insert(0, name)
        self.logger.debug('new view %s %r', name, view.geometry)
        return view, False

    def view(self, name):
        try:
            return self._views[name]
        except KeyError:
            raise UnknownViewError('unknown view %s' % name) from None

    def view_names(self):
        return list(self._order)

    @property
    def top(self):
        return self._order[-1] if self._order else None

    def set_view_on_top(self, name):
        self.view(name)
        self._order.remove(name)
        self._order.append(name)

    def delete_view(self, name):
        self.view(name)
        del self._views[name]
        self._order.remove(name)

    def clear_view(self, name):
        self.view(name).clear()

    def scroll(self, name, delta):
        self.view(name).scroll(delta)

    def visible_lines(self, view, width, height):
        """Rows of `view` that fit in width x height, honoring its offset."""
        rows = []
        for line in view.lines:
            wrapped = self.term.wrap(line, width) or ['']
            rows.extend(wrapped if view.wrap else wrapped[:1])
        end = max(0, len(rows) - view.offset)
        return rows[max(0, end - height):end]

    def draw(self, title, tabs, prompt):
        """Redraw the screen if anything changed since the last call."""
        term = self.term
        width, height = self.size()
        top = self._views.get(self.top) if self.top else None
        frame = (width, height, title, tabs, prompt,
                 self.top, top.version if top else None)
        if frame == self._last_frame:
            return False
        self._last_frame = frame

        out = [term.home, term.reverse(term.ljust(title, width)[:width])]
        row = 1
        if top is not None and top.frame:
            out.append(term.move_xy(0, row) + '-' * width)
            row += 1
        body = height - row - 2
        lines = self.visible_lines(top, width, body) if top else []
        for i in range(body):
            text = lines[i] if i < len(lines) else ''
            out.append(term.move_xy(0, row + i) + text + term.clear_eol)
        out.append(term.move_xy(0, height - 2) + tabs + term.clear_eol)
        out.append(term.move_xy(0, height - 1) + prompt + term.clear_eol)
        print(''.join(out), end='', flush=True)
        return True

    def invalidate(self):
        self._last_frame = None

    def close(self):
        print(self.term.normal + self.term.clear, end='', flush=True)
