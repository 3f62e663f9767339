#!/usr/bin/env python3
"""
dispatcher.py - Routes key activations into the keyboard core

================================================================================
EVENTS FROM THE INPUT SOURCE
================================================================================

The input source (the on-screen keyboard window, or a test) decides whether
a touch was a quick tap or a sustained press; the dispatcher never measures
time. It receives:

    tap(key)                    a press released before the hold threshold
    press_begin(key)            the hold threshold was reached on key
    press_move(position, hit)   the held pointer moved
    press_end()                 the held pointer was released
    press_cancel()              the press was interrupted

================================================================================
ROUTING A TAP
================================================================================

    role              effect
    ───────────────   ───────────────────────────────────────────────────
    DELETE            text_sink.delete_backward()
    MODE_TOGGLE       layout state transition, "layout-changed" signal
    FIXED_INSERTION   text_sink.insert_text(key.text), no mapping
    NORMAL            text_sink.insert_text(resolve(key.glyph))

A sustained press on a NORMAL key with alternates opens the alternates
session; press_end() commits it. A sustained press on any other key acts
as a tap when it is released.
================================================================================
"""

from alternates import AlternatesSession, new_handler_id
from catalog import KeyRole
from insertion import InsertionMapper
from layout_state import LayoutStateMachine

import logging

logger = logging.getLogger(__name__)


class KeyDispatcher:

    def __init__(self, catalog, text_sink):
        self.catalog = catalog
        self.mapper = InsertionMapper(catalog.insertion)
        self.layout_state = LayoutStateMachine(catalog)
        self.session = AlternatesSession(catalog, self.mapper, text_sink)
        self._text_sink = text_sink
        self._held_key = None
        self._layout_handlers = dict()

    def connect(self, signal, callback):
        """
        "layout-changed" is handled here; the alternates signals are passed
        on to the session.

        Returns:
            int: handler id to pass to disconnect()
        """
        if signal == 'layout-changed':
            handler_id = new_handler_id()
            self._layout_handlers[handler_id] = callback
            return handler_id
        return self.session.connect(signal, callback)

    def disconnect(self, handler_id):
        if self._layout_handlers.pop(handler_id, None) is None:
            self.session.disconnect(handler_id)

    def active_layout(self):
        return self.layout_state.active_layout()

    def _emit_layout_changed(self):
        layout = self.active_layout()
        for callback in list(self._layout_handlers.values()):
            callback(layout)

    def reset(self):
        """Drop any press in progress and go back to the script layout."""
        self.press_cancel()
        if self.layout_state.reset():
            self._emit_layout_changed()

    def tap(self, key):
        self._held_key = None
        self.session.cancel()
        if key.role == KeyRole.DELETE:
            logger.debug('tap: delete backward')
            self._text_sink.delete_backward()
        elif key.role == KeyRole.MODE_TOGGLE:
            if self.layout_state.handle(key.event):
                self._emit_layout_changed()
        elif key.role == KeyRole.FIXED_INSERTION:
            logger.debug(f'tap: fixed insertion {key.text!r}')
            self._text_sink.insert_text(key.text)
        else:
            text = self.mapper.resolve(key.glyph)
            logger.debug(f'tap: "{key.glyph}" -> {text!r}')
            if text:
                self._text_sink.insert_text(text)

    def press_begin(self, key):
        """
        Returns:
            bool: True if an alternates session was opened for key.
        """
        self._held_key = None
        if key.role == KeyRole.NORMAL and self.session.begin(key.glyph):
            return True
        # the session was not opened, so a previous one must not survive either
        self.session.cancel()
        self._held_key = key
        return False

    def press_move(self, position, hit_test):
        self.session.update(position, hit_test)

    def press_end(self):
        if self.session.active:
            self.session.commit()
            return
        key = self._held_key
        if key is not None:
            self.tap(key)

    def press_cancel(self):
        self._held_key = None
        self.session.cancel()
