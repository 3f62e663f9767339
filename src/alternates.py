#!/usr/bin/env python3
"""
alternates.py - Press-and-hold selection of alternate letterforms

================================================================================
WHAT IS AN ALTERNATES SESSION?
================================================================================

Several letters of the script have variants that do not get a key of their
own (ی → ئ ي ؽ, ا → آ ء أ إ, ...). Holding such a key opens a small row of
candidates above it; the user slides the finger along the row and lifts it
on the wanted glyph:

    hold "ی"                 slide right              lift
    ┌───┬───┬───┬───┐        ┌───┬───┬───┬───┐
    │[ی]│ ئ │ ي │ ؽ │  ───►  │ ی │ ئ │[ي]│ ؽ │  ───►  insert "ي"
    └───┴───┴───┴───┘        └───┴───┴───┴───┘

The anchor itself is always candidate 0, so lifting without choosing
anything inserts the letter printed on the key.

================================================================================
PROTOCOL
================================================================================

    ┌──────────┐   begin(g) with candidates   ┌──────────┐
    │   IDLE   │ ───────────────────────────► │  ACTIVE  │ ◄──┐ update()
    │          │ ◄─────────────────────────── │          │ ───┘
    └──────────┘   commit()  → one insertion  └──────────┘
                   cancel()  → nothing

    - begin() while ACTIVE cancels the running session first (a new press
      always wins) and never inserts anything for it.
    - update(), commit() and cancel() while IDLE are silently ignored, so
      late or duplicated events from the input source are harmless.
    - When the pointer is over no candidate, the selection falls back to
      candidate 0, not to the last candidate that was hovered.

================================================================================
RENDERER SIGNALS
================================================================================

    "show-candidates"     a session has just begun
    "selection-changed"   update() was called
    "hide-candidates"     the session ended (commit or cancel)

Callbacks registered with connect() receive the session and may read
candidates, selected_index and active; they must not drive the session.
connect() returns a handler id for disconnect(), as GObject does.
================================================================================
"""

import itertools
import logging

logger = logging.getLogger(__name__)

# shared by every signal source of the keyboard core, so ids never collide
_handler_ids = itertools.count(1)

SIGNALS = ('show-candidates', 'selection-changed', 'hide-candidates')


def new_handler_id():
    return next(_handler_ids)


class AlternatesSession:
    """
    The single alternates session of a keyboard.

    Attributes:
        anchor_glyph : str or None
            Glyph of the held key, None while idle.
        candidates : tuple
            Candidate glyphs, index 0 being the anchor; empty while idle.
        selected_index : int
            Currently highlighted candidate; always a valid index while active.
        active : bool
            True between begin() and commit()/cancel().
    """

    def __init__(self, catalog, mapper, text_sink):
        self._catalog = catalog
        self._mapper = mapper
        self._text_sink = text_sink
        self._handlers = {name: dict() for name in SIGNALS}
        self._reset()

    def _reset(self):
        self.anchor_glyph = None
        self.candidates = ()
        self.selected_index = 0
        self.active = False

    def connect(self, signal, callback):
        if signal not in self._handlers:
            raise ValueError(f'unknown signal: {signal}')
        handler_id = new_handler_id()
        self._handlers[signal][handler_id] = callback
        return handler_id

    def disconnect(self, handler_id):
        for handlers in self._handlers.values():
            if handlers.pop(handler_id, None) is not None:
                return
        raise ValueError(f'no handler with id {handler_id}')

    def _emit(self, signal):
        for callback in list(self._handlers[signal].values()):
            callback(self)

    def begin(self, anchor_glyph):
        """
        Open a session for anchor_glyph.

        Returns:
            bool: True if a session was opened, False if the glyph has no
                  alternates (the caller treats the press as a plain tap).
        """
        candidates = self._catalog.candidates(anchor_glyph)
        if not candidates:
            logger.debug(f'begin("{anchor_glyph}"): no alternates, no session')
            return False
        if self.active:
            logger.debug(f'begin("{anchor_glyph}") preempts session on "{self.anchor_glyph}"')
            self.cancel()
        self.anchor_glyph = anchor_glyph
        self.candidates = candidates
        self.selected_index = 0
        self.active = True
        logger.debug(f'Session started on "{anchor_glyph}" with {len(candidates)} candidate(s)')
        self._emit('show-candidates')
        return True

    def update(self, position, hit_test):
        """
        Move the selection to the candidate under position.

        hit_test(position, candidates) answers which candidate index lies
        under the pointer, or None when it is outside all of them.
        """
        if not self.active:
            return
        index = hit_test(position, self.candidates)
        if index is None:
            index = 0
        else:
            index = max(0, min(index, len(self.candidates) - 1))
        if index != self.selected_index:
            logger.debug(f'Selection: {self.selected_index} -> {index} ("{self.candidates[index]}")')
        self.selected_index = index
        self._emit('selection-changed')

    def selected_glyph(self):
        if not self.active:
            return None
        return self.candidates[self.selected_index]

    def commit(self):
        """
        Insert the selected candidate and end the session.

        Returns:
            str or None: The string handed to the text sink, or None if no
                         session was active.
        """
        if not self.active:
            return None
        glyph = self.candidates[self.selected_index]
        text = self._mapper.resolve(glyph)
        self._reset()
        self._emit('hide-candidates')
        logger.debug(f'Session commit: "{glyph}" -> {text!r}')
        if text:
            self._text_sink.insert_text(text)
        return text

    def cancel(self):
        if not self.active:
            return
        logger.debug(f'Session on "{self.anchor_glyph}" cancelled')
        self._reset()
        self._emit('hide-candidates')
