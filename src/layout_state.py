#!/usr/bin/env python3
"""
layout_state.py - Which key set is currently on screen

================================================================================
STATE MACHINE
================================================================================

    ┌──────────┐  TO_NUMERIC_SYMBOLIC  ┌──────────┐   TO_SYMBOLS   ┌──────────┐
    │  SCRIPT  │ ────────────────────► │ NUMBERS  │ ─────────────► │ SYMBOLS  │
    │ (start)  │                       │          │ ◄───────────── │          │
    └──────────┘                       └──────────┘   TO_NUMBERS   └──────────┘
         ▲                                  │                           │
         │            TO_SCRIPT             │         TO_SCRIPT         │
         └──────────────────────────────────┴───────────────────────────┘

Numbers and Symbols are two pages of the same numeric/symbolic family; the
letters are only reached again through TO_SCRIPT. Any other (state, event)
pair is ignored.

The state machine only answers "which Layout is active"; the Layout objects
themselves live in the catalog, so returning to a mode always yields the very
same Layout object.
================================================================================
"""

from catalog import Mode, ModeEvent

import logging

logger = logging.getLogger(__name__)

TRANSITIONS = {
    (Mode.SCRIPT, ModeEvent.TO_NUMERIC_SYMBOLIC): Mode.NUMBERS,
    (Mode.NUMBERS, ModeEvent.TO_SYMBOLS): Mode.SYMBOLS,
    (Mode.SYMBOLS, ModeEvent.TO_NUMBERS): Mode.NUMBERS,
    (Mode.NUMBERS, ModeEvent.TO_SCRIPT): Mode.SCRIPT,
    (Mode.SYMBOLS, ModeEvent.TO_SCRIPT): Mode.SCRIPT,
}


class LayoutStateMachine:

    def __init__(self, catalog):
        self._catalog = catalog
        self._mode = Mode.SCRIPT

    @property
    def mode(self):
        return self._mode

    def active_layout(self):
        return self._catalog.layout(self._mode)

    def handle(self, event):
        """
        Apply a mode toggle event.

        Returns:
            bool: True if the mode changed, False if the event has no
                  transition from the current mode.
        """
        target = TRANSITIONS.get((self._mode, event))
        if target is None:
            logger.debug(f'No transition from {self._mode.value} on {event}; ignored')
            return False
        logger.debug(f'Layout mode: {self._mode.value} -> {target.value}')
        self._mode = target
        return True

    def reset(self):
        """
        Returns:
            bool: True if the mode changed.
        """
        changed = self._mode != Mode.SCRIPT
        self._mode = Mode.SCRIPT
        return changed
