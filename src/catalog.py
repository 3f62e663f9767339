#!/usr/bin/env python3
"""
catalog.py - Static key layouts, alternates and insertion tables

================================================================================
OVERVIEW
================================================================================

The keyboard shows one of three key sets at a time:

    ┌────────────┐  ۱۲۳   ┌────────────┐  #+=   ┌────────────┐
    │   SCRIPT   │ ─────► │  NUMBERS   │ ─────► │  SYMBOLS   │
    │ (letters)  │ ◄───── │            │ ◄───── │            │
    └────────────┘  ABC   └────────────┘  ۱۲۳   └────────────┘
          ▲                                           │
          └──────────────────── ABC ──────────────────┘

Every key set is a Layout (ordered rows of ordered Keys). Layouts, the
alternates table and the insertion table are read from a layout JSON file
once at start-up and never change afterwards.

================================================================================
LAYOUT FILE FORMAT
================================================================================

    {
      "name": "Turki",
      "modes": {
        "script":  [["ض", "ص", ...], ...],
        "numbers": [...],
        "symbols": [...]
      },
      "alternates": {"ی": ["ئ", "ي", "ؽ"], ...},
      "insertion":  {"◌َ": "َ", ...}
    }

A key is either a plain string (a Normal key printing that glyph) or an
object describing a special key:

    {"glyph": "⌫",   "role": "delete"}
    {"glyph": "۱۲۳", "role": "mode_toggle",     "event": "to_numeric_symbolic"}
    {"glyph": "|",   "role": "fixed_insertion", "text": "\\u200c"}

================================================================================
ALTERNATES
================================================================================

The candidate list of an anchor glyph always starts with the anchor itself,
so that "no change" can be selected:

    "ی": ["ئ", "ي", "ؽ"]   →   candidates("ی") == ("ی", "ئ", "ي", "ؽ")

Anchors with an empty list are dropped, which makes them plain keys.
================================================================================
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
import logging

logger = logging.getLogger(__name__)


class Mode(Enum):
    SCRIPT = 'script'
    NUMBERS = 'numbers'
    SYMBOLS = 'symbols'


class ModeEvent(Enum):
    """Events carried by mode toggle keys."""
    TO_NUMERIC_SYMBOLIC = 'to_numeric_symbolic'
    TO_SYMBOLS = 'to_symbols'
    TO_NUMBERS = 'to_numbers'
    TO_SCRIPT = 'to_script'


class KeyRole(Enum):
    NORMAL = 'normal'
    DELETE = 'delete'
    MODE_TOGGLE = 'mode_toggle'
    FIXED_INSERTION = 'fixed_insertion'


@dataclass(frozen=True)
class Key:
    """
    A single key on a layout.

    glyph : str
        What is printed on the key.
    role : KeyRole
        How a tap on the key is handled.
    event : ModeEvent or None
        Transition fired by a MODE_TOGGLE key.
    text : str or None
        String inserted by a FIXED_INSERTION key.
    """
    glyph: str
    role: KeyRole = KeyRole.NORMAL
    event: ModeEvent = None
    text: str = None


@dataclass(frozen=True)
class Layout:
    mode: Mode
    rows: tuple

    def keys(self):
        for row in self.rows:
            yield from row


class LayoutCatalog:
    """
    Immutable collection of everything the keyboard needs to know up front:
    one Layout per Mode, the alternates table and the insertion table.
    """

    def __init__(self, layouts, alternates, insertion, name=''):
        missing = [mode.value for mode in Mode if mode not in layouts]
        if missing:
            raise ValueError(f'layouts missing for mode(s): {", ".join(missing)}')
        self.name = name
        self._layouts = MappingProxyType(dict(layouts))
        self.alternates = MappingProxyType(normalize_alternates(alternates))
        self.insertion = MappingProxyType(dict(insertion))

    def layout(self, mode):
        return self._layouts[mode]

    def candidates(self, glyph):
        """Return the candidate tuple for glyph, or an empty tuple."""
        return self.alternates.get(glyph, ())

    def has_alternates(self, glyph):
        return len(self.candidates(glyph)) > 0


def normalize_alternates(alternates):
    """
    Put every anchor at index 0 of its own candidate list.

    Duplicates of the anchor inside the list are removed, and anchors with
    nothing to offer are dropped.
    """
    result = dict()
    for anchor, alts in alternates.items():
        if not alts:
            logger.warning(f'Empty alternates list for "{anchor}"; treating it as a plain key')
            continue
        result[anchor] = (anchor,) + tuple(a for a in alts if a != anchor)
    return result


def parse_key(spec):
    if isinstance(spec, str):
        return Key(spec)
    if not isinstance(spec, dict) or 'glyph' not in spec:
        raise ValueError(f'invalid key definition: {spec!r}')
    glyph = spec['glyph']
    if not isinstance(glyph, str):
        raise ValueError(f'key glyph must be a string: {glyph!r}')
    try:
        role = KeyRole(spec.get('role', KeyRole.NORMAL.value))
    except ValueError:
        raise ValueError(f'unknown role for key "{glyph}": {spec.get("role")!r}')
    if role == KeyRole.MODE_TOGGLE:
        try:
            return Key(glyph, role, event=ModeEvent(spec.get('event')))
        except ValueError:
            raise ValueError(f'mode toggle "{glyph}" has an invalid event: {spec.get("event")!r}')
    if role == KeyRole.FIXED_INSERTION:
        if not isinstance(spec.get('text'), str):
            raise ValueError(f'fixed insertion key "{glyph}" needs a "text" string')
        return Key(glyph, role, text=spec['text'])
    return Key(glyph, role)


def parse_catalog(layout_data):
    """
    Build a LayoutCatalog from the decoded layout JSON.

    Raises:
        ValueError: when the data does not describe all three modes, or any
                    of the rows, key definitions, alternates or insertion
                    tables is malformed.
    """
    if not isinstance(layout_data, dict) or not isinstance(layout_data.get('modes'), dict):
        raise ValueError('layout data has no "modes" table')
    layouts = dict()
    for mode_name, rows in layout_data['modes'].items():
        try:
            mode = Mode(mode_name)
        except ValueError:
            raise ValueError(f'unknown mode in layout data: {mode_name!r}')
        if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
            raise ValueError(f'rows of mode "{mode_name}" must be a list of lists')
        layouts[mode] = Layout(mode, tuple(tuple(parse_key(k) for k in row) for row in rows))

    alternates = layout_data.get('alternates', {})
    if not isinstance(alternates, dict):
        raise ValueError('"alternates" must be an object')
    for anchor, alts in alternates.items():
        if not isinstance(alts, list) or not all(isinstance(a, str) for a in alts):
            raise ValueError(f'alternates of "{anchor}" must be a list of strings')

    insertion = layout_data.get('insertion', {})
    if not isinstance(insertion, dict) or not all(isinstance(v, str) for v in insertion.values()):
        raise ValueError('"insertion" must map glyphs to strings')

    catalog = LayoutCatalog(layouts, alternates, insertion,
                            name=layout_data.get('name', ''))
    logger.debug(f'catalog "{catalog.name}" built: {len(catalog.alternates)} alternate anchor(s), '
                 f'{len(catalog.insertion)} insertion mapping(s)')
    return catalog
