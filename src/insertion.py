#!/usr/bin/env python3
"""
insertion.py - Maps a committed display glyph to the text actually inserted

Some glyphs exist only to be seen. A diacritic cannot be drawn on its own,
so its key shows it on a dotted circle (◌َ) while the text that reaches the
application is the bare combining mark (U+064E):

    display glyph      inserted string
    ─────────────      ───────────────
        ◌َ        ──►      U+064E  (fatha)
        ◌ِ        ──►      U+0650  (kasra)
        ی         ──►      ی       (not in the table: passthrough)
"""


class InsertionMapper:

    def __init__(self, insertion_map):
        self._map = insertion_map if insertion_map else {}

    def resolve(self, glyph):
        return self._map.get(glyph, glyph)
