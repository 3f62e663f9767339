#!/usr/bin/env python3
# tests/test_catalog.py - Unit tests for catalog.py

import pytest
import json
import os
import sys

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from catalog import (
    Key,
    KeyRole,
    LayoutCatalog,
    Mode,
    ModeEvent,
    normalize_alternates,
    parse_catalog,
    parse_key,
)

DEFAULT_LAYOUT_PATH = os.path.join(os.path.dirname(__file__), '..', 'data', 'layouts', 'turki.json')

YEH = 'ی'
DIACRITICS_KEY = '◌َُِ'
FATHA_PLACEHOLDER = '◌َ'
KASRA_PLACEHOLDER = '◌ِ'
DAMMA_PLACEHOLDER = '◌ُ'


def minimal_layout_data(**overrides):
    data = {
        'name': 'test',
        'modes': {
            'script': [['a', 'b'], [{'glyph': '123', 'role': 'mode_toggle', 'event': 'to_numeric_symbolic'}]],
            'numbers': [['1', '2'], [{'glyph': 'ABC', 'role': 'mode_toggle', 'event': 'to_script'}]],
            'symbols': [['#', '%'], [{'glyph': 'ABC', 'role': 'mode_toggle', 'event': 'to_script'}]],
        },
        'alternates': {'a': ['à', 'á']},
        'insertion': {},
    }
    data.update(overrides)
    return data


class TestParseKey:
    """Test suite for parse_key()"""

    def test_plain_string_is_normal_key(self):
        """Test that a bare string becomes a Normal key printing that string"""
        key = parse_key('ض')

        assert key == Key('ض', KeyRole.NORMAL)
        assert key.event is None
        assert key.text is None

    def test_delete_key(self):
        """Test parsing a delete key"""
        key = parse_key({'glyph': '⌫', 'role': 'delete'})

        assert key.role == KeyRole.DELETE
        assert key.glyph == '⌫'

    def test_mode_toggle_key(self):
        """Test that a mode toggle carries its transition event"""
        key = parse_key({'glyph': '#+=', 'role': 'mode_toggle', 'event': 'to_symbols'})

        assert key.role == KeyRole.MODE_TOGGLE
        assert key.event == ModeEvent.TO_SYMBOLS

    def test_fixed_insertion_key(self):
        """Test that a fixed insertion key carries its text"""
        key = parse_key({'glyph': '|', 'role': 'fixed_insertion', 'text': '\u200c'})

        assert key.role == KeyRole.FIXED_INSERTION
        assert key.text == '\u200c'

    def test_unknown_role_rejected(self):
        """Test that an unknown role raises ValueError"""
        with pytest.raises(ValueError):
            parse_key({'glyph': 'x', 'role': 'shift'})

    def test_mode_toggle_without_event_rejected(self):
        """Test that a toggle without a valid event raises ValueError"""
        with pytest.raises(ValueError):
            parse_key({'glyph': 'x', 'role': 'mode_toggle'})
        with pytest.raises(ValueError):
            parse_key({'glyph': 'x', 'role': 'mode_toggle', 'event': 'to_emoji'})

    def test_fixed_insertion_without_text_rejected(self):
        """Test that a fixed insertion key without text raises ValueError"""
        with pytest.raises(ValueError):
            parse_key({'glyph': 'x', 'role': 'fixed_insertion'})

    def test_object_without_glyph_rejected(self):
        """Test that a key object needs a glyph"""
        with pytest.raises(ValueError):
            parse_key({'role': 'delete'})
        with pytest.raises(ValueError):
            parse_key(42)


class TestNormalizeAlternates:
    """Test suite for normalize_alternates()"""

    def test_anchor_prepended(self):
        """Test that the anchor becomes candidate 0"""
        result = normalize_alternates({YEH: ['ئ', 'ي', 'ؽ']})

        assert result[YEH] == (YEH, 'ئ', 'ي', 'ؽ')

    def test_anchor_already_first_not_duplicated(self):
        """Test that an anchor listed first is kept once"""
        result = normalize_alternates({'ن': ['ن', 'ں']})

        assert result['ن'] == ('ن', 'ں')

    def test_anchor_in_the_middle_moved_to_front(self):
        """Test that an anchor listed later moves to index 0"""
        result = normalize_alternates({'ه': ['هٔ', 'ه', 'ة']})

        assert result['ه'] == ('ه', 'هٔ', 'ة')

    def test_empty_list_dropped(self):
        """Test that an anchor without alternates is dropped"""
        result = normalize_alternates({'a': [], 'b': ['c']})

        assert 'a' not in result
        assert result['b'] == ('b', 'c')


class TestParseCatalog:
    """Test suite for parse_catalog() and LayoutCatalog"""

    def test_minimal_catalog(self):
        """Test building a catalog with all three modes"""
        catalog = parse_catalog(minimal_layout_data())

        assert catalog.name == 'test'
        for mode in Mode:
            assert catalog.layout(mode).mode == mode
        assert catalog.layout(Mode.SCRIPT).rows[0] == (Key('a'), Key('b'))

    def test_rows_are_tuples(self):
        """Test that the parsed rows are immutable"""
        catalog = parse_catalog(minimal_layout_data())

        rows = catalog.layout(Mode.NUMBERS).rows
        assert isinstance(rows, tuple)
        assert all(isinstance(row, tuple) for row in rows)

    def test_tables_are_read_only(self):
        """Test that alternates and insertion tables cannot be modified"""
        catalog = parse_catalog(minimal_layout_data())

        with pytest.raises(TypeError):
            catalog.alternates['b'] = ('b', 'c')
        with pytest.raises(TypeError):
            catalog.insertion['a'] = 'x'

    def test_candidates_and_has_alternates(self):
        """Test candidate lookup for anchors and plain glyphs"""
        catalog = parse_catalog(minimal_layout_data())

        assert catalog.candidates('a') == ('a', 'à', 'á')
        assert catalog.has_alternates('a') is True
        assert catalog.candidates('b') == ()
        assert catalog.has_alternates('b') is False

    def test_missing_mode_rejected(self):
        """Test that a catalog needs a layout for every mode"""
        data = minimal_layout_data()
        del data['modes']['symbols']

        with pytest.raises(ValueError):
            parse_catalog(data)

    def test_unknown_mode_rejected(self):
        """Test that an unknown mode name raises ValueError"""
        data = minimal_layout_data()
        data['modes']['emoji'] = [['x']]

        with pytest.raises(ValueError):
            parse_catalog(data)

    def test_missing_modes_table_rejected(self):
        """Test that data without a modes table raises ValueError"""
        with pytest.raises(ValueError):
            parse_catalog({'name': 'broken'})
        with pytest.raises(ValueError):
            parse_catalog(None)

    @pytest.mark.parametrize('rows', [None, 'ab', [None], ['ab'], {'a': 'b'}])
    def test_malformed_rows_rejected(self, rows):
        """Test that rows which are not a list of lists raise ValueError"""
        data = minimal_layout_data()
        data['modes']['script'] = rows

        with pytest.raises(ValueError):
            parse_catalog(data)

    @pytest.mark.parametrize('alternates', [['a', 'b'], 'a', {'a': 'àá'}, {'a': None}, {'a': ['à', 1]}])
    def test_malformed_alternates_rejected(self, alternates):
        """Test that an alternates table of the wrong shape raises ValueError"""
        with pytest.raises(ValueError):
            parse_catalog(minimal_layout_data(alternates=alternates))

    @pytest.mark.parametrize('insertion', [['a'], 'a', {'a': None}, {'a': 1}])
    def test_malformed_insertion_rejected(self, insertion):
        """Test that an insertion table of the wrong shape raises ValueError"""
        with pytest.raises(ValueError):
            parse_catalog(minimal_layout_data(insertion=insertion))

    def test_non_string_glyph_rejected(self):
        with pytest.raises(ValueError):
            parse_key({'glyph': 7})

    def test_layout_catalog_requires_all_modes(self):
        """Test the LayoutCatalog constructor directly"""
        with pytest.raises(ValueError):
            LayoutCatalog({}, {}, {})


class TestDefaultLayout:
    """Test suite for the shipped data/layouts/turki.json"""

    @pytest.fixture
    def catalog(self):
        with open(DEFAULT_LAYOUT_PATH, encoding='utf-8') as f:
            return parse_catalog(json.load(f))

    def test_script_rows(self, catalog):
        """Test the letter rows of the script layout"""
        rows = catalog.layout(Mode.SCRIPT).rows

        assert len(rows) == 4
        assert [k.glyph for k in rows[0]] == list('ضصقفغعهخحجچ')
        assert rows[2][-1].role == KeyRole.DELETE

    def test_bottom_row(self, catalog):
        """Test the special keys of the script bottom row"""
        bottom = catalog.layout(Mode.SCRIPT).rows[-1]

        assert bottom[0].role == KeyRole.MODE_TOGGLE
        assert bottom[0].event == ModeEvent.TO_NUMERIC_SYMBOLIC
        assert bottom[1].text == '\u200c'
        assert bottom[2].text == ' '
        assert bottom[3] == Key(DIACRITICS_KEY)
        assert bottom[4].text == '\n'

    def test_numeric_pages_toggle_between_each_other(self, catalog):
        """Test the toggles in the third row of the numeric/symbolic pages"""
        numbers_toggle = catalog.layout(Mode.NUMBERS).rows[2][0]
        symbols_toggle = catalog.layout(Mode.SYMBOLS).rows[2][0]

        assert numbers_toggle.event == ModeEvent.TO_SYMBOLS
        assert symbols_toggle.event == ModeEvent.TO_NUMBERS
        assert catalog.layout(Mode.NUMBERS).rows[-1][0].event == ModeEvent.TO_SCRIPT
        assert catalog.layout(Mode.SYMBOLS).rows[-1][0].event == ModeEvent.TO_SCRIPT

    def test_every_anchor_is_candidate_zero(self, catalog):
        """Test that each anchor reproduces itself at index 0"""
        assert len(catalog.alternates) == 7
        for anchor, candidates in catalog.alternates.items():
            assert candidates[0] == anchor
            assert candidates.count(anchor) == 1

    def test_diacritic_candidates(self, catalog):
        """Test the diacritics key candidates and their insertion forms"""
        assert catalog.candidates(DIACRITICS_KEY) == (
            DIACRITICS_KEY, FATHA_PLACEHOLDER, KASRA_PLACEHOLDER, DAMMA_PLACEHOLDER)
        assert catalog.insertion[FATHA_PLACEHOLDER] == '\u064e'
        assert catalog.insertion[KASRA_PLACEHOLDER] == '\u0650'
        assert catalog.insertion[DAMMA_PLACEHOLDER] == '\u064f'
        assert catalog.insertion[DIACRITICS_KEY] == ''

    def test_every_anchor_has_a_key(self, catalog):
        """Test that every alternates anchor is printed on the script layout"""
        glyphs = {key.glyph for key in catalog.layout(Mode.SCRIPT).keys()}

        assert set(catalog.alternates) <= glyphs
