#!/usr/bin/env python3
# keyboard_window.py - On-screen keyboard window for IBus-Turki

import gi
gi.require_version('Gtk', '3.0')
gi.require_version('Gdk', '3.0')
from gi.repository import Gtk, Gdk
import logging
logger = logging.getLogger(__name__)

KEY_HEIGHT = 42
KEY_SPACING = 6
ROW_SPACING = 8
SELECTED_STYLE_CLASS = 'suggested-action'


class KeyboardWindow(Gtk.Window):
    """
    Draws the active layout and turns pointer input into dispatcher events.

    - Plain keys call dispatcher.tap() on "clicked".
    - Keys with alternates get a long-press gesture (the hold threshold lives
      here, not in the dispatcher) and a drag gesture that reports pointer
      motion while the candidates popover is open.
    - The popover is rebuilt from the session on "show-candidates" and the
      highlighted candidate follows "selection-changed".
    """
    def __init__(self, dispatcher, long_press_ms=500):
        super().__init__(title="IBus-Turki")
        self._dispatcher = dispatcher
        self._long_press_ms = long_press_ms
        self._gestures = []
        self._key_buttons = {}
        self._popover = None
        self._candidate_buttons = []

        self.set_accept_focus(False)
        self.set_keep_above(True)
        self.set_type_hint(Gdk.WindowTypeHint.UTILITY)
        self.set_border_width(3)

        self._rows_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=ROW_SPACING)
        self.add(self._rows_box)

        self._handler_ids = [
            dispatcher.connect('layout-changed', self.on_layout_changed),
            dispatcher.connect('show-candidates', self.on_show_candidates),
            dispatcher.connect('selection-changed', self.on_selection_changed),
            dispatcher.connect('hide-candidates', self.on_hide_candidates),
        ]
        self.connect('destroy', self.on_destroy)

        self.build_layout(dispatcher.active_layout())

    def _long_press_delay_factor(self):
        # GestureLongPress only takes a factor of the desktop-wide long press time
        base_ms = Gtk.Settings.get_default().get_property('gtk-long-press-time')
        return self._long_press_ms / base_ms if base_ms else 1.0

    def build_layout(self, layout):
        for child in self._rows_box.get_children():
            self._rows_box.remove(child)
            child.destroy()
        self._gestures = []
        self._key_buttons = {}

        for row in layout.rows:
            row_box = Gtk.Box(spacing=KEY_SPACING, homogeneous=True)
            row_box.set_size_request(-1, KEY_HEIGHT)
            for key in row:
                row_box.pack_start(self._create_key_button(key), True, True, 0)
            self._rows_box.pack_start(row_box, False, False, 0)
        self._rows_box.show_all()
        logger.debug(f'Keyboard window shows the {layout.mode.value} layout')

    def _create_key_button(self, key):
        button = Gtk.Button(label=key.glyph)
        button.set_focus_on_click(False)
        self._key_buttons[key] = button
        if not self._dispatcher.catalog.has_alternates(key.glyph):
            button.connect('clicked', self.on_key_clicked, key)
            return button

        long_press = Gtk.GestureLongPress.new(button)
        long_press.set_propagation_phase(Gtk.PropagationPhase.CAPTURE)
        long_press.set_property('delay-factor', self._long_press_delay_factor())
        long_press.connect('pressed', self.on_key_long_pressed, key)
        long_press.connect('cancelled', self.on_key_long_press_cancelled, key)

        drag = Gtk.GestureDrag.new(button)
        drag.set_propagation_phase(Gtk.PropagationPhase.CAPTURE)
        drag.connect('drag-update', self.on_key_drag_update, button)
        drag.connect('drag-end', self.on_key_drag_end)

        self._gestures.extend([long_press, drag])
        return button

    def on_key_clicked(self, button, key):
        self._dispatcher.tap(key)

    def on_key_long_pressed(self, gesture, x, y, key):
        self._dispatcher.press_begin(key)

    def on_key_long_press_cancelled(self, gesture, key):
        # released (or moved away) before the hold threshold: a plain tap
        if not self._dispatcher.session.active:
            self._dispatcher.tap(key)

    def on_key_drag_update(self, gesture, offset_x, offset_y, button):
        if not self._dispatcher.session.active:
            return
        ok, start_x, start_y = gesture.get_start_point()
        if not ok:
            return
        coords = button.translate_coordinates(self, start_x + offset_x, start_y + offset_y)
        if coords is None:
            return
        self._dispatcher.press_move(coords, self.hit_test)

    def on_key_drag_end(self, gesture, offset_x, offset_y):
        if self._dispatcher.session.active:
            self._dispatcher.press_end()

    def hit_test(self, position, candidates):
        """Return the index of the candidate button under position, or None."""
        x, y = position
        for index, candidate_button in enumerate(self._candidate_buttons[:len(candidates)]):
            coords = self.translate_coordinates(candidate_button, x, y)
            if coords is None:
                continue
            local_x, local_y = coords
            allocation = candidate_button.get_allocation()
            if 0 <= local_x < allocation.width and 0 <= local_y < allocation.height:
                return index
        return None

    def on_destroy(self, window):
        for handler_id in self._handler_ids:
            self._dispatcher.disconnect(handler_id)
        self._handler_ids = []
        logger.debug('Keyboard window destroyed; core signals disconnected')

    def on_layout_changed(self, layout):
        self.build_layout(layout)

    def on_show_candidates(self, session):
        self.on_hide_candidates(session)
        anchor_button = None
        for key, button in self._key_buttons.items():
            if key.glyph == session.anchor_glyph:
                anchor_button = button
                break
        if anchor_button is None:
            logger.warning(f'No key button for "{session.anchor_glyph}"; candidates not shown')
            return

        box = Gtk.Box(spacing=4, homogeneous=True)
        box.set_border_width(8)
        self._candidate_buttons = []
        for candidate in session.candidates:
            candidate_button = Gtk.Button(label=candidate)
            candidate_button.set_size_request(38, KEY_HEIGHT)
            candidate_button.set_focus_on_click(False)
            box.pack_start(candidate_button, True, True, 0)
            self._candidate_buttons.append(candidate_button)

        self._popover = Gtk.Popover.new(anchor_button)
        self._popover.set_modal(False)
        self._popover.set_position(Gtk.PositionType.TOP)
        self._popover.add(box)
        box.show_all()
        self._popover.popup()
        self.on_selection_changed(session)

    def on_selection_changed(self, session):
        for index, candidate_button in enumerate(self._candidate_buttons):
            style = candidate_button.get_style_context()
            if index == session.selected_index:
                style.add_class(SELECTED_STYLE_CLASS)
            else:
                style.remove_class(SELECTED_STYLE_CLASS)

    def on_hide_candidates(self, session):
        if self._popover is not None:
            self._popover.popdown()
            self._popover.destroy()
        self._popover = None
        self._candidate_buttons = []
