from dispatcher import KeyDispatcher
from keyboard_window import KeyboardWindow
import util

import logging

import gi
gi.require_version('IBus', '1.0')
gi.require_version('Gtk', '3.0')
from gi.repository import Gtk, IBus
# http://lazka.github.io/pgi-docs/IBus-1.0/classes/Engine.html

logger = logging.getLogger(__name__)

NAME_TO_LOGGING_LEVEL = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

BACKSPACE_KEYCODE = 14


class EngineTurki(IBus.Engine):
    '''
    IBus side of the on-screen keyboard.

    The engine is the text sink of the keyboard core: committed glyphs go to
    the focused client through commit_text(), deletions are forwarded as
    BackSpace key events. It also owns the keyboard window and shows it
    while a client has the focus.
    '''
    __gtype_name__ = 'EngineTurki'

    def __init__(self):
        super().__init__()
        self._about_dialog = None
        self._window = None
        self._load_configs()
        self._dispatcher = KeyDispatcher(self._catalog, self)
        self._init_props()

    def _init_props(self):
        '''
        http://lazka.github.io/pgi-docs/IBus-1.0/classes/PropList.html
        '''
        self._prop_list = IBus.PropList()
        prop = IBus.Property(
            key='Keyboard',
            prop_type=IBus.PropType.NORMAL,
            label=IBus.Text.new_from_string("Show keyboard"),
            icon=None,
            tooltip=None,
            sensitive=True,
            visible=True,
            state=IBus.PropState.UNCHECKED,
            sub_props=None)
        self._prop_list.append(prop)
        prop = IBus.Property(
            key='About',
            prop_type=IBus.PropType.NORMAL,
            label=IBus.Text.new_from_string("About Turki..."),
            icon=None,
            tooltip=None,
            sensitive=True,
            visible=True,
            state=IBus.PropState.UNCHECKED,
            sub_props=None)
        self._prop_list.append(prop)

    def _load_configs(self):
        '''
        This function loads the config JSON file and the layout it names.
        The logging level value would be set to WARNING, if it's absent in the config JSON.
        '''
        self._config, warnings = util.get_config_data()
        if warnings:
            logger.info('config.json loaded with warnings')
        self._logging_level = self._load_logging_level(self._config)
        self._catalog = util.load_catalog(self._config)

    def _load_logging_level(self, config):
        level = config.get('logging_level', 'WARNING')
        if level not in NAME_TO_LOGGING_LEVEL:
            logger.warning(f'Specified logging level {level} is not recognized. Using the default WARNING level.')
            level = 'WARNING'
        logger.info(f'logging_level: {level}')
        logging.getLogger().setLevel(NAME_TO_LOGGING_LEVEL[level])
        return level

    # text sink

    def insert_text(self, text):
        logger.debug(f'insert_text({text!r})')
        self.commit_text(IBus.Text.new_from_string(text))

    def delete_backward(self):
        logger.debug('delete_backward()')
        self.forward_key_event(IBus.BackSpace, BACKSPACE_KEYCODE, 0)
        self.forward_key_event(IBus.BackSpace, BACKSPACE_KEYCODE, IBus.ModifierType.RELEASE_MASK)

    # keyboard window

    def _show_keyboard(self):
        if self._window is None:
            self._window = KeyboardWindow(self._dispatcher, self._config['long_press_ms'])
            self._window.connect('delete-event', self._on_window_delete)
        self._window.show_all()

    def _hide_keyboard(self):
        self._dispatcher.press_cancel()
        if self._window is not None:
            self._window.hide()

    def _on_window_delete(self, window, event):
        self._hide_keyboard()
        return True

    # IBus.Engine virtual methods

    def do_enable(self):
        logger.debug('enable')
        self.register_properties(self._prop_list)

    def do_disable(self):
        logger.debug('disable')
        if self._window is not None:
            self._window.destroy()
            self._window = None
        self._dispatcher.reset()

    def do_focus_in(self):
        self.register_properties(self._prop_list)
        if self._config['show_on_focus']:
            self._show_keyboard()

    def do_focus_out(self):
        self._hide_keyboard()

    def do_reset(self):
        self._dispatcher.press_cancel()

    def do_process_key_event(self, keyval, keycode, state):
        if state & IBus.ModifierType.RELEASE_MASK:
            return False
        if keyval == IBus.Escape and self._dispatcher.session.active:
            self._dispatcher.press_cancel()
            return True
        return False

    def do_property_activate(self, prop_name, state):
        logger.info(f'property_activate({prop_name}, {state})')
        if prop_name == 'Keyboard':
            self._show_keyboard()
        elif prop_name == 'About':
            if self._about_dialog:
                self._about_dialog.present()
                return
            dialog = Gtk.AboutDialog()
            dialog.set_program_name("Turki")
            dialog.set_logo_icon_name(util.get_package_name())
            dialog.set_default_icon_name(util.get_package_name())
            dialog.set_version(util.get_version())
            dialog.set_comments(f"config files location : {util.get_user_config_dir_relative_to_home()}")
            dialog.connect("response", self.about_response_callback)
            self._about_dialog = dialog
            dialog.show()

    def about_response_callback(self, dialog, response):
        dialog.destroy()
        self._about_dialog = None
