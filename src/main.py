"""
main.py - Entry point for the Turki IME engine

================================================================================
WHAT THIS FILE DOES
================================================================================

When Turki is selected as the input method, the IBus daemon starts this
script. It registers the engine with IBus and then waits for events:

    User selects Turki in system settings
            ↓
    IBus daemon starts this script (--ibus)
            ↓
    This script registers EngineTurki with IBus
            ↓
    Engine shows the on-screen keyboard and commits its text

Without --ibus the script registers its own IBus component, which is handy
for trying a change without restarting the daemon.

================================================================================
FILE RELATIONSHIPS
================================================================================

    main.py (THIS FILE)          ← Entry point, IBus registration
        │
        └──► engine.py           ← IBus engine, text sink
                  │
                  ├──► keyboard_window.py  (on-screen keyboard)
                  ├──► dispatcher.py       (key routing)
                  │       ├──► layout_state.py  (script/numbers/symbols)
                  │       ├──► alternates.py    (press-and-hold variants)
                  │       └──► insertion.py     (display glyph → text)
                  └──► util.py             (configuration, layout loading)
================================================================================
"""

from engine import EngineTurki
import util

import getopt
import gettext
import os
import locale
import logging
import sys
from shutil import copyfile

import gi
gi.require_version('Gtk', '3.0')
gi.require_version('IBus', '1.0')
from gi.repository import GLib, GObject, IBus, Gtk


class IMApp:
    """
    Connects the Turki engine to the IBus daemon and runs the main loop.

    exec_by_ibus=True means the daemon started us and already knows the
    component; otherwise the component and engine description are
    registered here.
    """

    def __init__(self, exec_by_ibus: bool) -> None:
        if not isinstance(exec_by_ibus, bool):
            raise TypeError("The `exec_by_ibus` parameter must be a boolean value.")
        self.exec_by_ibus = exec_by_ibus

        # the keyboard window needs GTK
        Gtk.init(None)

        self._mainloop = GLib.MainLoop()
        self._bus = IBus.Bus()
        self._bus.connect("disconnected", self._bus_disconnected_cb)
        self._factory = IBus.Factory(self._bus)
        self._factory.add_engine("turki", GObject.type_from_name("EngineTurki"))
        if exec_by_ibus:
            self._bus.request_name("org.freedesktop.IBus.Turki", 0)
        else:
            self._component = IBus.Component(
                name="org.freedesktop.IBus.Turki",
                description="Turki",
                version=util.get_version(),
                license="Apache-2.0",
                author="ibus-turki contributors",
                homepage="",
                textdomain=util.get_package_name())
            engine = IBus.EngineDesc(
                name="turki",
                longname="Turki",
                description="Turki on-screen keyboard",
                language="azb",
                license="Apache-2.0",
                author="ibus-turki contributors",
                icon=util.get_package_name(),
                layout="default")
            self._component.add_engine(engine)
            self._bus.register_component(self._component)
            self._bus.set_global_engine_async("turki", -1, None, None, None)

    def run(self):
        self._mainloop.run()

    def _bus_disconnected_cb(self, bus=None):
        self._mainloop.quit()


def print_help(v: int = 0) -> None:
    print("-i, --ibus             executed by IBus.")
    print("-h, --help             show this message.")
    print("-d, --daemonize        daemonize ibus")
    sys.exit(v)


def main():
    os.umask(0o077)

    # Create user specific data directory
    user_configdir = util.get_user_config_dir()
    os.makedirs(user_configdir, 0o700, True)
    os.makedirs(os.path.join(user_configdir, 'layouts'), 0o700, True)

    # check the config file and copy it from installed directory if it does not exist
    configfile_name = os.path.join(user_configdir, 'config.json')
    if not os.path.exists(configfile_name):
        copyfile(util.get_default_config_path(), configfile_name)

    # logging settings; the engine lowers or raises the level from config.json
    logfile_name = os.path.join(user_configdir, util.get_package_name() + '.log')
    logging.basicConfig(filename=logfile_name, level=logging.DEBUG, format='%(asctime)s %(levelname)-8s %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
    logger = logging.getLogger()
    logger.info(f'main.py user_configdir: {user_configdir}')
    logger.info(f'main.py util.get_datadir(): {util.get_datadir()}')

    exec_by_ibus = False
    daemonize = False

    shortopt = "ihd"
    longopt = ["ibus", "help", "daemonize"]

    try:
        opts, args = getopt.getopt(sys.argv[1:], shortopt, longopt)
    except getopt.GetoptError as err:
        logger.error(err)
        sys.exit(1)

    # argparse does not cope with the way IBus passes arguments
    for o, a in opts:
        if o in ("-h", "--help"):
            print_help(0)
        elif o in ("-d", "--daemonize"):
            daemonize = True
        elif o in ("-i", "--ibus"):
            exec_by_ibus = True
        else:
            sys.stderr.write("Unknown argument: %s\n" % o)
            print_help(1)
    logger.info(f'daemonize? : {daemonize}')
    logger.info(f'IBus exec? : {exec_by_ibus}')

    if daemonize:
        if os.fork():
            sys.exit()
    IMApp(exec_by_ibus).run()


if __name__ == "__main__":
    try:
        locale.bindtextdomain(util.get_package_name(), util.get_localedir())
    except AttributeError:
        # locale.bindtextdomain is missing on some platforms
        pass
    gettext.bindtextdomain(util.get_package_name(), util.get_localedir())
    main()
