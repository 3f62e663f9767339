import json
import os
import sys
from gi.repository import GLib
import logging

import catalog

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT_FILE_NAME = 'turki.json'


def get_package_name():
    '''
    returns 'ibus-turki'
    '''
    return 'ibus-turki'


def get_version():
    return '0.1.0'


def get_datadir():
    '''
    Return the path to the data directory under user-independent (central)
    location (= not under the HOME).
    The data directory next to src/ wins, which is the case for a source
    checkout or an editable install. A regular pip install puts the data
    under <prefix>/share/ibus-turki.
    '''
    source_datadir = os.path.normpath(os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'data'))
    if os.path.isdir(source_datadir):
        return source_datadir
    installed_datadir = os.path.join(sys.prefix, 'share', get_package_name())
    if os.path.isdir(installed_datadir):
        return installed_datadir
    return '/opt/ibus-turki'


def get_default_config_path():
    '''
    Return the path to the default config file in the system installation.
    This is the config.json that gets copied to user's home on first run.
    '''
    return os.path.join(get_datadir(), 'config.json')


def get_default_layout_path():
    return os.path.join(get_datadir(), 'layouts', DEFAULT_LAYOUT_FILE_NAME)


def get_localedir():
    return '/usr/local/share/locale'


def get_user_config_dir():
    '''
    Return the path to the config directory under $HOME.
    Typically, it would be $HOME/.config/ibus-turki
    '''
    return os.path.join(GLib.get_user_config_dir(), get_package_name())


def get_homedir():
    '''
    Return the path to the $HOME directory.
    '''
    return GLib.get_home_dir()


def get_user_config_dir_relative_to_home():
    return get_user_config_dir().replace(get_homedir(), '$' + '{HOME}')


def get_config_data():
    '''
    This function is to load the config JSON file from the HOME/.config/ibus-turki
    When the file is not present (e.g., after initial installation), it will copy
    the default config.json from the central location.

    Returns:
        tuple: (config_data, warnings_string) where warnings_string is empty if no warnings
    '''
    configfile_path = os.path.join(get_user_config_dir(), 'config.json')
    default_config_path = get_default_config_path()
    with open(default_config_path, encoding='utf-8') as f:
        default_config = json.load(f)
    warnings = ""

    if(not os.path.exists(configfile_path)):
        warning_msg = f'config.json is not found under {get_user_config_dir()} . Copying the default config.json from {default_config_path} ..'
        logger.warning(warning_msg)
        warnings = warning_msg
        save_config_data(default_config)
        return(default_config, warnings)
    try:
        with open(configfile_path, encoding='utf-8') as f:
            config_data = json.load(f)
    except json.decoder.JSONDecodeError as e:
        logger.error(f'Error loading the config.json under {get_user_config_dir()}')
        logger.error(e)
        logger.error(f'Using (but not copying) the default config.json from {default_config_path} ..')
        return default_config, warnings

    if not isinstance(config_data, dict):
        warning_msg = f'The config.json under {get_user_config_dir()} is not a JSON object. Using the default config.json'
        logger.warning(warning_msg)
        return default_config, warning_msg

    for k in default_config:
        if k not in config_data:
            warning_msg = f'The key "{k}" was not found in the config.json under {get_user_config_dir()} . Copying the default key-value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]
        if type(config_data[k]) != type(default_config[k]):
            warning_msg = f'Type mismatch found for the key "{k}" between config.json under {get_user_config_dir()} and default config.json. Replacing the value of this key with the value in default config.json'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]

    if config_data['long_press_ms'] <= 0:
        warning_msg = f'"long_press_ms" must be positive (got {config_data["long_press_ms"]}). Using {default_config["long_press_ms"]}'
        logger.warning(warning_msg)
        warnings += ("\n" if warnings else "") + warning_msg
        config_data['long_press_ms'] = default_config['long_press_ms']

    return config_data, warnings


def save_config_data(config_data):
    '''
    Save config data to the user config directory.

    Args:
        config_data: Dictionary containing configuration data to save

    Returns:
        bool: True if save was successful, False otherwise
    '''
    configfile_path = os.path.join(get_user_config_dir(), 'config.json')

    try:
        os.makedirs(get_user_config_dir(), exist_ok=True)
        with open(configfile_path, 'w', encoding='utf-8') as f:
            json.dump(config_data, f, ensure_ascii=False, indent=2)
        logger.info(f'Configuration saved successfully to {configfile_path}')
        return True
    except (OSError, TypeError) as e:
        logger.error(f'Error saving config.json to {configfile_path}')
        logger.error(e)
        return False


def get_layout_data(config):
    '''
    Load the layout JSON named by config["layout"].
    The user's layouts/ directory is searched first, then the installed one;
    the default turki.json is used when neither has the file.

    Returns:
        dict or None: decoded JSON, None if the file could not be loaded
    '''
    layout_file_name = config.get('layout', DEFAULT_LAYOUT_FILE_NAME)
    if os.path.exists(os.path.join(get_user_config_dir(), 'layouts', layout_file_name)):
        layout_file_path = os.path.join(get_user_config_dir(), 'layouts', layout_file_name)
    elif os.path.exists(os.path.join(get_datadir(), 'layouts', layout_file_name)):
        layout_file_path = os.path.join(get_datadir(), 'layouts', layout_file_name)
    else:
        logger.warning(f'Layout file {layout_file_name} not found; using {DEFAULT_LAYOUT_FILE_NAME}')
        layout_file_path = get_default_layout_path()
    try:
        with open(layout_file_path, encoding='utf-8') as layout_json:
            layout_data = json.load(layout_json)
        logger.info(f'layout JSON file loaded: {layout_file_path}')
        return layout_data
    except (OSError, json.decoder.JSONDecodeError) as error:
        logger.error(f'Error in loading layout file: {layout_file_path}')
        logger.error(error)
    return None


def load_catalog(config):
    '''
    Build the LayoutCatalog for the configured layout, falling back to the
    default layout if the configured one cannot be loaded or parsed.
    '''
    layout_data = get_layout_data(config)
    if layout_data is not None:
        try:
            return catalog.parse_catalog(layout_data)
        except ValueError as error:
            logger.error(f'Invalid layout "{config.get("layout")}": {error}')
    logger.warning(f'Using the default layout {get_default_layout_path()}')
    with open(get_default_layout_path(), encoding='utf-8') as layout_json:
        return catalog.parse_catalog(json.load(layout_json))
