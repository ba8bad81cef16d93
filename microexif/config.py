"""
Configure default tag values from a user configuration file.

The file is named microexifrc and holds a single [tags] section, e.g.

    [tags]
    make = Ximea
    model = MX245CG-SY-X4G3-FF
    copyright = 2024 Vlad Erium, Japan
"""
from configparser import ConfigParser
import os
import pathlib
import platform
import warnings

RC_NAME = 'microexifrc'

# Keys recognized in the [tags] section, mapped to tag names.
_TAG_KEYS = {
    'make': 'Make',
    'model': 'Model',
    'lens_model': 'LensModel',
    'software': 'Software',
    'copyright': 'Copyright',
    'artist': 'Artist',
}


def microexifrc_fname():
    """Return the path to the configuration file, or None if there is none.

    The current working directory takes precedence over the configuration
    directory.  Directories that happen to be named microexifrc are skipped.
    """
    candidates = (pathlib.Path.cwd(), get_configdir())
    for path in (directory / RC_NAME for directory in candidates):
        if path.is_file():
            return path
    return None


def read_tag_defaults():
    """
    Extract default tag values from the [tags] section of the configuration
    file.

    Returns
    -------
    dict
        Maps tag names (e.g. 'Make') to strings.  Empty if there is no
        configuration file or no [tags] section.
    """
    filename = microexifrc_fname()
    if filename is None:
        return {}

    parser = ConfigParser()
    parser.read(filename)
    if not parser.has_section('tags'):
        return {}

    defaults = {}
    for key, value in parser.items('tags'):
        try:
            defaults[_TAG_KEYS[key]] = value
        except KeyError:
            msg = (
                f'Unrecognized key ({key}) in the [tags] section of '
                f'{filename}.'
            )
            warnings.warn(msg, UserWarning)
    return defaults


def get_configdir():
    """Return the configuration directory.

    XDG_CONFIG_HOME/microexif if that variable is set and not empty,
    otherwise $HOME/.config/microexif, except on Windows (where HOME may be
    set to something unusual) and when HOME is unset, where the user's home
    directory is used directly.
    """
    xdg_config_home = os.environ.get('XDG_CONFIG_HOME')
    if xdg_config_home:
        return pathlib.Path(xdg_config_home) / 'microexif'

    home = os.environ.get('HOME')
    if home is None or platform.system() == 'Windows':
        return pathlib.Path.home() / 'microexif'

    return pathlib.Path(home) / '.config' / 'microexif'
