"""
Manage microexif configuration settings.
"""
# Standard library imports
import copy


_original_options = {
    'print.hexdump_width': 16,
    'tag.strict': False,
    'write.byteorder': 'big',
    'write.sort_tags': False,
}
_options = copy.deepcopy(_original_options)


def set_option(key, value):
    """Set the value of the specified option.

    Available options:

        print.hexdump_width
        tag.strict
        write.byteorder
        write.sort_tags

    Parameters
    ----------
    key : str
        Name of a single option.
    value :
        New value of option.

    Option Descriptions
    -------------------
    print.hexdump_width : int
        Number of bytes per line in a hex dump of an APP1 segment.  A gap is
        inserted halfway through each line. [default: 16]
    tag.strict : bool
        When True, a TagValue constructed directly from raw bytes must have
        a known type code and exactly count * unit-size bytes, otherwise a
        ConstructionError is raised.  When False, the raw bytes are trusted
        as given. [default: False]
    write.byteorder : str
        Byte order of the TIFF structure, either 'big' or 'little'.  The
        APP1 length field is big-endian regardless. [default: 'big']
    write.sort_tags : bool
        When True, directory entries are written in ascending tag number
        order, as strict TIFF readers expect.  When False, entries are
        written in the order they were added. [default: False]

    See also
    --------
    get_option
    """
    if key not in _options.keys():
        raise KeyError('{key} not valid.'.format(key=key))

    if key == 'write.byteorder' and value not in ('big', 'little'):
        msg = f"Byte order must be either 'big' or 'little', not {value!r}."
        raise ValueError(msg)

    if key == 'print.hexdump_width':
        check_hexdump_width(value)

    _options[key] = value


def check_hexdump_width(value):
    """Raise ValueError unless value is a positive even number."""
    if value < 2 or value % 2 != 0:
        msg = f'The hex dump width must be a positive even number, not {value}.'
        raise ValueError(msg)


def get_option(key):
    """Return the value of the specified option

    Parameter
    ---------
    key : str
        Name of a single option.

    Returns
    -------
    result : the value of the option.

    See also
    --------
    set_option
    """
    return _options[key]


def reset_option(key):
    """
    Reset one or more options to their default value.

    Pass "all" as argument to reset all options.

    Parameter
    ---------
    key : str
        Name of a single option.
    """
    global _options
    if key == 'all':
        _options = copy.deepcopy(_original_options)
    else:
        if key not in _options.keys():
            raise KeyError('{key} not valid.'.format(key=key))
        _options[key] = _original_options[key]
