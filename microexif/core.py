"""Core definitions to be shared amongst the modules.
"""
# standard library imports
from enum import IntEnum

# 3rd party library imports
import numpy as np


class DataType(IntEnum):
    """TIFF field types understood by the directory builder.

    See Also
    --------
    DATATYPE2FMT : struct format and width of each type.
    """

    BYTE = 1  # 8-bit unsigned integer
    ASCII = 2  # 8-bit byte holding a 7-bit ASCII code, NUL-terminated
    SHORT = 3  # 16-bit unsigned integer
    LONG = 4  # 32-bit unsigned integer
    RATIONAL = 5  # two LONGs, numerator and denominator
    UNDEFINED = 7  # 8-bit byte, meaning depends on the field
    SLONG = 9  # 32-bit signed integer
    SRATIONAL = 10  # two SLONGs, numerator and denominator


# maps the TIFF enumerated datatype to the corresponding struct datatype code,
# the data width, and the numpy datatype of a single component
DATATYPE2FMT = {
    DataType.BYTE: {"format": "B", "nbytes": 1, "nptype": np.uint8},
    DataType.ASCII: {"format": "B", "nbytes": 1, "nptype": np.uint8},
    DataType.SHORT: {"format": "H", "nbytes": 2, "nptype": np.uint16},
    DataType.LONG: {"format": "I", "nbytes": 4, "nptype": np.uint32},
    DataType.RATIONAL: {"format": "II", "nbytes": 8, "nptype": np.uint32},
    DataType.UNDEFINED: {"format": "B", "nbytes": 1, "nptype": np.uint8},
    DataType.SLONG: {"format": "i", "nbytes": 4, "nptype": np.int32},
    DataType.SRATIONAL: {"format": "ii", "nbytes": 8, "nptype": np.int32},
}

# Types that may be stored directly in the 4-byte value field of a directory
# entry when short enough.  Rationals always go to the extra data.
INLINE_TYPES = (
    DataType.BYTE, DataType.ASCII, DataType.SHORT, DataType.LONG,
    DataType.SLONG,
)

RATIONAL_TYPES = (DataType.RATIONAL, DataType.SRATIONAL)

# JPEG markers
APP1 = b'\xff\xe1'
DQT = b'\xff\xdb'

EXIF_IDENTIFIER = b'Exif\x00\x00'

# TIFF header constants
BIG_ENDIAN_MARK = b'MM'
LITTLE_ENDIAN_MARK = b'II'
TIFF_VERSION = 42
FIRST_IFD_OFFSET = 8

# Size of a classic TIFF directory entry and of the value field inside it.
IFD_ENTRY_LENGTH = 12
MAX_INLINE_PAYLOAD_LENGTH = 4

# The APP1 length field and the entry count are 16-bit.
MAX_SEGMENT_LENGTH = 0xFFFF
MAX_NUM_TAGS = 0xFFFF

_BYTEORDER = {
    'big': '>',
    'little': '<',
}

_BYTEORDER_MARK = {
    'big': BIG_ENDIAN_MARK,
    'little': LITTLE_ENDIAN_MARK,
}

# A handful of well-known tag numbers.  Used by the command line, the builder
# itself treats tag numbers as opaque.
TAGNAME2NUM = {
    'ImageDescription': 0x010E,
    'Make': 0x010F,
    'Model': 0x0110,
    'Orientation': 0x0112,
    'XResolution': 0x011A,
    'YResolution': 0x011B,
    'ResolutionUnit': 0x0128,
    'Software': 0x0131,
    'DateTime': 0x0132,
    'Artist': 0x013B,
    'YCbCrPositioning': 0x0213,
    'Copyright': 0x8298,
    'ExposureTime': 0x829A,
    'FNumber': 0x829D,
    'ISOSpeedRatings': 0x8827,
    'DateTimeOriginal': 0x9003,
    'CreateDate': 0x9004,
    'FocalLength': 0x920A,
    'FocalLengthIn35mmFilm': 0xA405,
    'LensModel': 0xA434,
}

TAGNUM2NAME = {v: k for k, v in TAGNAME2NUM.items()}
