"""microexif - build Exif APP1 segments and write them into JPEG files."""

__all__ = [
    'get_option', 'set_option', 'reset_option',
    'DataType', 'TagValue', 'TagDirectoryBuilder', 'App1Segment',
    'JpegInjector', 'hexdump',
    'ConstructionError', 'BuilderStateError', 'LayoutError',
    'MarkerNotFoundError',
]

# Local imports
from microexif import version
from .options import get_option, set_option, reset_option
from .core import DataType
from .tag import TagValue, ConstructionError
from .segment import App1Segment, LayoutError, hexdump
from .ifd import TagDirectoryBuilder, BuilderStateError
from .jpeg import JpegInjector, MarkerNotFoundError

__version__ = version.version
