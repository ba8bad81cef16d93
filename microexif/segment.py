"""The JPEG APP1 marker segment that carries Exif metadata.
"""
# standard library imports
import io
import struct

# local imports
from .core import APP1, EXIF_IDENTIFIER, MAX_SEGMENT_LENGTH
from .options import check_hexdump_width, get_option


class LayoutError(ValueError):
    """Raise this exception if the metadata does not fit the file format."""

    pass


class App1Segment(object):
    """Container for an Exif APP1 segment.

    Attributes
    ----------
    marker : bytes
        The two-byte APP1 marker, always 0xFFE1.
    length : int
        Value of the segment length field.  It counts itself, the
        identifier and the TIFF structure, but not the marker.
    tiff : bytes
        The TIFF header, image file directory and extra data.
    """
    marker = APP1
    longname = 'APP1'

    def __init__(self, tiff):
        self.tiff = bytes(tiff)

        # 2 bytes for the length field itself plus the identifier
        self.length = 2 + len(EXIF_IDENTIFIER) + len(self.tiff)
        if self.length > MAX_SEGMENT_LENGTH:
            msg = (
                f'The Exif data requires an APP1 segment of {self.length} '
                f'bytes, but an APP1 segment cannot be longer than '
                f'{MAX_SEGMENT_LENGTH} bytes.'
            )
            raise LayoutError(msg)

    def __repr__(self):
        return f'microexif.segment.App1Segment(tiff=<{len(self.tiff)} bytes>)'

    def __str__(self):
        msg = f'{self.longname} marker segment @ (0, {self.length + 2})'
        msg += f'\n    Identifier:  {EXIF_IDENTIFIER!r}'
        msg += f'\n    TIFF:  {len(self.tiff)} bytes'
        return msg

    def write(self, fptr):
        """Write the segment to a file.

        The length field always goes out big-endian, as does everything
        else in a JPEG marker segment, no matter the byte order of the TIFF
        structure inside it.
        """
        fptr.write(struct.pack('>2sH', self.marker, self.length))
        fptr.write(EXIF_IDENTIFIER)
        fptr.write(self.tiff)

    def to_bytes(self):
        """Return the entire segment, marker included."""
        b = io.BytesIO()
        self.write(b)
        return b.getvalue()


def hexdump(blob, width=None):
    """
    Render bytes as rows of upper case hex values.

    Parameters
    ----------
    blob : bytes
        Data to render.
    width : int, optional
        Number of bytes per row, with an extra space halfway through.
        Defaults to the 'print.hexdump_width' option.  Must be a positive
        even number, otherwise ValueError is raised.

    Returns
    -------
    str
        Multi-line string, no trailing newline.
    """
    if width is None:
        width = get_option('print.hexdump_width')
    else:
        check_hexdump_width(width)
    half = width // 2

    lines = []
    for start in range(0, len(blob), width):
        row = blob[start:start + width]
        left = ' '.join(f'{b:02X}' for b in row[:half])
        right = ' '.join(f'{b:02X}' for b in row[half:])
        line = f'{left}  {right}' if right else left
        lines.append(line)

    return '\n'.join(lines)
