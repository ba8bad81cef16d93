"""Encode an ordered set of tag values as a single TIFF image file directory.

The directory is laid out as follows, with offsets relative to the start of
the TIFF header::

    0       byte order mark, TIFF version, offset to the IFD (always 8)
    8       number of entries, N
    10      N 12-byte entries
    10+12N  offset of the next IFD (always 0, there is only one)
    14+12N  extra data

A value that fits into four bytes is stored in its entry.  Anything larger,
and every rational, is appended to the extra data and the entry holds its
offset instead.  Each extra data value starts on an even offset.
"""
# standard library imports
from collections import namedtuple
import io
import logging
import struct
import warnings

# 3rd party library imports
import numpy as np

# local imports
from .core import (
    _BYTEORDER, _BYTEORDER_MARK, DATATYPE2FMT, FIRST_IFD_OFFSET,
    IFD_ENTRY_LENGTH, INLINE_TYPES, MAX_INLINE_PAYLOAD_LENGTH, MAX_NUM_TAGS,
    TIFF_VERSION, DataType,
)
from .options import get_option
from .segment import App1Segment, LayoutError
from .tag import TagValue

logger = logging.getLogger('microexif')


class BuilderStateError(RuntimeError):
    """Raise this exception if a built directory is modified."""

    pass


IfdEntry = namedtuple(
    'IfdEntry', ['tag', 'dtype', 'count', 'inline', 'field', 'offset']
)
IfdEntry.__doc__ = """Placement of one tag in a built directory.

Attributes
----------
tag, dtype, count : int
    As written into the entry.
inline : bool
    True if the value is stored in the entry itself.
field : bytes
    The 4-byte value-or-offset field exactly as written.
offset : int or None
    Offset of the value in the extra data, relative to the TIFF header, or
    None for an inline value.
"""


class TagDirectoryBuilder(object):
    """
    Accumulate tag values and lay them out as an Exif APP1 segment.

    Tags are written in the order in which they were added, duplicates
    included.  Once built, the builder refuses further tags until it is
    reset.

    Attributes
    ----------
    byteorder : str
        Either 'big' or 'little'.
    sort_tags : bool
        If True, entries are written in ascending tag number order.
    entries : list
        IfdEntry records of the most recent build, empty before that.
    """

    def __init__(self, tags=None, byteorder=None, sort_tags=None):
        """
        Parameters
        ----------
        tags : iterable of TagValue, optional
            Initial tags.
        byteorder : str, optional
            Byte order of the TIFF structure.  Defaults to the
            'write.byteorder' option.
        sort_tags : bool, optional
            Defaults to the 'write.sort_tags' option.
        """
        if byteorder is None:
            byteorder = get_option('write.byteorder')
        if byteorder not in _BYTEORDER:
            msg = (
                f"Byte order must be either 'big' or 'little', not "
                f"{byteorder!r}."
            )
            raise ValueError(msg)
        self.byteorder = byteorder

        if sort_tags is None:
            sort_tags = get_option('write.sort_tags')
        self.sort_tags = sort_tags

        self._tags = []
        self._seen = set()
        self._extra_data = bytearray()
        self._built = False
        self.entries = []

        if tags is not None:
            self.extend(tags)

    def __len__(self):
        return len(self._tags)

    def __repr__(self):
        return (
            f'microexif.ifd.TagDirectoryBuilder(<{len(self._tags)} tags>, '
            f'byteorder={self.byteorder!r}, sort_tags={self.sort_tags})'
        )

    def __str__(self):
        msg = f'Image File Directory ({self.byteorder}-endian):'
        if not self._built:
            for tag in self._tags:
                msg += f'\n    {tag}'
            return msg

        for entry in self.entries:
            if entry.inline:
                where = f'inline {entry.field.hex(" ").upper()}'
            else:
                where = f'offset {entry.offset}'
            try:
                dtype = DataType(entry.dtype).name
            except ValueError:
                dtype = str(entry.dtype)
            msg += (
                f'\n    0x{entry.tag:04X}  {dtype:<9}  count={entry.count:<5}'
                f'  {where}'
            )
        return msg

    @property
    def tags(self):
        """The tag values, in the order they were added."""
        return tuple(self._tags)

    @property
    def built(self):
        return self._built

    def add_tag(self, value):
        """Append a tag value to the directory.

        Parameters
        ----------
        value : TagValue
            The tag.  A tag number that is already present is not rejected,
            both entries are written, but a warning is issued.
        """
        if self._built:
            msg = (
                'The directory has already been built.  Call reset() before '
                'adding more tags.'
            )
            raise BuilderStateError(msg)

        if not isinstance(value, TagValue):
            msg = f'Expected a TagValue, got {type(value).__name__}.'
            raise TypeError(msg)

        if value.tag in self._seen:
            msg = (
                f'Tag 0x{value.tag:04X} has already been added, it will be '
                f'written more than once.'
            )
            warnings.warn(msg, UserWarning)

        self._tags.append(value)
        self._seen.add(value.tag)

    def extend(self, values):
        """Append several tag values, e.g. those of another builder."""
        for value in values:
            self.add_tag(value)

    def reset(self):
        """Discard all tags and allow the builder to be used again."""
        self._tags = []
        self._seen = set()
        self._extra_data = bytearray()
        self._built = False
        self.entries = []

    def build(self):
        """Produce the complete APP1 segment.

        Returns
        -------
        bytes
            Marker, length, Exif identifier and TIFF structure, ready to be
            spliced into a JPEG.
        """
        segment = App1Segment(self._layout())
        self._built = True
        return segment.to_bytes()

    def build_tiff(self):
        """Produce the TIFF structure alone, without the APP1 wrapper.

        Returns
        -------
        bytes
            TIFF header, directory, next IFD offset and extra data.
        """
        tiff = self._layout()
        self._built = True
        return tiff

    def _layout(self):
        """Lay out the directory and the extra data.

        Every pass starts with an empty extra data buffer, so repeated
        builds of the same tags are byte-for-byte identical.
        """
        endian = _BYTEORDER[self.byteorder]

        if self.sort_tags:
            tags = sorted(self._tags, key=lambda x: x.tag)
        else:
            tags = self._tags

        num_tags = len(tags)
        if num_tags > MAX_NUM_TAGS:
            msg = (
                f'{num_tags} tags cannot be written, a single image file '
                f'directory holds at most {MAX_NUM_TAGS}.'
            )
            raise LayoutError(msg)

        b = io.BytesIO()

        b.write(struct.pack(
            endian + '2sHI',
            _BYTEORDER_MARK[self.byteorder], TIFF_VERSION, FIRST_IFD_OFFSET
        ))
        b.write(struct.pack(endian + 'H', num_tags))

        # The extra data follows the TIFF header, the entry count, the
        # entries and the next IFD offset.
        data_offset = FIRST_IFD_OFFSET + 2 + num_tags * IFD_ENTRY_LENGTH + 4

        self._extra_data = bytearray()
        self.entries = []

        for tag in tags:

            payload = _to_byteorder(tag, self.byteorder)

            if _fits_in_field(tag):

                # left-justify, zero pad on the right
                field = payload.ljust(MAX_INLINE_PAYLOAD_LENGTH, b'\x00')
                offset = None

            else:

                if data_offset > 0xFFFFFFFF:
                    msg = f'Offset {data_offset} does not fit into 32 bits.'
                    raise LayoutError(msg)

                field = struct.pack(endian + 'I', data_offset)
                offset = data_offset

                self._extra_data.extend(payload)
                data_offset += len(payload)

                # the next value must start on a word boundary
                if len(payload) % 2 != 0:
                    self._extra_data.append(0)
                    data_offset += 1

            where = 'inline' if offset is None else f'offset {offset}'
            logger.debug(f'tag 0x{tag.tag:04X}:  {len(payload)} bytes, {where}')

            b.write(struct.pack(endian + 'HHI', tag.tag, tag.dtype, tag.count))
            b.write(field)

            self.entries.append(
                IfdEntry(tag.tag, tag.dtype, tag.count, offset is None, field,
                         offset)
            )

        # only one IFD
        b.write(struct.pack(endian + 'I', 0))

        b.write(self._extra_data)

        return b.getvalue()


def _fits_in_field(tag):
    """Can the value be stored in the entry itself?

    Only the integer types and short strings qualify.  Rationals never do,
    and neither does UNDEFINED, whatever the length.
    """
    return (
        tag.dtype in INLINE_TYPES
        and tag.nbytes <= MAX_INLINE_PAYLOAD_LENGTH
    )


def _to_byteorder(tag, byteorder):
    """Return the value bytes of a tag in the requested byte order.

    The canonical encoding is big-endian, so this only has work to do for
    little-endian output, where each unit (each half of a rational) is
    reversed.
    """
    if byteorder == 'big':
        return tag.raw

    if tag.dtype not in DATATYPE2FMT:
        msg = (
            f'Tag 0x{tag.tag:04X} has an unsupported type code ({tag.dtype}) '
            f'and cannot be converted to little-endian.'
        )
        raise LayoutError(msg)

    nptype = np.dtype(DATATYPE2FMT[tag.dtype]['nptype'])
    if nptype.itemsize == 1:
        return tag.raw

    if len(tag.raw) % nptype.itemsize != 0:
        msg = (
            f'Tag 0x{tag.tag:04X} has {len(tag.raw)} bytes, which is not a '
            f'whole number of {nptype.itemsize}-byte units, and cannot be '
            f'converted to little-endian.'
        )
        raise LayoutError(msg)

    data = np.frombuffer(tag.raw, dtype=nptype.newbyteorder('>'))
    return data.astype(nptype.newbyteorder('<')).tobytes()
