"""Typed, byte-accurate tag values for a TIFF image file directory.

Every TagValue carries its value in one canonical form, a sequence of bytes
with each multi-byte unit stored most significant byte first.  Conversion to
the byte order of the output happens when the directory is built.
"""
# standard library imports
from collections import namedtuple
from fractions import Fraction
import struct

# 3rd party library imports
import numpy as np

# local imports
from .core import DataType, DATATYPE2FMT, RATIONAL_TYPES, TAGNUM2NAME
from .options import get_option


class ConstructionError(ValueError):
    """Raise this exception if a tag value cannot be encoded as requested."""

    pass


_TagValue = namedtuple('_TagValue', ['tag', 'dtype', 'count', 'raw'])


class TagValue(_TagValue):
    """
    One TIFF/EXIF field.

    The type code is never checked against the content, e.g. an ASCII
    field may hold arbitrary bytes.  Neither is the tag number checked
    against any registry.

    Attributes
    ----------
    tag : int
        16-bit tag number, e.g. 0x010F for Make.
    dtype : DataType or int
        16-bit TIFF type code.
    count : int
        Number of units.  For ASCII this includes the NUL terminator, for
        the rational types one unit is a numerator/denominator pair.
    raw : bytes
        Canonical (big-endian) encoding of the value, normally
        count * unit-size bytes long.
    """
    __slots__ = ()

    def __new__(cls, tag, dtype, count, raw):
        raw = bytes(raw)

        if not 0 <= tag <= 0xFFFF:
            msg = f'Tag number {tag} does not fit into 16 bits.'
            raise ConstructionError(msg)
        if not 0 <= dtype <= 0xFFFF:
            msg = f'Type code {dtype} does not fit into 16 bits.'
            raise ConstructionError(msg)
        if not 0 <= count <= 0xFFFFFFFF:
            msg = f'Count {count} does not fit into 32 bits.'
            raise ConstructionError(msg)

        try:
            dtype = DataType(dtype)
        except ValueError:
            # unknown, but we do not second-guess the caller unless asked to
            pass

        if get_option('tag.strict'):
            _validate(tag, dtype, count, raw)

        return super().__new__(cls, tag, dtype, count, raw)

    def __str__(self):
        try:
            name = TAGNUM2NAME[self.tag]
        except KeyError:
            name = 'unknown'
        if isinstance(self.dtype, DataType):
            dtype = self.dtype.name
        else:
            dtype = f'type {self.dtype}'
        return (
            f'Tag 0x{self.tag:04X} ({name}):  {dtype}, count={self.count}, '
            f'{self.nbytes} bytes'
        )

    @property
    def nbytes(self):
        """Length of the encoded value in bytes."""
        return len(self.raw)

    @property
    def payload(self):
        """The value interpreted according to the type code.

        ASCII is returned as a string without the NUL terminator, the
        rational types as a list of (numerator, denominator) tuples and
        the integer types as a tuple of ints.  Unknown types come back as
        bytes.
        """
        if self.dtype == DataType.ASCII:
            return self.raw.rstrip(b'\x00').decode('utf-8')

        if self.dtype == DataType.UNDEFINED or self.dtype not in DATATYPE2FMT:
            return self.raw

        fmt = DATATYPE2FMT[self.dtype]['format'] * self.count
        values = struct.unpack('>' + fmt, self.raw)
        if self.dtype in RATIONAL_TYPES:
            return list(zip(values[0::2], values[1::2]))
        return values

    @classmethod
    def from_int(cls, tag, dtype, value):
        """Single integer value of type BYTE, SHORT, LONG, SLONG, UNDEFINED.

        Parameters
        ----------
        tag : int
            Tag number.
        dtype : DataType
            One of the integer type codes.
        value : int
            Must be representable in the type.
        """
        dtype = _check_dtype(
            dtype,
            (DataType.BYTE, DataType.SHORT, DataType.LONG, DataType.SLONG,
             DataType.UNDEFINED)
        )
        raw = _pack(dtype, value)
        return cls(tag, dtype, 1, raw)

    @classmethod
    def from_rational(cls, tag, numerator, denominator=None,
                      dtype=DataType.RATIONAL):
        """Single RATIONAL or SRATIONAL value.

        Parameters
        ----------
        tag : int
            Tag number.
        numerator : int, float, or Fraction
            If denominator is None, this is the entire value and is
            reduced to the nearest fraction that fits the type.
        denominator : int, optional
            Denominator of the fraction.
        dtype : DataType
            Either RATIONAL or SRATIONAL.
        """
        dtype = _check_dtype(dtype, RATIONAL_TYPES)

        if denominator is None:
            numerator, denominator = _as_fraction(numerator, dtype)

        raw = _pack(dtype, numerator, denominator)
        return cls(tag, dtype, 1, raw)

    @classmethod
    def from_string(cls, tag, text, dtype=DataType.ASCII):
        """NUL-terminated string value.

        Parameters
        ----------
        tag : int
            Tag number.
        text : str or bytes
            A str is encoded as UTF-8.  The terminator is added here and is
            included in the count.
        dtype : DataType
            Normally ASCII.
        """
        if isinstance(text, str):
            text = text.encode('utf-8')
        raw = bytes(text) + b'\x00'
        return cls(tag, dtype, len(raw), raw)

    @classmethod
    def from_bytes(cls, tag, data, dtype=DataType.UNDEFINED):
        """Opaque bytes, already in canonical order.

        Parameters
        ----------
        tag : int
            Tag number.
        data : bytes
            The value bytes, a whole number of units of the type.
        dtype : DataType
            Normally UNDEFINED or BYTE.
        """
        data = bytes(data)
        dtype = _check_dtype(dtype, tuple(DATATYPE2FMT))

        nbytes = DATATYPE2FMT[dtype]['nbytes']
        count, remainder = divmod(len(data), nbytes)
        if remainder != 0:
            msg = (
                f'{len(data)} bytes is not a whole number of '
                f'{dtype.name} units.'
            )
            raise ConstructionError(msg)

        return cls(tag, dtype, count, data)

    @classmethod
    def from_values(cls, tag, dtype, values):
        """Multiple integer or rational units.

        Parameters
        ----------
        tag : int
            Tag number.
        dtype : DataType
            Any of the supported type codes.
        values : sequence or numpy array
            Integers, or (numerator, denominator) pairs for the rational
            types.
        """
        dtype = _check_dtype(dtype, tuple(DATATYPE2FMT))
        nptype = np.dtype(DATATYPE2FMT[dtype]['nptype'])

        data = np.asarray(values)
        if data.size == 0:
            return cls(tag, dtype, 0, b'')

        if not np.issubdtype(data.dtype, np.integer):
            msg = f'{dtype.name} values must be integers, not {data.dtype}.'
            raise ConstructionError(msg)

        if dtype in RATIONAL_TYPES:
            if data.ndim != 2 or data.shape[1] != 2:
                msg = (
                    f'{dtype.name} values must be (numerator, denominator) '
                    f'pairs, got an array of shape {data.shape}.'
                )
                raise ConstructionError(msg)
            count = data.shape[0]
        else:
            data = data.ravel()
            count = data.size

        iinfo = np.iinfo(nptype)
        if data.min() < iinfo.min or data.max() > iinfo.max:
            msg = f'Values out of range for the {dtype.name} type.'
            raise ConstructionError(msg)

        raw = data.astype(nptype.newbyteorder('>')).tobytes()
        return cls(tag, dtype, count, raw)


def _check_dtype(dtype, allowed):
    try:
        dtype = DataType(dtype)
    except ValueError:
        msg = f'Unsupported TIFF type code ({dtype}).'
        raise ConstructionError(msg) from None

    if dtype not in allowed:
        msg = f'A {dtype.name} value cannot be constructed this way.'
        raise ConstructionError(msg)

    return dtype


def _pack(dtype, *values):
    fmt = '>' + DATATYPE2FMT[dtype]['format']
    try:
        return struct.pack(fmt, *values)
    except struct.error as e:
        msg = f'Cannot encode {values} as {dtype.name}:  {e}'
        raise ConstructionError(msg) from e


def _as_fraction(value, dtype):
    """Reduce a number to a numerator and denominator that fit the type."""
    if isinstance(value, float):
        # go through the shortest repr so that 5.6 becomes 28/5
        value = repr(value)

    try:
        frac = Fraction(value)
    except (TypeError, ValueError) as e:
        msg = f'Cannot interpret {value!r} as a fraction.'
        raise ConstructionError(msg) from e

    limit = 0xFFFFFFFF if dtype == DataType.RATIONAL else 0x7FFFFFFF
    frac = frac.limit_denominator(limit)
    return frac.numerator, frac.denominator


def _validate(tag, dtype, count, raw):
    """Strict validation of a directly constructed value."""
    if dtype not in DATATYPE2FMT:
        msg = f'Tag {tag}:  unsupported TIFF type code ({dtype}).'
        raise ConstructionError(msg)

    expected = count * DATATYPE2FMT[dtype]['nbytes']
    if len(raw) != expected:
        msg = (
            f'Tag {tag}:  {count} {dtype.name} unit(s) require {expected} '
            f'bytes, but {len(raw)} were supplied.'
        )
        raise ConstructionError(msg)
