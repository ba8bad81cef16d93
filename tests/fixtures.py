"""
Test fixtures common to more than one test point.
"""

# Standard library imports
from collections import namedtuple
import pathlib
import shutil
import struct
import tempfile
import unittest

# 3rd party library imports
from PIL import Image

# Local imports
import microexif


DecodedApp1 = namedtuple(
    'DecodedApp1',
    ['marker', 'length', 'identifier', 'endian', 'version', 'ifd_offset',
     'entries', 'next_ifd', 'tiff']
)


def decode_app1(blob):
    """
    Take apart an APP1 segment, honoring the byte order mark of the TIFF
    header rather than assuming one.

    Returns
    -------
    DecodedApp1
        The entries are (tag, dtype, count, field) tuples, where field is
        the raw 4-byte value-or-offset field.  Offsets in the fields are
        relative to the start of the tiff attribute.
    """
    marker, length = struct.unpack('>2sH', blob[:4])
    identifier = blob[4:10]
    tiff = blob[10:]

    if tiff[:2] == b'MM':
        endian = '>'
    elif tiff[:2] == b'II':
        endian = '<'
    else:
        raise ValueError(f'bad byte order mark {tiff[:2]}')

    version, ifd_offset = struct.unpack(endian + 'HI', tiff[2:8])

    (num_tags,) = struct.unpack(endian + 'H', tiff[ifd_offset:ifd_offset + 2])

    entries = []
    for j in range(num_tags):
        start = ifd_offset + 2 + j * 12
        tag, dtype, count = struct.unpack(endian + 'HHI', tiff[start:start + 8])
        entries.append((tag, dtype, count, tiff[start + 8:start + 12]))

    start = ifd_offset + 2 + num_tags * 12
    (next_ifd,) = struct.unpack(endian + 'I', tiff[start:start + 4])

    return DecodedApp1(
        marker, length, identifier, endian, version, ifd_offset, entries,
        next_ifd, tiff
    )


def write_jpeg(path, size=(32, 24)):
    """Write a small solid color JPEG with Pillow."""
    image = Image.new('RGB', size, color=(200, 100, 50))
    image.save(path, format='JPEG')


class TestCommon(unittest.TestCase):
    """
    Common setup for many if not all tests.
    """

    def setUp(self):
        microexif.reset_option('all')

        # Create a temporary directory to be cleaned up following each test,
        # as well as names for an input and an output JPEG.
        self.test_dir = tempfile.mkdtemp()
        self.test_dir_path = pathlib.Path(self.test_dir)
        self.temp_jpeg_filename = self.test_dir_path / 'test.jpg'
        self.temp_exif_filename = self.test_dir_path / 'test_exif.jpg'

    def tearDown(self):
        shutil.rmtree(self.test_dir)
        microexif.reset_option('all')


class TestJPEGCommon(TestCommon):
    """
    Same as TestCommon, but a JPEG file is ready to be used as input.
    """

    def setUp(self):
        super().setUp()
        write_jpeg(self.temp_jpeg_filename)
