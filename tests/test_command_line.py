"""
Tests for the exifinject command line script.
"""
# standard library imports
import argparse
import datetime
from fractions import Fraction
import io
import logging
import unittest
from unittest.mock import patch

# 3rd party library imports
from PIL import Image

# Local imports
from microexif import command_line, DataType
from microexif.command_line import build_tags, format_timestamp
from . import fixtures


def make_namespace(**kwargs):
    """Same attributes that the parser would produce, all unset."""
    args = argparse.Namespace(
        make=None, model=None, lens_model=None, software=None,
        copyright=None, artist=None, exposure_time=None, fnumber=None,
        iso=None, focal_length=None, focal_length_35mm=None,
        orientation=None, datetime=None, no_datetime=False
    )
    for key, value in kwargs.items():
        setattr(args, key, value)
    return args


@patch('microexif.config.microexifrc_fname', lambda: None)
class TestSuite(fixtures.TestJPEGCommon):

    def test_smoke(self):
        """
        SCENARIO:  Specify the input file and a few tags, let the output file
        name default.

        EXPECTED RESULT:  <stem>_exif.jpg is written next to the input and
        Pillow reads the tags back
        """
        sys_argv = [
            '', str(self.temp_jpeg_filename),
            '--make', 'Ximea',
            '--model', 'MX245CG-SY-X4G3-FF',
            '--exposure-time', '1/100',
            '--fnumber', '5.6',
            '--iso', '200',
            '--datetime', '2024:08:22 13:45:15',
        ]
        with (
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO()) as fake_out
        ):
            command_line.main()

        self.assertTrue(self.temp_exif_filename.exists())
        self.assertIn(str(self.temp_exif_filename), fake_out.getvalue())

        with Image.open(self.temp_exif_filename) as im:
            exif = im.getexif()

        self.assertEqual(exif[0x010F], 'Ximea')
        self.assertEqual(exif[0x0110], 'MX245CG-SY-X4G3-FF')
        self.assertEqual(exif[0x8827], 200)
        self.assertEqual(exif[0x9003], '2024:08:22 13:45:15')
        self.assertEqual(exif[0x9004], '2024:08:22 13:45:15')
        self.assertAlmostEqual(float(exif[0x829A]), 0.01)
        self.assertAlmostEqual(float(exif[0x829D]), 5.6)

    def test_output_option(self):
        """
        SCENARIO:  Specify the output file.

        EXPECTED RESULT:  that file is written
        """
        output = self.test_dir_path / 'other.jpg'
        sys_argv = [
            '', str(self.temp_jpeg_filename), '-o', str(output),
            '--make', 'Ximea', '--no-datetime'
        ]
        with (
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO())
        ):
            command_line.main()

        self.assertTrue(output.exists())
        self.assertFalse(self.temp_exif_filename.exists())

    def test_dump(self):
        """
        SCENARIO:  Request a hex dump.

        EXPECTED RESULT:  the dump starts with the APP1 marker
        """
        sys_argv = [
            '', str(self.temp_jpeg_filename), '--make', 'Ximea', '--dump'
        ]
        with (
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO()) as fake_out
        ):
            command_line.main()

        actual = fake_out.getvalue()
        self.assertTrue(actual.startswith('FF E1'))

    def test_little_endian(self):
        """
        SCENARIO:  Request a little-endian directory.

        EXPECTED RESULT:  the TIFF header starts with II, Pillow reads it
        """
        sys_argv = [
            '', str(self.temp_jpeg_filename), '--make', 'Ximea',
            '--orientation', '6', '--little-endian'
        ]
        with (
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO())
        ):
            command_line.main()

        data = self.temp_exif_filename.read_bytes()
        pos = data.find(b'Exif\x00\x00')
        self.assertEqual(data[pos + 6:pos + 8], b'II')

        with Image.open(self.temp_exif_filename) as im:
            exif = im.getexif()
        self.assertEqual(exif[0x0112], 6)

    def test_sort_tags(self):
        """
        SCENARIO:  Request sorted directory entries.

        EXPECTED RESULT:  the entries are in ascending tag order
        """
        sys_argv = [
            '', str(self.temp_jpeg_filename), '--make', 'Ximea',
            '--copyright', 'me', '--orientation', '1', '--sort-tags',
            '--no-datetime', '--dump'
        ]
        with (
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO())
        ):
            command_line.main()

        data = self.temp_exif_filename.read_bytes()
        pos = data.find(b'\xff\xe1')
        length = int.from_bytes(data[pos + 2:pos + 4], 'big')
        decoded = fixtures.decode_app1(data[pos:pos + length + 2])

        actual = [entry[0] for entry in decoded.entries]
        self.assertEqual(actual, [0x010F, 0x0112, 0x8298])

    def test_output_exists(self):
        """
        SCENARIO:  The output file already exists.

        EXPECTED RESULT:  FileExistsError unless --overwrite is given
        """
        self.temp_exif_filename.write_bytes(b'')

        sys_argv = ['', str(self.temp_jpeg_filename), '--make', 'Ximea']
        with (
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO()),
            self.assertRaises(FileExistsError)
        ):
            command_line.main()

        sys_argv.append('--overwrite')
        with (
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO())
        ):
            command_line.main()

        self.assertGreater(self.temp_exif_filename.stat().st_size, 0)

    def test_verbosity(self):
        """
        SCENARIO:  Run with --verbosity info.

        EXPECTED RESULT:  the injection is logged
        """
        sys_argv = [
            '', str(self.temp_jpeg_filename), '--make', 'Ximea',
            '--verbosity', 'info'
        ]
        with (
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO()),
            self.assertLogs(logger='microexif', level=logging.INFO) as cm
        ):
            command_line.main()

        self.assertTrue(any('DQT marker' in msg for msg in cm.output))

    def test_config_defaults(self):
        """
        SCENARIO:  The configuration file supplies a Make and a Copyright,
        the command line overrides the Make.

        EXPECTED RESULT:  the command line wins, the Copyright still comes
        from the configuration file
        """
        rcfile = self.test_dir_path / 'microexifrc'
        rcfile.write_text('[tags]\nmake = Ximea\ncopyright = Vlad Erium\n')

        sys_argv = ['', str(self.temp_jpeg_filename), '--make', 'EVT']
        with (
            patch('microexif.config.microexifrc_fname', lambda: rcfile),
            patch('sys.argv', new=sys_argv),
            patch('sys.stdout', new=io.StringIO())
        ):
            command_line.main()

        with Image.open(self.temp_exif_filename) as im:
            exif = im.getexif()
        self.assertEqual(exif[0x010F], 'EVT')
        self.assertEqual(exif[0x8298], 'Vlad Erium')


class TestSuiteBuildTags(unittest.TestCase):

    def test_order(self):
        """
        SCENARIO:  every option is given

        EXPECTED RESULT:  the tags come out in a fixed order
        """
        args = make_namespace(
            make='EVT', model='HB-25000-SB-C', lens_model='50mm',
            exposure_time=Fraction(1, 100), fnumber=Fraction(28, 10),
            iso=400, focal_length=Fraction(50), focal_length_35mm=75,
            datetime='2024:08:22 13:45:15', software='exifinject',
            orientation=1, copyright='me', artist='you'
        )
        actual = [t.tag for t in build_tags(args)]
        expected = [
            0x010F, 0x0110, 0xA434, 0x829A, 0x829D, 0x8827, 0x920A,
            0xA405, 0x9003, 0x9004, 0x0131, 0x0112, 0x8298, 0x013B,
        ]
        self.assertEqual(actual, expected)

    def test_types(self):
        """
        SCENARIO:  one option of each kind

        EXPECTED RESULT:  ASCII, RATIONAL, and SHORT values
        """
        args = make_namespace(
            make='EVT', exposure_time=Fraction(1, 100), iso=400,
            no_datetime=True
        )
        make, exposure, iso = build_tags(args)

        self.assertEqual(make.dtype, DataType.ASCII)
        self.assertEqual(make.raw, b'EVT\x00')

        self.assertEqual(exposure.dtype, DataType.RATIONAL)
        self.assertEqual(exposure.raw, b'\x00\x00\x00\x01\x00\x00\x00\x64')

        self.assertEqual(iso.dtype, DataType.SHORT)
        self.assertEqual(iso.raw, b'\x01\x90')

    def test_no_datetime(self):
        """
        SCENARIO:  --no-datetime and nothing else

        EXPECTED RESULT:  no tags
        """
        self.assertEqual(build_tags(make_namespace(no_datetime=True)), [])

    @patch('microexif.command_line.format_timestamp')
    def test_default_datetime(self, mock_format_timestamp):
        """
        SCENARIO:  no date given

        EXPECTED RESULT:  the current time is used for both date tags
        """
        mock_format_timestamp.return_value = '2025:01:02 03:04:05'

        tags = build_tags(make_namespace())

        self.assertEqual([t.tag for t in tags], [0x9003, 0x9004])
        for t in tags:
            self.assertEqual(t.raw, b'2025:01:02 03:04:05\x00')

    def test_format_timestamp(self):
        """
        SCENARIO:  format a known datetime

        EXPECTED RESULT:  colons in the date, a space before the time
        """
        dt = datetime.datetime(2024, 8, 22, 13, 45, 15)
        self.assertEqual(format_timestamp(dt), '2024:08:22 13:45:15')


if __name__ == '__main__':
    unittest.main()
