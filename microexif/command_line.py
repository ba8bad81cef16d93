"""Entry point for console script exifinject."""
# Standard library imports ...
import argparse
import datetime
from fractions import Fraction
import logging
import pathlib

# Local imports ...
from . import config
from .core import DataType, TAGNAME2NUM
from .ifd import TagDirectoryBuilder
from .jpeg import JpegInjector
from .segment import hexdump
from .tag import TagValue

# Exif date format, e.g. "2024:08:22 13:45:15"
TIMESTAMP_FORMAT = '%Y:%m:%d %H:%M:%S'


def format_timestamp(dt=None):
    """Format a datetime the way Exif expects, defaulting to now."""
    if dt is None:
        dt = datetime.datetime.now()
    return dt.strftime(TIMESTAMP_FORMAT)


def build_tags(args):
    """
    Translate parsed command line arguments into tag values.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed arguments.  Options left as None produce no tag.

    Returns
    -------
    list of TagValue
    """
    tags = []

    def add_string(name, value):
        if value is not None:
            tags.append(TagValue.from_string(TAGNAME2NUM[name], value))

    def add_rational(name, value):
        if value is not None:
            tags.append(TagValue.from_rational(TAGNAME2NUM[name], value))

    def add_short(name, value):
        if value is not None:
            tags.append(
                TagValue.from_int(TAGNAME2NUM[name], DataType.SHORT, value)
            )

    add_string('Make', args.make)
    add_string('Model', args.model)
    add_string('LensModel', args.lens_model)
    add_rational('ExposureTime', args.exposure_time)
    add_rational('FNumber', args.fnumber)
    add_short('ISOSpeedRatings', args.iso)
    add_rational('FocalLength', args.focal_length)
    add_short('FocalLengthIn35mmFilm', args.focal_length_35mm)

    if not args.no_datetime:
        timestamp = args.datetime or format_timestamp()
        add_string('DateTimeOriginal', timestamp)
        add_string('CreateDate', timestamp)

    add_string('Software', args.software)
    add_short('Orientation', args.orientation)
    add_string('Copyright', args.copyright)
    add_string('Artist', args.artist)

    return tags


def main():
    """Entry point for console script exifinject."""

    kwargs = {
        'description': 'Write Exif metadata into a copy of a JPEG file.',
        'formatter_class': argparse.ArgumentDefaultsHelpFormatter,
        'add_help': False
    }
    parser = argparse.ArgumentParser(**kwargs)

    defaults = config.read_tag_defaults()

    group1 = parser.add_argument_group(
        'Tags', 'Values to write into the Exif directory.'
    )

    group1.add_argument(
        '--make', help='Camera manufacturer.', default=defaults.get('Make')
    )
    group1.add_argument(
        '--model', help='Camera model.', default=defaults.get('Model')
    )
    group1.add_argument(
        '--lens-model', help='Lens model.', default=defaults.get('LensModel')
    )
    group1.add_argument(
        '--software', help='Capture software.',
        default=defaults.get('Software')
    )
    group1.add_argument(
        '--copyright', help='Copyright notice.',
        default=defaults.get('Copyright')
    )
    group1.add_argument(
        '--artist', help='Photographer.', default=defaults.get('Artist')
    )

    help = 'Exposure time in seconds, e.g. 1/100.'
    group1.add_argument('--exposure-time', type=Fraction, help=help)

    help = 'F-number, e.g. 5.6.'
    group1.add_argument('--fnumber', type=Fraction, help=help)

    help = 'ISO speed rating.'
    group1.add_argument('--iso', type=int, help=help)

    help = 'Focal length in millimeters.'
    group1.add_argument('--focal-length', type=Fraction, help=help)

    help = 'Focal length in millimeters, 35mm film equivalent.'
    group1.add_argument('--focal-length-35mm', type=int, help=help)

    help = (
        'Orientation, 1 = horizontal (normal), 3 = rotate 180, '
        '6 = rotate 90 CW, 8 = rotate 270 CW.'
    )
    group1.add_argument(
        '--orientation', type=int, choices=range(1, 9), metavar='{1..8}',
        help=help
    )

    help = (
        'Date and time of capture, formatted as "YYYY:MM:DD HH:MM:SS".  '
        'Defaults to the current time.'
    )
    group1.add_argument('--datetime', help=help)

    help = 'Do not write DateTimeOriginal and CreateDate.'
    group1.add_argument('--no-datetime', help=help, action='store_true')

    group2 = parser.add_argument_group(
        'Layout', 'How the Exif directory is written.'
    )

    help = 'Write the directory entries in ascending tag number order.'
    group2.add_argument('--sort-tags', help=help, action='store_true')

    help = 'Write a little-endian (Intel) TIFF structure.'
    group2.add_argument('--little-endian', help=help, action='store_true')

    help = 'Print a hex dump of the APP1 segment.'
    group2.add_argument('--dump', help=help, action='store_true')

    parser.add_argument('jpeg', help='Input JPEG file.')

    help = 'Output JPEG file.  Defaults to <stem>_exif.jpg next to the input.'
    parser.add_argument('-o', '--output', help=help)

    help = 'Overwrite the output file if it exists.'
    parser.add_argument('--overwrite', help=help, action='store_true')

    # These arguments are not specific to either group.
    help = 'Show this help message and exit'
    parser.add_argument('--help', '-h', action='help', help=help)

    help = (
        'Logging level, one of "critical", "error", "warning", "info", '
        'or "debug".'
    )
    parser.add_argument(
        '--verbosity', help=help, default='warning',
        choices=['critical', 'error', 'warning', 'info', 'debug']
    )

    args = parser.parse_args()

    logging_level = getattr(logging, args.verbosity.upper())

    jpegp = pathlib.Path(args.jpeg)
    if args.output is None:
        outputp = jpegp.parent / f'{jpegp.stem}_exif.jpg'
    else:
        outputp = pathlib.Path(args.output)

    builder = TagDirectoryBuilder(
        build_tags(args),
        byteorder='little' if args.little_endian else 'big',
        sort_tags=args.sort_tags
    )
    blob = builder.build()

    if args.dump:
        print(hexdump(blob))

    with JpegInjector(
        jpegp, outputp, overwrite=args.overwrite, verbosity=logging_level
    ) as j:
        j.inject(blob)

    print(f'Exif data injected and new file created:  {outputp}')
