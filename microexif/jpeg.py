# standard library imports
import io
import logging
import os
import pathlib
import shutil
import tempfile

# 3rd party library imports
from PIL import Image

# local imports
from .core import DQT


class MarkerNotFoundError(IOError):
    """Raise this exception if a JPEG has no place to put the Exif data."""

    pass


def find_dqt_marker(data):
    """
    Locate the first DQT (0xFFDB) marker.

    Parameters
    ----------
    data : bytes
        Entire contents of a JPEG file.

    Returns
    -------
    int
        Byte offset of the marker from the start of the data.
    """
    pos = data.find(DQT)
    if pos < 0:
        raise MarkerNotFoundError('No DQT (0xFFDB) marker found.')
    return pos


class JpegInjector(object):
    """
    Insert an Exif APP1 segment into a copy of a JPEG file.

    The segment goes immediately before the first DQT marker.  The source is
    read in full and checked before the destination is created, and the
    destination only appears once it has been completely written.

    Attributes
    ----------
    jpeg_path : path
        Path to the source JPEG file.
    output_path : path
        Path to the JPEG file to be written.
    overwrite : bool
        Replace the output file if it already exists.
    verbosity : int
        Set the level of logging, i.e. WARNING, INFO, etc.
    """
    def __init__(
        self,
        jpeg: pathlib.Path | str,
        output: pathlib.Path | str,
        overwrite: bool = False,
        verbosity: int = logging.CRITICAL,
    ):
        self.jpeg_path = pathlib.Path(jpeg)
        self.output_path = pathlib.Path(output)
        self.overwrite = overwrite

        self.check_output()
        self.setup_logging(verbosity)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        pass

    def check_output(self):
        """Refuse to clobber an existing output file unless told to."""
        if not self.overwrite and self.output_path.exists():
            msg = (
                f'{str(self.output_path)} already exists, please delete if '
                f'you wish to overwrite.'
            )
            raise FileExistsError(msg)

    def setup_logging(self, verbosity):

        self.logger = logging.getLogger('microexif')
        self.logger.setLevel(verbosity)
        if not self.logger.handlers:
            ch = logging.StreamHandler()
            ch.setLevel(verbosity)
            self.logger.addHandler(ch)
        else:
            for handler in self.logger.handlers:
                handler.setLevel(verbosity)

    def read_jpeg(self):
        """Read and check the whole source file.

        Returns
        -------
        bytes
            The file contents.
        """
        data = self.jpeg_path.read_bytes()

        # Pillow raises UnidentifiedImageError (an OSError) for anything it
        # does not recognize at all.
        with Image.open(io.BytesIO(data)) as im:
            if im.format != 'JPEG':
                msg = f'{self.jpeg_path} is a {im.format} file, not a JPEG.'
                raise IOError(msg)

        return data

    def inject(self, blob):
        """Write the output file with the segment spliced in.

        Parameters
        ----------
        blob : bytes
            A complete APP1 segment.

        Returns
        -------
        path
            The output path.
        """
        # the output may have appeared since construction
        self.check_output()

        data = self.read_jpeg()

        pos = find_dqt_marker(data)
        self.logger.info(
            f'Inserting {len(blob)} byte segment before the DQT marker at '
            f'offset {pos}.'
        )

        # Write a temporary file next to the destination, then move it into
        # place.  A failure part way through leaves no partial output.
        fd, tmp_name = tempfile.mkstemp(
            suffix='.tmp', prefix=self.output_path.name + '.',
            dir=self.output_path.parent
        )
        try:
            with os.fdopen(fd, mode='wb') as f:
                f.write(data[:pos])
                f.write(blob)
                f.write(data[pos:])

            # mkstemp files are owner-only, the output takes after the source
            shutil.copymode(self.jpeg_path, tmp_name)
            self.check_output()
            shutil.move(tmp_name, self.output_path)
        except BaseException:
            pathlib.Path(tmp_name).unlink(missing_ok=True)
            raise

        self.logger.info(f'Wrote {self.output_path}.')
        return self.output_path
