"""
This file is part of microexif, a Python package for writing Exif metadata
into JPEG files.

License:  MIT
"""

# Standard library imports ...
import sys

# Third party library imports ...
from packaging.version import parse
import numpy as np
import PIL

# Do not change the format of this next line!  Doing so risks breaking
# setup.py
version = "0.3.0"

version_tuple = parse(version).release

__doc__ = f"""\
This is microexif **{version}**
"""

info = f"""\
Summary of microexif configuration
----------------------------------

microexif     {version}
Python        {sys.version}
sys.platform  {sys.platform}
sys.maxsize   {sys.maxsize}
numpy         {np.__version__}
Pillow        {PIL.__version__}
"""
