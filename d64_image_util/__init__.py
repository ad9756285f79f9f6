"""
D64 Disk Image Utility

A Python package for reading, writing, and manipulating Commodore 1541
(D64) floppy disk images: sector access, the block availability map,
the directory and file sector chains.
"""

from .constants import (
    DATA_BYTES_PER_SECTOR,
    DIR_ENTRY_SIZE,
    DIR_SECTOR,
    DIR_TRACK,
    FILE_CLOSED,
    FILE_LOCKED,
    FILE_TYPE_DEL,
    FILE_TYPE_PRG,
    FILE_TYPE_REL,
    FILE_TYPE_SEQ,
    FILE_TYPE_USR,
    SECTOR_SIZE,
    SECTORS_PER_TRACK,
)
from .exceptions import (
    CorruptedDiskError,
    D64Error,
    DirectoryFullError,
    DiskError,
    DiskFullError,
    FileExistsError,
    FileNotFoundError,
    InvalidFieldError,
    InvalidFilenameError,
    InvalidImageSizeError,
    InvalidTrackSectorError,
)
from .dos import CBMDOSBase
from .image import D64Image
from .formatter import OutputFormatter
from .geometry import image_size, sector_offset, sectors_per_track, track_count_for_size
from .models import BlockAvailabilityMap, DirectoryEntry
from .petscii import to_ascii, to_petscii
from .utils import hex_dump, parse_sector_data, validate_filename

__version__ = "1.0.0"

__all__ = [
    # Disk image classes
    "CBMDOSBase",
    "D64Image",
    # Data models
    "BlockAvailabilityMap",
    "DirectoryEntry",
    # Exceptions
    "D64Error",
    "DiskError",
    "InvalidImageSizeError",
    "InvalidTrackSectorError",
    "InvalidFieldError",
    "InvalidFilenameError",
    "FileNotFoundError",
    "FileExistsError",
    "DiskFullError",
    "DirectoryFullError",
    "CorruptedDiskError",
    # Geometry
    "sectors_per_track",
    "sector_offset",
    "image_size",
    "track_count_for_size",
    # Text codec
    "to_petscii",
    "to_ascii",
    # Utilities
    "validate_filename",
    "parse_sector_data",
    "hex_dump",
    # Output
    "OutputFormatter",
    # Constants
    "SECTOR_SIZE",
    "DATA_BYTES_PER_SECTOR",
    "SECTORS_PER_TRACK",
    "DIR_TRACK",
    "DIR_SECTOR",
    "DIR_ENTRY_SIZE",
    "FILE_TYPE_DEL",
    "FILE_TYPE_SEQ",
    "FILE_TYPE_PRG",
    "FILE_TYPE_USR",
    "FILE_TYPE_REL",
    "FILE_LOCKED",
    "FILE_CLOSED",
]
