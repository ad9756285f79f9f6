"""
In-memory 1541 disk image.

The whole image is held in a bytearray; changes stay in memory until
save() writes them back to a file.
"""

from .constants import (
    DIR_SECTOR,
    DIR_TERMINAL_LINK,
    DIR_TRACK,
    SECTOR_SIZE,
    TRACKS_35,
)
from .dos import CBMDOSBase
from .exceptions import DiskError, InvalidFieldError
from .geometry import image_size, sector_offset, track_count_for_size
from .logging_config import get_logger
from .models import BlockAvailabilityMap

logger = get_logger('image')


class D64Image(CBMDOSBase):
    """Commodore 1541 disk image (35 or 40 tracks)."""

    def __init__(
        self,
        data: bytearray,
        track_count: int,
        image_path: str | None = None,
        readonly: bool = False
    ):
        """Wrap an image buffer. Use create(), from_bytes() or open() instead."""
        if len(data) != image_size(track_count):
            raise DiskError(
                f"Buffer is {len(data)} bytes, {track_count} tracks need {image_size(track_count)}"
            )
        self._data = data
        self._track_count = track_count
        self.image_path = image_path
        self.readonly = readonly
        self._dirty = False

    @classmethod
    def create(cls, track_count: int = TRACKS_35) -> 'D64Image':
        """Create a blank (zero-filled, unformatted) image."""
        return cls(bytearray(image_size(track_count)), track_count)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'D64Image':
        """Load an image from raw bytes; the size selects 35 or 40 tracks."""
        track_count = track_count_for_size(len(data))
        return cls(bytearray(data), track_count)

    @classmethod
    def open(cls, image_path: str, readonly: bool = False) -> 'D64Image':
        """Load an image file."""
        try:
            with open(image_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise DiskError(f"Cannot open disk image: {e}")

        track_count = track_count_for_size(len(data))
        logger.debug("Opened %s (%d tracks)", image_path, track_count)
        return cls(bytearray(data), track_count, image_path=image_path, readonly=readonly)

    # =========================================================================
    # Sector I/O
    # =========================================================================

    @property
    def track_count(self) -> int:
        return self._track_count

    @property
    def data(self) -> bytes:
        """Snapshot of the whole image."""
        return bytes(self._data)

    @property
    def is_dirty(self) -> bool:
        """True if the image changed since it was loaded or saved."""
        return self._dirty

    def read_sector(self, track: int, sector: int) -> bytes:
        """Read a single sector from the disk image."""
        offset = sector_offset(track, sector, self._track_count)
        return bytes(self._data[offset:offset + SECTOR_SIZE])

    def write_sector(self, track: int, sector: int, data: bytes) -> None:
        """Write a single sector to the disk image."""
        if self.readonly:
            raise DiskError("Disk image opened in read-only mode")
        if len(data) != SECTOR_SIZE:
            raise InvalidFieldError(f"Invalid sector size: {len(data)}")

        offset = sector_offset(track, sector, self._track_count)
        self._data[offset:offset + SECTOR_SIZE] = data
        self._dirty = True

    # =========================================================================
    # Image-level Operations
    # =========================================================================

    def format(self, disk_name: str, disk_id: str) -> None:
        """
        Erase the image and write an empty filesystem: a BAM with every
        sector free except the directory track, the disk label, and one
        empty directory sector.
        """
        if self.readonly:
            raise DiskError("Disk image opened in read-only mode")

        bam = BlockAvailabilityMap.formatted(self._track_count)
        # Validate the label before erasing anything
        bam.set_disk_name(disk_name)
        bam.set_disk_id(disk_id)

        self._data[:] = bytes(len(self._data))
        self.write_bam(bam)

        directory = bytearray(SECTOR_SIZE)
        directory[0], directory[1] = DIR_TERMINAL_LINK
        self.write_sector(DIR_TRACK, DIR_SECTOR, bytes(directory))

        logger.debug("Formatted image as '%s', id '%s'", bam.disk_name, bam.disk_id)

    def save(self, image_path: str | None = None) -> None:
        """Write the image to a file (defaults to the file it was opened from)."""
        if self.readonly:
            raise DiskError("Disk image opened in read-only mode")

        path = image_path or self.image_path
        if path is None:
            raise DiskError("No file name given for disk image")

        try:
            with open(path, 'wb') as f:
                f.write(self._data)
        except OSError as e:
            raise DiskError(f"Cannot write disk image: {e}")

        self.image_path = path
        self._dirty = False
        logger.debug("Saved %s", path)

    def close(self) -> None:
        """Save pending changes if the image came from a file."""
        if self._dirty and not self.readonly and self.image_path is not None:
            self.save()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
        return False
