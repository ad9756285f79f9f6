"""
Track/sector geometry for 1541 disk images.

Tracks are numbered from 1 and hold a zone-dependent number of sectors;
sectors are numbered from 0. Images are laid out track after track with
no gaps, so a (track, sector) pair maps onto a single byte offset.
"""

from collections.abc import Iterator

from .constants import (
    MAX_TRACKS,
    SECTOR_SIZE,
    SECTORS_PER_TRACK,
    SUPPORTED_TRACK_COUNTS,
)
from .exceptions import InvalidImageSizeError, InvalidTrackSectorError


def _build_track_offsets() -> tuple[int, ...]:
    """Byte offset of the first sector of each track, index 0 = track 1."""
    offsets = []
    offset = 0
    for sectors in SECTORS_PER_TRACK:
        offsets.append(offset)
        offset += sectors * SECTOR_SIZE
    # One past the last track, so image sizes fall out of the same table
    offsets.append(offset)
    return tuple(offsets)


TRACK_OFFSETS = _build_track_offsets()


def sectors_per_track(track: int) -> int:
    """Number of sectors on a track (1-based)."""
    if not 1 <= track <= MAX_TRACKS:
        raise InvalidTrackSectorError(f"Invalid track: {track}")
    return SECTORS_PER_TRACK[track - 1]


def check_track_sector(track: int, sector: int, track_count: int) -> None:
    """Raise InvalidTrackSectorError unless (track, sector) exists on the image."""
    if track < 1 or track > track_count:
        raise InvalidTrackSectorError(
            f"Invalid track {track} (image has {track_count} tracks)"
        )
    if sector < 0 or sector >= SECTORS_PER_TRACK[track - 1]:
        raise InvalidTrackSectorError(
            f"Invalid sector {sector} on track {track} "
            f"(track has {SECTORS_PER_TRACK[track - 1]} sectors)"
        )


def sector_offset(track: int, sector: int, track_count: int) -> int:
    """Byte offset of (track, sector) within an image of track_count tracks."""
    check_track_sector(track, sector, track_count)
    return TRACK_OFFSETS[track - 1] + sector * SECTOR_SIZE


def image_size(track_count: int) -> int:
    """Exact byte size of an image with the given number of tracks."""
    if track_count not in SUPPORTED_TRACK_COUNTS:
        raise InvalidImageSizeError(
            f"Unsupported track count: {track_count} (use 35 or 40)"
        )
    return TRACK_OFFSETS[track_count]


def track_count_for_size(size: int) -> int:
    """Infer the track count from an exact image size."""
    for track_count in SUPPORTED_TRACK_COUNTS:
        if TRACK_OFFSETS[track_count] == size:
            return track_count
    raise InvalidImageSizeError(f"Invalid D64 image size: {size} bytes")


def total_sectors(track_count: int) -> int:
    """Total number of sectors on an image."""
    return image_size(track_count) // SECTOR_SIZE


def iter_sectors(track_count: int) -> Iterator[tuple[int, int]]:
    """Yield every valid (track, sector) pair in image order."""
    image_size(track_count)
    for track in range(1, track_count + 1):
        for sector in range(SECTORS_PER_TRACK[track - 1]):
            yield track, sector
