"""
Data model classes for the D64 disk image utility.
"""

import struct
from dataclasses import dataclass, field

from .constants import (
    BAM_BITMAP_BYTES,
    BAM_DISK_ID,
    BAM_DISK_ID_SIZE,
    BAM_DISK_NAME,
    BAM_DISK_NAME_SIZE,
    BAM_DOS_TYPE,
    BAM_DOS_VERSION,
    BAM_DOS_VERSION_SIZE,
    BAM_ENTRIES,
    BAM_ENTRY_SIZE,
    BAM_EXTENDED_ENTRIES,
    DIR_ENTRY_BLOCKS,
    DIR_ENTRY_NAME,
    DIR_ENTRY_NAME_SIZE,
    DIR_ENTRY_SIZE,
    DIR_ENTRY_START_SECTOR,
    DIR_ENTRY_START_TRACK,
    DIR_ENTRY_TYPE,
    DIR_SECTOR,
    DIR_TRACK,
    DOS_TYPE,
    DOS_VERSION,
    FILE_CLOSED,
    FILE_LOCKED,
    FILE_TYPE_MASK,
    FILE_TYPE_NAMES,
    FILE_TYPE_PRG,
    FILL_BYTE,
    SECTOR_SIZE,
    SECTORS_PER_TRACK,
    TRACKS_35,
)
from .exceptions import (
    CorruptedDiskError,
    DiskError,
    InvalidFieldError,
    InvalidTrackSectorError,
)
from .geometry import check_track_sector, image_size
from .petscii import decode_field, encode_field, to_petscii
from .utils import validate_filename


def _bam_entry_offset(track: int) -> int:
    """Offset of the 4-byte BAM entry for a track (1-based)."""
    if track <= TRACKS_35:
        return BAM_ENTRIES + (track - 1) * BAM_ENTRY_SIZE
    # 40-track images keep tracks 36-40 clear of the disk label
    return BAM_EXTENDED_ENTRIES + (track - TRACKS_35 - 1) * BAM_ENTRY_SIZE


def _valid_mask(track: int) -> int:
    return (1 << SECTORS_PER_TRACK[track - 1]) - 1


@dataclass
class BlockAvailabilityMap:
    """
    Decoded view of the BAM sector (track 18, sector 0).

    The map is a value: decode it with from_bytes(), change it through
    allocate()/free() and the label setters, and write it back with
    to_bytes(). Nothing here touches the disk image.
    """
    track_count: int
    free_counts: list[int]   # index 0 = track 1
    bitmaps: list[int]       # 24-bit masks, bit n = sector n, 1 = free
    name_bytes: bytes        # 16 bytes, fill-padded
    id_bytes: bytes          # 2 bytes
    dos_type: int = DOS_TYPE
    # Undecoded bytes of the source sector, preserved on encode
    _raw: bytes = field(default=bytes(SECTOR_SIZE), repr=False)

    @classmethod
    def from_bytes(cls, data: bytes, track_count: int) -> 'BlockAvailabilityMap':
        """Parse a 256-byte BAM sector."""
        if len(data) != SECTOR_SIZE:
            raise DiskError(f"Invalid BAM sector size: {len(data)}")
        image_size(track_count)

        free_counts = []
        bitmaps = []
        for track in range(1, track_count + 1):
            offset = _bam_entry_offset(track)
            free_counts.append(data[offset])
            bitmaps.append(int.from_bytes(
                data[offset + 1:offset + 1 + BAM_BITMAP_BYTES], 'little'
            ))

        return cls(
            track_count=track_count,
            free_counts=free_counts,
            bitmaps=bitmaps,
            name_bytes=bytes(data[BAM_DISK_NAME:BAM_DISK_NAME + BAM_DISK_NAME_SIZE]),
            id_bytes=bytes(data[BAM_DISK_ID:BAM_DISK_ID + BAM_DISK_ID_SIZE]),
            dos_type=data[BAM_DOS_TYPE],
            _raw=bytes(data),
        )

    @classmethod
    def formatted(cls, track_count: int) -> 'BlockAvailabilityMap':
        """
        Build the map of a freshly formatted disk: every sector free except
        on the directory track, which is reported as full.
        """
        image_size(track_count)

        free_counts = []
        bitmaps = []
        for track in range(1, track_count + 1):
            if track == DIR_TRACK:
                free_counts.append(0)
                bitmaps.append(0)
            else:
                free_counts.append(SECTORS_PER_TRACK[track - 1])
                bitmaps.append(_valid_mask(track))

        # Label area: name, 2 fill bytes, id, fill, DOS version, 4 fill bytes
        raw = bytearray(SECTOR_SIZE)
        label_end = BAM_DOS_VERSION + BAM_DOS_VERSION_SIZE + 4
        raw[BAM_DISK_NAME:label_end] = bytes([FILL_BYTE]) * (label_end - BAM_DISK_NAME)
        raw[BAM_DOS_VERSION:BAM_DOS_VERSION + BAM_DOS_VERSION_SIZE] = DOS_VERSION

        return cls(
            track_count=track_count,
            free_counts=free_counts,
            bitmaps=bitmaps,
            name_bytes=bytes([FILL_BYTE]) * BAM_DISK_NAME_SIZE,
            id_bytes=bytes([FILL_BYTE]) * BAM_DISK_ID_SIZE,
            dos_type=DOS_TYPE,
            _raw=bytes(raw),
        )

    def to_bytes(self) -> bytes:
        """Serialize to a 256-byte BAM sector linked to the first directory sector."""
        data = bytearray(self._raw)
        data[0] = DIR_TRACK
        data[1] = DIR_SECTOR
        data[BAM_DOS_TYPE] = self.dos_type

        for track in range(1, self.track_count + 1):
            offset = _bam_entry_offset(track)
            data[offset] = self.free_counts[track - 1]
            data[offset + 1:offset + 1 + BAM_BITMAP_BYTES] = \
                self.bitmaps[track - 1].to_bytes(BAM_BITMAP_BYTES, 'little')

        data[BAM_DISK_NAME:BAM_DISK_NAME + BAM_DISK_NAME_SIZE] = self.name_bytes
        data[BAM_DISK_ID:BAM_DISK_ID + BAM_DISK_ID_SIZE] = self.id_bytes
        return bytes(data)

    def _check_track(self, track: int) -> None:
        if track < 1 or track > self.track_count:
            raise InvalidTrackSectorError(
                f"Invalid track {track} (image has {self.track_count} tracks)"
            )

    def allocate(self, track: int, sector: int) -> bool:
        """
        Mark a sector as in use. Returns False if it already was.
        """
        check_track_sector(track, sector, self.track_count)
        bit = 1 << sector
        if not self.bitmaps[track - 1] & bit:
            return False
        if self.free_counts[track - 1] == 0:
            raise CorruptedDiskError(
                f"BAM free count for track {track} is 0 but sector {sector} is marked free"
            )
        self.bitmaps[track - 1] &= ~bit
        self.free_counts[track - 1] -= 1
        return True

    def free(self, track: int, sector: int) -> bool:
        """
        Mark a sector as free. Returns False if it already was.
        """
        check_track_sector(track, sector, self.track_count)
        bit = 1 << sector
        if self.bitmaps[track - 1] & bit:
            return False
        if self.free_counts[track - 1] >= 0xFF:
            raise CorruptedDiskError(f"BAM free count for track {track} overflows")
        self.bitmaps[track - 1] |= bit
        self.free_counts[track - 1] += 1
        return True

    def is_free(self, track: int, sector: int) -> bool:
        check_track_sector(track, sector, self.track_count)
        return bool(self.bitmaps[track - 1] & (1 << sector))

    def find_free(self, track: int) -> int | None:
        """Lowest free sector on a track, ignoring bits past the track's sector count."""
        self._check_track(track)
        bitmap = self.bitmaps[track - 1]
        for sector in range(SECTORS_PER_TRACK[track - 1]):
            if bitmap & (1 << sector):
                return sector
        return None

    def free_count(self, track: int) -> int:
        """Stored free-sector counter for a track."""
        self._check_track(track)
        return self.free_counts[track - 1]

    def bitmap_count(self, track: int) -> int:
        """Number of free bits within the track's valid sectors."""
        self._check_track(track)
        return bin(self.bitmaps[track - 1] & _valid_mask(track)).count('1')

    def blocks_free(self) -> int:
        """Free blocks outside the directory track."""
        return sum(
            count for track, count in enumerate(self.free_counts, start=1)
            if track != DIR_TRACK
        )

    @property
    def disk_name(self) -> str:
        return decode_field(self.name_bytes)

    @property
    def disk_id(self) -> str:
        return decode_field(self.id_bytes)

    def set_disk_name(self, name: str) -> None:
        """Store a disk name, padded with the fill byte."""
        self.name_bytes = encode_field(name, BAM_DISK_NAME_SIZE)

    def set_disk_id(self, disk_id: str) -> None:
        """Store a disk id. The id must encode to exactly two bytes."""
        encoded = to_petscii(disk_id)
        if len(encoded) != BAM_DISK_ID_SIZE:
            raise InvalidFieldError(
                f"Disk ID must be exactly {BAM_DISK_ID_SIZE} characters, got '{disk_id}'"
            )
        self.id_bytes = encoded


@dataclass
class DirectoryEntry:
    """Represents a 32-byte 1541 directory entry."""
    file_type: int       # Type byte: low 3 bits = type, 0x40 locked, 0x80 closed
    start_track: int     # First data sector
    start_sector: int
    name_bytes: bytes    # 16 bytes, fill-padded
    blocks: int = 0      # File size in sectors

    # Where the entry lives (not serialized)
    dir_track: int = 0
    dir_sector: int = 0
    slot: int = 0

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        dir_track: int = 0,
        dir_sector: int = 0,
        slot: int = 0
    ) -> 'DirectoryEntry':
        """Parse a 32-byte directory entry."""
        if len(data) != DIR_ENTRY_SIZE:
            raise DiskError(f"Invalid directory entry size: {len(data)}")

        return cls(
            file_type=data[DIR_ENTRY_TYPE],
            start_track=data[DIR_ENTRY_START_TRACK],
            start_sector=data[DIR_ENTRY_START_SECTOR],
            name_bytes=bytes(data[DIR_ENTRY_NAME:DIR_ENTRY_NAME + DIR_ENTRY_NAME_SIZE]),
            blocks=struct.unpack_from('<H', data, DIR_ENTRY_BLOCKS)[0],
            dir_track=dir_track,
            dir_sector=dir_sector,
            slot=slot,
        )

    @classmethod
    def create(
        cls,
        name: str,
        track: int,
        sector: int,
        blocks: int = 0,
        file_type: int = FILE_CLOSED | FILE_TYPE_PRG
    ) -> 'DirectoryEntry':
        """Build an entry for a closed file starting at (track, sector)."""
        return cls(
            file_type=file_type,
            start_track=track,
            start_sector=sector,
            name_bytes=validate_filename(name),
            blocks=blocks,
        )

    def to_bytes(self) -> bytes:
        """Serialize to a 32-byte directory entry. Bytes 0-1 are left zero."""
        data = bytearray(DIR_ENTRY_SIZE)
        data[DIR_ENTRY_TYPE] = self.file_type
        data[DIR_ENTRY_START_TRACK] = self.start_track
        data[DIR_ENTRY_START_SECTOR] = self.start_sector
        data[DIR_ENTRY_NAME:DIR_ENTRY_NAME + DIR_ENTRY_NAME_SIZE] = self.name_bytes
        struct.pack_into('<H', data, DIR_ENTRY_BLOCKS, self.blocks)
        return bytes(data)

    @property
    def name(self) -> str:
        """Filename, decoded up to the first fill byte."""
        return decode_field(self.name_bytes)

    @property
    def is_empty(self) -> bool:
        """Slot has never been used (or was scratched and cleared)."""
        return self.file_type == 0

    @property
    def is_scratched(self) -> bool:
        return self.file_type != 0 and self.file_type & FILE_TYPE_MASK == 0

    @property
    def is_visible(self) -> bool:
        return self.file_type & FILE_TYPE_MASK != 0

    @property
    def is_closed(self) -> bool:
        return bool(self.file_type & FILE_CLOSED)

    @property
    def is_locked(self) -> bool:
        return bool(self.file_type & FILE_LOCKED)

    @property
    def type_name(self) -> str:
        return FILE_TYPE_NAMES.get(self.file_type & FILE_TYPE_MASK, '???')

    def type_string(self) -> str:
        """Return type as listed by the drive, e.g. 'PRG', '*SEQ', 'PRG<'."""
        text = self.type_name
        if not self.is_closed:
            text = '*' + text
        if self.is_locked:
            text += '<'
        return text
