"""
CBM DOS filesystem base class for 1541 disk images.

This module provides the abstract base class holding the BAM, directory
and file chain operations. Subclasses supply sector I/O.

Directories and files are singly linked lists of sectors: the first two
bytes of every sector hold the (track, sector) of the next one. Every walk
here keeps a visited set so a corrupt image raises CorruptedDiskError
instead of looping.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from .constants import (
    BAM_SECTOR,
    BAM_TRACK,
    DATA_BYTES_PER_SECTOR,
    DIR_ENTRIES_PER_SECTOR,
    DIR_ENTRY_SIZE,
    DIR_ENTRY_TYPE,
    DIR_SECTOR,
    DIR_TRACK,
    FILE_CLOSED,
    FILE_TYPE_PRG,
    LINK_SIZE,
    SECTOR_SIZE,
)
from .exceptions import (
    CorruptedDiskError,
    DirectoryFullError,
    DiskFullError,
    FileExistsError,
    FileNotFoundError,
    InvalidTrackSectorError,
)
from .geometry import sectors_per_track
from .logging_config import get_logger
from .models import BlockAvailabilityMap, DirectoryEntry
from .petscii import to_ascii, to_petscii

logger = get_logger('dos')


class CBMDOSBase(ABC):
    """
    Abstract base class for 1541 DOS filesystem operations.

    Subclasses must implement:
    - Sector I/O: read_sector(), write_sector()
    - Geometry: track_count
    """

    # =========================================================================
    # Abstract Interface - Must be implemented by subclasses
    # =========================================================================

    @property
    @abstractmethod
    def track_count(self) -> int:
        """Number of tracks on the image (35 or 40)."""
        pass

    @abstractmethod
    def read_sector(self, track: int, sector: int) -> bytes:
        """Read a single 256-byte sector."""
        pass

    @abstractmethod
    def write_sector(self, track: int, sector: int, data: bytes) -> None:
        """Write a single 256-byte sector."""
        pass

    # =========================================================================
    # Block Availability Map
    # =========================================================================

    def read_bam(self) -> BlockAvailabilityMap:
        """Decode the BAM sector. Every call reads the image afresh."""
        return BlockAvailabilityMap.from_bytes(
            self.read_sector(BAM_TRACK, BAM_SECTOR), self.track_count
        )

    def write_bam(self, bam: BlockAvailabilityMap) -> None:
        """Encode a BAM and write it back to its sector."""
        self.write_sector(BAM_TRACK, BAM_SECTOR, bam.to_bytes())

    def allocate_sector(self, track: int, sector: int) -> bool:
        """Mark a sector as used. Returns False if it was already allocated."""
        bam = self.read_bam()
        changed = bam.allocate(track, sector)
        if changed:
            self.write_bam(bam)
            logger.debug("Allocated track %d, sector %d", track, sector)
        return changed

    def free_sector(self, track: int, sector: int) -> bool:
        """Mark a sector as free. Returns False if it was already free."""
        bam = self.read_bam()
        changed = bam.free(track, sector)
        if changed:
            self.write_bam(bam)
            logger.debug("Freed track %d, sector %d", track, sector)
        return changed

    def find_free_sector(self) -> tuple[int, int]:
        """First free sector, scanning tracks in ascending order."""
        bam = self.read_bam()
        for track in range(1, self.track_count + 1):
            sector = bam.find_free(track)
            if sector is not None:
                return (track, sector)
        raise DiskFullError("No free sectors available")

    def get_disk_name(self) -> str:
        return self.read_bam().disk_name

    def get_disk_id(self) -> str:
        return self.read_bam().disk_id

    def set_disk_name(self, name: str) -> None:
        bam = self.read_bam()
        bam.set_disk_name(name)
        self.write_bam(bam)

    def set_disk_id(self, disk_id: str) -> None:
        bam = self.read_bam()
        bam.set_disk_id(disk_id)
        self.write_bam(bam)

    # =========================================================================
    # Directory
    # =========================================================================

    def iter_directory_sectors(self) -> Iterator[tuple[int, int, bytes]]:
        """
        Walk the directory chain from (18, 1), yielding (track, sector, data).

        The chain ends when a link has track 0 or points back to (18, 1).
        Any other link must stay on the directory track and must not
        revisit a sector, otherwise CorruptedDiskError is raised.
        """
        track, sector = DIR_TRACK, DIR_SECTOR
        dir_sectors = sectors_per_track(DIR_TRACK)
        visited = set()

        while True:
            visited.add((track, sector))
            data = self.read_sector(track, sector)
            yield track, sector, data

            next_link = (data[0], data[1])
            if next_link[0] == 0 or next_link == (DIR_TRACK, DIR_SECTOR):
                return
            if next_link[0] != DIR_TRACK or next_link[1] >= dir_sectors:
                raise CorruptedDiskError(
                    f"Directory sector {track}/{sector} links off the directory "
                    f"track to {next_link[0]}/{next_link[1]}"
                )
            if next_link in visited:
                raise CorruptedDiskError(
                    f"Circular directory chain at track {next_link[0]}, sector {next_link[1]}"
                )
            track, sector = next_link

    def iter_directory_slots(self) -> Iterator[DirectoryEntry]:
        """Yield every directory slot in chain order, including empty ones."""
        for track, sector, data in self.iter_directory_sectors():
            for slot in range(DIR_ENTRIES_PER_SECTOR):
                offset = slot * DIR_ENTRY_SIZE
                yield DirectoryEntry.from_bytes(
                    data[offset:offset + DIR_ENTRY_SIZE], track, sector, slot
                )

    def read_directory(self) -> list[DirectoryEntry]:
        """Read all visible (not empty, not scratched) entries."""
        return [entry for entry in self.iter_directory_slots() if entry.is_visible]

    def list_files(self) -> list[str]:
        """Names of all visible files in directory order."""
        return [entry.name for entry in self.read_directory()]

    def _lookup(self, name: str) -> DirectoryEntry | None:
        # Compare in the form the name would have on disk
        wanted = to_ascii(to_petscii(name)).strip()
        for entry in self.iter_directory_slots():
            if entry.is_visible and entry.name.strip() == wanted:
                return entry
        return None

    def find_entry(self, name: str) -> DirectoryEntry:
        """Find a visible directory entry by name."""
        entry = self._lookup(name)
        if entry is None:
            raise FileNotFoundError(f"File not found: {name}")
        return entry

    def find_file(self, name: str) -> tuple[int, int]:
        """Return the (track, sector) of a file's first data sector."""
        entry = self.find_entry(name)
        return (entry.start_track, entry.start_sector)

    def create_dir_entry(self, name: str, track: int, sector: int, blocks: int = 0) -> DirectoryEntry:
        """Build a closed PRG entry pointing at (track, sector)."""
        return DirectoryEntry.create(name, track, sector, blocks=blocks)

    def _find_free_dir_slot(self) -> tuple[int, int, int]:
        """
        Find the first empty slot in the existing directory chain.
        Returns (track, sector, slot). The chain is never extended.
        """
        for entry in self.iter_directory_slots():
            if entry.is_empty:
                return (entry.dir_track, entry.dir_sector, entry.slot)
        raise DirectoryFullError("Directory is full")

    def _write_dir_entry(self, location: tuple[int, int, int], entry: DirectoryEntry) -> None:
        """Write an entry into a slot, leaving the sector's link bytes alone."""
        track, sector, slot = location
        offset = slot * DIR_ENTRY_SIZE
        sector_data = bytearray(self.read_sector(track, sector))
        sector_data[offset + LINK_SIZE:offset + DIR_ENTRY_SIZE] = entry.to_bytes()[LINK_SIZE:]
        self.write_sector(track, sector, bytes(sector_data))

        entry.dir_track, entry.dir_sector, entry.slot = location

    def append_dir_entry(self, entry: DirectoryEntry) -> None:
        """Store an entry in the first empty directory slot."""
        self._write_dir_entry(self._find_free_dir_slot(), entry)

    def delete_file(self, name: str) -> None:
        """Scratch a file: free its sectors and clear its directory slot."""
        entry = self.find_entry(name)

        # Walk the whole chain before touching the BAM
        chain = [(t, s) for t, s, _ in self.iter_chain(entry.start_track, entry.start_sector)]

        bam = self.read_bam()
        for track, sector in chain:
            bam.free(track, sector)

        offset = entry.slot * DIR_ENTRY_SIZE
        sector_data = bytearray(self.read_sector(entry.dir_track, entry.dir_sector))
        sector_data[offset + DIR_ENTRY_TYPE] = 0
        self.write_sector(entry.dir_track, entry.dir_sector, bytes(sector_data))

        self.write_bam(bam)
        logger.debug("Scratched '%s' (%d blocks)", entry.name, len(chain))

    # =========================================================================
    # File Data Chains
    # =========================================================================

    def iter_chain(self, track: int, sector: int) -> Iterator[tuple[int, int, bytes]]:
        """
        Walk a file's sector chain, yielding (track, sector, payload).

        Non-terminal sectors carry 254 payload bytes. In the last sector
        the link track is 0 and the link sector is the payload length.
        """
        visited = set()

        while True:
            if (track, sector) in visited:
                raise CorruptedDiskError(f"Circular sector chain at track {track}, sector {sector}")
            visited.add((track, sector))

            try:
                data = self.read_sector(track, sector)
            except InvalidTrackSectorError as e:
                raise CorruptedDiskError(f"Sector chain links to an invalid sector: {e}")

            next_track, next_sector = data[0], data[1]
            if next_track == 0:
                if next_sector > DATA_BYTES_PER_SECTOR:
                    raise CorruptedDiskError(
                        f"Invalid byte count {next_sector} in last sector "
                        f"(track {track}, sector {sector})"
                    )
                yield track, sector, data[LINK_SIZE:LINK_SIZE + next_sector]
                return

            yield track, sector, data[LINK_SIZE:]
            track, sector = next_track, next_sector

    def trace_file(self, name: str) -> list[tuple[int, int]]:
        """Return the ordered list of (track, sector) pairs holding a file."""
        start_track, start_sector = self.find_file(name)
        return [(t, s) for t, s, _ in self.iter_chain(start_track, start_sector)]

    def extract_file(self, name: str) -> bytes:
        """Read complete file contents."""
        start_track, start_sector = self.find_file(name)
        return b''.join(payload for _, _, payload in self.iter_chain(start_track, start_sector))

    def _allocate_chain(self, bam: BlockAvailabilityMap, count: int) -> list[tuple[int, int]]:
        """Claim count free sectors in the given BAM, first fit by ascending track."""
        # BAM and directory sectors wrongly marked free are claimed but never used
        reserved = {(BAM_TRACK, BAM_SECTOR)}
        reserved.update((t, s) for t, s, _ in self.iter_directory_sectors())

        chain = []
        for track in range(1, self.track_count + 1):
            while len(chain) < count:
                sector = bam.find_free(track)
                if sector is None:
                    break
                bam.allocate(track, sector)
                if (track, sector) not in reserved:
                    chain.append((track, sector))
            if len(chain) == count:
                return chain

        raise DiskFullError(f"Need {count} blocks, only {len(chain)} free")

    def insert_file(
        self,
        name: str,
        content: bytes,
        file_type: int = FILE_CLOSED | FILE_TYPE_PRG
    ) -> DirectoryEntry:
        """
        Write a file to the disk image and add it to the directory.

        Every sector is taken from the BAM and marked allocated. An empty
        file still occupies one sector. Nothing is written unless both a
        directory slot and enough free sectors are available.
        """
        blocks = max(1, -(-len(content) // DATA_BYTES_PER_SECTOR))
        entry = DirectoryEntry.create(name, 0, 0, blocks=blocks, file_type=file_type)

        if self._lookup(name) is not None:
            raise FileExistsError(f"File exists: {entry.name}")

        location = self._find_free_dir_slot()

        bam = self.read_bam()
        chain = self._allocate_chain(bam, blocks)

        for index, (track, sector) in enumerate(chain):
            chunk = content[index * DATA_BYTES_PER_SECTOR:(index + 1) * DATA_BYTES_PER_SECTOR]
            block = bytearray(SECTOR_SIZE)
            if index + 1 < len(chain):
                block[0], block[1] = chain[index + 1]
            else:
                block[0], block[1] = 0, len(chunk)
            block[LINK_SIZE:LINK_SIZE + len(chunk)] = chunk
            self.write_sector(track, sector, bytes(block))

        entry.start_track, entry.start_sector = chain[0]
        self._write_dir_entry(location, entry)
        self.write_bam(bam)

        logger.debug(
            "Inserted '%s': %d bytes in %d blocks starting at track %d, sector %d",
            entry.name, len(content), blocks, entry.start_track, entry.start_sector
        )
        return entry
