"""
Disk verification for D64 disk images.

Checks the BAM against itself and against the sectors actually reachable
from the directory.
"""

from dataclasses import dataclass, field

from .constants import BAM_SECTOR, BAM_TRACK, DIR_TRACK
from .dos import CBMDOSBase
from .exceptions import D64Error
from .geometry import iter_sectors
from .models import BlockAvailabilityMap


@dataclass
class VerificationResult:
    """Results from disk verification."""
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    info: list[str] = field(default_factory=list)

    # Statistics
    files_checked: int = 0
    directory_sectors: int = 0
    blocks_in_use: int = 0
    lost_blocks: int = 0
    cross_linked_blocks: list[tuple[int, int]] = field(default_factory=list)

    def add_error(self, message: str):
        """Add an error (disk is invalid)."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str):
        """Add a warning (disk usable but has issues)."""
        self.warnings.append(message)

    def add_info(self, message: str):
        """Add informational message."""
        self.info.append(message)


def verify_disk(disk: CBMDOSBase, verbose: bool = False) -> VerificationResult:
    """
    Verify a disk image for consistency.

    Args:
        disk: A disk image object
        verbose: Whether to include detailed information

    Returns:
        VerificationResult with findings
    """
    result = VerificationResult()

    try:
        bam = disk.read_bam()
    except D64Error as e:
        result.add_error(f"Cannot read BAM: {e}")
        return result

    result.add_info("Checking BAM counters...")
    _verify_bam_counters(disk, bam, result)

    # sector -> owners ("BAM", "directory", file names)
    sector_usage: dict[tuple[int, int], list[str]] = {(BAM_TRACK, BAM_SECTOR): ['BAM']}

    result.add_info("Checking directory structure...")
    _verify_directory(disk, sector_usage, result)

    for location, owners in sector_usage.items():
        if len(owners) > 1:
            result.add_error(
                f"Cross-linked sector {location[0]}/{location[1]}: used by {', '.join(owners)}"
            )
            result.cross_linked_blocks.append(location)

        track, sector = location
        if track != DIR_TRACK and bam.is_free(track, sector):
            result.add_error(f"Sector {track}/{sector} is in use by {owners[0]} but marked free in BAM")

    result.add_info("Checking for lost blocks...")
    _find_lost_blocks(disk, bam, sector_usage, result)

    result.blocks_in_use = len(sector_usage)

    if verbose:
        result.add_info(f"Files checked: {result.files_checked}")
        result.add_info(f"Directory sectors: {result.directory_sectors}")
        result.add_info(f"Blocks in use: {result.blocks_in_use}")
        if result.lost_blocks > 0:
            result.add_info(f"Lost blocks: {result.lost_blocks}")

    return result


def _verify_bam_counters(disk: CBMDOSBase, bam: BlockAvailabilityMap, result: VerificationResult):
    """Each track's free counter must match the free bits in its bitmap."""
    for track in range(1, disk.track_count + 1):
        counted = bam.bitmap_count(track)
        stored = bam.free_count(track)
        if counted != stored:
            result.add_error(
                f"Track {track}: BAM says {stored} free sectors, bitmap has {counted}"
            )


def _verify_directory(
    disk: CBMDOSBase,
    sector_usage: dict[tuple[int, int], list[str]],
    result: VerificationResult
):
    """Walk the directory and every file chain, recording sector owners."""
    try:
        for track, sector, _ in disk.iter_directory_sectors():
            sector_usage.setdefault((track, sector), []).append('directory')
            result.directory_sectors += 1
        entries = disk.read_directory()
    except D64Error as e:
        result.add_error(f"Cannot read directory: {e}")
        return

    for entry in entries:
        result.files_checked += 1
        try:
            chain = [
                (t, s) for t, s, _ in disk.iter_chain(entry.start_track, entry.start_sector)
            ]
        except D64Error as e:
            result.add_error(f"Invalid sector chain for file '{entry.name}': {e}")
            continue

        if entry.blocks != len(chain):
            result.add_warning(
                f"File '{entry.name}': directory says {entry.blocks} blocks, "
                f"chain has {len(chain)}"
            )

        for location in chain:
            sector_usage.setdefault(location, []).append(f"'{entry.name}'")


def _find_lost_blocks(
    disk: CBMDOSBase,
    bam: BlockAvailabilityMap,
    sector_usage: dict[tuple[int, int], list[str]],
    result: VerificationResult
):
    """Find sectors allocated in the BAM but not used by any file."""
    for track, sector in iter_sectors(disk.track_count):
        # The directory track is reserved as a whole
        if track == DIR_TRACK:
            continue
        if (track, sector) in sector_usage or bam.is_free(track, sector):
            continue
        result.lost_blocks += 1

    if result.lost_blocks:
        result.add_warning(f"Found {result.lost_blocks} allocated block(s) not used by any file")


def format_verification_result(result: VerificationResult) -> str:
    """Format verification result as human-readable string."""
    lines = []

    if result.is_valid:
        lines.append("Disk verification: PASSED")
    else:
        lines.append("Disk verification: FAILED")

    lines.append("")

    if result.errors:
        lines.append(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            lines.append(f"  ERROR: {error}")
        lines.append("")

    if result.warnings:
        lines.append(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            lines.append(f"  WARNING: {warning}")
        lines.append("")

    lines.append("Summary:")
    lines.append(f"  Files checked: {result.files_checked}")
    lines.append(f"  Directory sectors: {result.directory_sectors}")
    lines.append(f"  Blocks in use: {result.blocks_in_use}")

    if result.lost_blocks > 0:
        lines.append(f"  Lost blocks: {result.lost_blocks}")
    if result.cross_linked_blocks:
        lines.append(f"  Cross-linked blocks: {len(result.cross_linked_blocks)}")

    return '\n'.join(lines)
