"""
Disk information and statistics for D64 disk images.

Provides functions to summarize the BAM and directory of an image.
"""

from typing import Any

from .constants import DIR_TRACK, SECTOR_SIZE
from .dos import CBMDOSBase
from .geometry import sectors_per_track, total_sectors


def get_disk_info(disk: CBMDOSBase) -> dict[str, Any]:
    """
    Get comprehensive information about a disk image.

    Args:
        disk: A disk image object (D64Image)

    Returns:
        Dictionary containing disk information
    """
    bam = disk.read_bam()
    entries = disk.read_directory()

    tracks = []
    for track in range(1, disk.track_count + 1):
        sector_map = ''.join(
            '.' if bam.is_free(track, sector) else '*'
            for sector in range(sectors_per_track(track))
        )
        tracks.append({
            'track': track,
            'sectors': sectors_per_track(track),
            'free': bam.free_count(track),
            'map': sector_map,
        })

    blocks_total = total_sectors(disk.track_count) - sectors_per_track(DIR_TRACK)

    return {
        'disk_name': bam.disk_name,
        'disk_id': bam.disk_id,
        'dos_type': f"0x{bam.dos_type:02X}",
        'track_count': disk.track_count,
        'total_sectors': total_sectors(disk.track_count),
        'image_size': total_sectors(disk.track_count) * SECTOR_SIZE,
        'blocks_total': blocks_total,
        'blocks_free': bam.blocks_free(),
        'file_count': len(entries),
        'file_blocks': sum(entry.blocks for entry in entries),
        'tracks': tracks,
    }


def format_disk_info(info: dict[str, Any], verbose: bool = False) -> str:
    """
    Format disk information as human-readable text.

    Args:
        info: Dictionary from get_disk_info()
        verbose: Include the per-track sector map
    """
    lines = [
        f"Disk Name: {info['disk_name']}",
        f"Disk ID: {info['disk_id']}",
        f"Tracks: {info['track_count']} ({info['image_size']:,} bytes)",
        f"Files: {info['file_count']} ({info['file_blocks']} blocks)",
        f"Blocks free: {info['blocks_free']} of {info['blocks_total']}",
        "",
        "Free sectors per track:",
    ]

    for track in info['tracks']:
        line = f"  Track {track['track']:2}: {track['free']:2} free sectors"
        if verbose:
            line += f"  {track['map']}"
        lines.append(line)

    return '\n'.join(lines)
