"""
Command handlers for the D64 disk image utility.

Each handler performs one operation on an image file, reports through an
OutputFormatter and returns the process exit code.
"""

import os
from pathlib import Path

from .constants import FILE_CLOSED, FILE_TYPE_PRG, FILE_TYPE_SEQ, FILE_TYPE_USR
from .exceptions import D64Error, DiskFullError, FileNotFoundError
from .formatter import OutputFormatter
from .image import D64Image
from .info import format_disk_info, get_disk_info
from .utils import parse_sector_data
from .verify import format_verification_result, verify_disk

INSERT_FILE_TYPES = {
    'prg': FILE_TYPE_PRG,
    'seq': FILE_TYPE_SEQ,
    'usr': FILE_TYPE_USR,
}


def cmd_create(args, formatter: OutputFormatter) -> int:
    """Handle the 'create' command."""
    if os.path.exists(args.image) and not getattr(args, 'force', False):
        formatter.error(f"File already exists: {args.image}. Use --force to overwrite.")
        return 1

    try:
        tracks = getattr(args, 'tracks', 35)
        disk = D64Image.create(tracks)
        disk.save(args.image)
        formatter.success(f"Created new D64 file '{args.image}' with {tracks} tracks",
                          image=args.image, tracks=tracks)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_format(args, formatter: OutputFormatter) -> int:
    """Handle the 'format' command."""
    try:
        with D64Image.open(args.image) as disk:
            disk.format(args.name, args.id)

        formatter.success(
            f"Formatted D64 file '{args.image}' with name '{args.name}' and ID '{args.id}'",
            image=args.image, name=args.name, id=args.id
        )
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_read(args, formatter: OutputFormatter) -> int:
    """Handle the 'read' command."""
    try:
        with D64Image.open(args.image, readonly=True) as disk:
            data = disk.read_sector(args.track, args.sector)

        formatter.sector_dump(args.track, args.sector, data)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_write(args, formatter: OutputFormatter) -> int:
    """Handle the 'write' command."""
    try:
        data = parse_sector_data(args.data)

        with D64Image.open(args.image) as disk:
            disk.write_sector(args.track, args.sector, data)

        formatter.success("Sector written successfully", track=args.track, sector=args.sector)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_bam(args, formatter: OutputFormatter) -> int:
    """Handle the 'bam' command."""
    try:
        with D64Image.open(args.image, readonly=True) as disk:
            info = get_disk_info(disk)

        if formatter.json_mode:
            formatter.success("Disk information", **info)
        else:
            verbose = getattr(args, 'verbose', False)
            print(format_disk_info(info, verbose=verbose))
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_find_free(args, formatter: OutputFormatter) -> int:
    """Handle the 'find-free' command."""
    try:
        with D64Image.open(args.image, readonly=True) as disk:
            try:
                track, sector = disk.find_free_sector()
            except DiskFullError:
                formatter.success("No free sectors available", track=None, sector=None)
                return 0

        formatter.success(f"Found free sector: track {track}, sector {sector}",
                          track=track, sector=sector)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_allocate(args, formatter: OutputFormatter) -> int:
    """Handle the 'allocate' command."""
    try:
        with D64Image.open(args.image) as disk:
            changed = disk.allocate_sector(args.track, args.sector)

        if changed:
            message = f"Allocated sector {args.sector} on track {args.track}"
        else:
            message = f"Sector {args.sector} on track {args.track} was already allocated"
        formatter.success(message, track=args.track, sector=args.sector, changed=changed)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_free(args, formatter: OutputFormatter) -> int:
    """Handle the 'free' command."""
    try:
        with D64Image.open(args.image) as disk:
            changed = disk.free_sector(args.track, args.sector)

        if changed:
            message = f"Freed sector {args.sector} on track {args.track}"
        else:
            message = f"Sector {args.sector} on track {args.track} was already free"
        formatter.success(message, track=args.track, sector=args.sector, changed=changed)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_set_name(args, formatter: OutputFormatter) -> int:
    """Handle the 'set-name' command."""
    try:
        with D64Image.open(args.image) as disk:
            disk.set_disk_name(args.name)

        formatter.success(f"Disk name set to: {args.name}", name=args.name)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_set_id(args, formatter: OutputFormatter) -> int:
    """Handle the 'set-id' command."""
    try:
        with D64Image.open(args.image) as disk:
            disk.set_disk_id(args.id)

        formatter.success(f"Disk ID set to: {args.id}", id=args.id)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_list(args, formatter: OutputFormatter) -> int:
    """Handle the 'list' command."""
    try:
        with D64Image.open(args.image, readonly=True) as disk:
            entries = disk.read_directory()
            disk_name = disk.get_disk_name()

        formatter.list_files(entries, args.image, disk_name)
        return 0

    except D64Error as e:
        formatter.error(f"Error listing files: {e}")
        return 1


def cmd_extract(args, formatter: OutputFormatter) -> int:
    """Handle the 'extract' command."""
    try:
        with D64Image.open(args.image, readonly=True) as disk:
            content = disk.extract_file(args.name)

        Path(args.output).write_bytes(content)
        formatter.success(f"File '{args.name}' extracted to '{args.output}'",
                          name=args.name, output=args.output, size=len(content))
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1
    except OSError as e:
        formatter.error(f"Filesystem error: {e}")
        return 1


def cmd_insert(args, formatter: OutputFormatter) -> int:
    """Handle the 'insert' command."""
    try:
        content = Path(args.source).read_bytes()
        name = getattr(args, 'name', None) or Path(args.source).name
        file_type = INSERT_FILE_TYPES[getattr(args, 'type', None) or 'prg']

        with D64Image.open(args.image) as disk:
            entry = disk.insert_file(name, content, file_type=FILE_CLOSED | file_type)

        formatter.success(
            f"Inserted '{entry.name}' ({len(content)} bytes, {entry.blocks} blocks)",
            name=entry.name, size=len(content), blocks=entry.blocks,
            track=entry.start_track, sector=entry.start_sector
        )
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1
    except OSError as e:
        formatter.error(f"Filesystem error: {e}")
        return 1


def cmd_delete(args, formatter: OutputFormatter) -> int:
    """Handle the 'delete' command."""
    try:
        with D64Image.open(args.image) as disk:
            disk.delete_file(args.name)

        formatter.success(f"Deleted {args.name}", deleted=args.name)
        return 0

    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_trace(args, formatter: OutputFormatter) -> int:
    """Handle the 'trace' command."""
    try:
        with D64Image.open(args.image, readonly=True) as disk:
            sectors = disk.trace_file(args.name)

        formatter.trace(args.name, sectors)
        return 0

    except FileNotFoundError:
        formatter.error(f"File '{args.name}' not found on the disk")
        return 1
    except D64Error as e:
        formatter.error(str(e))
        return 1


def cmd_verify(args, formatter: OutputFormatter) -> int:
    """Handle the 'verify' command."""
    try:
        verbose = getattr(args, 'verbose', False)

        with D64Image.open(args.image, readonly=True) as disk:
            result = verify_disk(disk, verbose=verbose)

        if formatter.json_mode:
            formatter.success(
                "Verification complete",
                valid=result.is_valid,
                errors=result.errors,
                warnings=result.warnings,
                files_checked=result.files_checked,
                blocks_in_use=result.blocks_in_use,
                lost_blocks=result.lost_blocks
            )
        else:
            print(format_verification_result(result))

        return 0 if result.is_valid else 1

    except D64Error as e:
        formatter.error(str(e))
        return 1
