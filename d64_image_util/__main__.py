"""
Entry point for D64 Disk Image Utility.

Allows running as: python -m d64_image_util
"""

import argparse
import sys

from . import __version__
from .commands import (
    cmd_allocate,
    cmd_bam,
    cmd_create,
    cmd_delete,
    cmd_extract,
    cmd_find_free,
    cmd_format,
    cmd_free,
    cmd_insert,
    cmd_list,
    cmd_read,
    cmd_set_id,
    cmd_set_name,
    cmd_trace,
    cmd_verify,
    cmd_write,
)
from .formatter import OutputFormatter
from .logging_config import setup_logging, QUIET, NORMAL, VERBOSE


def _add_json_option(parser: argparse.ArgumentParser) -> None:
    # SUPPRESS keeps a global --json from being reset by the subcommand default
    parser.add_argument('--json', action='store_true', default=argparse.SUPPRESS,
                        help='Output in JSON format')


def _add_location(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('track', type=int, help='Track number (1-40)')
    parser.add_argument('sector', type=int, help='Sector number (0-20, depends on track)')


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog='d64_image_util',
        description='Commodore 1541 (D64) disk image utility'
    )

    # Global options
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__}')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show detailed output')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Suppress non-essential output')
    parser.add_argument('--json', action='store_true', help='Output in JSON format')

    subparsers = parser.add_subparsers(dest='command', required=True)

    # Create command
    create_parser = subparsers.add_parser('create', help='Create a new blank D64 image')
    create_parser.add_argument('image', help='Output file path for new disk image')
    create_parser.add_argument('-t', '--tracks', type=int, default=35, choices=[35, 40],
                               help='Number of tracks (default: 35)')
    create_parser.add_argument('-f', '--force', action='store_true',
                               help='Overwrite existing file')
    _add_json_option(create_parser)

    # Format command
    format_parser = subparsers.add_parser('format', help='Format a disk image (erases all data)')
    format_parser.add_argument('image', help='Disk image path')
    format_parser.add_argument('name', help='Disk name (up to 16 characters)')
    format_parser.add_argument('id', help='Disk ID (2 characters)')
    _add_json_option(format_parser)

    # Read command
    read_parser = subparsers.add_parser('read', help='Show the contents of a sector')
    read_parser.add_argument('image', help='Disk image path')
    _add_location(read_parser)
    _add_json_option(read_parser)

    # Write command
    write_parser = subparsers.add_parser('write', help='Write hex data to a sector')
    write_parser.add_argument('image', help='Disk image path')
    _add_location(write_parser)
    write_parser.add_argument('data', help='Hex data (up to 256 bytes, zero padded)')
    _add_json_option(write_parser)

    # BAM command
    bam_parser = subparsers.add_parser('bam', help='Show the block availability map',
                                       epilog='Use -v to include the per-track sector map.')
    bam_parser.add_argument('image', help='Disk image path')
    _add_json_option(bam_parser)

    # Find-free command
    find_free_parser = subparsers.add_parser('find-free', help='Find the first free sector')
    find_free_parser.add_argument('image', help='Disk image path')
    _add_json_option(find_free_parser)

    # Allocate command
    allocate_parser = subparsers.add_parser('allocate', help='Mark a sector as used in the BAM')
    allocate_parser.add_argument('image', help='Disk image path')
    _add_location(allocate_parser)
    _add_json_option(allocate_parser)

    # Free command
    free_parser = subparsers.add_parser('free', help='Mark a sector as free in the BAM')
    free_parser.add_argument('image', help='Disk image path')
    _add_location(free_parser)
    _add_json_option(free_parser)

    # Set-name command
    set_name_parser = subparsers.add_parser('set-name', help='Change the disk name')
    set_name_parser.add_argument('image', help='Disk image path')
    set_name_parser.add_argument('name', help='Disk name (up to 16 characters)')
    _add_json_option(set_name_parser)

    # Set-id command
    set_id_parser = subparsers.add_parser('set-id', help='Change the disk ID')
    set_id_parser.add_argument('image', help='Disk image path')
    set_id_parser.add_argument('id', help='Disk ID (2 characters)')
    _add_json_option(set_id_parser)

    # List command
    list_parser = subparsers.add_parser('list', help='List files in the directory')
    list_parser.add_argument('image', help='Disk image path')
    _add_json_option(list_parser)

    # Extract command
    extract_parser = subparsers.add_parser('extract', help='Copy a file out of the disk image')
    extract_parser.add_argument('image', help='Disk image path')
    extract_parser.add_argument('name', help='File name on the disk')
    extract_parser.add_argument('output', help='Output file path')
    _add_json_option(extract_parser)

    # Insert command
    insert_parser = subparsers.add_parser('insert', help='Copy a host file into the disk image')
    insert_parser.add_argument('image', help='Disk image path')
    insert_parser.add_argument('source', help='Host file to insert')
    insert_parser.add_argument('-n', '--name',
                               help='File name on the disk (default: source file name)')
    insert_parser.add_argument('-t', '--type', choices=['prg', 'seq', 'usr'], default='prg',
                               help='File type (default: prg)')
    _add_json_option(insert_parser)

    # Delete command
    delete_parser = subparsers.add_parser('delete', help='Scratch a file from the disk image')
    delete_parser.add_argument('image', help='Disk image path')
    delete_parser.add_argument('name', help='File name on the disk')
    _add_json_option(delete_parser)

    # Trace command
    trace_parser = subparsers.add_parser('trace', help='Show the sectors used by a file')
    trace_parser.add_argument('image', help='Disk image path')
    trace_parser.add_argument('name', help='File name on the disk')
    _add_json_option(trace_parser)

    # Verify command
    verify_parser = subparsers.add_parser('verify', help='Verify disk image integrity')
    verify_parser.add_argument('image', help='Disk image path to verify')
    _add_json_option(verify_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging based on verbosity flags
    if args.quiet:
        setup_logging(level=QUIET)
    elif args.verbose:
        setup_logging(level=VERBOSE)
    else:
        setup_logging(level=NORMAL)

    formatter = OutputFormatter(json_mode=args.json)

    match args.command:
        case 'create':
            return cmd_create(args, formatter)
        case 'format':
            return cmd_format(args, formatter)
        case 'read':
            return cmd_read(args, formatter)
        case 'write':
            return cmd_write(args, formatter)
        case 'bam':
            return cmd_bam(args, formatter)
        case 'find-free':
            return cmd_find_free(args, formatter)
        case 'allocate':
            return cmd_allocate(args, formatter)
        case 'free':
            return cmd_free(args, formatter)
        case 'set-name':
            return cmd_set_name(args, formatter)
        case 'set-id':
            return cmd_set_id(args, formatter)
        case 'list':
            return cmd_list(args, formatter)
        case 'extract':
            return cmd_extract(args, formatter)
        case 'insert':
            return cmd_insert(args, formatter)
        case 'delete':
            return cmd_delete(args, formatter)
        case 'trace':
            return cmd_trace(args, formatter)
        case 'verify':
            return cmd_verify(args, formatter)
        case _:
            formatter.error(f"Unknown command: {args.command}")
            return 1


if __name__ == '__main__':
    sys.exit(main())
