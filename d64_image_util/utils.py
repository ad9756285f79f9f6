"""
Utility functions for the D64 disk image utility.
"""

from .constants import DIR_ENTRY_NAME_SIZE, SECTOR_SIZE
from .exceptions import InvalidFieldError, InvalidFilenameError
from .petscii import encode_field, to_petscii


def validate_filename(filename: str) -> bytes:
    """
    Validate a filename and return its 16-byte padded directory form.
    Raises InvalidFilenameError if the name is empty or too long.
    """
    if not filename:
        raise InvalidFilenameError("Filename cannot be empty")

    encoded = to_petscii(filename)
    if len(encoded) > DIR_ENTRY_NAME_SIZE:
        raise InvalidFilenameError(
            f"Filename '{filename}' exceeds {DIR_ENTRY_NAME_SIZE} characters"
        )

    return encode_field(filename, DIR_ENTRY_NAME_SIZE)


def parse_sector_data(hex_string: str) -> bytes:
    """
    Decode a hex string into one sector worth of data.

    Whitespace is ignored. Short input is zero-padded to a full sector,
    longer input is rejected.
    """
    cleaned = ''.join(hex_string.split())
    try:
        data = bytes.fromhex(cleaned)
    except ValueError as e:
        raise InvalidFieldError(f"Invalid hex data: {e}")

    if len(data) > SECTOR_SIZE:
        raise InvalidFieldError(
            f"Sector data is {len(data)} bytes, maximum is {SECTOR_SIZE}"
        )

    return data.ljust(SECTOR_SIZE, b'\x00')


def hex_dump(data: bytes, width: int = 16) -> list[str]:
    """Format bytes as offset / hex / printable lines."""
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        hex_part = ' '.join(f"{b:02X}" for b in chunk)
        text_part = ''.join(chr(b) if 0x20 <= b < 0x7F else '.' for b in chunk)
        lines.append(f"{offset:02X}: {hex_part:<{width * 3 - 1}}  {text_part}")
    return lines
