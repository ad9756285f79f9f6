"""
Text conversion between host strings and the disk's PETSCII subset.

Only the printable band 0x20-0x5F is stored verbatim. Lowercase host
letters are folded to the uppercase PETSCII codes, and shifted letters
(0xC1-0xDA) read back as their unshifted counterparts. Everything else
becomes '?'.
"""

from .constants import FILL_BYTE
from .exceptions import InvalidFieldError

UNKNOWN = 0x3F  # '?'


def to_petscii(text: str) -> bytes:
    """Encode host text for storage on the disk."""
    out = bytearray()
    for char in text:
        if ' ' <= char <= '_':
            out.append(ord(char))
        elif 'a' <= char <= 'z':
            out.append(ord(char) - 32)
        else:
            out.append(UNKNOWN)
    return bytes(out)


def to_ascii(data: bytes) -> str:
    """Decode disk bytes to host text."""
    chars = []
    for byte in data:
        if 0x20 <= byte <= 0x5F:
            chars.append(chr(byte))
        elif 0xC1 <= byte <= 0xDA:
            chars.append(chr(byte - 0x80))
        else:
            chars.append('?')
    return ''.join(chars)


def decode_field(data: bytes) -> str:
    """Decode a padded name field, stopping at the first fill byte."""
    end = data.find(FILL_BYTE)
    if end == -1:
        end = len(data)
    return to_ascii(data[:end])


def encode_field(text: str, width: int) -> bytes:
    """Encode text into a fixed-width field right-padded with the fill byte."""
    encoded = to_petscii(text)
    if len(encoded) > width:
        raise InvalidFieldError(
            f"'{text}' is {len(encoded)} characters, field holds {width}"
        )
    return encoded + bytes([FILL_BYTE]) * (width - len(encoded))
