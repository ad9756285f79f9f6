"""
Constants for the Commodore 1541 (D64) disk image utility.
"""

# Sector geometry
SECTOR_SIZE = 256
LINK_SIZE = 2
DATA_BYTES_PER_SECTOR = SECTOR_SIZE - LINK_SIZE  # 254 payload bytes

# Sectors per track, index 0 = track 1
SECTORS_PER_TRACK = (
    (21,) * 17 +    # tracks 1-17
    (19,) * 7 +     # tracks 18-24
    (18,) * 6 +     # tracks 25-30
    (17,) * 10      # tracks 31-40
)
MAX_TRACKS = len(SECTORS_PER_TRACK)

# Supported image layouts
TRACKS_35 = 35
TRACKS_40 = 40
SUPPORTED_TRACK_COUNTS = (TRACKS_35, TRACKS_40)
D64_35_TRACKS_SIZE = 174848
D64_40_TRACKS_SIZE = 196608

# Reserved locations
DIR_TRACK = 18
BAM_TRACK = 18
BAM_SECTOR = 0
DIR_SECTOR = 1

# Padding byte for names and labels
FILL_BYTE = 0xA0

# BAM sector offsets
BAM_DOS_TYPE = 0x02
BAM_ENTRIES = 0x04           # 4 bytes per track: free count + 3-byte bitmap
BAM_ENTRY_SIZE = 4
BAM_EXTENDED_ENTRIES = 0xC0  # tracks 36-40 of a 40-track image
BAM_DISK_NAME = 0x90         # 144
BAM_DISK_NAME_SIZE = 16
BAM_DISK_ID = 0xA2           # 162
BAM_DISK_ID_SIZE = 2
BAM_DOS_VERSION = 0xA5       # 165
BAM_DOS_VERSION_SIZE = 2
BAM_BITMAP_BYTES = 3

DOS_TYPE = 0x41              # 'A'
DOS_VERSION = b'2A'

# Directory layout
DIR_ENTRY_SIZE = 32
DIR_ENTRIES_PER_SECTOR = SECTOR_SIZE // DIR_ENTRY_SIZE  # 8
DIR_ENTRY_TYPE = 2
DIR_ENTRY_START_TRACK = 3
DIR_ENTRY_START_SECTOR = 4
DIR_ENTRY_NAME = 5
DIR_ENTRY_NAME_SIZE = 16
DIR_ENTRY_BLOCKS = 30
DIR_TERMINAL_LINK = (0x00, 0xFF)

# File type byte
FILE_TYPE_MASK = 0x07
FILE_TYPE_DEL = 0
FILE_TYPE_SEQ = 1
FILE_TYPE_PRG = 2
FILE_TYPE_USR = 3
FILE_TYPE_REL = 4
FILE_LOCKED = 0x40
FILE_CLOSED = 0x80

FILE_TYPE_NAMES = {
    FILE_TYPE_DEL: 'DEL',
    FILE_TYPE_SEQ: 'SEQ',
    FILE_TYPE_PRG: 'PRG',
    FILE_TYPE_USR: 'USR',
    FILE_TYPE_REL: 'REL',
}
