"""
Custom exceptions for the D64 disk image utility.
"""


class D64Error(Exception):
    """Base exception for all D64 disk errors."""
    pass


class DiskError(D64Error):
    """Error reading/writing disk image."""
    pass


class InvalidImageSizeError(D64Error):
    """Image size matches neither the 35 nor the 40 track layout."""
    pass


class InvalidTrackSectorError(D64Error):
    """Track or sector out of range for the image geometry."""
    pass


class InvalidFieldError(InvalidTrackSectorError):
    """Malformed text field or sector block."""
    pass


class InvalidFilenameError(InvalidFieldError):
    """Filename cannot be stored in a directory entry."""
    pass


class FileNotFoundError(D64Error):
    """File not found in disk image."""
    pass


class FileExistsError(D64Error):
    """A file with the same name is already on the disk."""
    pass


class DiskFullError(D64Error):
    """Not enough free space on disk."""
    pass


class DirectoryFullError(DiskFullError):
    """No free directory entries available."""
    pass


class CorruptedDiskError(D64Error):
    """Disk structure is corrupted."""
    pass
