"""
Output formatting for the D64 disk image utility.
"""

import json
import sys

from .models import DirectoryEntry
from .utils import hex_dump


class OutputFormatter:
    """Handle output formatting (text or JSON)."""

    def __init__(self, json_mode: bool = False):
        self.json_mode = json_mode

    def success(self, message: str, **data) -> None:
        """Output success message."""
        if self.json_mode:
            output = {"status": "success", "message": message, **data}
            print(json.dumps(output))
        else:
            print(message)

    def error(self, message: str) -> None:
        """Output error message."""
        if self.json_mode:
            output = {"status": "error", "message": message}
            print(json.dumps(output))
        else:
            print(f"Error: {message}", file=sys.stderr)

    def list_files(self, entries: list[DirectoryEntry], image_path: str = "", disk_name: str = "") -> None:
        """Output file listing."""
        if self.json_mode:
            files = []
            for entry in entries:
                files.append({
                    "name": entry.name,
                    "type": entry.type_name,
                    "blocks": entry.blocks,
                    "track": entry.start_track,
                    "sector": entry.start_sector,
                    "closed": entry.is_closed,
                    "locked": entry.is_locked,
                })
            output = {"status": "success", "image": image_path, "disk_name": disk_name, "files": files}
            print(json.dumps(output))
        else:
            print(f"Files in {image_path}:" if image_path else "Files:")
            if disk_name:
                print(f"  Disk: \"{disk_name}\"")
            print()

            total_blocks = 0
            for i, entry in enumerate(entries, start=1):
                print(f"  {i:2}. {entry.name:<16}  {entry.blocks:>4}  {entry.type_string()}")
                total_blocks += entry.blocks

            print()
            print(f"  {len(entries)} file(s)  {total_blocks} block(s)")

    def trace(self, name: str, sectors: list[tuple[int, int]]) -> None:
        """Output the sector chain of a file."""
        if self.json_mode:
            output = {
                "status": "success",
                "name": name,
                "sectors": [{"track": t, "sector": s} for t, s in sectors],
            }
            print(json.dumps(output))
        else:
            print(f"File '{name}' is located in the following sectors:")
            for i, (track, sector) in enumerate(sectors, start=1):
                print(f"  Block {i}: Track {track}, Sector {sector}")
            print(f"Total blocks: {len(sectors)}")

    def sector_dump(self, track: int, sector: int, data: bytes) -> None:
        """Output the contents of one sector."""
        if self.json_mode:
            output = {"status": "success", "track": track, "sector": sector, "data": data.hex()}
            print(json.dumps(output))
        else:
            print(f"Track {track}, Sector {sector}:")
            for line in hex_dump(data):
                print(f"  {line}")
