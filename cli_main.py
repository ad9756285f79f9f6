#!/usr/bin/env python3
"""
Entry point script for the command line tool.
Used when running from a source checkout or building a frozen executable.
"""

import sys
from d64_image_util.__main__ import main

if __name__ == '__main__':
    sys.exit(main())
