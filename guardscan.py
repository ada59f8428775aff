#!/usr/bin/env python3
"""
SysGuard

Main executable entry point for the hardening inspector.
This script runs the CLI and exits with appropriate status codes.

Usage:
    ./guardscan.py [options]
    python3 guardscan.py [options]

Exit Codes:
    0 - Success, every mark passed
    1 - Error occurred during execution
    2 - Failed marks, unavailable facts or warnings (e.g., running without sudo)

Examples:
    # Run with default settings
    sudo ./guardscan.py

    # Human-readable sheet for a Chinese-locale host
    sudo ./guardscan.py --format text --profile zh_CN

    # Only the password and timeout checks, written to a file
    sudo ./guardscan.py --check passwd_complexity --check operation_timeout -o results.json
"""

import sys
from sysguard.cli import main

if __name__ == "__main__":
    sys.exit(main())
