#!/usr/bin/env python3
"""
gptsub Entry Point Script

This script initializes the CLI handler and translates one subtitle file.
"""

from gptsub.cli import main

if __name__ == "__main__":
    main()
