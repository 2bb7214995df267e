#!/usr/bin/env python3
"""Main entry point for facestream.

Simplified entry point that delegates to the CLI module.

Usage:
    python main.py enroll                 # Build the gallery and report counts
    python main.py recognize -i photo.jpg # Recognize a face in one image
    python main.py live --front           # Live camera recognition

Or use the CLI directly:
    python -m facestream live
"""

import sys


def main():
    """Main entry point - delegates to CLI."""
    # If no arguments, show help
    if len(sys.argv) == 1:
        print(__doc__)
        print("Run 'python main.py --help' for more options")
        sys.exit(0)

    from facestream.cli import main as cli_main
    cli_main()


if __name__ == "__main__":
    main()
