"""
Entry point for running clangprobe as a module.

Usage: python -m clangprobe [options]
"""

from clangprobe.cli.parser import main

if __name__ == "__main__":
    main()
