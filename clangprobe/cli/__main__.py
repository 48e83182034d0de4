"""
Entry point for running the clangprobe CLI as a module.

Usage: python -m clangprobe.cli [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
