"""
clangprobe CLI module.

This module provides the command-line interface for clangprobe.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
