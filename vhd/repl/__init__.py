"""REPL shell for interactive drive navigation.

This module provides an interactive shell for browsing drives and moving
files between local disk and storage through the virtual filesystem.
"""

from vhd.repl.shell import DriveShell

__all__ = ["DriveShell"]
