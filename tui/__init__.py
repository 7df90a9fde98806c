"""
TUI (Terminal User Interface) mode for pkgbrowse using Textual.

The app is a thin shell: every key goes to the Session, which decides what
happens, and every resulting view is drawn by the widgets in this package.
"""

__version__ = "1.0.0"
