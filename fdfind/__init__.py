"""Option parsing, file-type filters, directory entries and command execution for file search."""

__version__ = "10.2.0"