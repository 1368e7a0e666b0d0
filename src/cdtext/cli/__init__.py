"""
cdtext Command-Line Interface
=============================

- **cdtext**: inspect CD-Text dumps (entries, raw packs, summary)

Implemented as a Click group with help on every command.
"""

__all__ = ["cdtext"]
