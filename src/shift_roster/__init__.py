"""
Shift Roster

A command-line tool for recording employees, shifts and shift assignments,
with all state kept in JSON files on disk.
"""

__version__ = "1.0.0"
__author__ = "Shift Roster Team"
