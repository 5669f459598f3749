"""
Page text backend.

Finds the human-visible text of template pages and writes edits back as
byte-exact splices of the original source.
"""

__version__ = "0.1.0"
