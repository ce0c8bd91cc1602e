"""
Swipe Ledger

Captures magnetic-stripe card swipes from a keyboard-emulating reader and
keeps a deduplicated, sorted ledger of account numbers in a flat file.
"""

__version__ = "1.0.0"
