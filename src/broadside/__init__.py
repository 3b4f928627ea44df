"""Combat resolution and status effect engine for turn-based naval boarding battles."""

__version__ = "0.1.0"
