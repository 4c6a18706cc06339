"""worklog: prediction statistics and time reports from a plain-text work log."""

__version__ = "1.0.0"
