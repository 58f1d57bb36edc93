"""moodtracker: mood journaling API."""

__version__ = "0.1.0"
