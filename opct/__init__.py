"""Error counters, archive metadata parsing, archive redaction and failure filters for provider compatibility results."""

__version__ = "0.1.0"

__all__ = [
    "archive",
    "cleaner",
    "errorcounter",
    "filters",
    "plugin",
    "sonobuoy",
    "suite",
    "tags",
    "testdoc",
    "timers",
]