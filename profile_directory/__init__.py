"""Profile directory: searchable, mappable people directory."""

__version__ = "1.0.0"
