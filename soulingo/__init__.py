"""SouLingo - headless session controllers for the language-learning app."""

__version__ = "0.1.0"
