"""CSV service dataset validation, issue resolution and satisfaction analytics."""

__version__ = "0.1.0"
