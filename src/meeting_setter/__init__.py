"""Meeting Setter — conversational meeting-scheduling assistant."""

__version__ = "0.1.0"
