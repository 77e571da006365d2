"""Lead Research Agent: newsletter leads scored against an Ideal Customer Profile."""

__version__ = "0.1.0"
