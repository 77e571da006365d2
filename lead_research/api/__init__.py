"""HTTP API for the Lead Research Agent."""
