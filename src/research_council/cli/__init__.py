"""Command-line interface for the research council."""
