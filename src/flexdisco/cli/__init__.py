"""Command-line interface for flexdisco."""
