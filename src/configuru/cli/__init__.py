"""Command-line interface for configuru."""
