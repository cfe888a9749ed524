"""Command-line dose entry tool."""
