"""Core helpers shared by the fetch engine and the CLI."""
