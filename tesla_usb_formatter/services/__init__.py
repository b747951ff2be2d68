"""Command layer shared by the CLI and other front ends."""
