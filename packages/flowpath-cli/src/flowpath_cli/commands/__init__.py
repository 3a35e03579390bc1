"""Flowpath CLI subcommands."""
