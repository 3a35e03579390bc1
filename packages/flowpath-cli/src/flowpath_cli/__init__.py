"""Flowpath command line interface."""
