"""Parley command line interface."""
