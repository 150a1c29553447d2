"""Sprout command-line interface."""
