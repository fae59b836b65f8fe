"""CLI package for epirus."""
