"""Shared helpers for logging and filesystem paths."""
