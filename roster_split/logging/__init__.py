"""Labeled console logging and the batch error list."""
