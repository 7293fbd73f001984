"""Escape-time engine: viewport, coordinate mapping, evaluation and field generation."""
