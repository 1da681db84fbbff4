"""Test fixtures: in-memory stores and entity factories."""
