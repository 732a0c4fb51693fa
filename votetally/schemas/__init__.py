"""Packaged JSON schemas for votetally wire documents."""
