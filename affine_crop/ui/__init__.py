"""Painting helpers for crop decorations."""
