"""Jigsaw board service."""
