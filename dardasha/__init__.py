"""Dardasha - voice and text chat client for hosted language models."""

__version__ = "0.1.0"
