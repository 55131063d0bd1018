"""Shared types, key handling, names and PEM framing."""
