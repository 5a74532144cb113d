"""Cube Flop puzzle game, a quad drawing layer, and WAV reading with audio format conversion."""

__version__ = "0.1.0"