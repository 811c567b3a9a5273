"""Gridshift: a tile-flip puzzle inside a roguelike node map."""

__version__ = "0.1.0"
