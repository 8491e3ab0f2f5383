"""
suggestion-board: client library for a community suggestion board.

Keeps a local suggestion feed, liked posts and visitor identity in sync
with a hosted suggestions table.
"""

__version__ = "0.1.0"
