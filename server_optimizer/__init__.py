"""
Server Optimizer

Adjusts a game server's fps.limit to the number of connected players.
"""

__version__ = "1.0.0"
