"""
Host Service - game server integration

Responsibilities:
- Report the connected player count
- Apply fps.limit values
- Deliver chat messages to individual players
"""

from .adapter import HostAdapter, Member

__all__ = ["HostAdapter", "Member"]
