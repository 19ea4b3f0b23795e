"""
Broadcast dispatch for the Invalidator Service.
"""

from .broadcaster import BroadcastDispatcher, BroadcastResult

__all__ = ["BroadcastDispatcher", "BroadcastResult"]
