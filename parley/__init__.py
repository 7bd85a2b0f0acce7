"""
Parley - chat bot listener registry and dispatch engine.

Routes normalized chat messages and interactive events to plugin listeners
and delivers their replies through the owning platform.
"""

__version__ = "0.1.0"
