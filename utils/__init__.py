"""
Utilities of the harvester.
"""
from .channel import Channel, ChannelClosedError

__all__ = [
    'Channel',
    'ChannelClosedError',
]
