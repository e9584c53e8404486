"""
Concurrency utilities package.
"""

from .lease import CommandLease, timed_lock

__all__ = [
    'CommandLease',
    'timed_lock',
]
