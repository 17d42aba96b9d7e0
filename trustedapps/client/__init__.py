"""
Outbound client helpers for calling trusted app protected services.
"""

from .auth import TrustedAppsAuth, current_timestamp

__all__ = [
    "TrustedAppsAuth",
    "current_timestamp",
]
