"""Client modules for external services."""

from .commerce import CommerceClient, CommerceError

__all__ = ["CommerceClient", "CommerceError"]
