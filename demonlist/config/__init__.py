"""
Configuration package for the demonlist.
"""

from .settings import settings, list_size, extended_list_size

__all__ = ["settings", "list_size", "extended_list_size"]
