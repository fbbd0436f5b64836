"""Data models for discovered tests."""

from gotestshard.models.item import SUITE_SUFFIX, DiscoveredItem, ItemKind

__all__ = ["SUITE_SUFFIX", "DiscoveredItem", "ItemKind"]
