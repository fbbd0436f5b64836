"""Greedy distribution of grouped tests into a fixed number of shards.

Items are bucketed by grouping key (suite name, or test name for
package-level tests), keys are sorted, and shards are filled one after the
other up to ``ceil(total / shard_count)`` items.  The last shard absorbs
whatever remains, so the shard count is never exceeded even when balance
suffers.  Manually pinned entries (overrides) are kept out of the greedy
pass and appended verbatim.

Each rendered shard can be fed to ``go test -run '(<entry>)/'``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from gotestshard.models.item import DiscoveredItem

logger = logging.getLogger(__name__)

SEPARATOR = "|"


@dataclass
class Shard:
    """One automatic matrix entry."""

    index: int
    """One-based shard number."""

    keys: list[str] = field(default_factory=list)
    """Grouping keys in placement order."""

    size: int = 0
    """Number of items covered by ``keys``."""

    def render(self) -> str:
        return SEPARATOR.join(self.keys)


def split_entry(entry: str) -> list[str]:
    """Split a compound ``A|B`` entry into its grouping keys."""
    return [part for part in entry.split(SEPARATOR) if part]


def suite_groups(
    items: Iterable[DiscoveredItem],
    excluded: Iterable[str] = (),
) -> dict[str, int]:
    """Count items per grouping key, keys sorted ascending.

    Items without a grouping key and keys listed in *excluded* are skipped.
    """
    skip = set(excluded)
    counts: dict[str, int] = {}
    for item in items:
        key = item.grouping_key
        if key is None or key in skip:
            continue
        counts[key] = counts.get(key, 0) + 1
    return {key: counts[key] for key in sorted(counts)}


def target_size(total: int, shard_count: int) -> int:
    """Items per shard the greedy pass aims for: ``ceil(total / shard_count)``."""
    return math.ceil(total / shard_count)


def plan_shards(
    items: Sequence[DiscoveredItem],
    shard_count: int,
    overrides: Sequence[str] = (),
) -> list[Shard]:
    """Assign grouping keys to exactly *shard_count* shards.

    The target size is computed from the full item count, overrides
    included, even though overridden keys are not placed here.

    Raises:
        ValueError: If shard_count is less than 1.
    """
    if shard_count < 1:
        msg = f"shard_count must be >= 1, got {shard_count}"
        raise ValueError(msg)

    excluded = {key for entry in overrides for key in split_entry(entry)}
    groups = suite_groups(items, excluded)
    target = target_size(len(items), shard_count)

    shards = [Shard(index=i) for i in range(1, shard_count + 1)]
    pos = 0
    for key, count in groups.items():
        current = shards[pos]
        if pos < shard_count - 1 and current.keys and current.size + count > target:
            pos += 1
            current = shards[pos]
        current.keys.append(key)
        current.size += count

    logger.debug(
        "Planned %d groups into %d shards (target size %d, %d excluded keys)",
        len(groups),
        shard_count,
        target,
        len(excluded),
    )
    return shards


def distribute(
    items: Sequence[DiscoveredItem],
    shard_count: int,
    overrides: Sequence[str] = (),
) -> list[str]:
    """Return the matrix: *shard_count* rendered shards followed by *overrides*.

    Raises:
        ValueError: If shard_count is less than 1.
    """
    shards = plan_shards(items, shard_count, overrides)
    return [shard.render() for shard in shards] + list(overrides)
