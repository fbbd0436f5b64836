"""Distribution of discovered tests into CI shards."""

from gotestshard.sharding.distributor import (
    SEPARATOR,
    Shard,
    distribute,
    plan_shards,
    split_entry,
    suite_groups,
    target_size,
)
from gotestshard.sharding.matrix import dumps_matrix, loads_matrix, read_matrix, write_matrix

__all__ = [
    "SEPARATOR",
    "Shard",
    "distribute",
    "dumps_matrix",
    "loads_matrix",
    "plan_shards",
    "read_matrix",
    "split_entry",
    "suite_groups",
    "target_size",
    "write_matrix",
]
