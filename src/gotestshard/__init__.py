"""gotestshard: list Go tests and split them into CI shards."""

__version__ = "0.1.0"
