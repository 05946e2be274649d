"""Ethereum block indexer: backfill, reorg validation and transformer hooks."""

__version__ = "0.1.0"
