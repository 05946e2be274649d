"""Sync worker process."""
