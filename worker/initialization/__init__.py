"""
Worker Initialization Module.

This module contains all initialization logic split into focused modules:
- logging: Logger configuration
- services: Engine, block store and chain source wiring
- shutdown: Graceful shutdown handler
"""

__all__ = []
