"""
Transformer runner.

Executes registered transformers in order. A failing transformer is
logged and does not prevent the others from running.
"""

import asyncio

from loguru import logger

from chainsync.services.transformers.base import EventTransformer


class TransformerRunner:
    """Runs a fixed list of transformers."""

    def __init__(self, transformers: list[EventTransformer] | None = None) -> None:
        self.transformers: list[EventTransformer] = list(transformers or [])

    def register(self, transformer: EventTransformer) -> None:
        self.transformers.append(transformer)

    async def execute_all(self) -> dict[str, Exception | None]:
        """
        Execute every transformer once.

        Returns:
            Mapping of transformer name to its error, or None on success.
            Repeated names get a "#n" suffix in registration order.
        """
        results: dict[str, Exception | None] = {}
        seen: dict[str, int] = {}
        for transformer in self.transformers:
            seen[transformer.name] = seen.get(transformer.name, 0) + 1
            key = transformer.name
            if seen[key] > 1:
                key = f"{key}#{seen[key]}"
            try:
                await transformer.execute()
                results[key] = None
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"[Transformers] {key} failed: {e}")
                results[key] = e

        failed = sum(1 for error in results.values() if error is not None)
        if failed:
            logger.warning(f"[Transformers] {failed}/{len(results)} transformers failed")
        return results
