"""
Event transformer interface.

Transformers turn persisted blocks and logs into domain tables.
They run after the sync engine has stored the data they read.
"""

from abc import ABC, abstractmethod


class EventTransformer(ABC):
    """A job that decodes stored chain data into domain records."""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def execute(self) -> None:
        """
        Run one transformation pass.

        Raises:
            Exception: Any failure; the runner logs it and moves on
        """
