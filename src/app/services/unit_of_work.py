"""Unit of Work Interface

Atomic all-or-nothing group of reads and writes.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Transaction boundary shared by the repositories of one use case

    Nothing written through the repositories is visible to other readers
    until commit(); rollback() discards it.
    """

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
