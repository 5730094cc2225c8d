"""
Base Fixture Interface
Abstract base class for resources set up before and torn down after a check
"""

from abc import ABC, abstractmethod


class Fixture(ABC):
    """
    A resource with paired setup/teardown around the check

    All fixtures must implement:
    - setup(): Acquire the resource
    - teardown(): Release it; only called if setup() completed
    """

    name: str = ""

    @abstractmethod
    async def setup(self) -> None:
        """
        Acquire the resource

        Raises:
            FixtureError: If setup fails
        """
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """
        Release the resource

        Raises:
            FixtureError: If teardown fails
        """
        pass

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.name})"
