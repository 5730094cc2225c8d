"""
Base Exporter Interface
The exporter yields the base URL of the service whose metrics are scraped
"""

from abc import ABC, abstractmethod


class Exporter(ABC):
    """Starts (or locates) the service under test"""

    @abstractmethod
    async def start(self) -> str:
        """
        Make the service reachable and return its base URL

        Returns:
            Base URL such as "http://localhost:9100"

        Raises:
            ExporterStartError: If the service cannot be located or never becomes ready
        """
        pass
