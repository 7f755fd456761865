"""Seed data source interface"""
from abc import ABC, abstractmethod
from typing import Dict


class ISeedDataSource(ABC):
    """Supplies {formulas, models, tags, snippets, settings, version?}"""

    @abstractmethod
    async def fetch(self) -> Dict:
        """
        Fetch seed content.

        Raises:
            InitializationError: when the seed cannot be read or parsed
        """
        pass
