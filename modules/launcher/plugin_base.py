"""
Base class for launcher plugins.
"""

from abc import ABC, abstractmethod
from typing import List

from .result import Result


class PluginBase(ABC):
    """
    Abstract base class for launcher plugins.
    All plugins must inherit from this class.
    """

    def __init__(self):
        self.name = self.__class__.__name__.lower()
        self.display_name = self.__class__.__name__
        self.description = "A launcher plugin"
        self.enabled = True

    @abstractmethod
    def search(self, query: str) -> List[Result]:
        """
        Process a search query and return results.

        Args:
            query: The search query from the user

        Returns:
            List of Result objects, in any order
        """
        pass

    def refresh(self):
        """
        Refresh the cached data of this plugin.

        Called once before the first search and again whenever the user asks
        for a refresh. Work that is too slow for search() belongs here.
        Plugins whose refresh() may run in parallel to search() must guard
        their own state.
        """
        pass

    def set_config(self, config: dict):
        """
        Apply the user's settings for this plugin.

        Args:
            config: The plugin's entry in the "plugins" section of config.json
        """
        self.enabled = bool(config.get("enabled", self.enabled))

    def __str__(self):
        return f"Plugin({self.name})"

    def __repr__(self):
        return self.__str__()
