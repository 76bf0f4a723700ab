"""
Result class representing a search result from plugins.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class Result:
    """
    Represents a search result that can be displayed and executed.

    The weight is trusted as given: 1.0 is the best ordinary match and 0.0
    keeps a result at the bottom, but values outside that range are allowed
    to pin a result to the top or bottom of the list.
    """

    # Display information
    title: str
    weight: float = 0.0
    subtitle: Optional[str] = None
    icon: Optional[str] = None  # Opaque icon reference, resolved by the UI

    # Behavior
    action: Optional[Callable[[], Any]] = None

    # Metadata
    id: Optional[str] = None  # Reserved for remembering user choices
    plugin_name: str = ""

    def __post_init__(self):
        if self.id is None:
            object.__setattr__(self, "id", self.title)

    def execute(self):
        """Execute this result's action."""
        if self.action:
            return self.action()
        else:
            raise NotImplementedError("No action defined for this result")

    def __str__(self):
        return f"Result(title='{self.title}', weight={self.weight})"

    def __repr__(self):
        return self.__str__()
