from typing import Callable, List, Optional

from modules.launcher.plugin_base import PluginBase
from modules.launcher.result import Result


class CommandsPlugin(PluginBase):
    """
    Plugin offering commands to control the launcher itself.
    """

    def __init__(
        self,
        on_refresh: Optional[Callable[[], None]] = None,
        on_exit: Optional[Callable[[], None]] = None,
    ):
        super().__init__()
        self.name = "commands"
        self.display_name = "Commands"
        self.description = "Control the launcher"
        self.commands = {
            "exit": {
                "title": "Exit",
                "description": "Close this application",
                "icon": "application-exit",
                "action": on_exit,
            },
            "refresh": {
                "title": "Refresh",
                "description": "Refreshes all data",
                "icon": "view-refresh",
                "action": on_refresh,
            },
        }

    def search(self, query: str) -> List[Result]:
        command = self.commands.get(query.strip().lower())
        if command is None or command["action"] is None:
            return []

        return [
            Result(
                title=command["title"],
                subtitle=command["description"],
                icon=command["icon"],
                action=command["action"],
                weight=1.0,
                plugin_name=self.display_name,
            )
        ]
