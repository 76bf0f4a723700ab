import re
import shlex
import subprocess
from typing import Callable, Iterable, List, NamedTuple, Optional

from loguru import logger

from modules.launcher.plugin_base import PluginBase
from modules.launcher.result import Result
from utils.similarity import maximum_similarity

# Desktop entry field codes like %f, %U or %i
FIELD_CODE_PATTERN = re.compile(r"%[fFuUdDnNickvm]")


class ApplicationInfo(NamedTuple):
    name: str
    command: str
    comment: Optional[str] = None
    icon: Optional[str] = None


def load_desktop_applications() -> List[ApplicationInfo]:
    """Read the installed desktop applications through fabric."""
    from fabric.utils.helpers import get_desktop_applications

    applications = []
    for app in get_desktop_applications(include_hidden=False):
        name = app.display_name or app.name
        command = app.command_line or app.executable or ""
        if not name or not command:
            continue
        applications.append(
            ApplicationInfo(
                name=name,
                command=command,
                comment=app.description or app.generic_name,
                icon=getattr(app, "icon_name", None),
            )
        )
    return applications


class ApplicationsPlugin(PluginBase):
    def __init__(self, loader: Optional[Callable[[], Iterable[ApplicationInfo]]] = None):
        super().__init__()
        self.name = "applications"
        self.display_name = "Applications"
        self.description = "Search and launch desktop applications"
        self.loader = loader or load_desktop_applications
        self.applications: List[ApplicationInfo] = []

    def refresh(self):
        """Reload the list of installed applications."""
        applications = []
        for app in self.loader():
            applications.append(
                app._replace(command=FIELD_CODE_PATTERN.sub("", app.command).strip())
            )
        # Swap in one step so a concurrent search sees the old or the new list
        self.applications = applications
        logger.debug(f"[Applications] Loaded {len(applications)} applications")

    def search(self, query: str) -> List[Result]:
        """Search applications whose name, command or comment contain the query."""
        query = query.lower().strip()
        if not query:
            return []

        results = []
        for app in self.applications:
            if (
                query in app.name.lower()
                or query in app.command.lower()
                or (app.comment and query in app.comment.lower())
            ):
                results.append(
                    Result(
                        title=app.name,
                        subtitle=app.comment or app.command,
                        icon=app.icon,
                        action=lambda a=app: self._launch_application(a),
                        weight=maximum_similarity(query, app.name, app.command, app.comment),
                        plugin_name=self.display_name,
                    )
                )

        return results

    def _launch_application(self, app: ApplicationInfo):
        try:
            subprocess.Popen(shlex.split(app.command), start_new_session=True)
        except (OSError, ValueError) as e:
            logger.warning(f"[Applications] Could not start {app.name}: {e}")
