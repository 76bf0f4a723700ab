import threading
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from loguru import logger

from modules.launcher.plugin_base import PluginBase
from modules.launcher.plugins import BUILTIN_PLUGINS


class PluginLoadError(Exception):
    """A plugin could not be constructed or failed its first refresh."""

    def __init__(self, plugin_name: str, cause: BaseException):
        super().__init__(f"Failed to load plugin {plugin_name}: {cause}")
        self.plugin_name = plugin_name
        self.cause = cause


class PluginManager:
    """
    Discovers, initializes and holds the active launcher plugins.

    The active set is replaced as a whole on every change, so readers always
    iterate over a consistent snapshot while a registration or discovery runs
    in another thread. At most one instance per plugin type is active.
    """

    def __init__(
        self,
        plugin_classes: Optional[Mapping[str, Callable[[], PluginBase]]] = None,
        disabled: Iterable[str] = (),
        plugin_config: Optional[Mapping[str, dict]] = None,
    ):
        if plugin_classes is None:
            plugin_classes = BUILTIN_PLUGINS

        # Available plugin constructors, keyed by plugin name
        self.plugin_classes: Dict[str, Callable[[], PluginBase]] = dict(plugin_classes)
        self.disabled = {name.lower() for name in disabled}
        # Per-plugin settings, applied before a plugin's first refresh
        self.plugin_config: Dict[str, dict] = dict(plugin_config or {})
        self.failed_plugins: Dict[str, PluginLoadError] = {}

        self._plugins: Tuple[PluginBase, ...] = ()
        self._discovered: set = set()
        self._lock = threading.RLock()

    def discover(self) -> List[PluginBase]:
        """
        Construct and refresh every known plugin that is not active yet.

        A plugin that fails to construct or refresh is skipped and recorded
        in failed_plugins; the remaining plugins still load.

        Returns:
            The plugins activated by this call
        """
        loaded = []
        with self._lock:
            for plugin_name, plugin_class in self.plugin_classes.items():
                if plugin_name in self._discovered:
                    continue
                if plugin_name in self.disabled:
                    logger.debug(f"[PluginManager] Skipping disabled plugin: {plugin_name}")
                    continue

                try:
                    plugin = plugin_class()
                except Exception as e:
                    self._record_failure(plugin_name, e)
                    continue

                if self._activate(plugin, plugin_name):
                    self._discovered.add(plugin_name)
                    loaded.append(plugin)

        logger.info(
            f"[PluginManager] Loaded {len(loaded)} plugin(s), "
            f"{len(self.failed_plugins)} failed"
        )
        return loaded

    def register(self, plugin: PluginBase) -> bool:
        """
        Refresh and activate a single plugin instance.

        Returns:
            True if the plugin is now active, False if a plugin of the same
            type was already active or its refresh failed
        """
        with self._lock:
            return self._activate(plugin, plugin.name)

    def deactivate(self, plugin_name: str) -> bool:
        """Remove a plugin from the active set by name."""
        with self._lock:
            remaining = tuple(p for p in self._plugins if p.name != plugin_name)
            if len(remaining) == len(self._plugins):
                return False
            self._plugins = remaining
            self._discovered.discard(plugin_name)
            logger.debug(f"[PluginManager] Deactivated plugin: {plugin_name}")
            return True

    def refresh_all(self):
        """Refresh every active plugin, isolating failures per plugin."""
        for plugin in self.get_active_plugins():
            try:
                plugin.refresh()
            except Exception as e:
                logger.opt(exception=e).warning(
                    f"[PluginManager] Failed to refresh plugin {plugin.name}: {e}"
                )

    def get_active_plugins(self) -> Tuple[PluginBase, ...]:
        """Get a snapshot of the active plugin instances."""
        return self._plugins

    def get_plugin(self, plugin_name: str) -> Optional[PluginBase]:
        for plugin in self._plugins:
            if plugin.name == plugin_name:
                return plugin
        return None

    def get_plugin_names(self) -> List[str]:
        """Get list of available plugin names."""
        return list(self.plugin_classes.keys())

    def get_active_plugin_names(self) -> List[str]:
        """Get list of active plugin names."""
        return [plugin.name for plugin in self._plugins]

    def _activate(self, plugin: PluginBase, plugin_name: str) -> bool:
        if any(type(active) is type(plugin) for active in self._plugins):
            logger.warning(
                f"[PluginManager] Plugin {plugin_name} is already active, "
                "ignoring duplicate instance"
            )
            return False

        try:
            if plugin_name in self.plugin_config:
                plugin.set_config(self.plugin_config[plugin_name])
            plugin.refresh()
        except Exception as e:
            self._record_failure(plugin_name, e)
            return False

        self._plugins = self._plugins + (plugin,)
        self.failed_plugins.pop(plugin_name, None)
        logger.debug(f"[PluginManager] Loaded plugin: {plugin_name}")
        return True

    def _record_failure(self, plugin_name: str, error: Exception):
        self.failed_plugins[plugin_name] = PluginLoadError(plugin_name, error)
        logger.opt(exception=error).warning(
            f"[PluginManager] Skipping plugin {plugin_name} due to errors: {error}"
        )
