"""
Federated search across all active launcher plugins.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from loguru import logger

from modules.launcher.plugin_base import PluginBase
from modules.launcher.plugin_manager import PluginManager
from modules.launcher.result import Result


def result_sort_key(result: Result):
    # Highest weight first, equal weights ordered by title
    return (-result.weight, result.title)


def sort_results(results: Iterable[Result]) -> List[Result]:
    """Return the results ordered from best to worst match."""
    return sorted(results, key=result_sort_key)


class QueryDispatcher:
    """
    Sends a query to every active plugin and merges the answers into one
    ranked list.

    A plugin that raises, or that does not answer within the timeout when
    searching in parallel, contributes no results to that query. A plugin
    whose previous parallel search is still running is left out until it
    finishes, so it never holds more than one worker. Weights are used
    exactly as the plugins report them.
    """

    def __init__(
        self,
        plugin_manager: PluginManager,
        max_workers: int = 1,
        timeout: Optional[float] = None,
    ):
        self.plugin_manager = plugin_manager
        self.max_workers = max(1, max_workers)
        self.timeout = timeout
        self._executor: Optional[ThreadPoolExecutor] = None
        self._in_flight: Dict[PluginBase, Future] = {}
        self._in_flight_lock = threading.Lock()
        if self.max_workers > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="launcher-search"
            )

    def query(self, text: str, limit: Optional[int] = None) -> List[Result]:
        """
        Search all plugins for a query.

        Args:
            text: The search query
            limit: Optional maximum number of results to return

        Returns:
            The results ordered so the best fitting result comes first
        """
        if not text or not text.strip():
            return []

        plugins = [p for p in self.plugin_manager.get_active_plugins() if p.enabled]

        if self._executor is None:
            results = []
            for plugin in plugins:
                results.extend(self._search_plugin(plugin, text))
        else:
            results = self._search_parallel(plugins, text)

        results = sort_results(results)
        if limit is not None:
            results = results[:limit]
        return results

    def shutdown(self):
        """Release the worker threads used for parallel searches."""
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def _search_parallel(self, plugins: List[PluginBase], text: str) -> List[Result]:
        futures = {}
        with self._in_flight_lock:
            for plugin in plugins:
                running = self._in_flight.get(plugin)
                if running is not None and not running.done():
                    logger.debug(
                        f"[Dispatcher] Plugin {plugin.name} is still busy with "
                        "an earlier query, skipping it"
                    )
                    continue
                future = self._executor.submit(self._search_plugin, plugin, text)
                self._in_flight[plugin] = future
                futures[future] = plugin

        if not futures:
            return []

        done, pending = wait(futures, timeout=self.timeout)

        for future in pending:
            future.cancel()
            logger.warning(
                f"[Dispatcher] Plugin {futures[future].name} timed out "
                f"after {self.timeout}s, skipping its results"
            )

        results = []
        for future in done:
            results.extend(future.result())
        return results

    def _search_plugin(self, plugin: PluginBase, text: str) -> List[Result]:
        try:
            found = list(plugin.search(text) or [])
        except Exception as e:
            logger.opt(exception=e).warning(
                f"[Dispatcher] Error in plugin {plugin.name}: {e}"
            )
            return []

        return [
            r if r.plugin_name else replace(r, plugin_name=plugin.display_name)
            for r in found
        ]
