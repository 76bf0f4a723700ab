import argparse
import sys

import gi
import setproctitle
from fabric import Application
from gi.repository import GLib
from loguru import logger

from config.data import APP_NAME, load_config
from modules.launcher.dispatcher import QueryDispatcher
from modules.launcher.main import Launcher
from modules.launcher.plugin_manager import PluginManager
from modules.launcher.plugins import CommandsPlugin
from services.instance import ClosePolicy, InstanceCoordinator, Role
from utils.functions import run_in_thread

gi.require_version("Gtk", "3.0")
gi.require_version("Gdk", "3.0")

for log in [
    "fabric.core.application",
    "fabric.widgets.window",
]:
    logger.disable(log)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Search and launch anything")
    parser.add_argument(
        "--hidden", action="store_true", help="Start without showing the window"
    )
    parser.add_argument(
        "--closing",
        action="store_true",
        help="Quit when the window is closed instead of hiding it",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    close_policy = ClosePolicy(terminate_on_close=args.closing)
    launcher = None

    def show_launcher():
        if launcher is not None:
            launcher.show_launcher()
        return False

    # Signals arrive on the coordinator thread, the window lives on the GTK loop
    coordinator = InstanceCoordinator(
        on_show=lambda: GLib.idle_add(show_launcher),
        close_policy=close_policy,
    )
    if coordinator.try_become_primary() is Role.SECONDARY:
        return 0

    setproctitle.setproctitle(APP_NAME)

    config = load_config()

    plugin_manager = PluginManager(
        disabled=config["disabled_plugins"], plugin_config=config["plugins"]
    )
    plugin_manager.discover()

    dispatcher = QueryDispatcher(
        plugin_manager,
        max_workers=config["search_workers"],
        timeout=config["plugin_timeout"],
    )

    app = None

    def quit_app():
        if app is not None:
            app.quit()

    plugin_manager.register(
        CommandsPlugin(
            on_refresh=run_in_thread(plugin_manager.refresh_all),
            on_exit=quit_app,
        )
    )
    logger.info(
        f"[Main] Active plugins: {', '.join(plugin_manager.get_active_plugin_names())}"
    )

    launcher = Launcher(
        dispatcher,
        close_policy,
        on_quit=quit_app,
        max_results=config["max_results"],
        debounce_ms=config["search_debounce_ms"],
    )
    app = Application(f"{APP_NAME}", launcher)

    if not args.hidden:
        launcher.show_launcher()

    try:
        app.run()
    finally:
        coordinator.stop(timeout=1.0)
        dispatcher.shutdown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
