"""
Built-in launcher plugins.

BUILTIN_PLUGINS maps a plugin name to the constructor used by the
PluginManager during discovery. Plugins that need collaborators, like the
commands plugin, are registered explicitly by the application.
"""

from .applications import ApplicationsPlugin
from .calculator import CalculatorPlugin
from .commands import CommandsPlugin

BUILTIN_PLUGINS = {
    "applications": ApplicationsPlugin,
    "calculator": CalculatorPlugin,
}

__all__ = ["ApplicationsPlugin", "BUILTIN_PLUGINS", "CalculatorPlugin", "CommandsPlugin"]
