import subprocess
from typing import List

import pytest

from modules.launcher.dispatcher import QueryDispatcher
from modules.launcher.plugin_manager import PluginManager
from modules.launcher.plugins.applications import ApplicationInfo, ApplicationsPlugin
from modules.launcher.plugins.calculator import CALCULATION_WEIGHT, CalculatorPlugin
from modules.launcher.plugins.commands import CommandsPlugin
from modules.launcher.result import Result
from utils.similarity import maximum_similarity

APPLICATIONS = [
    ApplicationInfo(name="Firefox", command="firefox %u", comment="Browse the Web", icon="firefox"),
    ApplicationInfo(name="Files", command="nautilus --new-window %U", comment=None, icon=None),
    ApplicationInfo(name="Terminal", command="kitty", comment="Fast terminal emulator"),
]


@pytest.fixture
def applications() -> ApplicationsPlugin:
    plugin = ApplicationsPlugin(loader=lambda: list(APPLICATIONS))
    plugin.refresh()
    return plugin


def test_calculator_evaluates_expressions() -> None:
    results = CalculatorPlugin().search("2 + 3 * 4")

    assert len(results) == 1
    result = results[0]
    assert result.title == "14"
    assert result.subtitle == "= 2 + 3 * 4"
    assert result.weight == CALCULATION_WEIGHT
    assert result.id == "calculator"


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("2^10", "1024"),
        ("sqrt(16) + pi - pi", "4"),
        ("-(1.5 * 2)", "-3"),
        ("7 // 2 % 2", "1"),
        ("2^1000", "1.07151e+301"),
        ("pow(3, 4, 5)", "1"),
    ],
)
def test_calculator_supports_functions_and_operators(expression: str, expected: str) -> None:
    assert CalculatorPlugin().search(expression)[0].title == expected


@pytest.mark.parametrize(
    "query",
    [
        "",
        "firefox",
        "1 +",
        "1/0",
        "__import__('os')",
        "().__class__",
        "9**9**9",
        "sqrt(-1)",
        "True + 1",
        "10**400",
        "((9**999)**999)**999",
        "pow(pow(9, 999), 999)",
    ],
)
def test_calculator_ignores_invalid_expressions(query: str) -> None:
    assert CalculatorPlugin().search(query) == []


def test_calculator_copies_result(monkeypatch) -> None:
    calls = []

    def fake_run(command, input=None, check=False):
        calls.append((command, input))

    monkeypatch.setattr(subprocess, "run", fake_run)
    CalculatorPlugin().search("6*7")[0].execute()

    assert calls == [(["wl-copy"], b"42"), (["wl-copy", "--primary"], b"42")]


def test_commands_plugin_offers_exit_and_refresh() -> None:
    actions: List[str] = []
    plugin = CommandsPlugin(
        on_refresh=lambda: actions.append("refresh"),
        on_exit=lambda: actions.append("exit"),
    )

    [exit_result] = plugin.search("exit")
    [refresh_result] = plugin.search(" Refresh ")
    assert exit_result.title == "Exit"
    assert refresh_result.weight == 1.0
    assert plugin.search("exi") == []

    exit_result.execute()
    refresh_result.execute()
    assert actions == ["exit", "refresh"]


def test_commands_without_callbacks_are_hidden() -> None:
    assert CommandsPlugin().search("exit") == []


def test_refresh_command_refreshes_registry() -> None:
    manager = PluginManager({})
    loads = []
    apps = ApplicationsPlugin(loader=lambda: loads.append(1) or list(APPLICATIONS))
    manager.register(apps)
    manager.register(CommandsPlugin(on_refresh=manager.refresh_all))

    [refresh] = QueryDispatcher(manager).query("refresh")
    refresh.execute()

    assert len(loads) == 2


def test_applications_strip_field_codes(applications: ApplicationsPlugin) -> None:
    assert [app.command for app in applications.applications] == [
        "firefox",
        "nautilus --new-window",
        "kitty",
    ]


def test_applications_match_name_command_or_comment(applications: ApplicationsPlugin) -> None:
    assert [r.title for r in applications.search("FIRE")] == ["Firefox"]
    assert [r.title for r in applications.search("nautilus")] == ["Files"]
    assert [r.title for r in applications.search("web")] == ["Firefox"]
    assert applications.search("") == []
    assert applications.search("zzz") == []


def test_applications_weight_uses_best_similarity(applications: ApplicationsPlugin) -> None:
    [result] = applications.search("terminal")

    assert result.weight == maximum_similarity(
        "terminal", "Terminal", "kitty", "Fast terminal emulator"
    )
    assert result.weight == 1.0
    assert result.subtitle == "Fast terminal emulator"


def test_applications_subtitle_falls_back_to_command(applications: ApplicationsPlugin) -> None:
    [result] = applications.search("files")
    assert result.subtitle == "nautilus --new-window"
    assert result.icon is None


def test_applications_launch_detached(monkeypatch, applications: ApplicationsPlugin) -> None:
    launched = []

    def fake_popen(command, **kwargs):
        launched.append((command, kwargs))

    monkeypatch.setattr(subprocess, "Popen", fake_popen)
    applications.search("firefox")[0].execute()

    assert launched == [(["firefox"], {"start_new_session": True})]


def test_applications_split_quoted_commands_without_a_shell(monkeypatch) -> None:
    launched = []
    monkeypatch.setattr(subprocess, "Popen", lambda command, **kwargs: launched.append(command))
    plugin = ApplicationsPlugin(
        loader=lambda: [
            ApplicationInfo(name="Notes", command='editor "/tmp/my notes.txt" %F'),
            ApplicationInfo(name="Nosy", command='editor "unterminated'),
        ]
    )
    plugin.refresh()

    plugin.search("notes")[0].execute()
    plugin.search("nosy")[0].execute()

    assert launched == [["editor", "/tmp/my notes.txt"]]


def test_failing_loader_skips_applications_at_discovery() -> None:
    def broken_loader():
        raise ImportError("no fabric available")

    manager = PluginManager({"applications": lambda: ApplicationsPlugin(loader=broken_loader)})

    assert manager.discover() == []
    assert "applications" in manager.failed_plugins


def test_calculator_result_ranks_first() -> None:
    manager = PluginManager({})
    manager.register(ApplicationsPlugin(loader=lambda: [ApplicationInfo(name="2", command="x2")]))
    manager.register(CalculatorPlugin())

    results = QueryDispatcher(manager).query("2")

    assert [r.plugin_name for r in results] == ["Calculator", "Applications"]


def test_result_without_action_cannot_execute() -> None:
    with pytest.raises(NotImplementedError):
        Result(title="inert").execute()


def test_result_id_defaults_to_title() -> None:
    assert Result(title="Firefox").id == "Firefox"
    assert Result(title="4", id="calculator").id == "calculator"
