"""Tests for panel SPA configuration."""

import pytest

from adminkit.config import Settings
from adminkit.panels import Panel, PanelRegistry, build_default_panel
from adminkit.support.concerns import ClosureEvaluationError


def test_spa_mode_is_off_by_default():
    panel = Panel.make("admin")

    assert panel.has_spa_mode() is False
    assert panel.has_spa_prefetch() is False
    assert panel.get_spa_url_exceptions() == []


def test_spa_sets_mode_and_prefetch_together():
    panel = Panel.make("admin").spa(prefetch=True)

    assert panel.has_spa_mode() is True
    assert panel.has_spa_prefetch() is True

    panel.spa()

    assert panel.has_spa_prefetch() is False


def test_spa_settings_accept_closures():
    enabled = {"value": False}
    panel = Panel.make("admin").spa(condition=lambda: enabled["value"], prefetch=lambda panel: panel.get_id() == "admin")

    assert panel.has_spa_mode() is False
    enabled["value"] = True
    assert panel.has_spa_mode() is True
    assert panel.has_spa_prefetch() is True


def test_url_exceptions_are_copied():
    exceptions = ["*/admin/exports/*"]
    panel = Panel.make("admin").spa_url_exceptions(exceptions)

    panel.get_spa_url_exceptions().append("*/other")

    assert panel.get_spa_url_exceptions() == ["*/admin/exports/*"]


def test_url_exceptions_closure_with_unknown_parameter():
    panel = Panel.make("admin").spa_url_exceptions(lambda tenant: [])

    with pytest.raises(ClosureEvaluationError):
        panel.get_spa_url_exceptions()


@pytest.mark.parametrize(
    "url, expected",
    [
        (None, True),
        ("https://app.test/admin/leads", True),
        ("https://app.test/admin/exports/12/download", False),
        ("https://elsewhere.test/admin/leads", False),
    ],
)
def test_uses_spa_navigation(url, expected):
    panel = Panel.make("admin").spa().spa_url_exceptions(["*/admin/exports/*"])

    assert panel.uses_spa_navigation(url, root="https://app.test") is expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://app.test/admin/search?q=x", False),
        ("https://app.test/admin/searchXq=x", True),
        ("https://app.test/admin/[draft]/1", False),
        ("https://app.test/admin/d/1", True),
    ],
)
def test_url_exceptions_match_question_marks_and_brackets_literally(url, expected):
    panel = Panel.make("admin").spa().spa_url_exceptions(["*/admin/search?q=*", "*/admin/[draft]/*"])

    assert panel.uses_spa_navigation(url, root="https://app.test") is expected


def test_uses_spa_navigation_when_spa_is_off():
    assert Panel.make("admin").uses_spa_navigation("https://app.test/admin") is False


def test_default_panel_follows_settings():
    config = Settings(panel_id="backoffice", panel_path="/office/", panel_spa_url_exceptions=["*/office/reports/*"])
    panel = build_default_panel(config)

    assert panel.get_id() == "backoffice"
    assert panel.get_path() == "office"
    assert panel.has_spa_mode() is False

    config.panel_spa_mode = True
    config.panel_spa_prefetch = True

    assert panel.has_spa_mode() is True
    assert panel.has_spa_prefetch() is True
    assert panel.get_spa_url_exceptions() == [
        "*/office/imports/*/failed-rows/download",
        "*/office/reports/*",
    ]
    assert panel.uses_spa_navigation("https://app.test/office/imports/1/failed-rows/download") is False


def test_registry_default_panel():
    registry = PanelRegistry()
    registry.register(Panel.make("first"))
    registry.register(Panel.make("second").default())

    assert registry.get_default().get_id() == "second"
    assert registry.get("missing") is None
    assert [panel.get_id() for panel in registry.all()] == ["first", "second"]


def test_to_dict():
    panel = Panel.make("admin").path("control").spa(prefetch=True)

    assert panel.to_dict() == {
        "id": "admin",
        "path": "control",
        "is_default": False,
        "spa": {"enabled": True, "prefetch": True, "url_exceptions": []},
    }
