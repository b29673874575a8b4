from wallboard.core.entry import ConfigEntry
from wallboard.core.registry import RegistryView, TabRegistry


def test_view_is_read_only_and_live():
    registry = TabRegistry()
    view = registry.view()
    entry = ConfigEntry(url="http://a/")

    registry.register("tab-1", entry)
    assert view.get("tab-1") is entry
    assert "tab-1" in view
    assert view.tab_for(entry) == "tab-1"
    assert type(view) is RegistryView
    assert not hasattr(view, "register")


def test_prune_drops_vanished_tabs():
    registry = TabRegistry()
    registry.register("tab-1", ConfigEntry(url="http://a/"))
    registry.register("tab-2", ConfigEntry(url="http://b/"))

    assert registry.prune(["tab-2", "tab-9"]) == ["tab-1"]
    assert list(registry) == ["tab-2"]
