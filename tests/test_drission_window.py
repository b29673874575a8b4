"""
测试 DrissionWindow 的标签页顺序与错误转换（不启动真实浏览器）
"""

from unittest.mock import MagicMock

import pytest
import requests

from wallboard.core.exceptions import WindowClosedError, WindowError
from wallboard.core.window.drission_window import DrissionWindow


def make_window(targets):
    window = DrissionWindow(profile_path="/tmp/wallboard-test-profile")
    window.page = MagicMock()
    window._address = "127.0.0.1:9333"
    window._fetch_targets = lambda: list(targets)
    return window


def test_port_is_derived_from_profile_path():
    a = DrissionWindow(profile_path="/tmp/a")
    assert a.port == DrissionWindow(profile_path="/tmp/a").port
    assert 9200 <= a.port < 9500
    assert DrissionWindow(profile_path="/tmp/a", port=9444).port == 9444


async def test_tab_order_is_stable_across_activation():
    targets = [
        {"id": "A", "url": "http://a/", "type": "page"},
        {"id": "B", "url": "http://b/", "type": "page"},
        {"id": "C", "url": "http://c/", "type": "page"},
    ]
    window = make_window(targets)
    tabs = await window.get_open_tabs()
    assert [t.id for t in tabs] == ["A", "B", "C"]
    assert [t.active for t in tabs] == [True, False, False]

    # /json 把最近激活的放在最前面
    targets[:] = [targets[2], targets[0], targets[1]]
    tabs = await window.get_open_tabs()
    assert [t.id for t in tabs] == ["A", "B", "C"]
    assert [t.id for t in tabs if t.active] == ["C"]


async def test_library_errors_become_window_errors():
    window = make_window([])
    window.page.activate_tab.side_effect = RuntimeError("tab gone")
    with pytest.raises(WindowError):
        await window.focus_tab("X")

    window.page.get_tab.side_effect = RuntimeError("tab gone")
    with pytest.raises(WindowError):
        await window.reload_tab("X")


def attached_window():
    """已经"启动"的窗口，/json 走真实的 _fetch_targets"""
    window = DrissionWindow(profile_path="/tmp/wallboard-test-profile")
    window.page = MagicMock()
    window._address = "127.0.0.1:1"
    return window


async def test_unreachable_browser_is_not_alive(monkeypatch):
    window = attached_window()

    def refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", refuse)
    assert not await window.is_alive()
    with pytest.raises(WindowClosedError):
        await window.get_open_tabs()


async def test_slow_browser_is_still_alive(monkeypatch):
    window = attached_window()

    def slow(*args, **kwargs):
        raise requests.ReadTimeout("slow")

    monkeypatch.setattr(requests, "get", slow)
    assert await window.is_alive()
    with pytest.raises(WindowError) as excinfo:
        await window.get_open_tabs()
    assert not isinstance(excinfo.value, WindowClosedError)


async def test_bad_json_body_is_still_alive(monkeypatch):
    window = attached_window()
    response = MagicMock()
    response.json.side_effect = ValueError("not json")

    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: response)
    assert await window.is_alive()
