"""
测试轮播插件
"""

import logging
from datetime import timedelta

from wallboard.core.entry import ConfigEntry
from wallboard.core.log_config import LogConfig
from wallboard.core.registry import TabRegistry
from wallboard.plugins import Revolver

from conftest import FakeWindow


def make_revolver(window, registry, start):
    return Revolver(window, registry.view(), start_time=start)


async def test_rotates_only_after_dwell_time(monday_noon):
    window = FakeWindow(urls=["http://a/", "http://b/", "http://c/"])
    window.active_id = "tab-1"
    registry = TabRegistry()
    registry.register("tab-1", ConfigEntry(url="http://a/", rotate_after=4))
    revolver = make_revolver(window, registry, monday_noon)

    await revolver.tick(monday_noon + timedelta(seconds=3.99))
    assert window.active_id == "tab-1"

    await revolver.tick(monday_noon + timedelta(seconds=4))
    assert window.active_id == "tab-2"
    assert revolver.last_rotate_time == monday_noon + timedelta(seconds=4)


async def test_wraps_from_last_to_first(monday_noon):
    window = FakeWindow(urls=["http://a/", "http://b/"])
    window.active_id = "tab-2"
    revolver = make_revolver(window, TabRegistry(), monday_noon)

    await revolver.tick(monday_noon + timedelta(seconds=30))
    assert window.active_id == "tab-1"


async def test_unknown_tab_uses_default_interval(monday_noon):
    window = FakeWindow(urls=["http://a/", "http://b/"])
    window.active_id = "tab-1"
    revolver = make_revolver(window, TabRegistry(), monday_noon)

    await revolver.tick(monday_noon + timedelta(seconds=29))
    assert window.active_id == "tab-1"
    await revolver.tick(monday_noon + timedelta(seconds=30))
    assert window.active_id == "tab-2"


async def test_manual_switch_changes_interval_but_not_clock(monday_noon):
    window = FakeWindow(urls=["http://slow/", "http://fast/", "http://other/"])
    window.active_id = "tab-1"
    registry = TabRegistry()
    registry.register("tab-1", ConfigEntry(url="http://slow/", rotate_after=10))
    registry.register("tab-2", ConfigEntry(url="http://fast/", rotate_after=4))
    revolver = make_revolver(window, registry, monday_noon)

    await revolver.tick(monday_noon + timedelta(seconds=5))
    assert window.active_id == "tab-1"

    # 用户手动切到 fast：经过的 5 秒已经超过它的 4 秒
    window.active_id = "tab-2"
    await revolver.tick(monday_noon + timedelta(seconds=5))
    assert window.active_id == "tab-3"


async def test_empty_window_is_a_noop(monday_noon):
    window = FakeWindow(urls=[])
    revolver = make_revolver(window, TabRegistry(), monday_noon)

    await revolver.tick(monday_noon + timedelta(hours=1))
    assert window.calls == []


async def test_host_failures_do_not_escape(monday_noon):
    window = FakeWindow(urls=["http://a/", "http://b/"])
    window.fail_focus = True
    revolver = make_revolver(window, TabRegistry(), monday_noon)

    assert await revolver.run_tick(monday_noon + timedelta(minutes=1))

    window.fail_list = True
    await revolver.tick(monday_noon + timedelta(minutes=2))


def test_plugin_log_level_reaches_the_logger(monday_noon):
    registry = TabRegistry()
    verbose = Revolver(FakeWindow(), registry.view(), start_time=monday_noon,
                       log_config=LogConfig(level=logging.DEBUG))
    assert verbose.logger.isEnabledFor(logging.DEBUG)

    quiet = Revolver(FakeWindow(), registry.view(), start_time=monday_noon,
                     log_config=LogConfig(level=logging.WARNING))
    assert not quiet.logger.isEnabledFor(logging.INFO)
