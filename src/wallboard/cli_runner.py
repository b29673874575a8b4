# cli_runner.py
import asyncio
import os
import sys

from aioconsole import ainput

from wallboard.core.coordinator import WallboardCoordinator
from wallboard.core.exceptions import ConfigError, WindowError
from wallboard.core.loader import ConfigLoader
from wallboard.core.window.drission_window import DrissionWindow


DEFAULT_CONFIG_PATH = "wallboard.yaml"

HELP_TEXT = """
    focus   把展示窗口带到前台
    status  显示当前注册的标签页
    tick    立即执行一次 tick
    exit    关闭窗口并退出
"""


def print_status(coordinator: WallboardCoordinator):
    wallboard = coordinator.active
    if not wallboard:
        print("❌ No active wallboard")
        return
    print(f"✅ Wallboard on {wallboard.window.window_id}, ticks: {wallboard.tick_count}")
    for tab_id, entry in wallboard.registry.items():
        print(f"   {tab_id}: {entry.url}")


async def next_command(coordinator: WallboardCoordinator):
    """等待下一条指令；窗口被关掉时返回 None"""
    input_task = asyncio.create_task(ainput(">> "))
    closed_task = asyncio.create_task(coordinator.window_closed.wait())
    done, _ = await asyncio.wait({input_task, closed_task}, return_when=asyncio.FIRST_COMPLETED)
    if closed_task in done:
        input_task.cancel()
        return None
    closed_task.cancel()
    return input_task.result().strip().lower()


async def main(config_path: str):
    # 1. 加载配置（配置有问题直接退出）
    loader = ConfigLoader(config_path)
    config = loader.load()
    loader.configure_logging(config)

    # 2. 创建协调器，启动第一个 Wallboard
    coordinator = WallboardCoordinator(
        config,
        window_factory=lambda: DrissionWindow(
            profile_path=config.profile_path,
            port=config.port,
            headless=config.headless,
        ),
    )
    await coordinator.activate()
    watch_task = asyncio.create_task(coordinator.watch())

    await asyncio.to_thread(print, ">>> Wallboard 已启动。输入 help 查看指令。")

    # 3. 主循环：监听键盘输入，窗口关闭时退出
    try:
        while True:
            command = await next_command(coordinator)
            if command is None:
                await asyncio.to_thread(print, ">>> 窗口已关闭，退出。")
                break
            if command in ("exit", "quit"):
                break
            if command == "focus":
                await coordinator.activate()
            elif command == "status":
                print_status(coordinator)
            elif command == "tick":
                if coordinator.active:
                    await coordinator.active.tick()
            elif command == "help":
                print(HELP_TEXT)
            elif command:
                print(f"❌ 未知指令: {command}")
    finally:
        watch_task.cancel()
        # 先停驱动器再关窗口；窗口已经被用户关掉时这里什么都不做
        await coordinator.shutdown()


def run():
    config_path = sys.argv[1] if len(sys.argv) > 1 else os.getenv("WALLBOARD_CONFIG", DEFAULT_CONFIG_PATH)
    try:
        asyncio.run(main(config_path))
    except ConfigError as e:
        print(f"❌ 配置错误: {e}", file=sys.stderr)
        sys.exit(2)
    except WindowError as e:
        print(f"❌ 无法打开窗口: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
