"""
标签页注册表 (Tab Registry)

TabId -> ConfigEntry 的映射，由 Wallboard 持有。

访问规则通过接口拆分来保证：
- RegistryView: 只读视图，交给 Revolver / Refresher
- TabRegistry: 可写注册表，只交给 TabOpener

不变量：每个 key 都对应一个当前打开的标签页。关闭标签页时必须在同一步里删除 key。
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .entry import ConfigEntry


class RegistryView:
    """注册表的只读视图"""

    def __init__(self, data: Dict[str, ConfigEntry]):
        self._data = data

    def get(self, tab_id: str) -> Optional[ConfigEntry]:
        return self._data.get(tab_id)

    def __contains__(self, tab_id) -> bool:
        return tab_id in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def items(self) -> List[Tuple[str, ConfigEntry]]:
        return list(self._data.items())

    def tab_for(self, entry: ConfigEntry) -> Optional[str]:
        """按身份查找条目对应的标签页 ID"""
        for tab_id, registered in self._data.items():
            if registered is entry:
                return tab_id
        return None


class TabRegistry(RegistryView):
    """可写注册表。每次修改都是针对单个标签页的一步原子操作（中间没有 await）。"""

    def __init__(self):
        super().__init__({})

    def view(self) -> RegistryView:
        """返回共享同一份数据的只读视图"""
        return RegistryView(self._data)

    def register(self, tab_id: str, entry: ConfigEntry):
        self._data[tab_id] = entry

    def unregister(self, tab_ids: Iterable[str]):
        for tab_id in tab_ids:
            self._data.pop(tab_id, None)

    def prune(self, open_tab_ids: Iterable[str]) -> List[str]:
        """
        删除不再打开的标签页（自愈：例如关闭调用失败了一半，或用户手动关了标签页）。

        Returns:
            被删除的 TabId 列表
        """
        alive = set(open_tab_ids)
        stale = [tab_id for tab_id in self._data if tab_id not in alive]
        self.unregister(stale)
        return stale
