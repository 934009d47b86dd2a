"""
扫描结果监听器
协调器在发出 search_complete 信号后，依次同步通知已注册的监听器
"""
from typing import Protocol

from logger import get_logger

logger = get_logger("watcher")


class ResultListener(Protocol):
    """结果监听器接口：实现 notify 即可"""

    def notify(self, matched_paths: list[str]) -> None:
        ...


class LoggingListener:
    """把结果数量写入日志"""

    def notify(self, matched_paths: list[str]) -> None:
        if matched_paths:
            logger.info(f"{len(matched_paths)} 个文件匹配")
        else:
            logger.info("未找到匹配文件")


class CollectingListener:
    """在内存中保存每次扫描的结果"""

    def __init__(self):
        self.results: list[list[str]] = []

    def notify(self, matched_paths: list[str]) -> None:
        self.results.append(list(matched_paths))

    @property
    def last(self) -> list[str]:
        """最近一次结果，尚无结果时为空列表"""
        return self.results[-1] if self.results else []
