"""
完整性校验
移除已不存在或不再是目录的监控路径
"""
import os

from .watch_list import WatchList
from logger import get_logger

logger = get_logger("watcher")


def is_existing_dir(path: str) -> bool:
    """路径存在且为目录（os.path.isdir 对无法访问或非法的路径返回 False）"""
    return bool(path) and os.path.isdir(path)


class IntegrityVerifier:
    """监控列表校验器"""

    def verify(self, store: WatchList) -> None:
        """
        对照文件系统清理监控列表

        重复执行是幂等的：文件系统不变时第二次不会再删除任何记录。
        """
        paths = store.all_paths()
        removed = 0
        for path in paths:
            if path and not is_existing_dir(path):
                store.remove(path)
                removed += 1
                logger.info(f"目录不存在或不是目录，已移出监控: {path}")

        logger.debug(f"校验完成: {len(paths)} 个目录, 移除 {removed} 个")
