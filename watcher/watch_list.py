"""
监控目录列表
持久化保存需要扫描的目录路径，保证路径唯一
"""
import sqlite3
import threading
from typing import Optional
from dataclasses import dataclass

from database.db_manager import DatabaseManager, WATCHED_TABLE
from logger import get_logger

logger = get_logger("watcher")

# 存储失败：数据库不可用，或路径含无法编码为 UTF-8 的字符（文件名中的非法字节）
STORAGE_ERRORS = (sqlite3.Error, UnicodeError)


@dataclass
class WatchedDirectory:
    """监控目录记录"""
    id: int = 0
    path: str = ""


class WatchList:
    """
    监控目录存储

    所有读写都经过这里。存储层出错时只记录日志，不向调用方抛出：
    读取降级为空结果，写入降级为无操作。
    """

    def __init__(self, db: DatabaseManager):
        self.db = db
        # 每个方法作为一个整体执行，保证"先查后插"不被并发打断
        self._lock = threading.Lock()

    def insert(self, path: Optional[str]) -> bool:
        """
        添加监控目录（不检查文件系统）

        Args:
            path: 目录路径，为空或已存在时忽略

        Returns:
            是否实际插入了新记录
        """
        if not path:
            return False

        with self._lock:
            try:
                with self.db._get_connection() as conn:
                    cursor = conn.cursor()
                    if self._contains(cursor, path):
                        return False
                    cursor.execute(
                        f"INSERT INTO {WATCHED_TABLE} (path) VALUES (?)", (path,)
                    )
                    logger.info(f"添加监控目录: {path}")
                    return True
            except STORAGE_ERRORS as e:
                logger.warning(f"添加目录失败: {path!r} - {e}")
                return False

    def remove(self, path: Optional[str]) -> bool:
        """
        移除路径完全一致的所有记录

        Returns:
            是否删除了记录
        """
        if not path:
            return False

        with self._lock:
            try:
                with self.db._get_connection() as conn:
                    cursor = conn.cursor()
                    cursor.execute(f"DELETE FROM {WATCHED_TABLE} WHERE path = ?", (path,))
                    success = cursor.rowcount > 0
                    if success:
                        logger.info(f"移除监控目录: {path}")
                    return success
            except STORAGE_ERRORS as e:
                logger.warning(f"移除目录失败: {path!r} - {e}")
                return False

    def contains(self, path: Optional[str]) -> bool:
        """检查目录是否已在监控列表"""
        if not path:
            return False

        with self._lock:
            try:
                with self.db._get_connection() as conn:
                    return self._contains(conn.cursor(), path)
            except STORAGE_ERRORS as e:
                logger.warning(f"查询目录失败: {path!r} - {e}")
                return False

    def all_paths(self) -> list[str]:
        """获取所有监控目录路径，存储不可用时返回空列表"""
        return [entry.path for entry in self.all_entries()]

    def all_entries(self) -> list[WatchedDirectory]:
        """获取所有监控目录记录"""
        with self._lock:
            try:
                with self.db._get_connection() as conn:
                    cursor = conn.cursor()
                    cursor.execute(f"SELECT id, path FROM {WATCHED_TABLE} ORDER BY id")
                    return [
                        WatchedDirectory(id=row['id'], path=row['path'])
                        for row in cursor.fetchall()
                    ]
            except STORAGE_ERRORS as e:
                logger.warning(f"读取监控目录失败: {e}")
                return []

    def count(self) -> int:
        """监控目录数量"""
        return len(self.all_entries())

    def clear(self) -> None:
        """清空监控列表"""
        with self._lock:
            try:
                with self.db._get_connection() as conn:
                    conn.execute(f"DELETE FROM {WATCHED_TABLE}")
                logger.info("已清空监控目录")
            except STORAGE_ERRORS as e:
                logger.warning(f"清空监控目录失败: {e}")

    # ========== 内部方法 ==========

    @staticmethod
    def _contains(cursor, path: str) -> bool:
        cursor.execute(f"SELECT 1 FROM {WATCHED_TABLE} WHERE path = ? LIMIT 1", (path,))
        return cursor.fetchone() is not None
