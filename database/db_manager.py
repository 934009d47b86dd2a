"""
FileExtSearch - 文件扩展名扫描服务

数据库管理模块 - 使用 SQLite 存储监控目录
"""
import sqlite3
from pathlib import Path
from contextlib import contextmanager

from logger import get_logger

logger = get_logger("database")

# 单表结构：监控目录路径
WATCHED_TABLE = "watched_dirs"


class DatabaseManager:
    """SQLite 数据库管理器"""

    def __init__(self, db_path: str | Path):
        """
        初始化数据库管理器

        Args:
            db_path: 数据库文件路径
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_tables()

    @contextmanager
    def _get_connection(self):
        """获取数据库连接的上下文管理器（每次操作一个事务，结束后关闭连接）"""
        conn = sqlite3.connect(str(self.db_path), timeout=10)
        conn.row_factory = sqlite3.Row  # 支持按列名访问

        try:
            conn.execute("PRAGMA journal_mode=WAL")  # WAL模式提升并发性能
            conn.execute("PRAGMA synchronous=NORMAL")
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_tables(self) -> None:
        """初始化数据库表结构"""
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                # 路径唯一性由 WatchList 在插入前查询保证，这里不加 UNIQUE 约束
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {WATCHED_TABLE} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
                        path TEXT NOT NULL
                    )
                """)
                cursor.execute(
                    f"CREATE INDEX IF NOT EXISTS idx_watched_path ON {WATCHED_TABLE}(path)"
                )
            logger.debug(f"数据库已就绪: {self.db_path}")
        except sqlite3.Error as e:
            # 存储不可用时不中断程序，后续读取按"无监控目录"处理
            logger.warning(f"初始化数据库失败: {self.db_path} - {e}")

    def get_stats(self) -> dict:
        """获取数据库统计信息"""
        stats = {'db_path': str(self.db_path), 'watched_count': 0, 'db_size': 0}
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT COUNT(*) FROM {WATCHED_TABLE}")
                stats['watched_count'] = cursor.fetchone()[0]
        except sqlite3.Error as e:
            logger.warning(f"读取统计信息失败: {e}")
        if self.db_path.exists():
            stats['db_size'] = self.db_path.stat().st_size
        return stats
