"""
FileExtSearch 文件扫描模块
递归遍历目录，按扩展名筛选文件
"""
import os
from typing import Iterable, Optional, Sequence
from concurrent.futures import ThreadPoolExecutor

from logger import get_logger

logger = get_logger("scanner")


class DirectoryScanner:
    """目录扫描器"""

    def __init__(self, ignore_patterns: list[str] = None, follow_links: bool = True,
                 max_workers: int = 1):
        """
        初始化扫描器

        Args:
            ignore_patterns: 要忽略的文件/目录名，".*" 表示所有隐藏项
            follow_links: 是否进入符号链接指向的目录（不做循环检测）
            max_workers: 扫描多个根目录时的并行线程数，1 表示顺序扫描
        """
        self.ignore_patterns = ignore_patterns or []
        self.follow_links = follow_links
        self.max_workers = max(1, int(max_workers or 1))

    @staticmethod
    def _normalize_filter(extensions) -> Optional[tuple[str, ...]]:
        """None 表示匹配全部；序列中的 None 项被忽略"""
        if extensions is None:
            return None
        if isinstance(extensions, str):
            extensions = [extensions]
        return tuple(ext for ext in extensions if ext is not None)

    def _should_ignore(self, name: str) -> bool:
        """检查是否应该忽略该文件/目录"""
        for pattern in self.ignore_patterns:
            if pattern == ".*" and name.startswith('.'):
                return True
            if name == pattern:
                return True
        return False

    def _on_walk_error(self, error: OSError) -> None:
        # 无法列出的目录不贡献结果，遍历继续
        logger.debug(f"无法读取目录: {error.filename} - {error.strerror}")

    def scan(self, root_dir: str, extensions: Optional[Sequence[str]] = None) -> list[str]:
        """
        扫描单个根目录

        Args:
            root_dir: 根目录路径
            extensions: 扩展名列表（区分大小写的后缀匹配），None 表示返回所有文件和子目录

        Returns:
            匹配项的绝对路径列表，顺序为文件系统列举顺序。根目录不存在或不是目录时返回空列表
        """
        if not root_dir or not os.path.isdir(root_dir):
            logger.debug(f"跳过无效根目录: {root_dir}")
            return []

        suffixes = self._normalize_filter(extensions)
        root = os.path.abspath(root_dir)
        matched = []

        # os.walk 自顶向下、深度优先，内部使用显式栈，不受递归深度限制
        for dirpath, dirnames, filenames in os.walk(
            root, onerror=self._on_walk_error, followlinks=self.follow_links
        ):
            if self.ignore_patterns:
                dirnames[:] = [d for d in dirnames if not self._should_ignore(d)]
                filenames = [f for f in filenames if not self._should_ignore(f)]

            if suffixes is None:
                # 无过滤：子目录与文件都算匹配
                matched.extend(os.path.join(dirpath, d) for d in dirnames)
                matched.extend(os.path.join(dirpath, f) for f in filenames)
            else:
                matched.extend(
                    os.path.join(dirpath, f) for f in filenames if f.endswith(suffixes)
                )

        logger.debug(f"扫描完成: {root}, 匹配 {len(matched)} 项")
        return matched

    def scan_all(self, roots: Iterable[str],
                 extensions: Optional[Sequence[str]] = None) -> list[str]:
        """
        扫描多个根目录并按根目录顺序拼接结果（不去重）

        max_workers > 1 时并行扫描，结果集合与顺序扫描一致
        """
        roots = [r for r in roots if r]
        if self.max_workers == 1 or len(roots) <= 1:
            results = [self.scan(root, extensions) for root in roots]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(lambda r: self.scan(r, extensions), roots))

        merged = []
        for paths in results:
            merged.extend(paths)
        return merged
