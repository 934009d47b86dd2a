"""
FileExtSearch - 文件扩展名扫描服务

扫描协调器 - 更新监控列表、校验、扫描并分发结果
"""
from enum import Enum
from typing import Optional, Sequence
from dataclasses import dataclass

from PySide6.QtCore import QObject, QThread, Signal

from scanner.file_scanner import DirectoryScanner
from .watch_list import WatchList
from .verifier import IntegrityVerifier, is_existing_dir
from .listeners import ResultListener

from logger import get_logger

logger = get_logger("watcher")


class ScanState(str, Enum):
    """单次请求的处理阶段"""
    IDLE = "idle"
    UPDATING = "updating"
    VERIFYING = "verifying"
    SCANNING = "scanning"
    DELIVERING = "delivering"


@dataclass
class ScanRequest:
    """扫描请求"""
    add_paths: Optional[list[str]] = None
    remove_paths: Optional[list[str]] = None
    extensions: Optional[list[str]] = None  # None = 匹配全部
    scan: bool = False

    @classmethod
    def scan_only(cls, extensions: Optional[Sequence[str]] = None) -> "ScanRequest":
        """只扫描已有的监控目录"""
        return cls(extensions=_as_list(extensions), scan=True)

    @classmethod
    def add(cls, paths: Sequence[str], extensions: Optional[Sequence[str]] = None,
            scan: bool = True) -> "ScanRequest":
        """添加监控目录，默认随后扫描"""
        return cls(add_paths=_as_list(paths), extensions=_as_list(extensions), scan=scan)

    @classmethod
    def remove(cls, paths: Sequence[str], extensions: Optional[Sequence[str]] = None,
               scan: bool = False) -> "ScanRequest":
        """移除监控目录，默认不扫描"""
        return cls(remove_paths=_as_list(paths), extensions=_as_list(extensions), scan=scan)

    @classmethod
    def from_dict(cls, data: dict) -> "ScanRequest":
        """
        从字典构造请求

        同时接受 addPaths/removePaths/extensionFilter/shouldScan 与对应的下划线写法
        """
        def pick(*keys):
            for key in keys:
                if key in data:
                    return data[key]
            return None

        return cls(
            add_paths=_as_list(pick("addPaths", "add_paths")),
            remove_paths=_as_list(pick("removePaths", "remove_paths")),
            extensions=_as_list(pick("extensionFilter", "extensions")),
            scan=bool(pick("shouldScan", "scan")),
        )


def _as_list(values) -> Optional[list[str]]:
    if values is None:
        return None
    if isinstance(values, str):
        return [values]
    return list(values)


class ScanCoordinator(QObject):
    """
    扫描协调器

    每次请求严格按 移除 → 添加 → 校验 → 扫描 的顺序执行。
    出错只会减少结果，不会向调用方抛出。
    """

    # 扫描完成信号，每次扫描只发一次
    search_complete = Signal(list)  # matched_paths
    state_changed = Signal(str)     # ScanState 值

    def __init__(self, store: WatchList, scanner: DirectoryScanner = None,
                 verifier: IntegrityVerifier = None, parent=None):
        super().__init__(parent)
        self.store = store
        self.scanner = scanner or DirectoryScanner()
        self.verifier = verifier or IntegrityVerifier()
        self._listeners: list[ResultListener] = []
        self._state = ScanState.IDLE

    # ========== 监听器 ==========

    def add_listener(self, listener: ResultListener):
        """注册结果监听器"""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ResultListener):
        """注销结果监听器"""
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def state(self) -> ScanState:
        """最近一次上报的阶段，请求重叠时反映最后发生的变化"""
        return self._state

    # ========== 公共方法 ==========

    def handle(self, request: ScanRequest) -> Optional[list[str]]:
        """执行一个扫描请求"""
        return self.process(
            request.add_paths, request.remove_paths, request.extensions, request.scan
        )

    def process(self, add_paths: Optional[Sequence[str]] = None,
                remove_paths: Optional[Sequence[str]] = None,
                extensions: Optional[Sequence[str]] = None,
                should_scan: bool = False) -> Optional[list[str]]:
        """
        处理一次请求

        Args:
            add_paths: 要添加的目录，不存在或不是目录的路径会被跳过
            remove_paths: 要移除的目录
            extensions: 扩展名过滤，None 表示匹配所有文件和子目录
            should_scan: 是否扫描

        Returns:
            去重后的匹配路径列表；不扫描时返回 None
        """
        try:
            self._set_state(ScanState.UPDATING)
            for path in remove_paths or []:
                if path:
                    self.store.remove(path)
            for path in add_paths or []:
                self._add_path(path)

            # 无论是否扫描都先校验
            self._set_state(ScanState.VERIFYING)
            self.verifier.verify(self.store)

            if not should_scan:
                return None

            self._set_state(ScanState.SCANNING)
            roots = self.store.all_paths()
            logger.info(f"开始扫描 {len(roots)} 个监控目录, 扩展名: {extensions}")
            matched = self.scanner.scan_all(roots, extensions)
            # 保留首次出现的顺序
            results = list(dict.fromkeys(matched))
            logger.info(f"扫描完成: {len(results)} 项 (去重前 {len(matched)})")

            self._set_state(ScanState.DELIVERING)
            self._deliver(results)
            return results
        finally:
            self._set_state(ScanState.IDLE)

    # ========== 内部方法 ==========

    def _add_path(self, path: Optional[str]):
        if not path:
            return
        if is_existing_dir(path):
            self.store.insert(path)
        else:
            logger.debug(f"不是有效目录，跳过: {path!r}")

    def _deliver(self, results: list[str]):
        """发出信号后同步通知监听器"""
        self.search_complete.emit(results)
        for listener in list(self._listeners):
            try:
                listener.notify(results)
            except Exception:
                logger.exception(f"监听器处理结果失败: {listener!r}")

    def _set_state(self, state: ScanState):
        # 每个请求完整上报自己的阶段，不与其他请求共用的 _state 比较
        self._state = state
        self.state_changed.emit(state.value)


class ScanThread(QThread):
    """扫描线程包装器"""

    results_ready = Signal(list)

    def __init__(self, coordinator: ScanCoordinator, request: ScanRequest, parent=None):
        super().__init__(parent)
        self.coordinator = coordinator
        self.request = request
        self.result: Optional[list[str]] = None

    def run(self):
        """执行请求"""
        self.result = self.coordinator.handle(self.request)
        if self.result is not None:
            self.results_ready.emit(self.result)
