"""
测试公共夹具
"""
import pytest
from PySide6.QtCore import QCoreApplication

from database.db_manager import DatabaseManager
from scanner.file_scanner import DirectoryScanner
from watcher import WatchList, ScanCoordinator


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """信号与线程需要一个 QCoreApplication 实例"""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def db(tmp_path):
    return DatabaseManager(tmp_path / "data" / "watch.db")


@pytest.fixture
def store(db):
    return WatchList(db)


@pytest.fixture
def coordinator(store):
    return ScanCoordinator(store, DirectoryScanner())


@pytest.fixture
def make_tree(tmp_path):
    """按相对路径列表创建文件，以 / 结尾的表示目录"""
    def _make(root_name: str, entries: list[str]):
        root = tmp_path / root_name
        root.mkdir(parents=True, exist_ok=True)
        for entry in entries:
            target = root / entry
            if entry.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(entry, encoding="utf-8")
        return root
    return _make
