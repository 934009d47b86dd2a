"""
FileExtSearch - 文件扩展名扫描服务
程序入口（无界面的 Qt 宿主）
"""
import argparse
import logging
import sys
from pathlib import Path

# 添加项目根目录到路径
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from PySide6.QtCore import QCoreApplication

from config import Config, config as default_config
from database.db_manager import DatabaseManager
from logger import setup_logging, get_logger
from scanner.file_scanner import DirectoryScanner
from watcher import (
    WatchList, ScanCoordinator, ScanRequest, ScanThread, LoggingListener
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="file-ext-search",
        description="维护监控目录列表，并按扩展名递归扫描这些目录"
    )
    parser.add_argument("--add", nargs="+", metavar="DIR", default=None,
                        help="添加监控目录（必须是已存在的目录）")
    parser.add_argument("--remove", nargs="+", metavar="DIR", default=None,
                        help="移除监控目录")
    filter_group = parser.add_mutually_exclusive_group()
    filter_group.add_argument("--ext", nargs="*", metavar="EXT", default=None,
                              help="扩展名过滤，如 .txt .md（区分大小写）")
    filter_group.add_argument("--all", action="store_true",
                              help="忽略配置中的扩展名，返回所有文件和子目录")
    parser.add_argument("--no-scan", action="store_true",
                        help="只更新监控列表，不扫描")
    parser.add_argument("--list", action="store_true",
                        help="列出监控目录后退出")
    parser.add_argument("--db", metavar="PATH", default=None,
                        help="数据库文件路径")
    parser.add_argument("--config", metavar="PATH", default=None,
                        help="配置文件路径")
    return parser


def resolve_extensions(args, app_config: Config):
    """命令行优先，其次是配置文件"""
    if args.all:
        return None
    if args.ext is not None:
        return args.ext
    return app_config.get("scanner", "extensions")


def print_results(paths: list):
    """每行输出一个匹配路径，文件名中的非法字节以替换字符输出"""
    for path in paths:
        raw = path.encode("utf-8", errors="surrogateescape")
        print(raw.decode("utf-8", errors="replace"))


def create_coordinator(app_config: Config, db_path: str = None) -> ScanCoordinator:
    """按配置组装存储、扫描器与协调器"""
    db = DatabaseManager(db_path or app_config.database_path)
    scanner = DirectoryScanner(
        ignore_patterns=app_config.get("scanner", "ignore_patterns", default=[]),
        follow_links=app_config.get("scanner", "follow_links", default=True),
        max_workers=app_config.get("scanner", "max_workers", default=1),
    )
    return ScanCoordinator(WatchList(db), scanner)


def _level(name, default: int) -> int:
    """日志级别名转数值，无法识别时使用默认值"""
    if not name:
        return default
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else default


def main(argv: list[str] = None) -> int:
    """主函数"""
    args = build_parser().parse_args(argv)
    app_config = Config(args.config) if args.config else default_config

    setup_logging(
        app_config.log_dir,
        console_level=_level(app_config.get("logging", "console_level"), logging.INFO),
        file_level=_level(app_config.get("logging", "file_level"), logging.DEBUG),
    )
    logger = get_logger("main")

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("FileExtSearch")

    coordinator = create_coordinator(app_config, args.db)

    if args.list:
        for entry in coordinator.store.all_entries():
            print(f"{entry.id}\t{entry.path}")
        return 0

    coordinator.add_listener(LoggingListener())

    request = ScanRequest(
        add_paths=args.add,
        remove_paths=args.remove,
        extensions=resolve_extensions(args, app_config),
        scan=not args.no_scan,
    )
    logger.debug(f"请求: {request}")

    thread = ScanThread(coordinator, request)
    thread.results_ready.connect(print_results)
    thread.finished.connect(app.quit)
    thread.start()

    app.exec()
    thread.wait()
    return 0


if __name__ == "__main__":
    sys.exit(main())
