"""
监控目录模块
提供监控列表持久化、完整性校验和扫描协调
"""
from .watch_list import WatchList, WatchedDirectory
from .verifier import IntegrityVerifier
from .coordinator import ScanCoordinator, ScanRequest, ScanState, ScanThread
from .listeners import ResultListener, LoggingListener, CollectingListener

__all__ = [
    'WatchList',
    'WatchedDirectory',
    'IntegrityVerifier',
    'ScanCoordinator',
    'ScanRequest',
    'ScanState',
    'ScanThread',
    'ResultListener',
    'LoggingListener',
    'CollectingListener'
]
