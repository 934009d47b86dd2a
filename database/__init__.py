"""
数据库模块
"""
from .db_manager import DatabaseManager, WATCHED_TABLE

__all__ = ['DatabaseManager', 'WATCHED_TABLE']
