"""
文件扫描模块
"""
from .file_scanner import DirectoryScanner

__all__ = ['DirectoryScanner']
