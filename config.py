"""
FileExtSearch 配置管理模块
"""
import copy
import json
import sys
from pathlib import Path


class Config:
    """应用程序配置管理"""

    # 默认配置
    DEFAULTS = {
        # 数据库配置
        "database": {
            "path": "data/file_ext_search.db"
        },
        # 扫描配置
        "scanner": {
            "extensions": None,      # None = 匹配所有文件和子目录
            "follow_links": True,    # 是否进入符号链接目录，关闭后链接目录只列出不进入
            "max_workers": 1,        # >1 时多个监控目录并行扫描
            "ignore_patterns": []    # 忽略的文件/目录名，".*" 表示隐藏项
        },
        # 日志配置
        "logging": {
            "dir": "data",
            "console_level": "INFO",
            "file_level": "DEBUG"
        }
    }

    def __init__(self, config_path: str = None):
        """
        初始化配置管理器

        Args:
            config_path: 配置文件路径，默认为程序目录下的 config.json
        """
        if getattr(sys, 'frozen', False):
            self.base_dir = Path(sys.executable).parent
        else:
            self.base_dir = Path(__file__).parent

        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = self.base_dir / "config.json"

        self._config = copy.deepcopy(self.DEFAULTS)
        self.load()

    def load(self) -> None:
        """从文件加载配置"""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    saved_config = json.load(f)
                    self._deep_update(self._config, saved_config)
            except (json.JSONDecodeError, IOError) as e:
                # 使用 print 而非 logger，因为 config.py 在 logger 之前加载
                print(f"加载配置失败: {e}，使用默认配置", file=sys.stderr)

    def save(self) -> None:
        """保存配置到文件"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=4, ensure_ascii=False)

    def get(self, *keys, default=None):
        """
        获取配置值

        Args:
            keys: 配置键路径，如 get("scanner", "extensions")
            default: 默认值

        Returns:
            配置值或默认值
        """
        value = self._config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, *keys, value) -> None:
        """
        设置配置值

        Args:
            keys: 配置键路径
            value: 要设置的值
        """
        if len(keys) < 1:
            return

        config = self._config
        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]
        config[keys[-1]] = value

    def _deep_update(self, base: dict, update: dict) -> None:
        """深度更新字典"""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_update(base[key], value)
            else:
                base[key] = value

    def _resolve(self, raw: str) -> Path:
        path = Path(raw)
        if not path.is_absolute():
            path = self.base_dir / path
        return path

    @property
    def database_path(self) -> Path:
        """获取数据库完整路径"""
        return self._resolve(self.get("database", "path"))

    @property
    def log_dir(self) -> Path:
        """获取日志目录完整路径"""
        return self._resolve(self.get("logging", "dir", default="data"))


# 全局配置实例
config = Config()
