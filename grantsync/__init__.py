"""grantsync - MySQL 授权声明式同步工具."""

from grantsync.settings import APP_VERSION

__version__ = APP_VERSION
