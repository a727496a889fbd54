"""时区工具方法：支持根据配置动态获取当前时区。"""

from __future__ import annotations

from datetime import datetime

from zoneinfo import ZoneInfo

from app.packages.drive.core.config import get_settings


def get_timezone() -> ZoneInfo:
    """返回配置指定的时区信息。"""
    return get_settings().timezone_info


def now() -> datetime:
    """返回当前时区的时间。"""
    return datetime.now(get_timezone())
