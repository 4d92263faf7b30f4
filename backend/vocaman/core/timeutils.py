from datetime import datetime

import pytz

from vocaman.core.config import settings


def local_now() -> datetime:
    """返回配置时区（默认 Asia/Seoul）下的当前时间"""
    return datetime.now(pytz.timezone(settings.TIMEZONE))
