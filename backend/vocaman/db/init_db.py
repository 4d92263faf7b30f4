#!/usr/bin/env python3
"""
数据库初始化脚本

这个脚本用于创建所有数据库表。
"""
import logging

from vocaman.core.config import settings
from vocaman.db.base_class import Base
from vocaman.db.database import engine

# 导入所有模型，确保它们被正确注册
import vocaman.models  # noqa: F401

logger = logging.getLogger(__name__)


def init_db() -> None:
    """初始化数据库，创建所有表"""
    logger.info("Using database URL: %s", settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db()
