import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from vocaman.core.config import settings
from vocaman.core.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    """根据数据库类型生成引擎参数，所有等待都受超时约束"""
    if database_url.startswith("sqlite"):
        # check_same_thread 是SQLite特有的，用于允许多线程访问
        # timeout 为等待数据库锁的最长秒数
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.DATABASE_POOL_TIMEOUT,
            }
        }
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }


# 创建数据库引擎
engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# 创建一个Session工厂
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def lock_for_write(db: Session) -> None:
    """
    在当前事务中预先取得写锁，供 SELECT ... FOR UPDATE 之前调用。

    SQLite 没有行锁，pysqlite 又只在第一条 DML 之前才隐式开启事务，
    因此在这里显式执行 BEGIN IMMEDIATE，让同一数据库上的写事务排队，
    等待时长受连接参数 timeout 约束。其他数据库依靠 FOR UPDATE 行锁，不做处理。
    """
    if db.get_bind().dialect.name != "sqlite":
        return
    dbapi_connection = db.connection().connection.driver_connection
    if not dbapi_connection.in_transaction:
        dbapi_connection.execute("BEGIN IMMEDIATE")


# FastAPI 依赖项，用于在每个请求中获取数据库会话
def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    事务作用域：代码块正常结束时提交，任何异常都会回滚。

    数据库驱动层面的错误（连接失败、锁等待超时等）统一转换为 StoreUnavailable，
    业务异常在回滚后原样抛出。

    Args:
        db: 数据库会话

    Yields:
        Session: 同一个数据库会话
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Store error, transaction rolled back: %s", e)
        raise StoreUnavailable() from e
    except Exception:
        db.rollback()
        raise
