import logging
import os

from celery import Celery, signals

from vocaman.core.config import settings

# 配置日志记录器
logger = logging.getLogger(__name__)

# 创建 Celery 应用实例
celery_app = Celery(
    "vocaman",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "vocaman.tasks.notification_tasks",
    ]
)


@signals.worker_process_init.connect
def init_worker_process(sender=None, **kwargs):
    """
    Worker 子进程启动时丢弃从父进程继承的数据库连接池，
    每个进程重新建立自己的连接。
    """
    from vocaman.db.database import engine

    engine.dispose(close=False)
    logger.info(f"Database pool reset for Worker (PID: {os.getpid()}).")


# Celery 配置
celery_app.conf.update(
    # 任务序列化格式
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # 时区设置
    timezone=settings.TIMEZONE,
    enable_utc=True,

    # 测试或无 Redis 的本地开发环境下同步执行任务
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,

    # 队列配置
    task_routes={
        'vocaman.tasks.notification_tasks.create_notification_task': {'queue': 'db_writer_queue'},
    },
    task_default_queue='default',
)
