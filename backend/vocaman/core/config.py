from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    """
    应用程序配置设置类，从环境变量或.env文件加载所有配置项。
    使用Pydantic进行数据验证和类型检查。

    包含服务器配置、数据库连接池、JWT签名密钥、Google登录、Redis/Celery、
    静态音频目录等配置项。JWT_SECRET 为必填项，缺失时启动即校验失败。
    """
    # Server
    BACKEND_PORT: int = 3000

    # Model configuration tells Pydantic where to find the .env file.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True
    )

    PROJECT_NAME: str = "Vocaman API"
    API_V2_STR: str = "/api/v2"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Seoul"

    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:8081"]

    # Database
    DATABASE_URL: str = "sqlite:///./vocaman.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    # Seconds to wait for a pooled connection (or a SQLite lock) before failing
    DATABASE_POOL_TIMEOUT: int = 20

    # Auth
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 10

    # Google Sign-In
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_REQUEST_TIMEOUT: float = 5.0

    # Redis / Celery
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: float = 5.0
    CELERY_TASK_ALWAYS_EAGER: bool = False

    # File paths
    AUDIO_DIR: str = "./backend/public/audio"

# Create a single, globally accessible instance of the settings.
# This will raise a validation error on startup if required settings are missing.
settings = Settings()
