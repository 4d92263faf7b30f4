from sqlalchemy import Column, BigInteger, Integer, String, DateTime, JSON

from vocaman.core.timeutils import local_now
from vocaman.db.base_class import Base


class User(Base):
    """用户模型

    家长、学生（孩子）和管理员共用一张表，通过 role 区分。

    Attributes:
        id: 自增ID
        email: 登录邮箱，唯一
        password_hash: bcrypt 哈希，Google 登录创建的账户为空
        nickname: 昵称
        role: 'student'、'parent' 或 'admin'
        google_id: Google 账户 sub，唯一
        mileage: 奖励积分余额
        settings: 客户端设置（任意 JSON 对象）
        created_at: 创建时间
    """
    __tablename__ = "users"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=True)
    nickname = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default="student")
    google_id = Column(String(255), unique=True, nullable=True)
    mileage = Column(Integer, nullable=False, default=0)
    settings = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=local_now)
