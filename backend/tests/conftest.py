"""
测试公共夹具

在导入项目模块之前设置测试环境：临时 SQLite 数据库、固定的 JWT 密钥、
同步执行的 Celery 任务。Redis 和 Google 校验通过 dependency_overrides 替换为 mock。
"""
import os
import sys
import tempfile
from typing import Generator, List
from unittest.mock import MagicMock

import pytest

# 添加 backend 目录到Python路径
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

_test_dir = tempfile.mkdtemp(prefix="vocaman-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_test_dir, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["GOOGLE_CLIENT_ID"] = "test-client.apps.googleusercontent.com"
os.environ["AUDIO_DIR"] = _test_dir

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from vocaman.config.dependency_injection import get_google_verifier, get_token_blocklist
from vocaman.core import security
from vocaman.db.base_class import Base
from vocaman.db.database import SessionLocal, engine
from vocaman.main import app
from vocaman.models.content import Concept, Hint, Term
from vocaman.models.dataset import Dataset, DatasetConcept
from vocaman.models.user import User
from vocaman.models.user_relation import UserRelation
from vocaman.services.token_blocklist import TokenBlocklist

TEST_PASSWORD = "correct-horse"


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """每个测试使用一套全新的表"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis() -> MagicMock:
    """以字典模拟 setex/exists 的 Redis 客户端"""
    store = {}
    redis_client = MagicMock()
    redis_client.setex.side_effect = lambda key, ttl, value: store.__setitem__(key, value)
    redis_client.exists.side_effect = lambda key: 1 if key in store else 0
    redis_client.store = store
    return redis_client


@pytest.fixture
def google_verifier() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(db, fake_redis, google_verifier) -> Generator[TestClient, None, None]:
    """创建测试客户端，替换外部依赖"""
    app.dependency_overrides[get_token_blocklist] = lambda: TokenBlocklist(redis_client=fake_redis)
    app.dependency_overrides[get_google_verifier] = lambda: google_verifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role: str = "student", nickname: str = None, email: str = None, mileage: int = 0) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role}{counter['n']}@example.com",
            password_hash=security.hash_password(TEST_PASSWORD),
            nickname=nickname or f"{role}-{counter['n']}",
            role=role,
            mileage=mileage,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_relation(db):
    def _make_relation(parent: User, child: User, status: str = "approved") -> UserRelation:
        relation = UserRelation(parent_user_id=parent.id, child_user_id=child.id, status=status)
        db.add(relation)
        db.commit()
        db.refresh(relation)
        return relation

    return _make_relation


@pytest.fixture
def make_dataset(db):
    """
    创建单词集：concepts 为每个概念下的单词数量列表，
    例如 [1, 1, 1] 表示三个各带一个英文单词的概念。
    返回 (dataset, term_ids)。
    """
    def _make_dataset(owner: User, concepts: List[int] = (1, 1, 1), *, name: str = "Animals",
                      is_official: bool = False, recommended_grade: int = None, with_hints: bool = False):
        dataset = Dataset(
            name=name,
            owner_user_id=owner.id,
            source_language_code="ko",
            target_language_code="en",
            is_official=is_official,
            recommended_grade=recommended_grade,
        )
        db.add(dataset)
        db.flush()

        term_ids = []
        for index, term_count in enumerate(concepts):
            concept = Concept(image_url=f"https://cdn.example.com/{name}/{index}.png", created_by=owner.id)
            db.add(concept)
            db.flush()
            db.add(DatasetConcept(dataset_id=dataset.id, concept_id=concept.id))
            for t in range(term_count):
                term = Term(concept_id=concept.id, language_code="en", text=f"word-{index}-{t}")
                db.add(term)
                db.flush()
                term_ids.append(term.id)
                if with_hints:
                    db.add(Hint(term_id=term.id, hint_type="text", hint_content=f"hint {index}-{t}", language_code="ko"))
        db.commit()
        db.refresh(dataset)
        return dataset, term_ids

    return _make_dataset


@pytest.fixture
def auth_headers():
    """为指定用户签发访问令牌并构造请求头"""
    def _auth_headers(user: User) -> dict:
        token = security.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            nickname=user.nickname,
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
