from sqlalchemy import Column, BigInteger, Integer, String, Boolean, DateTime, ForeignKey

from vocaman.core.timeutils import local_now
from vocaman.db.base_class import Base


class Dataset(Base):
    """单词集模型

    Attributes:
        id: 自增ID
        name: 名称
        owner_user_id: 创建者
        source_language_code: 原语言，如 'ko'
        target_language_code: 目标语言，如 'en'
        is_official: 是否为官方单词集
        recommended_grade: 官方单词集推荐的年级
        created_at: 创建时间
    """
    __tablename__ = "datasets"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    owner_user_id = Column(ForeignKey("users.id"), index=True, nullable=False)
    source_language_code = Column(String(10), nullable=False)
    target_language_code = Column(String(10), nullable=False)
    is_official = Column(Boolean, nullable=False, default=False)
    recommended_grade = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=local_now)


class DatasetConcept(Base):
    """单词集与概念的多对多关联"""
    __tablename__ = "dataset_concepts"

    dataset_id = Column(ForeignKey("datasets.id"), primary_key=True)
    concept_id = Column(ForeignKey("concepts.id"), primary_key=True)
