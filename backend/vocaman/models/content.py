from sqlalchemy import Column, BigInteger, Integer, String, Text, DateTime, ForeignKey

from vocaman.core.timeutils import local_now
from vocaman.db.base_class import Base


class Concept(Base):
    """概念（一张单词卡），通常由一张图片表示，可对应多种语言的 Term"""
    __tablename__ = "concepts"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    image_url = Column(String(500), nullable=True)
    created_by = Column(ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=local_now)


class Term(Base):
    """某个概念在某种语言下的单词"""
    __tablename__ = "terms"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    concept_id = Column(ForeignKey("concepts.id"), index=True, nullable=False)
    language_code = Column(String(10), nullable=False)
    text = Column(String(255), nullable=False)
    audio_ref = Column(String(255), nullable=True)


class Hint(Base):
    """单词提示"""
    __tablename__ = "hints"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    term_id = Column(ForeignKey("terms.id"), index=True, nullable=False)
    hint_type = Column(String(50), nullable=False)
    hint_content = Column(Text, nullable=False)
    language_code = Column(String(10), nullable=False)
