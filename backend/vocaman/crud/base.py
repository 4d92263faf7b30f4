from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import asc, desc, select, func
from sqlalchemy.orm import Session

# 导入SQLAlchemy模型基类
from vocaman.db.base_class import Base

# 定义泛型类型变量
ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


# 定义排序方向枚举
class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        具有默认创建、读取、更新、删除（CRUD）操作的CRUD对象。

        写操作只执行 flush，不提交事务；提交由调用方的 transaction() 作用域负责。

        **参数**

        * `model`: SQLAlchemy模型类
        """
        self.model = model

    def get(self, db: Session, obj_id: Any) -> Optional[ModelType]:
        """
        通过ID获取单个记录。

        Args:
            db: 数据库会话
            obj_id: 记录ID

        Returns:
            Optional[ModelType]: 找到的记录，如果不存在则返回None
        """
        # 检查obj_id是否为None，避免在filter中产生无效的布尔值
        if obj_id is None:
            return None
        return db.get(self.model, obj_id)

    def _apply_filters(self, query, filter_conditions: Optional[Dict[str, Any]]):
        if filter_conditions:
            for field, value in filter_conditions.items():
                if hasattr(self.model, field):
                    # 简单相等筛选
                    query = query.where(getattr(self.model, field) == value)
        return query

    def get_multi(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
        filter_conditions: Optional[Dict[str, Any]] = None,
        sort_by: Optional[Union[str, List[Tuple[str, SortDirection]]]] = None
    ) -> List[ModelType]:
        """
        获取多个记录（支持分页、筛选和排序）。

        Args:
            db: 数据库会话
            skip: 跳过的记录数，默认为0
            limit: 返回的记录数限制，默认不限制
            filter_conditions: 筛选条件字典，例如 {"recipient_user_id": 1}
            sort_by: 排序字段，可以是单个字段名字符串或字段-方向元组列表

        Returns:
            List[ModelType]: 记录列表
        """
        query = self._apply_filters(select(self.model), filter_conditions)

        # 应用排序
        if sort_by:
            if isinstance(sort_by, str):
                # 单字段排序，默认升序
                query = query.order_by(asc(getattr(self.model, sort_by)))
            elif isinstance(sort_by, list):
                # 多字段排序
                for field, direction in sort_by:
                    if hasattr(self.model, field):
                        column = getattr(self.model, field)
                        if direction == SortDirection.DESC:
                            query = query.order_by(desc(column))
                        else:
                            query = query.order_by(asc(column))

        # 应用分页
        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return list(db.scalars(query).all())

    def get_count(
        self,
        db: Session,
        *,
        filter_conditions: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        获取符合条件的记录总数。

        Args:
            db: 数据库会话
            filter_conditions: 筛选条件字典

        Returns:
            int: 符合条件的记录总数
        """
        query = self._apply_filters(select(func.count()).select_from(self.model), filter_conditions)
        return db.scalar(query) or 0

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """
        创建一个新的记录。

        Args:
            db: 数据库会话
            obj_in: 创建记录的数据对象（schema 或字典）

        Returns:
            ModelType: 创建的记录（已 flush，主键可用）
        """
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**obj_in_data)  # SQLAlchemy model
        db.add(db_obj)
        db.flush()
        db.refresh(db_obj)
        return db_obj

    @staticmethod
    def update(
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]]
    ) -> ModelType:
        """
        更新一个已存在的记录。

        Args:
            db: 数据库会话
            db_obj: 要更新的数据库对象
            obj_in: 更新数据对象，可以是UpdateSchemaType或字典

        Returns:
            ModelType: 更新后的记录
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            # exclude_unset=True 表示只获取被显式设置了值的字段
            update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        db.add(db_obj)
        db.flush()
        return db_obj

    def remove(self, db: Session, *, obj_id: Any) -> Optional[ModelType]:
        """
        删除一个记录。

        Args:
            db: 数据库会话
            obj_id: 要删除的记录ID

        Returns:
            Optional[ModelType]: 被删除的记录，如果不存在则返回None
        """
        obj = db.get(self.model, obj_id)
        if obj:
            db.delete(obj)
            db.flush()
        return obj
