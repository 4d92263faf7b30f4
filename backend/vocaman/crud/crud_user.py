from typing import Any, Dict, Optional

from pydantic import BaseModel
from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from vocaman.crud.base import CRUDBase
from vocaman.models.user import User


class CRUDUser(CRUDBase[User, BaseModel, BaseModel]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.scalars(select(User).where(User.email == email)).first()

    def get_by_google_id_or_email(self, db: Session, *, google_id: str, email: str) -> Optional[User]:
        query = select(User).where(or_(User.google_id == google_id, User.email == email))
        return db.scalars(query).first()

    def add_mileage(self, db: Session, *, user_id: int, amount: int) -> int:
        """原子地增加积分（UPDATE users SET mileage = mileage + :amount）"""
        result = db.execute(
            update(User)
            .where(User.id == user_id)
            .values(mileage=User.mileage + amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def replace_settings(self, db: Session, *, db_obj: User, settings: Dict[str, Any]) -> User:
        return self.update(db, db_obj=db_obj, obj_in={"settings": settings})


user = CRUDUser(User)
