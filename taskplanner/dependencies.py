from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .services.repository import SqlAlchemyScheduleRepository
from .services.scheduler_service import SchedulingService


def get_current_user(
    x_user_id: Optional[int] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the owner of the request from the X-User-Id header."""
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )

    user = db.query(User).filter(User.id == x_user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    """Scheduling service bound to this request's session."""
    return SchedulingService(SqlAlchemyScheduleRepository(db))
