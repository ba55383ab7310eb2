# tourportal/api/statistics.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tourportal.auth.permissions import require
from tourportal.auth.policy import Action, SessionContext
from tourportal.core.db import get_db
from tourportal.services import statistics

router = APIRouter(tags=["statistics"])


@router.get("/api/admin/statistics")
def admin_statistics(
    session: SessionContext = Depends(require(Action.VIEW_ADMIN_STATISTICS)),
    db: Session = Depends(get_db),
):
    return statistics.admin_statistics(db)


@router.get("/api/manager/statistics")
def manager_statistics(
    session: SessionContext = Depends(require(Action.VIEW_MANAGER_STATISTICS)),
    db: Session = Depends(get_db),
):
    return statistics.manager_statistics(db)
