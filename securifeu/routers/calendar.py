from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, selectinload

from .. import models
from ..database import get_db
from ..dependencies import get_current_user, get_now
from ..services.compliance import to_local_date
from ..services.planning import available_years, calendar_months, clients_with_actions

router = APIRouter(prefix="/calendar", tags=["Calendrier"], dependencies=[Depends(get_current_user)])


@router.get("")
def read_calendar(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Clients ayant des actions sur le mois sélectionné (mois courant par défaut)."""
    today = to_local_date(now)
    month = month or today.month
    year = year or today.year

    clients = (
        db.query(models.Client)
        .options(selectinload(models.Client.equipments).selectinload(models.Equipment.material))
        .all()
    )
    result = clients_with_actions(clients, month, year, now)
    return {
        "month": month,
        "year": year,
        "months": calendar_months(month, year, now),
        "available_years": available_years(now),
        "total_actions": sum(c.total_actions for c in result),
        "clients": result,
    }
