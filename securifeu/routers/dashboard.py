from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, selectinload

from .. import models
from ..database import get_db
from ..dependencies import get_current_user, get_now
from ..services.dashboard import fleet_stats

router = APIRouter(prefix="/dashboard", tags=["Dashboard"], dependencies=[Depends(get_current_user)])


@router.get("/stats")
def get_dashboard_stats(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    clients = (
        db.query(models.Client)
        .options(selectinload(models.Client.equipments).selectinload(models.Equipment.material))
        .all()
    )
    materials = db.query(models.Material).all()
    return fleet_stats(clients, materials, now)
