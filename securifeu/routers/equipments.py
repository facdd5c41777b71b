import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..dependencies import get_current_user, get_now
from ..services.compliance import EquipmentEvaluation, evaluate
from .clients import get_client_or_404, with_status

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Équipements"], dependencies=[Depends(get_current_user)])


def _get_or_404(db: Session, equipment_id: int) -> models.Equipment:
    e = db.query(models.Equipment).filter(models.Equipment.id == equipment_id).first()
    if not e: raise HTTPException(404, "Équipement non trouvé")
    return e


def _check_material(db: Session, material_id: int) -> models.Material:
    m = db.query(models.Material).filter(models.Material.id == material_id).first()
    if not m: raise HTTPException(404, "Matériel non trouvé")
    return m


def _check_number_free(db: Session, client_id: int, number: int, exclude_id=None):
    q = db.query(models.Equipment).filter(
        models.Equipment.client_id == client_id, models.Equipment.number == number
    )
    if exclude_id is not None:
        q = q.filter(models.Equipment.id != exclude_id)
    if q.first():
        raise HTTPException(409, f"Un équipement avec le numéro {number} existe déjà pour ce client")


def _commit(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Conflit d'intégrité (numéro d'équipement déjà utilisé ?)")


# ==========================
# 1. PARC D'UN CLIENT
# ==========================
@router.get("/clients/{client_id}/equipments", response_model=List[schemas.EquipmentWithStatus])
def read_client_equipments(client_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    c = get_client_or_404(db, client_id)
    rows = sorted(c.equipments, key=lambda e: (e.commissioning_date, e.id), reverse=True)
    return [with_status(e, now) for e in rows]


@router.post("/clients/{client_id}/equipments", response_model=schemas.EquipmentOut, status_code=201)
def create_equipment(client_id: int, eq: schemas.EquipmentCreate, db: Session = Depends(get_db)):
    get_client_or_404(db, client_id)
    _check_material(db, eq.material_id)
    _check_number_free(db, client_id, eq.number)

    data = eq.model_dump()
    if data.get("notes") is not None:
        data["notes"] = data["notes"].strip() or None

    new_e = models.Equipment(**data, client_id=client_id)
    db.add(new_e)
    _commit(db)
    db.refresh(new_e)
    logger.info("Équipement n°%s ajouté au client %s", new_e.number, client_id)
    return new_e


# ==========================
# 2. UN ÉQUIPEMENT
# ==========================
@router.get("/equipments/{equipment_id}", response_model=schemas.EquipmentWithStatus)
def read_equipment(equipment_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return with_status(_get_or_404(db, equipment_id), now)


@router.get("/equipments/{equipment_id}/status", response_model=EquipmentEvaluation)
def read_equipment_status(equipment_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return evaluate(_get_or_404(db, equipment_id), now=now)


@router.put("/equipments/{equipment_id}", response_model=schemas.EquipmentOut)
def update_equipment(equipment_id: int, up: schemas.EquipmentUpdate, db: Session = Depends(get_db)):
    e = _get_or_404(db, equipment_id)

    data = up.model_dump(exclude_unset=True)
    if data.get("number") is not None and data["number"] != e.number:
        _check_number_free(db, e.client_id, data["number"], exclude_id=equipment_id)
    if data.get("material_id") is not None:
        _check_material(db, data["material_id"])

    # Champs obligatoires : un null explicite est ignoré
    for k in ("number", "commissioning_date", "material_id"):
        if k in data and data[k] is None:
            del data[k]
    if data.get("notes") is not None:
        data["notes"] = data["notes"].strip() or None

    for k, v in data.items():
        setattr(e, k, v)
    _commit(db)
    db.refresh(e)
    return e


@router.delete("/equipments/{equipment_id}")
def delete_equipment(equipment_id: int, db: Session = Depends(get_db)):
    e = _get_or_404(db, equipment_id)
    db.delete(e)
    db.commit()
    logger.info("Équipement %s supprimé", equipment_id)
    return {"status": "deleted"}
