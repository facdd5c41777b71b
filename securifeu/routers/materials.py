from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from .. import models, schemas
from ..database import get_db
from ..dependencies import get_current_user

router = APIRouter(prefix="/materials", tags=["Matériels"], dependencies=[Depends(get_current_user)])


def _get_or_404(db: Session, material_id: int) -> models.Material:
    m = db.query(models.Material).filter(models.Material.id == material_id).first()
    if not m: raise HTTPException(404, "Matériau non trouvé")
    return m


def _check_type_free(db: Session, material_type, exclude_id=None):
    """Un seul template par type de matériel."""
    q = db.query(models.Material).filter(models.Material.type == material_type)
    if exclude_id is not None:
        q = q.filter(models.Material.id != exclude_id)
    if q.first():
        raise HTTPException(409, f"Un template {material_type.value} existe déjà. Vous ne pouvez avoir qu'un seul template par type.")


@router.get("", response_model=List[schemas.MaterialOut])
def read_materials(db: Session = Depends(get_db)):
    return db.query(models.Material).order_by(models.Material.type).all()


@router.get("/{material_id}", response_model=schemas.MaterialOut)
def read_material(material_id: int, db: Session = Depends(get_db)):
    return _get_or_404(db, material_id)


@router.post("", response_model=schemas.MaterialOut, status_code=201)
def create_material(mat: schemas.MaterialCreate, db: Session = Depends(get_db)):
    _check_type_free(db, mat.type)
    data = mat.model_dump()
    # Le délai de recharge n'a de sens que pour les PA
    if mat.type != models.MaterialType.PA:
        data["time_before_reload"] = None
    new_m = models.Material(**data)
    db.add(new_m)
    db.commit()
    db.refresh(new_m)
    return new_m


@router.put("/{material_id}", response_model=schemas.MaterialOut)
def update_material(material_id: int, mat: schemas.MaterialUpdate, db: Session = Depends(get_db)):
    db_mat = _get_or_404(db, material_id)

    data = mat.model_dump(exclude_unset=True)
    if data.get("type") is not None and data["type"] != db_mat.type:
        _check_type_free(db, data["type"], exclude_id=material_id)

    for k, v in data.items():
        if v is None and k != "time_before_reload":
            continue
        setattr(db_mat, k, v)
    if db_mat.type != models.MaterialType.PA:
        db_mat.time_before_reload = None

    db.commit()
    db.refresh(db_mat)
    return db_mat


@router.delete("/{material_id}")
def delete_material(material_id: int, db: Session = Depends(get_db)):
    m = _get_or_404(db, material_id)
    used = db.query(models.Equipment).filter(models.Equipment.material_id == material_id).count()
    if used:
        raise HTTPException(409, f"Impossible de supprimer ce matériau : {used} équipement(s) l'utilisent")
    db.delete(m)
    db.commit()
    return {"status": "deleted"}
