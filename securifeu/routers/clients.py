import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..database import get_db
from ..dependencies import get_current_user, get_now
from ..services.compliance import evaluate, issue_summary, recharge_applies, to_local_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"], dependencies=[Depends(get_current_user)])


def get_client_or_404(db: Session, client_id: int) -> models.Client:
    c = (
        db.query(models.Client)
        .options(selectinload(models.Client.equipments).selectinload(models.Equipment.material))
        .filter(models.Client.id == client_id)
        .first()
    )
    if not c: raise HTTPException(404, "Client non trouvé")
    return c


def with_status(equipment: models.Equipment, now) -> schemas.EquipmentWithStatus:
    out = schemas.EquipmentOut.model_validate(equipment)
    return schemas.EquipmentWithStatus(**out.model_dump(), status=evaluate(equipment, now=now))


def client_detail(c: models.Client, now) -> schemas.ClientDetail:
    rows = [with_status(e, now) for e in c.equipments]
    base = schemas.ClientOut.model_validate(c).model_dump(exclude={"equipments"})
    return schemas.ClientDetail(**base, equipments=rows, stats=issue_summary(r.status for r in rows))


def _check_duplicate(db: Session, name: str, location: str, exclude_id=None):
    q = db.query(models.Client).filter(models.Client.name == name, models.Client.location == location)
    if exclude_id is not None:
        q = q.filter(models.Client.id != exclude_id)
    if q.first():
        raise HTTPException(409, "Un client avec ce nom et cette localisation existe déjà")


# ==========================
# 1. LISTE / CRÉATION
# ==========================
@router.get("", response_model=List[schemas.ClientOut])
def read_clients(search: Optional[str] = Query(None, max_length=100), db: Session = Depends(get_db)):
    q = db.query(models.Client).options(
        selectinload(models.Client.equipments).selectinload(models.Equipment.material)
    )
    # Recherche insensible à la casse sur le nom, le contact et la localisation
    if search and search.strip():
        kw = search.strip()
        q = q.filter(or_(
            models.Client.name.ilike(f"%{kw}%"),
            models.Client.contact_name.ilike(f"%{kw}%"),
            models.Client.location.ilike(f"%{kw}%"),
        ))
    return q.order_by(models.Client.created_at.desc(), models.Client.id.desc()).all()


@router.post("", response_model=schemas.ClientOut, status_code=201)
def create_client(client: schemas.ClientCreate, db: Session = Depends(get_db)):
    name, location = client.name.strip(), client.location.strip()
    _check_duplicate(db, name, location)

    new_c = models.Client(
        name=name,
        location=location,
        contact_name=client.contact_name.strip(),
        phone=client.phone,
        email=client.email,
    )
    db.add(new_c)
    db.commit()
    db.refresh(new_c)
    logger.info("Client créé : %s (%s)", new_c.name, new_c.id)
    return new_c


# ==========================
# 2. FICHE CLIENT
# ==========================
@router.get("/{client_id}", response_model=schemas.ClientDetail)
def read_client(client_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    return client_detail(get_client_or_404(db, client_id), now)


@router.put("/{client_id}", response_model=schemas.ClientOut)
def update_client(client_id: int, up: schemas.ClientUpdate, db: Session = Depends(get_db)):
    c = get_client_or_404(db, client_id)

    data = up.model_dump(exclude_unset=True)
    for k in ("name", "location", "contact_name"):
        if data.get(k) is not None:
            data[k] = data[k].strip()
        elif k in data:
            del data[k]

    name = data.get("name", c.name)
    location = data.get("location", c.location)
    if name != c.name or location != c.location:
        _check_duplicate(db, name, location, exclude_id=client_id)

    for k, v in data.items():
        setattr(c, k, v)
    db.commit()
    db.refresh(c)
    return c


@router.delete("/{client_id}")
def delete_client(client_id: int, db: Session = Depends(get_db)):
    c = get_client_or_404(db, client_id)
    if c.equipments:
        raise HTTPException(
            409,
            f"Impossible de supprimer ce client : il possède encore {len(c.equipments)} équipement(s)",
        )
    db.delete(c)
    db.commit()
    logger.info("Client supprimé : %s", client_id)
    return {"status": "deleted"}


# ==========================
# 3. VISITE DE VÉRIFICATION
# ==========================
@router.post("/{client_id}/verification", response_model=schemas.ClientDetail)
def record_verification(
    client_id: int,
    visit: schemas.VerificationVisit,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """
    Contrôle de tout le parc du client à la date de visite, puis
    enregistrement des recharges effectuées sur les PA.
    """
    c = get_client_or_404(db, client_id)
    visit_date = visit.verification_date or to_local_date(now)

    by_number = {e.number: e for e in c.equipments}
    for r in visit.recharges:
        e = by_number.get(r.equipment_number)
        if e is None:
            raise HTTPException(404, f"Équipement n°{r.equipment_number} introuvable pour ce client")
        if not recharge_applies(e.material):
            raise HTTPException(400, f"L'équipement n°{r.equipment_number} n'est pas un PA rechargeable")

    for e in c.equipments:
        e.last_verification_date = visit_date
    for r in visit.recharges:
        by_number[r.equipment_number].last_recharge_date = r.recharge_date

    db.commit()
    logger.info("Vérification du %s enregistrée pour le client %s (%d recharge(s))",
                visit_date, client_id, len(visit.recharges))

    return client_detail(get_client_or_404(db, client_id), now)
