import re
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime

from .equipments import EquipmentOut, EquipmentWithStatus

# Format français : 0X XX XX XX XX ou +33 X XX XX XX XX
PHONE_RE = re.compile(r"^(?:\+33|0)[1-9]\d{8}$")

def _check_phone(v):
    if v is None or v.strip() == "":
        return None
    if not PHONE_RE.match(re.sub(r"\s", "", v)):
        raise ValueError("Format de téléphone invalide")
    return v.strip()

class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    location: str = Field(min_length=1, max_length=200)
    contact_name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _check_phone(v)

class ClientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    contact_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = None
    email: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _check_phone(v)

class ClientOut(BaseModel):
    id: int
    name: str
    location: str
    contact_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    equipments: List[EquipmentOut] = []
    class Config:
        from_attributes = True

class EquipmentStats(BaseModel):
    total: int
    validity_expired: int
    control_expired: int
    recharge_expired: int

class ClientDetail(ClientOut):
    equipments: List[EquipmentWithStatus] = []
    stats: EquipmentStats

# --- VISITE DE VÉRIFICATION ---
class RechargeEntry(BaseModel):
    equipment_number: int
    recharge_date: date

class VerificationVisit(BaseModel):
    verification_date: Optional[date] = None
    recharges: List[RechargeEntry] = []
