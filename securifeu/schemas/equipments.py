from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime

from ..models.clients import RechargeType
from ..services.compliance import EquipmentEvaluation
from .materials import MaterialOut

NOTES_MAX_LENGTH = 500

class EquipmentCreate(BaseModel):
    material_id: int
    number: int = Field(gt=0)
    commissioning_date: date
    last_verification_date: Optional[date] = None
    last_recharge_date: Optional[date] = None
    recharge_type: Optional[RechargeType] = None
    volume: Optional[float] = Field(default=None, gt=0)
    serial_number: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)

class EquipmentUpdate(BaseModel):
    material_id: Optional[int] = None
    number: Optional[int] = Field(default=None, gt=0)
    commissioning_date: Optional[date] = None
    last_verification_date: Optional[date] = None
    last_recharge_date: Optional[date] = None
    recharge_type: Optional[RechargeType] = None
    volume: Optional[float] = Field(default=None, gt=0)
    serial_number: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)

class EquipmentOut(BaseModel):
    id: int
    client_id: int
    number: int
    commissioning_date: date
    last_verification_date: Optional[date] = None
    last_recharge_date: Optional[date] = None
    recharge_type: Optional[RechargeType] = None
    volume: Optional[float] = None
    serial_number: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    material: MaterialOut
    class Config:
        from_attributes = True

class EquipmentWithStatus(EquipmentOut):
    status: EquipmentEvaluation
