from pydantic import BaseModel, Field
from typing import Optional

from ..models.materials import MaterialType

class MaterialCreate(BaseModel):
    type: MaterialType
    validity_time: int = Field(gt=0, description="Durée de vie en jours")
    time_before_control: int = Field(gt=0, description="Jours entre deux contrôles")
    time_before_reload: Optional[int] = Field(default=None, gt=0, description="Jours entre deux recharges (PA)")

class MaterialUpdate(BaseModel):
    type: Optional[MaterialType] = None
    validity_time: Optional[int] = Field(default=None, gt=0)
    time_before_control: Optional[int] = Field(default=None, gt=0)
    time_before_reload: Optional[int] = Field(default=None, gt=0)

class MaterialOut(BaseModel):
    id: int
    type: MaterialType
    validity_time: int
    time_before_control: int
    time_before_reload: Optional[int] = None
    class Config:
        from_attributes = True
