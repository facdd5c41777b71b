import enum

from sqlalchemy import Column, Integer, Enum
from sqlalchemy.orm import relationship
from .base import Base


class MaterialType(str, enum.Enum):
    PA = "PA"        # Pression auxiliaire
    PP = "PP"        # Pression permanente
    ALARM = "ALARM"  # Alarme
    CO2 = "CO2"


class Material(Base):
    """Template d'un type de matériel (un seul template par type)."""
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(MaterialType, name="material_type"), unique=True, nullable=False)

    # Durées en jours
    validity_time = Column(Integer, nullable=False)
    time_before_control = Column(Integer, nullable=False)
    time_before_reload = Column(Integer, nullable=True)  # PA uniquement

    equipments = relationship("Equipment", back_populates="material")
