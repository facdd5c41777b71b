import enum

from sqlalchemy import Column, Integer, String, Date, DateTime, Float, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from .base import Base


class RechargeType(str, enum.Enum):
    WATER_ADD = "WATER_ADD"
    POWDER = "POWDER"
    CO2 = "CO2"
    FOAM = "FOAM"


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("name", "location", name="uq_client_name_location"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), index=True, nullable=False)
    location = Column(String(200), nullable=False)
    contact_name = Column(String(100), nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Pas de cascade : la suppression est refusée tant qu'il reste des équipements
    equipments = relationship("Equipment", back_populates="client", order_by="Equipment.number")


class Equipment(Base):
    __tablename__ = "equipments"
    __table_args__ = (UniqueConstraint("client_id", "number", name="uq_equipment_client_number"),)

    id = Column(Integer, primary_key=True, index=True)
    number = Column(Integer, nullable=False)

    commissioning_date = Column(Date, nullable=False)
    last_verification_date = Column(Date, nullable=True)
    last_recharge_date = Column(Date, nullable=True)

    recharge_type = Column(Enum(RechargeType, name="recharge_type"), nullable=True)
    volume = Column(Float, nullable=True)
    serial_number = Column(String, nullable=True)
    location = Column(String, nullable=True)
    notes = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    client = relationship("Client", back_populates="equipments")

    material_id = Column(Integer, ForeignKey("materials.id"), nullable=False)
    material = relationship("Material", back_populates="equipments")
