from .base import Base
from .users import User
from .materials import Material, MaterialType
from .clients import Client, Equipment, RechargeType
