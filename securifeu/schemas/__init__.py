from .users import Token, UserCreate, UserLogin, ForgotPassword, ResetPassword, UserOut, AuthResponse, MessageOut
from .materials import MaterialCreate, MaterialUpdate, MaterialOut
from .equipments import EquipmentCreate, EquipmentUpdate, EquipmentOut, EquipmentWithStatus
from .clients import ClientCreate, ClientUpdate, ClientOut, ClientDetail, EquipmentStats, RechargeEntry, VerificationVisit
