import re
import secrets
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, RESET_TOKEN_EXPIRE_MINUTES

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_MIN_LENGTH = 6
_PASSWORD_RULE = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

# --- MOTS DE PASSE ---

def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password):
    return pwd_context.hash(password)

def password_error(password: str) -> Optional[str]:
    """Message d'erreur si le mot de passe ne respecte pas la politique, sinon None."""
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Le mot de passe doit contenir au moins {PASSWORD_MIN_LENGTH} caractères"
    if not _PASSWORD_RULE.match(password):
        return "Le mot de passe doit contenir au moins une minuscule, une majuscule et un chiffre"
    return None

# --- JWT ---

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def create_user_token(user) -> str:
    return create_access_token({"sub": user.email, "uid": user.id, "ver": user.token_version})

def decode_access_token(token: str):
    """
    Retourne le payload (dict) si le token est valide, None sinon.
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None

# --- RESET MOT DE PASSE ---

def generate_reset_token():
    """Token aléatoire (64 caractères hexa) et sa date d'expiration."""
    return secrets.token_hex(32), datetime.utcnow() + timedelta(minutes=RESET_TOKEN_EXPIRE_MINUTES)
