import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from .. import models, schemas, security
from ..config import AUTH_COOKIE_NAME, ACCESS_TOKEN_EXPIRE_MINUTES, COOKIE_SECURE
from ..database import get_db
from ..dependencies import get_current_user
from ..services.email import send_password_reset_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentification"])

RESET_MESSAGE = "Si cet email existe dans notre système, vous recevrez un lien de réinitialisation."


def _set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def _authenticate(db: Session, email: str, password: str) -> models.User:
    user = db.query(models.User).filter(models.User.email == email.lower()).first()
    if not user or not security.verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email ou mot de passe incorrect",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Compte désactivé")

    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


# ==========================
# 1. INSCRIPTION
# ==========================
@router.post("/auth/signup", response_model=schemas.AuthResponse, status_code=201)
def signup(data: schemas.UserCreate, response: Response, db: Session = Depends(get_db)):
    if not data.full_name.strip():
        raise HTTPException(400, "Email, mot de passe et nom complet requis")

    error = security.password_error(data.password)
    if error:
        raise HTTPException(400, error)

    email = data.email.lower()
    if db.query(models.User).filter(models.User.email == email).first():
        raise HTTPException(409, "Un compte avec cet email existe déjà")

    user = models.User(
        email=email,
        hashed_password=security.get_password_hash(data.password),
        full_name=data.full_name.strip(),
        is_active=True,
        token_version=0,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Nouveau compte créé : %s", user.email)

    token = security.create_user_token(user)
    _set_auth_cookie(response, token)
    return {"success": True, "message": "Compte créé avec succès", "user": user, "access_token": token}


# ==========================
# 2. CONNEXION
# ==========================
@router.post("/auth/login", response_model=schemas.AuthResponse)
def login(data: schemas.UserLogin, response: Response, db: Session = Depends(get_db)):
    user = _authenticate(db, data.email, data.password)
    token = security.create_user_token(user)
    _set_auth_cookie(response, token)
    return {"success": True, "user": user, "access_token": token}


@router.post("/token", response_model=schemas.Token)
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """Variante OAuth2 (formulaire) pour la doc interactive."""
    user = _authenticate(db, form_data.username, form_data.password)
    return {"access_token": security.create_user_token(user), "token_type": "bearer"}


@router.post("/auth/logout", response_model=schemas.MessageOut)
def logout(response: Response):
    response.delete_cookie(AUTH_COOKIE_NAME)
    return {"success": True, "message": "Déconnexion réussie"}


@router.get("/auth/me", response_model=schemas.UserOut)
def read_me(current_user: models.User = Depends(get_current_user)):
    return current_user


# ==========================
# 3. MOT DE PASSE OUBLIÉ
# ==========================
@router.post("/auth/forgot-password", response_model=schemas.MessageOut)
def forgot_password(data: schemas.ForgotPassword, db: Session = Depends(get_db)):
    user = db.query(models.User).filter(models.User.email == data.email.lower()).first()

    # Même réponse que l'email existe ou non (pas d'énumération)
    if not user or not user.is_active:
        logger.info("Reset demandé pour un compte inexistant ou inactif : %s", data.email)
        return {"success": True, "message": RESET_MESSAGE}

    user.reset_token, user.reset_token_expiry = security.generate_reset_token()
    db.commit()

    if not send_password_reset_email(user.email, user.full_name or "", user.reset_token):
        user.reset_token = None
        user.reset_token_expiry = None
        db.commit()
        raise HTTPException(500, "Erreur lors de l'envoi de l'email. Veuillez réessayer.")

    logger.info("Email de réinitialisation envoyé à %s", user.email)
    return {"success": True, "message": RESET_MESSAGE}


@router.post("/auth/reset-password", response_model=schemas.AuthResponse)
def reset_password(data: schemas.ResetPassword, response: Response, db: Session = Depends(get_db)):
    error = security.password_error(data.password)
    if error:
        raise HTTPException(400, error)

    user = db.query(models.User).filter(
        models.User.reset_token == data.token,
        models.User.reset_token_expiry >= datetime.utcnow(),
        models.User.is_active == True,  # noqa: E712
    ).first()
    if not user:
        raise HTTPException(400, "Token invalide ou expiré")

    user.hashed_password = security.get_password_hash(data.password)
    user.reset_token = None
    user.reset_token_expiry = None
    user.token_version = user.token_version + 1
    db.commit()
    db.refresh(user)
    logger.info("Mot de passe réinitialisé pour %s", user.email)

    token = security.create_user_token(user)
    _set_auth_cookie(response, token)
    return {"success": True, "message": "Mot de passe réinitialisé avec succès", "user": user, "access_token": token}
