from datetime import datetime
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from . import models
from .config import AUTH_COOKIE_NAME, LOCAL_TZ
from .database import get_db
from .security import decode_access_token

# Non bloquant : le token peut aussi arriver par cookie
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def extract_token(request: Request, bearer: Optional[str]) -> Optional[str]:
    """Header Authorization d'abord, puis cookie."""
    if bearer:
        return bearer
    return request.cookies.get(AUTH_COOKIE_NAME)


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Impossible de valider les identifiants",
        headers={"WWW-Authenticate": "Bearer"},
    )

    raw = extract_token(request, token)
    if not raw:
        raise credentials_exception

    payload = decode_access_token(raw)
    if payload is None or payload.get("sub") is None:
        raise credentials_exception

    user = db.query(models.User).filter(models.User.email == payload["sub"]).first()
    if user is None or not user.is_active:
        raise credentials_exception

    # Token émis avant un changement de mot de passe
    if payload.get("ver") != user.token_version:
        raise credentials_exception

    return user


def get_now() -> datetime:
    """Instant de référence de la requête, lu une seule fois."""
    return datetime.now(LOCAL_TZ)
