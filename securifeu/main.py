import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import models  # noqa: F401  (enregistre les tables sur Base.metadata)
from .config import CORS_ORIGINS, LOG_LEVEL
from .database import Base, engine
from .routers import auth, calendar, clients, dashboard, equipments, materials

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Pas de migrations : les tables sont créées au démarrage
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Sécurifeu API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(materials.router)
app.include_router(clients.router)
app.include_router(equipments.router)
app.include_router(dashboard.router)
app.include_router(calendar.router)


@app.get("/")
def root():
    return {"message": "Sécurifeu API Ready 🚀"}
