# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config

# Importamos los routers de la capa de infraestructura
from sri_core.infrastructure.api.routers import documents_router, identity_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - [%(funcName)s] - %(message)s'
)

app = FastAPI(
    title="API de Comprobantes Electrónicos e Identificaciones SRI",
    description="Validación de comprobantes electrónicos del SRI y consulta de cédulas y RUC.",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(documents_router.router)
app.include_router(identity_router.router)


@app.get("/", tags=["Health Check"])
def read_root():
    return {"status": "ok", "message": "API de comprobantes SRI en línea"}
