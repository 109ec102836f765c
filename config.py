# config.py
import os
from dotenv import load_dotenv

load_dotenv()

# --- CONFIGURACIÓN GENERAL ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Orígenes permitidos por CORS, separados por coma
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

# --- CONFIGURACIÓN DEL SRI ---
# Dominio de los servicios en línea del SRI
SRI_BASE_URL = os.getenv("SRI_BASE_URL", "https://srienlinea.sri.gob.ec")
SRI_TIMEOUT_SECONDS = float(os.getenv("SRI_TIMEOUT_SECONDS", "30"))
SRI_VERIFY_SSL = os.getenv("SRI_VERIFY_SSL", "true").lower() not in ("0", "false", "no")

# El SRI rechaza clientes que no se identifican como navegador
SRI_USER_AGENT = os.getenv(
    "SRI_USER_AGENT",
    "Mozilla/5.0 (Windows NT 6.1; Win64; x64; rv:67.0) Gecko/20100101 Firefox/67.0"
)

# Servicio de captcha (sesión + emisión de token)
CAPTCHA_START_PATH = "/sri-captcha-servicio-internet/captcha/start/1"
CAPTCHA_VALIDATE_PATH = "/sri-captcha-servicio-internet/rest/ValidacionCaptcha/validarCaptcha/{answer}"

# Registro Civil (cédulas)
CEDULA_EXISTENCE_PATH = "/sri-registro-civil-servicio-internet/rest/DatosRegistroCivil/existeNumeroIdentificacion"
CEDULA_DATA_PATH = "/sri-registro-civil-servicio-internet/rest/DatosRegistroCivil/obtenerDatosCompletosPorNumeroIdentificacionConToken"

# Catastro (RUC)
RUC_EXISTENCE_PATH = "/sri-catastro-sujeto-servicio-internet/rest/ConsolidadoContribuyente/existePorNumeroRuc"
RUC_DATA_PATH = "/sri-catastro-sujeto-servicio-internet/rest/ConsolidadoContribuyente/obtenerPorNumerosRuc"
RUC_ESTABLISHMENTS_PATH = "/sri-catastro-sujeto-servicio-internet/rest/Establecimiento/consultarPorNumeroRuc"

# --- CONFIGURACIÓN DE COMPROBANTES ---
# Tamaño máximo aceptado para un XML subido a la API
MAX_XML_BYTES = int(os.getenv("MAX_XML_BYTES", str(2 * 1024 * 1024)))
