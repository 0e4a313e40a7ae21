#  Copyright (c) 2026 Fleer
import os
import sys
from dotenv import load_dotenv

# 1. DETERMINAR RUTAS BASE
if getattr(sys, 'frozen', False):
    BASE_DIR = os.path.dirname(sys.executable)
else:
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))

ENV_PATH = os.path.join(BASE_DIR, '.env')
if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH)


def _env_bool(clave: str, defecto: bool) -> bool:
    valor = os.getenv(clave)
    if valor is None or valor.strip() == "":
        return defecto
    return valor.strip().lower() in ("1", "true", "si", "sí", "yes", "on")


# 2. CONFIGURACIÓN DE BASE DE DATOS
DB_TYPE = os.getenv("DB_TYPE", "sqlite")
DB_NAME = os.getenv("DB_NAME", "personas.db")

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    if DB_TYPE == "sqlite":
        db_path = os.path.join(BASE_DIR, DB_NAME)
        DATABASE_URL = f"sqlite:///{db_path}"
    else:
        _user = os.getenv("DB_USER")
        _pass = os.getenv("DB_PASS")
        _host = os.getenv("DB_HOST")
        _name = os.getenv("DB_NAME_REMOTE")
        _port = os.getenv("DB_PORT", "5432")

        if not all([_user, _pass, _host, _name]):
            fallback_path = os.path.join(BASE_DIR, 'temp_fallback.db')
            DATABASE_URL = f"sqlite:///{fallback_path}"
        else:
            DATABASE_URL = f"postgresql://{_user}:{_pass}@{_host}:{_port}/{_name}"

# 3. ALMACENAMIENTO DE EVIDENCIAS
ARTIFACTS_DIR = os.getenv("ARTIFACTS_DIR", os.path.join(BASE_DIR, 'evidencias'))
ARTIFACTS_PUBLIC_URL = os.getenv("ARTIFACTS_PUBLIC_URL", "")
MAX_EVIDENCIA_BYTES = int(os.getenv("MAX_EVIDENCIA_BYTES", str(5 * 1024 * 1024)))

# 4. REGLAS DEL CICLO DE VIDA
# Atajo DATOS_PENDIENTES -> CONFIRMADO para roles con privilegio de confirmación.
PERMITIR_CONFIRMAR_DESDE_PENDIENTE = _env_bool("PERMITIR_CONFIRMAR_DESDE_PENDIENTE", True)

# 5. REGISTRO EXTERNO DE DOCUMENTOS (opcional)
REGISTRO_VALIDACION_HABILITADA = _env_bool("REGISTRO_VALIDACION_HABILITADA", False)
REGISTRO_URL = os.getenv("REGISTRO_URL", "").rstrip("/")
REGISTRO_EMAIL = os.getenv("REGISTRO_EMAIL", "")
REGISTRO_PASSWORD = os.getenv("REGISTRO_PASSWORD", "")
REGISTRO_TIMEOUT = float(os.getenv("REGISTRO_TIMEOUT", "10"))
REGISTRO_ATRIBUCION = os.getenv("REGISTRO_ATRIBUCION", "")

# 6. LOGGING
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
APP_TITLE = "Sistema de Seguimiento de Personas"
