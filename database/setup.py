#  Copyright (c) 2026 Fleer
#  Permission is hereby granted, free of charge, to any person obtaining a copy
#  of this software and associated documentation files (the "Software"), to deal
#  in the Software without restriction, including without limitation the rights
#  to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
#  copies of the Software, and to permit persons to whom the Software is
#  furnished to do so, subject to the following conditions:
#
#  The above copyright notice and this permission notice shall be included in all
#  copies or substantial portions of the Software.

import logging

from sqlalchemy import inspect

from database.conexion import engine, Base
import database.models  # noqa: F401  registra las tablas en Base.metadata

logger = logging.getLogger(__name__)


def inicializar_base_de_datos(bind=None):
    """
    Crea la estructura de la base de datos si no existe.

    Los índices únicos parciales (una novedad abierta y una confirmación
    activa por persona) se crean junto con sus tablas.

    Args:
        bind (Engine, optional): Motor a usar; por defecto el configurado en `database.conexion`.

    Returns:
        list[str]: Tablas presentes tras la inicialización.
    """
    bind = bind or engine
    logger.info("Inicializando base de datos (%s)...", bind.dialect.name)
    try:
        Base.metadata.create_all(bind=bind)
    except Exception:
        logger.exception("Error crítico creando tablas")
        raise

    tablas = inspect(bind).get_table_names()
    logger.info("Estructura de tablas verificada/creada: %s", ", ".join(sorted(tablas)))
    return tablas
