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
import os

from database import config
from database.schemas import ArtefactoGuardado
from utilities.errores import ErrorDependencia

logger = logging.getLogger(__name__)


class AlmacenLocal:
    """Almacén de artefactos (evidencias) sobre el sistema de archivos local.

    Cualquier otro almacén (S3, R2, etc.) basta con exponer los mismos dos
    métodos: `guardar(ruta, contenido, tipo_contenido)` y `eliminar(ruta)`.
    """

    def __init__(self, directorio: str | None = None, url_publica: str | None = None):
        self.directorio = os.path.abspath(directorio or config.ARTIFACTS_DIR)
        self.url_publica = (config.ARTIFACTS_PUBLIC_URL if url_publica is None else url_publica).rstrip("/")

    def _ruta_absoluta(self, ruta: str) -> str:
        destino = os.path.abspath(os.path.join(self.directorio, ruta))
        if os.path.commonpath([self.directorio, destino]) != self.directorio:
            raise ErrorDependencia(f"Ruta de artefacto fuera del almacén: {ruta}")
        return destino

    def url_de(self, ruta: str) -> str:
        """URL pública del artefacto (o URI file:// si no hay URL configurada)."""
        if self.url_publica:
            return f"{self.url_publica}/{ruta.lstrip('/')}"
        return "file://" + self._ruta_absoluta(ruta).replace(os.sep, "/")

    def guardar(self, ruta: str, contenido: bytes, tipo_contenido: str = "") -> ArtefactoGuardado:
        """Escribe el artefacto en disco.

        Args:
            ruta (str): Ruta relativa, p. ej. 'confirmaciones/<persona>-<ulid>.jpg'.
            contenido (bytes): Bytes del archivo.
            tipo_contenido (str): MIME type (informativo en el almacén local).

        Returns:
            ArtefactoGuardado: URL y ruta interna.

        Raises:
            ErrorDependencia: Si no se pudo escribir el archivo.
        """
        destino = self._ruta_absoluta(ruta)
        try:
            os.makedirs(os.path.dirname(destino), exist_ok=True)
            with open(destino, "wb") as f:
                f.write(contenido)
        except OSError as e:
            raise ErrorDependencia(f"No se pudo guardar la evidencia: {e}") from e

        logger.debug("Artefacto guardado en %s (%s, %d bytes)", ruta, tipo_contenido, len(contenido))
        return ArtefactoGuardado(url=self.url_de(ruta), path=ruta)

    def eliminar(self, ruta: str) -> None:
        """Elimina un artefacto. Eliminar uno inexistente no es un error.

        Raises:
            ErrorDependencia: Si el archivo existe pero no se pudo borrar.
        """
        destino = self._ruta_absoluta(ruta)
        try:
            os.remove(destino)
        except FileNotFoundError:
            logger.debug("Artefacto %s ya no existía", ruta)
        except OSError as e:
            raise ErrorDependencia(f"No se pudo eliminar la evidencia: {e}") from e

    def existe(self, ruta: str) -> bool:
        return os.path.isfile(self._ruta_absoluta(ruta))
