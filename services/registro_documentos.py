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

"""Cliente del registro externo de documentos (colección 'people').

El registro es consultivo: detecta documentos ya inscritos por otra campaña
y recibe los que este sistema inscribe o elimina. Toda falla de red o de
autenticación se registra en el log y se degrada: la consulta responde
"no encontrado" y las escrituras continúan sin error.
"""

import logging
import time

import requests

from database import config

logger = logging.getLogger(__name__)

# El token dura una hora; se renueva antes de que expire
VIGENCIA_TOKEN_SEG = 55 * 60
COLECCION = "/api/collections/people/records"


def _literal(valor: str) -> str:
    """Escapa un valor para usarlo entre comillas dobles en una expresión de filtro."""
    return str(valor).replace("\\", "\\\\").replace('"', '\\"')


class RegistroDocumentos:
    """Cliente HTTP con token Bearer en caché."""

    def __init__(
        self,
        url: str | None = None,
        email: str | None = None,
        password: str | None = None,
        habilitado: bool | None = None,
        timeout: float | None = None,
        atribucion: str | None = None,
        http=None,
        reloj=time.monotonic,
    ):
        self.url = (config.REGISTRO_URL if url is None else url).rstrip("/")
        self.email = config.REGISTRO_EMAIL if email is None else email
        self.password = config.REGISTRO_PASSWORD if password is None else password
        self._habilitado = config.REGISTRO_VALIDACION_HABILITADA if habilitado is None else habilitado
        self.timeout = config.REGISTRO_TIMEOUT if timeout is None else timeout
        self.atribucion = config.REGISTRO_ATRIBUCION if atribucion is None else atribucion
        self.http = http or requests.Session()
        self._reloj = reloj
        self._token = None
        self._token_expira = 0.0

    @property
    def habilitado(self) -> bool:
        """Activo solo con la bandera encendida y credenciales completas."""
        return bool(self._habilitado and self.url and self.email and self.password)

    # ----------------------------
    # HTTP
    # ----------------------------
    def _autenticar(self) -> str:
        if self._token and self._reloj() < self._token_expira:
            return self._token

        resp = self.http.post(
            f"{self.url}/api/collections/users/auth-with-password",
            json={"identity": self.email, "password": self.password},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        self._token = resp.json()["token"]
        self._token_expira = self._reloj() + VIGENCIA_TOKEN_SEG
        return self._token

    def _solicitar(self, metodo: str, ruta: str, **kwargs) -> requests.Response:
        token = self._autenticar()
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        return self.http.request(metodo, f"{self.url}{ruta}", headers=headers, timeout=self.timeout, **kwargs)

    def _buscar(self, numero_documento: str) -> dict | None:
        resp = self._solicitar(
            "GET", COLECCION,
            params={"filter": f'document_number="{_literal(numero_documento)}"', "perPage": 1},
        )
        if not resp.ok:
            logger.warning("Registro externo respondió %s al buscar %s", resp.status_code, numero_documento)
            return None
        items = resp.json().get("items") or []
        return items[0] if items else None

    # ----------------------------
    # OPERACIONES PÚBLICAS
    # ----------------------------
    def consultar(self, numero_documento: str) -> dict | None:
        """Busca un documento en el registro.

        Args:
            numero_documento (str): Documento normalizado.

        Returns:
            dict | None: {'etiqueta': <campaña que lo inscribió>} si existe; None si
            no existe, si el registro está deshabilitado o si la consulta falla.
        """
        if not self.habilitado:
            return None
        try:
            registro = self._buscar(numero_documento)
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.warning("Registro externo no disponible al consultar %s: %s", numero_documento, e)
            return None
        if registro is None:
            return None
        return {"etiqueta": registro.get("place") or None}

    def registrar(self, numero_documento: str, lider_id: str, etiqueta: str | None = None) -> None:
        """Inscribe un documento. Se invoca después del commit principal."""
        if not self.habilitado:
            return
        cuerpo = {
            "document_number": numero_documento,
            "place": etiqueta if etiqueta is not None else (self.atribucion or None),
            "leader_id": lider_id,
        }
        try:
            resp = self._solicitar("POST", COLECCION, json=cuerpo)
            if not resp.ok:
                logger.error("Error al crear %s en el registro externo: %s %s",
                             numero_documento, resp.status_code, resp.text[:200])
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error("Error al crear %s en el registro externo: %s", numero_documento, e)

    def eliminar(self, numero_documento: str) -> None:
        """Elimina un documento del registro (busca su ID y lo borra)."""
        if not self.habilitado:
            return
        try:
            registro = self._buscar(numero_documento)
            if registro is None:
                return
            resp = self._solicitar("DELETE", f"{COLECCION}/{registro['id']}")
            if not resp.ok:
                logger.error("Error al eliminar %s del registro externo: %s", numero_documento, resp.status_code)
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error("Error al eliminar %s del registro externo: %s", numero_documento, e)


def mensaje_atribucion(info: dict | None) -> str:
    """Mensaje para un documento ya inscrito por otra campaña."""
    etiqueta = (info or {}).get("etiqueta")
    if etiqueta:
        return f"El documento ya está registrado por {etiqueta}"
    return "El documento ya está registrado en el registro externo"
