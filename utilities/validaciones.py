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

import re
from datetime import date
from typing import Any, Optional

from config.mappings import CAMPOS_TEXTO_OPCIONALES, EDAD_MAXIMA_ANIOS, OBSERVACION_MAX_CARACTERES
from database.models import TipoDocumento
from utilities.errores import ErrorValidacion
from utilities.sanitizer import Sanitizer

_DOCUMENTO_VALIDO = re.compile(r"[A-Z0-9]+")

def _restar_anios(fecha: date, anios: int) -> date:
    try:
        return fecha.replace(year=fecha.year - anios)
    except ValueError:
        # 29 de febrero en un año no bisiesto
        return fecha.replace(year=fecha.year - anios, day=28)


def _tipo_documento(valor: Any) -> Optional[TipoDocumento]:
    txt = Sanitizer.limpiar_valor(valor)
    if not txt:
        return TipoDocumento.CC
    for tipo in TipoDocumento:
        if tipo.value.upper() == txt.upper():
            return tipo
    return None


def validar_datos_persona(datos: dict, hoy: date | None = None) -> dict:
    """Valida y normaliza los datos de una persona (fila importada o registro individual).

    Reglas:
    1. nombres, apellidos y numero_documento son obligatorios.
    2. tipo_documento ∈ {CC, CE, Pasaporte, TI, Otro}; vacío equivale a CC.
    3. fecha_nacimiento: opcional, válida, no futura y no anterior a 150 años.
    4. fecha_expedicion: opcional, válida y no futura.
    5. barrio y puesto_votacion se devuelven como códigos; su resolución ocurre después.

    Args:
        datos (dict): Datos crudos {campo: valor}.
        hoy (date, optional): Fecha de referencia (por defecto, hoy).

    Returns:
        dict: Datos normalizados listos para persistir.

    Raises:
        ErrorValidacion: Con un mensaje por campo en `detalles`.
    """
    hoy = hoy or date.today()
    errores = {}

    nombres = Sanitizer.limpiar_valor(datos.get("nombres"))
    apellidos = Sanitizer.limpiar_valor(datos.get("apellidos"))
    documento = Sanitizer.limpiar_documento(datos.get("numero_documento"))

    if not nombres:
        errores["nombres"] = "Los nombres son obligatorios"
    if not apellidos:
        errores["apellidos"] = "Los apellidos son obligatorios"
    if not documento:
        errores["numero_documento"] = "El número de documento es obligatorio"
    elif not _DOCUMENTO_VALIDO.fullmatch(documento):
        errores["numero_documento"] = "El número de documento solo admite letras y dígitos"

    tipo = _tipo_documento(datos.get("tipo_documento"))
    if tipo is None:
        errores["tipo_documento"] = "Tipo de documento inválido. Debe ser: CC, CE, Pasaporte, TI u Otro"

    fecha_nacimiento = None
    try:
        fecha_nacimiento = Sanitizer.limpiar_fecha(datos.get("fecha_nacimiento"))
    except ValueError:
        errores["fecha_nacimiento"] = "Fecha de nacimiento inválida"
    if fecha_nacimiento is not None:
        if fecha_nacimiento > hoy or fecha_nacimiento < _restar_anios(hoy, EDAD_MAXIMA_ANIOS):
            errores["fecha_nacimiento"] = "Fecha de nacimiento inválida. Debe ser una fecha válida no futura"

    fecha_expedicion = None
    try:
        fecha_expedicion = Sanitizer.limpiar_fecha(datos.get("fecha_expedicion"))
    except ValueError:
        errores["fecha_expedicion"] = "Fecha de expedición inválida"
    if fecha_expedicion is not None and fecha_expedicion > hoy:
        errores["fecha_expedicion"] = "Fecha de expedición inválida. No puede ser futura"

    if errores:
        raise ErrorValidacion(", ".join(errores.values()), detalles=errores)

    normalizados = {
        "nombres": nombres,
        "apellidos": apellidos,
        "tipo_documento": tipo,
        "numero_documento": documento,
        "fecha_nacimiento": fecha_nacimiento,
        "fecha_expedicion": fecha_expedicion,
        "barrio": Sanitizer.limpiar_codigo(datos.get("barrio")),
        "puesto_votacion": Sanitizer.limpiar_codigo(datos.get("puesto_votacion")),
    }
    for campo in CAMPOS_TEXTO_OPCIONALES:
        normalizados[campo] = Sanitizer.limpiar_valor(datos.get(campo)) or None
    return normalizados


def validar_observacion(observacion: Any) -> str:
    """Valida el texto de una novedad (1 a 2000 caracteres tras recortar espacios)."""
    txt = "" if observacion is None else str(observacion).strip()
    if not txt:
        raise ErrorValidacion("La observación es obligatoria", detalles={"observacion": "obligatoria"})
    if len(txt) > OBSERVACION_MAX_CARACTERES:
        raise ErrorValidacion(
            f"La observación no puede exceder {OBSERVACION_MAX_CARACTERES} caracteres",
            detalles={"observacion": "demasiado larga"},
        )
    return txt
