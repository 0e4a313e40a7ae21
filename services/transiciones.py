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

"""Tabla única de transiciones del ciclo de vida de una persona.

Todas las rutas de escritura (verificación, confirmación de estado,
confirmación con evidencia, novedades y reversión) consultan estas tablas;
ningún servicio decide por su cuenta qué estados son legales.
"""

import enum

from database.models import EstadoPersona
from utilities.errores import TransicionInvalida


class Accion(str, enum.Enum):
    VERIFICAR = "verificar"
    CONFIRMAR_ESTADO = "confirmar_estado"
    COMPLETAR = "completar"
    REPORTAR_NOVEDAD = "reportar_novedad"


ORIGENES = {
    Accion.VERIFICAR: frozenset({EstadoPersona.DATOS_PENDIENTES}),
    Accion.CONFIRMAR_ESTADO: frozenset({EstadoPersona.VERIFICADO, EstadoPersona.DATOS_PENDIENTES}),
    Accion.COMPLETAR: frozenset({
        EstadoPersona.CONFIRMADO, EstadoPersona.DATOS_PENDIENTES, EstadoPersona.VERIFICADO
    }),
    Accion.REPORTAR_NOVEDAD: frozenset({
        EstadoPersona.DATOS_PENDIENTES, EstadoPersona.VERIFICADO, EstadoPersona.CONFIRMADO
    }),
}
"""dict: Acción -> estados desde los que es legal."""

DESTINOS = {
    Accion.VERIFICAR: EstadoPersona.VERIFICADO,
    Accion.CONFIRMAR_ESTADO: EstadoPersona.CONFIRMADO,
    Accion.COMPLETAR: EstadoPersona.COMPLETADO,
    Accion.REPORTAR_NOVEDAD: EstadoPersona.CON_NOVEDAD,
}

# Reversión escalonada: un paso por llamada
REVERSION = {
    EstadoPersona.COMPLETADO: EstadoPersona.CONFIRMADO,
    EstadoPersona.CONFIRMADO: EstadoPersona.VERIFICADO,
    EstadoPersona.VERIFICADO: EstadoPersona.DATOS_PENDIENTES,
    EstadoPersona.CON_NOVEDAD: EstadoPersona.DATOS_PENDIENTES,
    EstadoPersona.DATOS_PENDIENTES: EstadoPersona.DATOS_PENDIENTES,
}


def origenes_permitidos(accion: Accion, permitir_desde_pendiente: bool = True) -> frozenset:
    """Estados de origen legales para una acción.

    Args:
        accion (Accion): Transición solicitada.
        permitir_desde_pendiente (bool): Habilita el atajo DATOS_PENDIENTES -> CONFIRMADO.
    """
    origenes = ORIGENES[accion]
    if accion == Accion.CONFIRMAR_ESTADO and not permitir_desde_pendiente:
        origenes = origenes - {EstadoPersona.DATOS_PENDIENTES}
    return origenes


def exigir_origen(accion: Accion, estado, permitir_desde_pendiente: bool = True) -> EstadoPersona:
    """Valida el estado actual contra la tabla y devuelve el estado destino.

    Raises:
        TransicionInvalida: Si la acción no es legal desde `estado`.
    """
    estado = EstadoPersona(estado)
    if estado not in origenes_permitidos(accion, permitir_desde_pendiente):
        raise TransicionInvalida(
            f"No se puede {accion.value.replace('_', ' ')} una persona en estado {estado.value}"
        )
    return DESTINOS[accion]


def siguiente_estado_reversion(estado) -> EstadoPersona:
    """Estado resultante de reversar un paso.

    Raises:
        TransicionInvalida: Desde DATOS_PENDIENTES (la reversión sería un no-op).
    """
    estado = EstadoPersona(estado)
    destino = REVERSION[estado]
    if destino == estado:
        raise TransicionInvalida(f"No se puede reversar una persona en estado {estado.value}")
    return destino
