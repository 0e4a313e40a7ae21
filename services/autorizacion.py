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

"""Guardia de autorización.

Predicados puros "¿puede el actor X hacer Y sobre Z?". Todos siguen el mismo
orden de evaluación: (1) admin siempre puede; (2) regla de pertenencia del
rol; (3) denegación por defecto. No consultan la base de datos ni el reloj:
la persona debe llegar con su líder registrante (`registrado_por`) cargado.
"""

import enum

from database.models import Rol
from utilities.errores import PermisoDenegado


class Operacion(str, enum.Enum):
    ACCEDER = "acceder"
    CREAR_NOVEDAD = "crear_novedad"
    RESOLVER_NOVEDAD = "resolver_novedad"
    REVERSAR_ESTADO = "reversar_estado"
    CONFIRMAR = "confirmar"
    VERIFICAR = "verificar"
    CONFIRMAR_ESTADO = "confirmar_estado"
    ELIMINAR = "eliminar"


# ---------------- REGLAS DE PERTENENCIA ----------------

def _siempre(actor, persona) -> bool:
    return True


def _nunca(actor, persona) -> bool:
    return False


def _es_dueno(actor, persona) -> bool:
    return persona.registrado_por_id == actor.id


def _coordina_al_lider(actor, persona) -> bool:
    if persona.registrado_por_id == actor.id:
        return True
    lider = persona.registrado_por
    return lider is not None and lider.rol == Rol.LIDER and lider.coordinador_id == actor.id


def _lider_asignado(actor, persona) -> bool:
    return persona.registrado_por_id in actor.lideres_asignados_ids


_REGLAS_NOVEDAD = {
    Rol.ADMIN: _siempre,
    Rol.COORDINADOR: _coordina_al_lider,
    Rol.LIDER: _es_dueno,
    Rol.VALIDADOR: _lider_asignado,
    Rol.CONFIRMADOR: _lider_asignado,
    Rol.CONSULTOR: _nunca,
}

_REGLAS = {
    Operacion.ACCEDER: {
        Rol.ADMIN: _siempre,
        Rol.COORDINADOR: _coordina_al_lider,
        Rol.LIDER: _es_dueno,
        Rol.VALIDADOR: _lider_asignado,
        Rol.CONFIRMADOR: _lider_asignado,
        Rol.CONSULTOR: _siempre,
    },
    Operacion.CREAR_NOVEDAD: _REGLAS_NOVEDAD,
    Operacion.RESOLVER_NOVEDAD: _REGLAS_NOVEDAD,
    Operacion.REVERSAR_ESTADO: {
        Rol.ADMIN: _siempre,
        Rol.COORDINADOR: _coordina_al_lider,
        Rol.LIDER: _nunca,
        Rol.VALIDADOR: _lider_asignado,
        Rol.CONFIRMADOR: _lider_asignado,
        Rol.CONSULTOR: _nunca,
    },
    Operacion.CONFIRMAR: {
        Rol.ADMIN: _siempre,
        Rol.COORDINADOR: _coordina_al_lider,
        Rol.LIDER: _es_dueno,
        Rol.VALIDADOR: _nunca,
        Rol.CONFIRMADOR: _lider_asignado,
        Rol.CONSULTOR: _nunca,
    },
    Operacion.VERIFICAR: {
        Rol.ADMIN: _siempre,
        Rol.COORDINADOR: _nunca,
        Rol.LIDER: _nunca,
        Rol.VALIDADOR: _lider_asignado,
        Rol.CONFIRMADOR: _nunca,
        Rol.CONSULTOR: _nunca,
    },
    Operacion.CONFIRMAR_ESTADO: {
        Rol.ADMIN: _siempre,
        Rol.COORDINADOR: _nunca,
        Rol.LIDER: _nunca,
        Rol.VALIDADOR: _nunca,
        Rol.CONFIRMADOR: _lider_asignado,
        Rol.CONSULTOR: _nunca,
    },
    Operacion.ELIMINAR: {
        Rol.ADMIN: _siempre,
        Rol.COORDINADOR: _coordina_al_lider,
        Rol.LIDER: _es_dueno,
        Rol.VALIDADOR: _nunca,
        Rol.CONFIRMADOR: _nunca,
        Rol.CONSULTOR: _nunca,
    },
}

# Un rol nuevo sin regla explícita rompe la importación del módulo.
for _op in Operacion:
    _faltantes = set(Rol) - set(_REGLAS.get(_op, {}))
    if _faltantes:
        raise RuntimeError(f"Operación {_op.value} sin regla para: {sorted(r.value for r in _faltantes)}")


def evaluar(operacion: Operacion, actor, persona) -> bool:
    """Evalúa una operación sobre una persona para el actor dado."""
    if actor.rol == Rol.ADMIN:
        return True
    regla = _REGLAS[operacion].get(actor.rol, _nunca)
    return bool(regla(actor, persona))


# ---------------- PREDICADOS PÚBLICOS ----------------

def puede_acceder_persona(actor, persona) -> bool:
    return evaluar(Operacion.ACCEDER, actor, persona)


def puede_crear_novedad(actor, persona) -> bool:
    return evaluar(Operacion.CREAR_NOVEDAD, actor, persona)


def puede_resolver_novedad(actor, novedad) -> bool:
    """La novedad debe llegar con `persona` (y su `registrado_por`) cargados."""
    return evaluar(Operacion.RESOLVER_NOVEDAD, actor, novedad.persona)


def puede_reversar_estado(actor, persona) -> bool:
    return evaluar(Operacion.REVERSAR_ESTADO, actor, persona)


def puede_confirmar(actor, persona) -> bool:
    return evaluar(Operacion.CONFIRMAR, actor, persona)


def puede_verificar(actor, persona) -> bool:
    return evaluar(Operacion.VERIFICAR, actor, persona)


def puede_confirmar_estado(actor, persona) -> bool:
    return evaluar(Operacion.CONFIRMAR_ESTADO, actor, persona)


def puede_eliminar_persona(actor, persona) -> bool:
    return evaluar(Operacion.ELIMINAR, actor, persona)


def puede_importar(actor) -> bool:
    return actor.rol in (Rol.ADMIN, Rol.COORDINADOR, Rol.LIDER)


def exigir(permitido: bool, mensaje: str) -> None:
    """Convierte un predicado negativo en `PermisoDenegado`."""
    if not permitido:
        raise PermisoDenegado(mensaje)
