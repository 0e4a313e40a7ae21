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

from database.models import Rol
from models.perfil_model import PerfilModel
from models.persona_model import PersonaModel
from services.autorizacion import puede_acceder_persona
from utilities.errores import ErrorValidacion, NoEncontrado, PermisoDenegado

_personas = PersonaModel()
_perfiles = PerfilModel()


def cargar_persona(session, actor, persona_id: str, bloquear: bool = False):
    """Carga una persona visible para el actor dentro de una unidad de trabajo.

    Una persona inexistente y una fuera del alcance del actor producen el mismo
    error, de modo que el caller no puede sondear IDs ajenos.

    Args:
        session (Session): Sesión de la unidad de trabajo.
        actor (Actor): Contexto del actor.
        persona_id (str): ID de la persona.
        bloquear (bool): Bloquea la fila hasta el fin de la transacción.

    Returns:
        Persona: La persona con su líder registrante cargado.

    Raises:
        NoEncontrado: Si no existe o el actor no puede verla.
    """
    persona = _personas.obtener_con_dueno_en(session, persona_id, bloquear=bloquear)
    if persona is None or not puede_acceder_persona(actor, persona):
        raise NoEncontrado("Persona no encontrada")
    return persona


def resolver_dueno(actor, alcance, registrado_por_id: str | None = None) -> str:
    """Determina el líder dueño de las personas que registra el actor.

    Args:
        actor (Actor): Contexto del actor.
        alcance (Alcance): Alcance ya resuelto del actor.
        registrado_por_id (str, optional): Dueño explícito; por defecto el actor.

    Returns:
        str: ID del dueño.

    Raises:
        PermisoDenegado: Si el dueño está fuera del alcance del actor.
        NoEncontrado: Si el perfil no existe o está inactivo.
        ErrorValidacion: Si el perfil no es líder ni coordinador.
    """
    if not registrado_por_id or registrado_por_id == actor.id:
        return actor.id
    if not alcance.incluye(registrado_por_id):
        raise PermisoDenegado("El líder indicado está fuera de su alcance")

    perfil = _perfiles.get_by_id(registrado_por_id)
    if perfil is None or not perfil.activo:
        raise NoEncontrado("Líder no encontrado")
    if perfil.rol not in (Rol.LIDER, Rol.COORDINADOR):
        raise ErrorValidacion(
            "El dueño de las personas debe ser un líder o un coordinador",
            detalles={"registrado_por_id": "rol inválido"},
        )
    return perfil.id
