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

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from database.conexion import unidad_de_trabajo
from database.models import EstadoPersona, Novedad, Persona
from database.schemas import Actor
from models.novedad_model import NovedadModel
from services.acceso import cargar_persona
from services.autorizacion import exigir, puede_acceder_persona, puede_crear_novedad, puede_resolver_novedad
from services.transiciones import Accion, exigir_origen
from utilities.errores import Conflicto, NoEncontrado, TransicionInvalida
from utilities.helper import ahora
from utilities.validaciones import validar_observacion

logger = logging.getLogger(__name__)


class NovedadService:
    """Interrupción del ciclo de vida: una novedad abierta suspende a la persona en
    CON_NOVEDAD y su resolución restaura exactamente el estado previo."""

    def __init__(self):
        self.model = NovedadModel()

    def registrar(self, actor: Actor, persona_id: str, observacion: str) -> Novedad:
        """Abre una novedad sobre una persona.

        En una sola transacción: crea la novedad, guarda el estado actual en
        `estado_anterior` y pasa la persona a CON_NOVEDAD.

        Args:
            actor (Actor): Actor que reporta.
            persona_id (str): ID de la persona.
            observacion (str): Descripción (1 a 2000 caracteres).

        Returns:
            Novedad: La novedad abierta.

        Raises:
            ErrorValidacion: Observación vacía o demasiado larga.
            NoEncontrado: Persona inexistente o fuera de alcance.
            PermisoDenegado: El actor no puede reportar novedades sobre la persona.
            Conflicto: Ya hay una novedad sin resolver.
            TransicionInvalida: La persona está COMPLETADO.
        """
        texto = validar_observacion(observacion)
        with unidad_de_trabajo() as session:
            persona = cargar_persona(session, actor, persona_id, bloquear=True)
            exigir(puede_crear_novedad(actor, persona), "No tiene permiso para reportar novedades sobre esta persona")

            if self.model.abierta_en(session, persona.id):
                raise Conflicto("La persona ya tiene una novedad sin resolver")
            destino = exigir_origen(Accion.REPORTAR_NOVEDAD, persona.estado)

            novedad = Novedad(
                persona_id=persona.id,
                observacion=texto,
                resuelta=False,
                creada_por_id=actor.id,
                created_at=ahora(),
            )
            session.add(novedad)
            persona.estado_anterior = persona.estado
            persona.estado = destino
            try:
                session.flush()
            except IntegrityError as e:
                raise Conflicto("La persona ya tiene una novedad sin resolver") from e

        logger.info("Novedad %s abierta sobre la persona %s por %s", novedad.id, persona_id, actor.id)
        return novedad

    def resolver(self, actor: Actor, novedad_id: str) -> Novedad:
        """Cierra una novedad y devuelve a la persona a su estado previo.

        Raises:
            NoEncontrado: Novedad inexistente o persona fuera de alcance.
            PermisoDenegado: El actor no puede resolver la novedad.
            TransicionInvalida: La novedad ya estaba resuelta.
        """
        with unidad_de_trabajo() as session:
            novedad = self.model.obtener_en(
                session, novedad_id, bloquear=True,
                opciones=[joinedload(Novedad.persona).joinedload(Persona.registrado_por)]
            )
            if novedad is None or not puede_acceder_persona(actor, novedad.persona):
                raise NoEncontrado("Novedad no encontrada")
            exigir(puede_resolver_novedad(actor, novedad), "No tiene permiso para resolver esta novedad")
            if novedad.resuelta:
                raise TransicionInvalida("La novedad ya está resuelta")

            persona = novedad.persona
            novedad.resuelta = True
            novedad.resuelta_por_id = actor.id
            novedad.resuelta_at = ahora()

            persona.estado = persona.estado_anterior or EstadoPersona.DATOS_PENDIENTES
            persona.estado_anterior = None

        logger.info("Novedad %s resuelta por %s; persona %s vuelve a %s",
                    novedad_id, actor.id, persona.id, EstadoPersona(persona.estado).value)
        return novedad

    def listar(self, actor: Actor, persona_id: str, solo_activas: bool = False) -> list[Novedad]:
        """Novedades de una persona visible para el actor, más recientes primero."""
        with unidad_de_trabajo() as session:
            cargar_persona(session, actor, persona_id)
        return self.model.listar_por_persona(persona_id, solo_activas=solo_activas)
