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

from database import config
from database.conexion import unidad_de_trabajo
from database.models import EstadoPersona
from database.schemas import Actor
from models.confirmacion_model import VotoConfirmacionModel
from models.novedad_model import NovedadModel
from services.acceso import cargar_persona
from services.autorizacion import exigir, puede_confirmar_estado, puede_reversar_estado, puede_verificar
from services.confirmaciones import reversar_confirmacion
from services.transiciones import Accion, exigir_origen, siguiente_estado_reversion
from utilities.errores import TransicionInvalida
from utilities.helper import ahora

logger = logging.getLogger(__name__)


class CicloVidaService:
    """Máquina de estados de la persona: transiciones hacia adelante y reversión escalonada.

    Cada operación se ejecuta en una sola unidad de trabajo; un error aborta la
    transacción completa y la persona queda sin cambios.
    """

    def __init__(self, permitir_desde_pendiente: bool | None = None):
        if permitir_desde_pendiente is None:
            permitir_desde_pendiente = config.PERMITIR_CONFIRMAR_DESDE_PENDIENTE
        self.permitir_desde_pendiente = permitir_desde_pendiente

    def verificar(self, actor: Actor, persona_id: str):
        """DATOS_PENDIENTES -> VERIFICADO. Registra validador y marca de tiempo.

        Raises:
            NoEncontrado, PermisoDenegado, TransicionInvalida
        """
        with unidad_de_trabajo() as session:
            persona = cargar_persona(session, actor, persona_id, bloquear=True)
            exigir(puede_verificar(actor, persona), "No tiene permiso para verificar a esta persona")
            destino = exigir_origen(Accion.VERIFICAR, persona.estado)

            persona.estado_anterior = persona.estado
            persona.estado = destino
            persona.validado_por_id = actor.id
            persona.validado_at = ahora()

        logger.info("Persona %s verificada por %s", persona_id, actor.id)
        return persona

    def confirmar_estado(self, actor: Actor, persona_id: str):
        """VERIFICADO (o DATOS_PENDIENTES si el atajo está habilitado) -> CONFIRMADO.

        Raises:
            NoEncontrado, PermisoDenegado, TransicionInvalida
        """
        with unidad_de_trabajo() as session:
            persona = cargar_persona(session, actor, persona_id, bloquear=True)
            exigir(puede_confirmar_estado(actor, persona), "No tiene permiso para confirmar el estado de esta persona")
            destino = exigir_origen(Accion.CONFIRMAR_ESTADO, persona.estado, self.permitir_desde_pendiente)

            persona.estado_anterior = persona.estado
            persona.estado = destino
            persona.confirmado_estado_por_id = actor.id
            persona.confirmado_estado_at = ahora()

        logger.info("Estado de la persona %s confirmado por %s", persona_id, actor.id)
        return persona

    def reversar_estado(self, actor: Actor, persona_id: str):
        """Retrocede un paso según la tabla de reversión.

        - COMPLETADO -> CONFIRMADO: la confirmación activa se marca reversada en la misma transacción.
        - CONFIRMADO -> VERIFICADO: limpia quién y cuándo confirmó el estado.
        - VERIFICADO -> DATOS_PENDIENTES: limpia quién y cuándo verificó.
        - CON_NOVEDAD -> DATOS_PENDIENTES: solo si no queda una novedad sin resolver.

        El estado previo a la reversión queda en `estado_anterior`.

        Args:
            actor (Actor): Actor que reversa.
            persona_id (str): ID de la persona.

        Returns:
            Persona: La persona actualizada.

        Raises:
            NoEncontrado: Persona inexistente o fuera de alcance.
            PermisoDenegado: El rol no puede reversar a esta persona.
            TransicionInvalida: Desde DATOS_PENDIENTES o con novedad abierta.
        """
        with unidad_de_trabajo() as session:
            persona = cargar_persona(session, actor, persona_id, bloquear=True)
            exigir(puede_reversar_estado(actor, persona), "No tiene permiso para reversar el estado de esta persona")

            origen = EstadoPersona(persona.estado)
            destino = siguiente_estado_reversion(origen)

            if origen == EstadoPersona.CON_NOVEDAD and NovedadModel.abierta_en(session, persona.id):
                raise TransicionInvalida("No se puede reversar una persona con novedad activa. Resuelva la novedad primero")

            if origen == EstadoPersona.COMPLETADO:
                activa = VotoConfirmacionModel.activa_en(session, persona.id)
                if activa is not None:
                    reversar_confirmacion(session, activa, actor)
            elif origen == EstadoPersona.VERIFICADO:
                persona.validado_por_id = None
                persona.validado_at = None
            elif origen == EstadoPersona.CONFIRMADO:
                persona.confirmado_estado_por_id = None
                persona.confirmado_estado_at = None

            persona.estado_anterior = origen
            persona.estado = destino

        logger.info("Estado de la persona %s reversado de %s a %s por %s",
                    persona_id, origen.value, destino.value, actor.id)
        return persona
