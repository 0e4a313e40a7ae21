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

"""Subsistema de confirmación con evidencia.

Confirmar es la única ruta hacia COMPLETADO. El artefacto se guarda antes de
la escritura en base de datos; si esa escritura falla, el artefacto se borra.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from config.mappings import TIPOS_EVIDENCIA_PREFIJO
from database import config
from database.conexion import unidad_de_trabajo
from database.models import VotoConfirmacion
from database.schemas import Actor, ArchivoEvidencia, ArtefactoGuardado
from models.confirmacion_model import VotoConfirmacionModel
from models.novedad_model import NovedadModel
from services.acceso import cargar_persona
from services.almacenamiento import AlmacenLocal
from services.autorizacion import exigir, puede_confirmar
from services.transiciones import Accion, exigir_origen
from utilities.errores import Conflicto, ErrorDependencia, ErrorValidacion, TransicionInvalida
from utilities.helper import ahora, extension_de
from utilities.uid import generar_ruta_evidencia

logger = logging.getLogger(__name__)


def validar_evidencia(archivo: ArchivoEvidencia, max_bytes: int | None = None) -> None:
    """Valida que la evidencia sea una imagen no vacía y dentro del tamaño máximo.

    Raises:
        ErrorValidacion: Con el detalle del campo 'archivo'.
    """
    max_bytes = config.MAX_EVIDENCIA_BYTES if max_bytes is None else max_bytes
    if archivo is None or not archivo.contenido:
        raise ErrorValidacion("Debe adjuntar la imagen de evidencia", detalles={"archivo": "obligatorio"})
    if not (archivo.tipo_contenido or "").lower().startswith(TIPOS_EVIDENCIA_PREFIJO):
        raise ErrorValidacion("El archivo debe ser una imagen", detalles={"archivo": "tipo no permitido"})
    if archivo.tamano > max_bytes:
        raise ErrorValidacion(
            f"La imagen no puede superar {max_bytes // (1024 * 1024)} MB",
            detalles={"archivo": "demasiado grande"},
        )


def reversar_confirmacion(session, confirmacion: VotoConfirmacion, actor: Actor) -> VotoConfirmacion:
    """Marca una confirmación como reversada dentro de la unidad de trabajo del caller.

    Solo se invoca como parte de la reversión COMPLETADO -> CONFIRMADO; la
    confirmación queda como registro de auditoría y nunca vuelve a estar activa.
    """
    confirmacion.reversado = True
    confirmacion.reversado_por_id = actor.id
    confirmacion.reversado_at = ahora()
    session.add(confirmacion)
    return confirmacion


class ConfirmacionService:
    """Confirma personas con una evidencia fotográfica."""

    def __init__(self, almacen=None, max_bytes: int | None = None):
        self.almacen = almacen or AlmacenLocal()
        self.max_bytes = max_bytes
        self.model = VotoConfirmacionModel()

    def confirmar(self, actor: Actor, persona_id: str, archivo: ArchivoEvidencia) -> VotoConfirmacion:
        """Crea la confirmación activa de una persona y la lleva a COMPLETADO.

        Orden de comprobaciones: acceso, permiso, novedad abierta, confirmación
        activa, estado de origen y evidencia. Solo después se guarda el artefacto.

        Args:
            actor (Actor): Actor que confirma.
            persona_id (str): ID de la persona.
            archivo (ArchivoEvidencia): Imagen de evidencia.

        Returns:
            VotoConfirmacion: La confirmación creada.

        Raises:
            NoEncontrado: Persona inexistente o fuera de alcance.
            PermisoDenegado: El actor no puede confirmar a esta persona.
            TransicionInvalida: Novedad sin resolver o estado no confirmable.
            Conflicto: Ya existe una confirmación activa.
            ErrorValidacion: Evidencia inválida.
            ErrorDependencia: Falla del almacén o de la base de datos (con compensación).
        """
        artefacto = None
        try:
            with unidad_de_trabajo() as session:
                persona = cargar_persona(session, actor, persona_id, bloquear=True)
                exigir(puede_confirmar(actor, persona), "No tiene permiso para confirmar a esta persona")

                if NovedadModel.abierta_en(session, persona.id):
                    raise TransicionInvalida("La persona tiene una novedad sin resolver")
                if self.model.activa_en(session, persona.id):
                    raise Conflicto("La persona ya tiene una confirmación activa")
                destino = exigir_origen(Accion.COMPLETAR, persona.estado)
                validar_evidencia(archivo, self.max_bytes)

                artefacto = self._guardar_artefacto(persona.id, archivo)
                confirmacion = self._registrar_confirmacion(session, persona, actor, artefacto)

                persona.estado_anterior = persona.estado
                persona.estado = destino
                session.flush()
        except IntegrityError as e:
            self._compensar(artefacto)
            raise Conflicto("La persona ya tiene una confirmación activa") from e
        except SQLAlchemyError as e:
            self._compensar(artefacto)
            raise ErrorDependencia(f"No se pudo registrar la confirmación: {e}") from e
        except Exception:
            self._compensar(artefacto)
            raise

        logger.info("Persona %s confirmada por %s (confirmación %s)", persona_id, actor.id, confirmacion.id)
        return confirmacion

    def _guardar_artefacto(self, persona_id: str, archivo: ArchivoEvidencia) -> ArtefactoGuardado:
        extension = extension_de(archivo.nombre) or archivo.tipo_contenido.split("/", 1)[-1]
        ruta = generar_ruta_evidencia(persona_id, extension)
        return self.almacen.guardar(ruta, archivo.contenido, archivo.tipo_contenido)

    @staticmethod
    def _registrar_confirmacion(session, persona, actor: Actor, artefacto: ArtefactoGuardado) -> VotoConfirmacion:
        confirmacion = VotoConfirmacion(
            persona_id=persona.id,
            imagen_url=artefacto.url,
            imagen_path=artefacto.path,
            confirmado_por_id=actor.id,
            confirmado_at=ahora(),
            reversado=False,
        )
        session.add(confirmacion)
        session.flush()
        return confirmacion

    def _compensar(self, artefacto: ArtefactoGuardado | None) -> None:
        """Borra el artefacto huérfano tras un fallo de la escritura en base de datos."""
        if artefacto is None:
            return
        try:
            self.almacen.eliminar(artefacto.path)
            logger.warning("Evidencia %s eliminada tras fallo al registrar la confirmación", artefacto.path)
        except ErrorDependencia:
            # El error original es el que se propaga
            logger.exception("No se pudo eliminar la evidencia huérfana %s", artefacto.path)

    def para_mostrar(self, actor: Actor, persona_id: str):
        """Confirmación a mostrar: la activa, o la última reversada (solo auditoría)."""
        with unidad_de_trabajo() as session:
            cargar_persona(session, actor, persona_id)
        return self.model.para_mostrar(persona_id)
