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

from database.conexion import unidad_de_trabajo
from database.models import EstadoPersona, Persona
from database.schemas import Actor
from models.catalogo_model import BarrioModel, PuestoVotacionModel
from models.perfil_model import PerfilModel
from models.persona_model import PersonaModel
from services.acceso import cargar_persona, resolver_dueno
from services.almacenamiento import AlmacenLocal
from services.autorizacion import exigir, puede_eliminar_persona, puede_importar
from services.importacion import datos_para_persona, resolver_codigos
from services.registro_documentos import RegistroDocumentos, mensaje_atribucion
from utilities.errores import Conflicto, ErrorDependencia
from utilities.validaciones import validar_datos_persona

logger = logging.getLogger(__name__)


class PersonaService:
    """Ruta de registro individual: alta, baja y listado de personas."""

    def __init__(self, registro: RegistroDocumentos | None = None, almacen=None):
        self.registro = registro or RegistroDocumentos()
        self.almacen = almacen or AlmacenLocal()
        self.model = PersonaModel()

    def registrar(self, actor: Actor, datos: dict, registrado_por_id: str | None = None) -> Persona:
        """Registra una persona nueva en DATOS_PENDIENTES.

        Usa el mismo esquema de validación que la importación masiva.

        Args:
            actor (Actor): Actor que registra (admin, coordinador o líder).
            datos (dict): Datos crudos del formulario.
            registrado_por_id (str, optional): Líder dueño; por defecto el actor.

        Returns:
            Persona: La persona creada.

        Raises:
            PermisoDenegado: Rol sin permiso o dueño fuera de alcance.
            NoEncontrado: Dueño inexistente o inactivo.
            ErrorValidacion: Datos o códigos inválidos, o dueño que no es líder ni coordinador.
            Conflicto: Documento ya registrado (localmente o en el registro externo).
        """
        exigir(puede_importar(actor), "No tiene permiso para registrar personas")
        alcance = PerfilModel.resolver_alcance(actor)
        dueno_id = resolver_dueno(actor, alcance, registrado_por_id)

        normalizados = validar_datos_persona(datos)
        documento = normalizados["numero_documento"]
        if self.model.existe_documento(documento):
            raise Conflicto("El número de documento ya está registrado")

        info = self.registro.consultar(documento)
        if info is not None:
            raise Conflicto(mensaje_atribucion(info))

        barrio_id, puesto_id = resolver_codigos(
            normalizados, BarrioModel().mapa_codigos(), PuestoVotacionModel().mapa_codigos()
        )

        try:
            with unidad_de_trabajo() as session:
                persona = Persona(**datos_para_persona(normalizados, barrio_id, puesto_id))
                persona.estado = EstadoPersona.DATOS_PENDIENTES
                persona.es_importado = False
                persona.registrado_por_id = dueno_id
                session.add(persona)
        except IntegrityError as e:
            raise Conflicto("El número de documento ya está registrado") from e

        self.registro.registrar(documento, dueno_id)
        logger.info("Persona %s registrada por %s", persona.id, actor.id)
        return persona

    def eliminar(self, actor: Actor, persona_id: str) -> None:
        """Elimina una persona con sus novedades y confirmaciones.

        Las evidencias y el registro externo se limpian después del commit; sus
        fallas se registran en el log sin revertir la eliminación.

        Raises:
            NoEncontrado: Persona inexistente o fuera de alcance.
            PermisoDenegado: El actor no puede eliminarla.
        """
        with unidad_de_trabajo() as session:
            persona = cargar_persona(session, actor, persona_id, bloquear=True)
            exigir(puede_eliminar_persona(actor, persona), "No tiene permiso para eliminar esta persona")
            documento = persona.numero_documento
            rutas = [c.imagen_path for c in persona.confirmaciones if c.imagen_path]
            session.delete(persona)

        for ruta in rutas:
            try:
                self.almacen.eliminar(ruta)
            except ErrorDependencia:
                logger.exception("No se pudo eliminar la evidencia %s de la persona %s", ruta, persona_id)
        self.registro.eliminar(documento)
        logger.info("Persona %s eliminada por %s", persona_id, actor.id)

    def listar_visibles(self, actor: Actor, filters: dict | None = None) -> list[Persona]:
        """Personas dentro del alcance del actor, más recientes primero."""
        return self.model.listar_en_alcance(PerfilModel.resolver_alcance(actor), filters)
