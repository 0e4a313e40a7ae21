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

"""Motor de reconciliación de importaciones masivas.

Fusiona filas externas con las personas existentes sin corromper datos ya
confirmados. Cada fila pasa por las etapas en orden y la primera que la
descalifica es la única que se reporta:

1. validación de esquema
2. duplicados dentro del archivo (sobrevive la primera aparición)
3. duplicados en base de datos (dentro del alcance -> actualización; fuera -> error)
4. registro externo de documentos (solo filas nuevas)
5. resolución de códigos de barrio y puesto de votación
6. guardia de confirmación (personas con confirmación activa se omiten)
7. aplicación, una transacción por fila
8. contadores y errores del lote
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from config.mappings import CAMPOS_LOGISTICOS
from database.conexion import unidad_de_trabajo
from database.models import EstadoPersona, Persona
from database.schemas import (
    Actor, ErrorFila, FilaCandidata, FilaOmitida, FilaValidada, ResultadoImportacion
)
from models.catalogo_model import BarrioModel, PuestoVotacionModel
from models.confirmacion_model import VotoConfirmacionModel
from models.importacion_model import ImportacionModel
from models.perfil_model import PerfilModel
from models.persona_model import PersonaModel
from services.acceso import resolver_dueno
from services.autorizacion import exigir, puede_importar
from services.registro_documentos import RegistroDocumentos, mensaje_atribucion
from utilities.errores import ErrorValidacion
from utilities.helper import ahora
from utilities.sanitizer import Sanitizer
from utilities.validaciones import validar_datos_persona

logger = logging.getLogger(__name__)


# ---------------- UTILIDADES COMPARTIDAS CON EL REGISTRO INDIVIDUAL ----------------

def resolver_codigos(datos: dict, mapa_barrios: dict, mapa_puestos: dict) -> tuple:
    """Traduce los códigos de barrio y puesto a IDs internos.

    Un código vacío equivale a "sin asignar"; uno desconocido es un error.

    Returns:
        tuple: (barrio_id, puesto_votacion_id), cualquiera puede ser None.

    Raises:
        ErrorValidacion: Con los códigos no encontrados en `detalles`.
    """
    errores = {}
    barrio_id = puesto_id = None

    codigo_barrio = datos.get("barrio")
    if codigo_barrio:
        barrio_id = mapa_barrios.get(codigo_barrio)
        if barrio_id is None:
            errores["barrio"] = f"Código de barrio '{codigo_barrio}' no existe"

    codigo_puesto = datos.get("puesto_votacion")
    if codigo_puesto:
        puesto_id = mapa_puestos.get(codigo_puesto)
        if puesto_id is None:
            errores["puesto_votacion"] = f"Código de puesto de votación '{codigo_puesto}' no existe"

    if errores:
        raise ErrorValidacion(", ".join(errores.values()), detalles=errores)
    return barrio_id, puesto_id


def datos_para_persona(datos: dict, barrio_id: str | None, puesto_votacion_id: str | None) -> dict:
    """Convierte datos validados en columnas de `Persona` (sin los códigos crudos)."""
    columnas = {k: v for k, v in datos.items() if k not in ("barrio", "puesto_votacion")}
    columnas["barrio_id"] = barrio_id
    columnas["puesto_votacion_id"] = puesto_votacion_id
    return columnas


class ImportacionService:
    """Orquesta la reconciliación de un lote de filas candidatas."""

    def __init__(self, registro: RegistroDocumentos | None = None):
        self.registro = registro or RegistroDocumentos()
        self.model_persona = PersonaModel()
        self.model_importacion = ImportacionModel()
        self.model_confirmacion = VotoConfirmacionModel()
        self.model_barrio = BarrioModel()
        self.model_puesto = PuestoVotacionModel()

    def importar(
        self,
        actor: Actor,
        filas: list[FilaCandidata],
        archivo_nombre: str | None = None,
        registrado_por_id: str | None = None,
    ) -> ResultadoImportacion:
        """Ejecuta el pipeline completo sobre un lote.

        Args:
            actor (Actor): Actor que importa (admin, coordinador o líder).
            filas (list[FilaCandidata]): Filas ya decodificadas, con su número de fila.
            archivo_nombre (str, optional): Nombre del archivo origen (auditoría).
            registrado_por_id (str, optional): Líder dueño de las personas nuevas;
                por defecto el propio actor. Debe estar dentro de su alcance.

        Returns:
            ResultadoImportacion: Contadores, filas omitidas y errores por fila.

        Raises:
            PermisoDenegado: Si el rol no importa o el dueño está fuera de su alcance.
            NoEncontrado: Si el dueño indicado no existe o está inactivo.
            ErrorValidacion: Si el dueño indicado no es líder ni coordinador.
        """
        exigir(puede_importar(actor), "No tiene permiso para importar personas")
        alcance = PerfilModel.resolver_alcance(actor)
        dueno_id = resolver_dueno(actor, alcance, registrado_por_id)

        resultado = ResultadoImportacion(total_registros=len(filas))
        importacion = self.model_importacion.create({
            "usuario_id": actor.id,
            "archivo_nombre": archivo_nombre,
            "total_registros": len(filas),
            "created_at": ahora(),
        })
        resultado.importacion_id = importacion.id

        try:
            validas = self._validar_esquema(filas, resultado)
            validas = self._descartar_duplicados_archivo(validas, resultado)
            nuevas, existentes = self._clasificar_contra_bd(validas, alcance, resultado)
            nuevas = self._consultar_registro(nuevas, resultado)
            nuevas, existentes = self._resolver_codigos(nuevas, existentes, resultado)
            existentes = self._omitir_confirmadas(existentes, resultado)

            for fila in nuevas:
                self._crear(fila, importacion.id, dueno_id, resultado)
            for fila in existentes:
                self._actualizar(fila, resultado)
        finally:
            # Un lote interrumpido conserva los contadores de las filas ya aplicadas
            resultado.errores.sort(key=lambda e: e.fila)
            resultado.omitidos.sort(key=lambda o: o.fila)
            self._finalizar(importacion.id, resultado)

            # Canal lateral: el registro externo se notifica después de los commits
            for documento in resultado.documentos_creados:
                self.registro.registrar(documento, dueno_id)

        logger.info(
            "Importación %s: %d filas, %d creadas, %d actualizadas, %d omitidas, %d con error",
            importacion.id, resultado.total_registros, resultado.creados,
            resultado.actualizados, len(resultado.omitidos), len(resultado.errores),
        )
        return resultado

    # ----------------------------
    # ETAPAS
    # ----------------------------
    @staticmethod
    def _validar_esquema(filas: list[FilaCandidata], resultado: ResultadoImportacion) -> list[FilaValidada]:
        validas = []
        for candidata in filas:
            try:
                datos = validar_datos_persona(candidata.datos)
            except ErrorValidacion as e:
                documento = Sanitizer.limpiar_documento(candidata.datos.get("numero_documento")) or None
                resultado.errores.append(ErrorFila(candidata.fila, "validacion", e.mensaje, documento))
                continue
            validas.append(FilaValidada(candidata.fila, datos["numero_documento"], datos))
        return validas

    @staticmethod
    def _descartar_duplicados_archivo(validas: list[FilaValidada], resultado: ResultadoImportacion) -> list[FilaValidada]:
        primeras = {}
        unicas = []
        for fila in validas:
            primera = primeras.get(fila.numero_documento)
            if primera is not None:
                resultado.errores.append(ErrorFila(
                    fila.fila, "duplicado_archivo",
                    f"Documento duplicado en el archivo (primera aparición en la fila {primera})",
                    fila.numero_documento,
                ))
                continue
            primeras[fila.numero_documento] = fila.fila
            unicas.append(fila)
        return unicas

    def _clasificar_contra_bd(self, validas, alcance, resultado) -> tuple[list, list]:
        """Separa filas nuevas y existentes. Una existente fuera del alcance es un error."""
        with unidad_de_trabajo() as session:
            existentes_bd = self.model_persona.buscar_por_documentos_en(
                session, [f.numero_documento for f in validas]
            )

        nuevas, existentes = [], []
        for fila in validas:
            persona = existentes_bd.get(fila.numero_documento)
            if persona is None:
                nuevas.append(fila)
            elif alcance.incluye(persona.registrado_por_id):
                fila.persona_id = persona.id
                existentes.append(fila)
            else:
                resultado.errores.append(ErrorFila(
                    fila.fila, "duplicado_bd",
                    "El documento ya está registrado por otro líder", fila.numero_documento,
                ))
        return nuevas, existentes

    def _consultar_registro(self, nuevas, resultado) -> list:
        if not self.registro.habilitado:
            return nuevas
        aceptadas = []
        for fila in nuevas:
            info = self.registro.consultar(fila.numero_documento)
            if info is not None:
                resultado.errores.append(ErrorFila(
                    fila.fila, "registro_externo", mensaje_atribucion(info), fila.numero_documento
                ))
                continue
            aceptadas.append(fila)
        return aceptadas

    def _resolver_codigos(self, nuevas, existentes, resultado) -> tuple[list, list]:
        mapa_barrios = self.model_barrio.mapa_codigos()
        mapa_puestos = self.model_puesto.mapa_codigos()

        def resolver(filas):
            resueltas = []
            for fila in filas:
                try:
                    fila.barrio_id, fila.puesto_votacion_id = resolver_codigos(fila.datos, mapa_barrios, mapa_puestos)
                except ErrorValidacion as e:
                    resultado.errores.append(ErrorFila(fila.fila, "codigos", e.mensaje, fila.numero_documento))
                    continue
                resueltas.append(fila)
            return resueltas

        return resolver(nuevas), resolver(existentes)

    def _omitir_confirmadas(self, existentes, resultado) -> list:
        with unidad_de_trabajo() as session:
            confirmadas = self.model_confirmacion.personas_con_activa_en(session, [f.persona_id for f in existentes])
        pendientes = []
        for fila in existentes:
            if fila.persona_id in confirmadas:
                resultado.omitidos.append(FilaOmitida(fila.fila, fila.numero_documento, fila.persona_id))
                continue
            pendientes.append(fila)
        return pendientes

    # ----------------------------
    # APLICACIÓN (una transacción por fila)
    # ----------------------------
    def _crear(self, fila: FilaValidada, importacion_id: str, dueno_id: str, resultado: ResultadoImportacion):
        try:
            with unidad_de_trabajo() as session:
                persona = Persona(**datos_para_persona(fila.datos, fila.barrio_id, fila.puesto_votacion_id))
                persona.estado = EstadoPersona.DATOS_PENDIENTES
                persona.es_importado = True
                persona.importacion_id = importacion_id
                persona.registrado_por_id = dueno_id
                session.add(persona)
        except IntegrityError as e:
            logger.warning("Fila %d: restricción violada al crear %s: %s", fila.fila, fila.numero_documento, e.orig)
            resultado.errores.append(ErrorFila(
                fila.fila, "aplicacion", "El documento ya existe en la base de datos", fila.numero_documento
            ))
            return
        except SQLAlchemyError as e:
            logger.error("Fila %d: error de base de datos al crear %s: %s", fila.fila, fila.numero_documento, e)
            resultado.errores.append(ErrorFila(fila.fila, "aplicacion", f"Error de base de datos: {e}", fila.numero_documento))
            return
        resultado.creados += 1
        resultado.documentos_creados.append(fila.numero_documento)

    def _actualizar(self, fila: FilaValidada, resultado: ResultadoImportacion):
        cambios = {}
        if fila.barrio_id is not None:
            cambios["barrio_id"] = fila.barrio_id
        if fila.puesto_votacion_id is not None:
            cambios["puesto_votacion_id"] = fila.puesto_votacion_id
        if fila.datos.get("mesa_votacion"):
            cambios["mesa_votacion"] = fila.datos["mesa_votacion"]

        try:
            with unidad_de_trabajo() as session:
                persona = self.model_persona.obtener_en(session, fila.persona_id, bloquear=True)
                if persona is None:
                    resultado.errores.append(ErrorFila(
                        fila.fila, "aplicacion", "La persona ya no existe", fila.numero_documento
                    ))
                    return
                # La confirmación pudo crearse entre la clasificación y este commit
                if self.model_confirmacion.activa_en(session, persona.id):
                    resultado.omitidos.append(FilaOmitida(fila.fila, fila.numero_documento, persona.id))
                    return
                for campo in CAMPOS_LOGISTICOS:
                    if campo in cambios:
                        setattr(persona, campo, cambios[campo])
        except SQLAlchemyError as e:
            logger.error("Fila %d: error de base de datos al actualizar %s: %s", fila.fila, fila.numero_documento, e)
            resultado.errores.append(ErrorFila(fila.fila, "aplicacion", f"Error de base de datos: {e}", fila.numero_documento))
            return
        resultado.actualizados += 1

    def _finalizar(self, importacion_id: str, resultado: ResultadoImportacion):
        self.model_importacion.update(importacion_id, {
            "registros_exitosos": resultado.exitosos,
            "registros_fallidos": resultado.fallidos,
            "errores": [e.como_dict() for e in resultado.errores],
            "omitidos": [o.como_dict() for o in resultado.omitidos],
        })
