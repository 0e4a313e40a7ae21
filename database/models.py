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

import enum

from sqlalchemy import (
    Column, String, ForeignKey, Date, DateTime, JSON, Text,
    UniqueConstraint, Enum, Integer, Boolean, Index, text
)
from sqlalchemy.orm import relationship
from database.conexion import Base
from utilities.uid import generar_uid
from utilities.helper import ahora


# ---------------- ENUMERACIONES ----------------

class Rol(str, enum.Enum):
    """Roles cerrados del sistema. Todo rol nuevo necesita su regla en services.autorizacion."""
    ADMIN = "admin"
    COORDINADOR = "coordinador"
    LIDER = "lider"
    VALIDADOR = "validador"
    CONFIRMADOR = "confirmador"
    CONSULTOR = "consultor"  # auditor de solo lectura


class EstadoPersona(str, enum.Enum):
    """Estados del ciclo de vida de una persona."""
    DATOS_PENDIENTES = "DATOS_PENDIENTES"
    VERIFICADO = "VERIFICADO"
    CONFIRMADO = "CONFIRMADO"
    COMPLETADO = "COMPLETADO"
    CON_NOVEDAD = "CON_NOVEDAD"


class TipoDocumento(str, enum.Enum):
    CC = "CC"
    CE = "CE"
    PASAPORTE = "Pasaporte"
    TI = "TI"
    OTRO = "Otro"


def _valores(enum_cls):
    return [m.value for m in enum_cls]


# ---------------- MODELOS ----------------

class Perfil(Base):
    """Actor del sistema (administrador, coordinador, líder, validador, confirmador, consultor)."""
    __tablename__ = "perfiles"

    id = Column(String(26), primary_key=True, default=generar_uid, index=True)
    nombres = Column(String(150), nullable=False)
    apellidos = Column(String(150), nullable=False, default="")
    numero_documento = Column(String(30), unique=True, nullable=False)
    rol = Column(Enum(Rol, name="rol_perfil", values_callable=_valores), nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    # líder -> coordinador
    coordinador_id = Column(
        String(26),
        ForeignKey("perfiles.id", ondelete="SET NULL"),
        nullable=True
    )

    coordinador = relationship("Perfil", remote_side="Perfil.id", backref="lideres")
    personas = relationship("Persona", back_populates="registrado_por", foreign_keys="Persona.registrado_por_id")
    lideres_asignados = relationship(
        "FiltroLider",
        back_populates="filtro",
        foreign_keys="FiltroLider.filtro_id",
        cascade="all, delete-orphan"
    )


class FiltroLider(Base):
    """Asignación muchos-a-muchos validador/confirmador -> líder."""
    __tablename__ = "filtro_lideres"

    id = Column(String(26), primary_key=True, default=generar_uid, index=True)
    filtro_id = Column(String(26), ForeignKey("perfiles.id", ondelete="CASCADE"), nullable=False)
    lider_id = Column(String(26), ForeignKey("perfiles.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=ahora, nullable=False)

    filtro = relationship("Perfil", foreign_keys=[filtro_id], back_populates="lideres_asignados")
    lider = relationship("Perfil", foreign_keys=[lider_id])

    __table_args__ = (
        UniqueConstraint("filtro_id", "lider_id", name="uq_filtro_lider"),
    )


class Barrio(Base):
    """Tabla de códigos de ubicación."""
    __tablename__ = "barrios"

    id = Column(String(26), primary_key=True, default=generar_uid, index=True)
    codigo = Column(String(30), unique=True, nullable=False)
    nombre = Column(String(150), nullable=False)


class PuestoVotacion(Base):
    """Tabla de códigos de puestos de votación."""
    __tablename__ = "puestos_votacion"

    id = Column(String(26), primary_key=True, default=generar_uid, index=True)
    codigo = Column(String(30), unique=True, nullable=False)
    nombre = Column(String(200), nullable=False)
    direccion = Column(String(255), nullable=True)


class Importacion(Base):
    """Lote de importación masiva: contadores agregados y errores por fila."""
    __tablename__ = "importaciones"

    id = Column(String(26), primary_key=True, default=generar_uid, index=True)
    usuario_id = Column(String(26), ForeignKey("perfiles.id"), nullable=False)
    archivo_nombre = Column(String(255), nullable=True)
    total_registros = Column(Integer, default=0, nullable=False)
    registros_exitosos = Column(Integer, default=0, nullable=False)
    registros_fallidos = Column(Integer, default=0, nullable=False)
    errores = Column(JSON, nullable=True)
    omitidos = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=ahora, nullable=False)

    personas = relationship("Persona", back_populates="importacion")


class Persona(Base):
    """Individuo que recorre el ciclo de verificación y confirmación."""
    __tablename__ = "personas"

    id = Column(String(26), primary_key=True, default=generar_uid, index=True)
    nombres = Column(String(150), nullable=False)
    apellidos = Column(String(150), nullable=False)
    tipo_documento = Column(
        Enum(TipoDocumento, name="tipo_documento", values_callable=_valores),
        nullable=False,
        default=TipoDocumento.CC
    )
    numero_documento = Column(String(30), unique=True, nullable=False)
    fecha_nacimiento = Column(Date, nullable=True)
    fecha_expedicion = Column(Date, nullable=True)
    profesion = Column(String(150), nullable=True)
    numero_celular = Column(String(30), nullable=True)
    direccion = Column(String(255), nullable=True)
    departamento = Column(String(100), nullable=True)
    municipio = Column(String(100), nullable=True)

    # Campos logísticos: los únicos que una reimportación puede refrescar
    barrio_id = Column(String(26), ForeignKey("barrios.id", ondelete="SET NULL"), nullable=True)
    puesto_votacion_id = Column(String(26), ForeignKey("puestos_votacion.id", ondelete="SET NULL"), nullable=True)
    mesa_votacion = Column(String(20), nullable=True)

    estado = Column(
        Enum(EstadoPersona, name="estado_persona", values_callable=_valores),
        nullable=False,
        default=EstadoPersona.DATOS_PENDIENTES
    )
    estado_anterior = Column(
        Enum(EstadoPersona, name="estado_persona", values_callable=_valores),
        nullable=True
    )

    registrado_por_id = Column(String(26), ForeignKey("perfiles.id"), nullable=False, index=True)
    validado_por_id = Column(String(26), ForeignKey("perfiles.id", ondelete="SET NULL"), nullable=True)
    validado_at = Column(DateTime(timezone=True), nullable=True)
    confirmado_estado_por_id = Column(String(26), ForeignKey("perfiles.id", ondelete="SET NULL"), nullable=True)
    confirmado_estado_at = Column(DateTime(timezone=True), nullable=True)

    es_importado = Column(Boolean, default=False, nullable=False)
    importacion_id = Column(String(26), ForeignKey("importaciones.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=ahora, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=ahora, onupdate=ahora, nullable=False)

    registrado_por = relationship("Perfil", foreign_keys=[registrado_por_id], back_populates="personas")
    barrio = relationship("Barrio")
    puesto_votacion = relationship("PuestoVotacion")
    importacion = relationship("Importacion", back_populates="personas")
    novedades = relationship("Novedad", back_populates="persona", cascade="all, delete-orphan")
    confirmaciones = relationship("VotoConfirmacion", back_populates="persona", cascade="all, delete-orphan")


class Novedad(Base):
    """Interrupción del ciclo de vida de una persona (máximo una abierta por persona)."""
    __tablename__ = "novedades"

    id = Column(String(26), primary_key=True, default=generar_uid, index=True)
    persona_id = Column(String(26), ForeignKey("personas.id", ondelete="CASCADE"), nullable=False, index=True)
    observacion = Column(Text, nullable=False)
    resuelta = Column(Boolean, default=False, nullable=False)
    creada_por_id = Column(String(26), ForeignKey("perfiles.id"), nullable=False)
    resuelta_por_id = Column(String(26), ForeignKey("perfiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=ahora, nullable=False)
    resuelta_at = Column(DateTime(timezone=True), nullable=True)

    persona = relationship("Persona", back_populates="novedades")

    __table_args__ = (
        Index(
            "uq_novedad_abierta_por_persona",
            "persona_id",
            unique=True,
            sqlite_where=text("resuelta = 0"),
            postgresql_where=text("resuelta = false"),
        ),
    )


class VotoConfirmacion(Base):
    """Evidencia de completitud (máximo una activa por persona)."""
    __tablename__ = "voto_confirmaciones"

    id = Column(String(26), primary_key=True, default=generar_uid, index=True)
    persona_id = Column(String(26), ForeignKey("personas.id", ondelete="CASCADE"), nullable=False, index=True)
    imagen_url = Column(String(500), nullable=False)
    imagen_path = Column(String(300), nullable=False)
    confirmado_por_id = Column(String(26), ForeignKey("perfiles.id"), nullable=False)
    confirmado_at = Column(DateTime(timezone=True), default=ahora, nullable=False)
    reversado = Column(Boolean, default=False, nullable=False)
    reversado_por_id = Column(String(26), ForeignKey("perfiles.id"), nullable=True)
    reversado_at = Column(DateTime(timezone=True), nullable=True)

    persona = relationship("Persona", back_populates="confirmaciones")

    __table_args__ = (
        Index(
            "uq_confirmacion_activa_por_persona",
            "persona_id",
            unique=True,
            sqlite_where=text("reversado = 0"),
            postgresql_where=text("reversado = false"),
        ),
    )
