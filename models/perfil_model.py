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

from database.base_model import BaseCRUDModel
from database.conexion import SessionLocal
from database.models import Perfil, FiltroLider, Rol
from database.schemas import Actor, Alcance
from utilities.errores import NoEncontrado


class PerfilModel(BaseCRUDModel):
    """Modelo de identidad: roles de los actores y grafo de pertenencia hacia los líderes."""
    model = Perfil

    def obtener_actor(self, perfil_id: str) -> Actor:
        """Construye el contexto inmutable de un actor a partir de su perfil.

        Args:
            perfil_id (str): ID del perfil autenticado.

        Returns:
            Actor: Rol, coordinador y líderes asignados (solo validador/confirmador).

        Raises:
            NoEncontrado: Si el perfil no existe o está inactivo.
        """
        session = SessionLocal()
        try:
            perfil = session.get(Perfil, perfil_id)
            if not perfil or not perfil.activo:
                raise NoEncontrado("Perfil no encontrado")

            asignados = frozenset()
            if perfil.rol in (Rol.VALIDADOR, Rol.CONFIRMADOR):
                filas = session.query(FiltroLider.lider_id).filter(FiltroLider.filtro_id == perfil.id).all()
                asignados = frozenset(f.lider_id for f in filas)

            return Actor(
                id=perfil.id,
                rol=Rol(perfil.rol),
                coordinador_id=perfil.coordinador_id,
                lideres_asignados_ids=asignados,
            )
        finally:
            session.close()

    @staticmethod
    def resolver_alcance(actor: Actor, session=None) -> Alcance:
        """Resuelve el conjunto de líderes cuyas personas puede tocar el actor.

        Reglas:
        - admin y consultor: alcance universal (el consultor solo para lectura).
        - coordinador: su propio ID más todos los líderes con coordinador_id == actor.id.
        - líder: solo su propio ID.
        - validador / confirmador: exactamente sus líderes asignados.

        Args:
            actor (Actor): Contexto del actor.
            session (Session, optional): Sesión abierta a reutilizar.

        Returns:
            Alcance: Alcance resuelto.
        """
        if actor.rol in (Rol.ADMIN, Rol.CONSULTOR):
            return Alcance(universal=True)
        if actor.rol == Rol.LIDER:
            return Alcance(lideres=frozenset({actor.id}))
        if actor.rol in (Rol.VALIDADOR, Rol.CONFIRMADOR):
            return Alcance(lideres=frozenset(actor.lideres_asignados_ids))
        if actor.rol == Rol.COORDINADOR:
            propia = session is None
            session = session or SessionLocal()
            try:
                filas = session.query(Perfil.id).filter(
                    Perfil.coordinador_id == actor.id,
                    Perfil.rol == Rol.LIDER,
                ).all()
                return Alcance(lideres=frozenset({actor.id, *(f.id for f in filas)}))
            finally:
                if propia:
                    session.close()
        return Alcance()

    def asignar_lideres(self, filtro_id: str, lider_ids: list[str]):
        """Reemplaza los líderes asignados a un validador/confirmador.

        La gestión de asignaciones pertenece a la administración; se expone aquí
        para la carga de datos de prueba.
        """
        session = SessionLocal()
        try:
            session.query(FiltroLider).filter(FiltroLider.filtro_id == filtro_id).delete()
            for lider_id in dict.fromkeys(lider_ids):
                session.add(FiltroLider(filtro_id=filtro_id, lider_id=lider_id))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
