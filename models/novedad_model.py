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
from database.models import Novedad


class NovedadModel(BaseCRUDModel):
    """Modelo CRUD de novedades."""
    model = Novedad

    @staticmethod
    def abierta_en(session, persona_id: str):
        """Devuelve la novedad sin resolver de la persona, si existe."""
        return (
            session.query(Novedad)
            .filter(Novedad.persona_id == persona_id, Novedad.resuelta.is_(False))
            .first()
        )

    def listar_por_persona(self, persona_id: str, solo_activas: bool = False):
        """Novedades de una persona, más recientes primero.

        Args:
            persona_id (str): ID de la persona.
            solo_activas (bool): Si True, solo las no resueltas.
        """
        session = SessionLocal()
        try:
            query = session.query(Novedad).filter(Novedad.persona_id == persona_id)
            if solo_activas:
                query = query.filter(Novedad.resuelta.is_(False))
            return query.order_by(Novedad.created_at.desc(), Novedad.id.desc()).all()
        finally:
            session.close()
