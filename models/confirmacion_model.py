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
from database.models import VotoConfirmacion


class VotoConfirmacionModel(BaseCRUDModel):
    """Modelo CRUD de confirmaciones con evidencia."""
    model = VotoConfirmacion

    @staticmethod
    def activa_en(session, persona_id: str):
        """Confirmación no reversada más reciente de la persona (o None)."""
        return (
            session.query(VotoConfirmacion)
            .filter(VotoConfirmacion.persona_id == persona_id, VotoConfirmacion.reversado.is_(False))
            .order_by(VotoConfirmacion.confirmado_at.desc(), VotoConfirmacion.id.desc())
            .first()
        )

    @staticmethod
    def personas_con_activa_en(session, persona_ids) -> set:
        """IDs de las personas (del conjunto dado) que tienen una confirmación activa."""
        persona_ids = list(persona_ids)
        if not persona_ids:
            return set()
        filas = (
            session.query(VotoConfirmacion.persona_id)
            .filter(
                VotoConfirmacion.persona_id.in_(persona_ids),
                VotoConfirmacion.reversado.is_(False),
            )
            .all()
        )
        return {f.persona_id for f in filas}

    def activa(self, persona_id: str):
        session = SessionLocal()
        try:
            return self.activa_en(session, persona_id)
        finally:
            session.close()

    def para_mostrar(self, persona_id: str):
        """Selecciona la confirmación a mostrar para una persona.

        Prioriza la activa más reciente por fecha de confirmación. Si todas están
        reversadas, devuelve la reversada más reciente solo para auditoría; el
        llamador debe consultar `reversado` y nunca tratarla como activa.

        Returns:
            VotoConfirmacion | None
        """
        session = SessionLocal()
        try:
            activa = self.activa_en(session, persona_id)
            if activa:
                return activa
            return (
                session.query(VotoConfirmacion)
                .filter(VotoConfirmacion.persona_id == persona_id)
                .order_by(VotoConfirmacion.confirmado_at.desc(), VotoConfirmacion.id.desc())
                .first()
            )
        finally:
            session.close()
