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

from sqlalchemy.orm import joinedload

from database.base_model import BaseCRUDModel
from database.conexion import SessionLocal
from database.models import Persona
from database.schemas import Alcance


class PersonaModel(BaseCRUDModel):
    """Modelo CRUD de personas con consultas que cargan al líder dueño del registro."""
    model = Persona

    def obtener_con_dueno_en(self, session, persona_id: str, bloquear: bool = False):
        """Carga una persona junto con su líder registrante (necesario para autorizar).

        Args:
            session (Session): Sesión de la unidad de trabajo.
            persona_id (str): ID de la persona.
            bloquear (bool): Bloquea la fila hasta el fin de la transacción.

        Returns:
            Persona | None
        """
        return self.obtener_en(
            session, persona_id, bloquear=bloquear,
            opciones=[joinedload(Persona.registrado_por)]
        )

    @staticmethod
    def buscar_por_documentos_en(session, documentos) -> dict:
        """Devuelve {numero_documento: Persona} para los documentos que ya existen."""
        documentos = list(documentos)
        if not documentos:
            return {}
        personas = (
            session.query(Persona)
            .options(joinedload(Persona.registrado_por))
            .filter(Persona.numero_documento.in_(documentos))
            .all()
        )
        return {p.numero_documento: p for p in personas}

    def existe_documento(self, numero_documento: str) -> bool:
        return self.count(filters={"numero_documento": numero_documento}) > 0

    def listar_en_alcance(self, alcance: Alcance, filters: dict | None = None):
        """Lista las personas visibles para un alcance, más recientes primero."""
        session = SessionLocal()
        try:
            query = self._apply_filters(session.query(Persona), filters)
            if not alcance.universal:
                if not alcance.lideres:
                    return []
                query = query.filter(Persona.registrado_por_id.in_(list(alcance.lideres)))
            return query.order_by(Persona.created_at.desc(), Persona.id.desc()).all()
        finally:
            session.close()
