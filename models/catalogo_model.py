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
from database.models import Barrio, PuestoVotacion
from utilities.sanitizer import Sanitizer


class CatalogoModel(BaseCRUDModel):
    """Tabla de códigos de solo lectura: traduce un código externo a un ID interno."""

    def resolver(self, codigo) -> str | None:
        """Devuelve el ID interno del código, o None si no existe.

        Args:
            codigo (Any): Código tal como llega del archivo.
        """
        limpio = Sanitizer.limpiar_codigo(codigo)
        if not limpio:
            return None
        session = SessionLocal()
        try:
            fila = session.query(self.model.id).filter(self.model.codigo == limpio).first()
            return fila.id if fila else None
        finally:
            session.close()

    def mapa_codigos(self) -> dict:
        """{codigo: id} de toda la tabla, para resolver lotes sin una consulta por fila."""
        session = SessionLocal()
        try:
            return {Sanitizer.limpiar_codigo(c): i for c, i in session.query(self.model.codigo, self.model.id).all()}
        finally:
            session.close()


class BarrioModel(CatalogoModel):
    model = Barrio


class PuestoVotacionModel(CatalogoModel):
    model = PuestoVotacion
