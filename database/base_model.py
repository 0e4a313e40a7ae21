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

from sqlalchemy.exc import IntegrityError
from database.conexion import SessionLocal
from utilities.errores import Conflicto


class BaseCRUDModel:
    """Clase base para operaciones CRUD genéricas sobre un modelo SQLAlchemy.

    Los métodos públicos abren y cierran su propia sesión. Los métodos con
    sufijo `_en` reciben una sesión ya abierta para componerse dentro de una
    unidad de trabajo transaccional (ver `database.conexion.unidad_de_trabajo`).
    Las clases hijas definen el atributo de clase `model`.
    """

    model = None  # se define en la subclase

    @staticmethod
    def _get_session():
        return SessionLocal()

    # ----------------------------
    # MÉTODOS BÁSICOS CRUD
    # ----------------------------
    def get_by_id(self, obj_id: str):
        """Busca un registro por su clave primaria.

        Args:
            obj_id (str): El identificador ULID del registro.

        Returns:
            object: La instancia si existe, None en caso contrario.
        """
        with self._get_session() as session:
            return session.get(self.model, obj_id)

    def create(self, data: dict):
        """Crea y persiste un nuevo registro.

        Args:
            data (dict): Datos para inicializar el modelo.

        Returns:
            object: La instancia recién creada.

        Raises:
            Conflicto: Si se viola una restricción de unicidad.
        """
        with self._get_session() as session:
            try:
                obj = self.model(**data)
                session.add(obj)
                session.commit()
                session.refresh(obj)
                return obj
            except IntegrityError as e:
                session.rollback()
                raise Conflicto(f"Registro duplicado en {self.model.__tablename__}") from e

    def update(self, obj_id: str, data: dict):
        """Actualiza los campos indicados de un registro existente.

        Returns:
            object: La instancia actualizada, None si no existe.

        Raises:
            Conflicto: Si la actualización viola restricciones de unicidad.
        """
        with self._get_session() as session:
            try:
                obj = session.get(self.model, obj_id)
                if not obj:
                    return None
                for key, value in data.items():
                    if hasattr(obj, key):
                        setattr(obj, key, value)
                session.commit()
                session.refresh(obj)
                return obj
            except IntegrityError as e:
                session.rollback()
                raise Conflicto(f"Registro duplicado en {self.model.__tablename__}") from e

    # ----------------------------
    # VARIANTES DENTRO DE UNA UNIDAD DE TRABAJO
    # ----------------------------
    def obtener_en(self, session, obj_id: str, bloquear: bool = False, opciones=None):
        """Obtiene un registro dentro de una sesión abierta.

        Args:
            session (Session): Sesión de la unidad de trabajo.
            obj_id (str): ID del registro.
            bloquear (bool): Si True, emite SELECT ... FOR UPDATE (ignorado por SQLite).
            opciones (list, optional): Opciones de carga (joinedload, etc.).

        Returns:
            object | None: La instancia o None.
        """
        query = session.query(self.model).filter(self.model.id == obj_id)
        if opciones:
            query = query.options(*opciones)
        if bloquear:
            # OF: solo la tabla propia, las relaciones cargadas con joinedload no se bloquean
            query = query.with_for_update(of=self.model)
        return query.first()

    # ----------------------------
    # FILTRADO
    # ----------------------------
    def _apply_filters(self, query, filters: dict | None = None):
        """Aplica filtros de igualdad (AND). Listas, tuplas y conjuntos se traducen a IN.

        Args:
            query (Query): Objeto Query base.
            filters (dict, optional): {campo: valor}. Los valores None se ignoran.

        Returns:
            Query: El Query filtrado.
        """
        if filters:
            for field, value in filters.items():
                if not hasattr(self.model, field) or value is None:
                    continue
                column = getattr(self.model, field)
                if isinstance(value, (list, tuple, set, frozenset)):
                    query = query.filter(column.in_(list(value)))
                else:
                    query = query.filter(column == value)
        return query

    # ----------------------------
    # MÉTODOS DE CONSULTA
    # ----------------------------
    def count(self, filters: dict | None = None) -> int:
        with self._get_session() as session:
            return self._apply_filters(session.query(self.model), filters).count()

    def search(
        self,
        filters: dict | None = None,
        order_by=None,
        limit: int | None = None,
        offset: int | None = None,
        first: bool = False,
    ):
        """Búsqueda con filtros, ordenamiento y paginación.

        Args:
            filters (dict, optional): Filtros exactos (AND, listas como IN).
            order_by (Column, optional): Criterio de ordenamiento SQLAlchemy.
            limit (int, optional): Límite de registros a devolver.
            offset (int, optional): Número de registros a saltar.
            first (bool, optional): Si True, devuelve solo el primer resultado.

        Returns:
            list | object: Lista de resultados o una instancia única si first=True.
        """
        with self._get_session() as session:
            query = self._apply_filters(session.query(self.model), filters)

            if order_by is not None:
                query = query.order_by(order_by)
            if offset is not None:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)

            return query.first() if first else query.all()
