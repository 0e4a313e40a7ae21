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

"""Taxonomía de errores de dominio.

Cada error lleva un `tipo` estable (para que la capa de presentación elija
el código de respuesta) y un `mensaje` legible listo para mostrar al usuario.
"""


class ErrorDominio(Exception):
    """Error base de las operaciones del núcleo."""

    tipo = "error"

    def __init__(self, mensaje: str):
        super().__init__(mensaje)
        self.mensaje = mensaje

    def como_dict(self) -> dict:
        return {"tipo": self.tipo, "mensaje": self.mensaje}


class PermisoDenegado(ErrorDominio):
    """El actor no tiene permiso para la operación solicitada."""
    tipo = "forbidden"


class NoEncontrado(ErrorDominio):
    """El registro no existe o está fuera del alcance del actor (indistinguibles a propósito)."""
    tipo = "not_found"


class TransicionInvalida(ErrorDominio):
    """La operación no es legal desde el estado actual."""
    tipo = "invalid_transition"


class Conflicto(ErrorDominio):
    """Se violó una invariante de unicidad."""
    tipo = "conflict"


class ErrorValidacion(ErrorDominio):
    """Datos de entrada mal formados.

    Args:
        mensaje (str): Resumen del error.
        detalles (dict, optional): Mensajes por campo {campo: mensaje}.
    """
    tipo = "validation"

    def __init__(self, mensaje: str, detalles: dict | None = None):
        super().__init__(mensaje)
        self.detalles = detalles or {}

    def como_dict(self) -> dict:
        data = super().como_dict()
        data["detalles"] = dict(self.detalles)
        return data


class ErrorDependencia(ErrorDominio):
    """Falla de un colaborador externo (almacenamiento de evidencias, base de datos, registro)."""
    tipo = "dependency"
