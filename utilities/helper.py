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

from datetime import datetime, timezone


def ahora() -> datetime:
    """Marca de tiempo UTC usada en toda la trazabilidad (verificación, novedades, confirmaciones)."""
    return datetime.now(timezone.utc)


def nombre_completo(obj) -> str:
    """Devuelve 'NOMBRES APELLIDOS' de una Persona o Perfil, tolerando campos vacíos."""
    partes = [getattr(obj, "nombres", "") or "", getattr(obj, "apellidos", "") or ""]
    return " ".join(p.strip() for p in partes if p and p.strip())


def extension_de(nombre_archivo: str) -> str:
    """Extrae la extensión (sin punto, minúsculas) de un nombre de archivo."""
    if not nombre_archivo or "." not in nombre_archivo:
        return ""
    return nombre_archivo.rsplit(".", 1)[-1].lower()
