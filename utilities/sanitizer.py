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
import re
import unicodedata
from datetime import date, datetime, timedelta
import pandas as pd
from typing import Any, Optional

# Excel cuenta los días desde 1899-12-30
_EPOCA_EXCEL = date(1899, 12, 30)


class Sanitizer:
    """Clase utilitaria estática para limpieza de datos de entrada."""

    @staticmethod
    def es_vacio(valor: Any) -> bool:
        """True para None, NaN de pandas y cadenas en blanco."""
        if valor is None:
            return True
        try:
            if pd.isna(valor):
                return True
        except (TypeError, ValueError):
            return False
        return str(valor).strip() == ""

    @staticmethod
    def limpiar_texto(texto: Any) -> str:
        """
        Normaliza texto eliminando acentos, manteniendo la Ñ, y lo convierte a mayúsculas.
        Se usa para comparar encabezados de columnas.

        Args:
            texto (Any): Texto de entrada.

        Returns:
            str: Texto limpio y en mayúsculas.
        """
        if Sanitizer.es_vacio(texto):
            return ""

        txt = str(texto).strip()
        # Protección de la Ñ
        txt = txt.replace("ñ", "__ENYE__").replace("Ñ", "__ENYE_MAYUS__")

        txt = unicodedata.normalize("NFD", txt)
        txt = "".join(c for c in txt if unicodedata.category(c) != "Mn")

        txt = txt.replace("__ENYE__", "ñ").replace("__ENYE_MAYUS__", "Ñ")
        txt = re.sub(r"\s+", " ", txt)
        return txt.upper()

    @staticmethod
    def limpiar_valor(valor: Any) -> str:
        """Convierte una celda a cadena sin espacios sobrantes ('' si está vacía)."""
        if Sanitizer.es_vacio(valor):
            return ""
        if isinstance(valor, float) and valor.is_integer():
            valor = int(valor)
        return re.sub(r"\s+", " ", str(valor).strip())

    @staticmethod
    def limpiar_documento(valor: Any) -> str:
        """
        Limpia puntos, guiones y espacios de un número de documento.
        Maneja valores float (ej: 1712345.0) que llegan así desde Excel.

        Args:
            valor (Any): Valor de entrada.

        Returns:
            str: Documento sin separadores, en mayúsculas (pasaportes alfanuméricos).
        """
        if Sanitizer.es_vacio(valor):
            return ""
        if isinstance(valor, float) and valor.is_integer():
            valor = int(valor)
        c = str(valor).strip()
        return re.sub(r"[\s.\-,]", "", c).upper()

    @staticmethod
    def limpiar_codigo(valor: Any) -> str:
        """Normaliza un código de catálogo (barrio, puesto de votación)."""
        return Sanitizer.limpiar_documento(valor)

    @staticmethod
    def limpiar_fecha(valor: Any) -> Optional[date]:
        """
        Convierte una celda a fecha.

        Acepta objetos date/datetime/Timestamp, números seriales de Excel y
        cadenas 'YYYY-MM-DD' o 'DD/MM/YYYY'.

        Args:
            valor (Any): Valor de entrada.

        Returns:
            date | None: La fecha, o None si la celda está vacía.

        Raises:
            ValueError: Si el valor no es interpretable como fecha.
        """
        if Sanitizer.es_vacio(valor):
            return None
        if isinstance(valor, pd.Timestamp):
            return valor.date()
        if isinstance(valor, datetime):
            return valor.date()
        if isinstance(valor, date):
            return valor
        if isinstance(valor, (int, float)) and not isinstance(valor, bool):
            try:
                return _EPOCA_EXCEL + timedelta(days=int(valor))
            except (OverflowError, ValueError) as e:
                # seriales fuera del rango de `date` (o inf)
                raise ValueError(f"Fecha no reconocida: {valor}") from e

        txt = str(valor).strip()
        for formato in ("%Y-%m-%d", "%d/%m/%Y", "%Y-%m-%d %H:%M:%S"):
            try:
                return datetime.strptime(txt, formato).date()
            except ValueError:
                continue
        raise ValueError(f"Fecha no reconocida: {txt}")
