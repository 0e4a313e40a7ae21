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

import logging
import os
from typing import List

import pandas as pd

from config.mappings import COLUMNA_ALIAS, COLUMNAS_OBLIGATORIAS, EXTENSIONES_HOJA_CALCULO
from database.schemas import Actor, FilaCandidata, ResultadoImportacion
from services.importacion import ImportacionService
from utilities.errores import ErrorValidacion
from utilities.sanitizer import Sanitizer

logger = logging.getLogger(__name__)


class ExcelEngine:
    """Motor de carga de hojas de cálculo de personas.

    Lee el archivo físico, limpia los nombres de columnas y mapea las columnas
    del archivo a los campos esperados por el sistema.
    """

    def __init__(self, filepath: str):
        """Inicializa el motor con la ruta del archivo.

        Args:
            filepath (str): Ruta al archivo .xlsx o .xlsm.
        """
        self.filepath = filepath
        self.df = None
        self.mapa_cols = {}

    def cargar(self) -> pd.DataFrame:
        """Carga la primera hoja en un DataFrame de pandas y normaliza encabezados.

        Raises:
            ErrorValidacion: Si el archivo no tiene una extensión soportada o no se puede leer.
        """
        if not self.filepath.lower().endswith(EXTENSIONES_HOJA_CALCULO):
            raise ErrorValidacion(
                "Formato no soportado. Use un archivo de Excel (.xlsx)",
                detalles={"archivo": os.path.basename(self.filepath)},
            )
        try:
            self.df = pd.read_excel(self.filepath, engine="openpyxl", dtype=object)
        except Exception as e:
            raise ErrorValidacion(f"No se pudo leer el archivo: {e}") from e

        self.df.columns = [Sanitizer.limpiar_texto(col) for col in self.df.columns]
        logger.debug("Archivo %s cargado: %d filas, columnas %s", self.filepath, len(self.df), list(self.df.columns))
        return self.df

    def mapear_columnas(self) -> bool:
        """Identifica las columnas basándose en alias conocidos.

        Primero busca coincidencias exactas con `COLUMNA_ALIAS`; luego, para los
        campos aún sin columna, una columna que contenga alguno de los alias.

        Returns:
            bool: True si todas las columnas obligatorias fueron identificadas.
        """
        cols_df = self.df.columns.tolist()
        used_cols = []

        for key, alias_list in COLUMNA_ALIAS.items():
            found = False
            for col in cols_df:
                if col not in used_cols:
                    if col == Sanitizer.limpiar_texto(key.replace("_", " ")) or col in alias_list:
                        self.mapa_cols[key] = col
                        used_cols.append(col)
                        found = True
                        break

            if not found:
                for col in cols_df:
                    if col not in used_cols:
                        for alias in alias_list:
                            if alias in col:
                                self.mapa_cols[key] = col
                                used_cols.append(col)
                                found = True
                                break
                        if found: break

        return not self.columnas_faltantes()

    def columnas_faltantes(self) -> List[str]:
        """Campos obligatorios sin columna en el archivo."""
        return [c for c in COLUMNAS_OBLIGATORIAS if c not in self.mapa_cols]

    def filas(self) -> List[FilaCandidata]:
        """Convierte el DataFrame en filas candidatas.

        La numeración es la que ve el usuario en Excel: la fila 1 es el
        encabezado, así que el primer registro es la fila 2. Las filas
        completamente vacías se ignoran.

        Returns:
            List[FilaCandidata]: Una por fila con datos.
        """
        candidatas = []
        for idx, row in self.df.iterrows():
            datos = {campo: row.get(col) for campo, col in self.mapa_cols.items()}
            if all(Sanitizer.es_vacio(v) for v in datos.values()):
                continue
            candidatas.append(FilaCandidata(fila=int(idx) + 2, datos=datos))
        return candidatas


def importar_archivo(
    actor: Actor,
    filepath: str,
    servicio: ImportacionService | None = None,
    registrado_por_id: str | None = None,
) -> ResultadoImportacion:
    """Decodifica un archivo de Excel y lo entrega al motor de reconciliación.

    Args:
        actor (Actor): Actor que importa.
        filepath (str): Ruta al archivo.
        servicio (ImportacionService, optional): Servicio a usar (inyectable en pruebas).
        registrado_por_id (str, optional): Líder dueño de las personas nuevas.

    Returns:
        ResultadoImportacion: Resumen de la corrida.

    Raises:
        ErrorValidacion: Archivo ilegible o sin las columnas obligatorias.
        PermisoDenegado: El actor no puede importar.
    """
    engine = ExcelEngine(filepath)
    engine.cargar()
    if not engine.mapear_columnas():
        faltantes = engine.columnas_faltantes()
        raise ErrorValidacion(
            "Faltan columnas obligatorias: " + ", ".join(faltantes),
            detalles={c: "columna no encontrada" for c in faltantes},
        )

    servicio = servicio or ImportacionService()
    return servicio.importar(
        actor,
        engine.filas(),
        archivo_nombre=os.path.basename(filepath),
        registrado_por_id=registrado_por_id,
    )
