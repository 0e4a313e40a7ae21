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

"""Configuración de mapeos y constantes para la importación de personas.

Define los alias de encabezados de la hoja de cálculo, los campos
obligatorios y los límites de validación compartidos por la importación
masiva y el registro individual.
"""

# Mapeo de columnas esperadas en el Excel y sus posibles alias (ya normalizados)
COLUMNA_ALIAS = {
    'nombres': ['NOMBRES', 'NOMBRE', 'PRIMER NOMBRE'],
    'apellidos': ['APELLIDOS', 'APELLIDO'],
    'tipo_documento': ['TIPO DE DOCUMENTO', 'TIPO DOCUMENTO', 'TIPO DOC'],
    'numero_documento': ['NUMERO DE DOCUMENTO', 'NUMERO DOCUMENTO', 'DOCUMENTO', 'CEDULA', 'IDENTIFICACION'],
    'fecha_nacimiento': ['FECHA DE NACIMIENTO', 'FECHA NACIMIENTO'],
    'fecha_expedicion': ['FECHA DE EXPEDICION', 'FECHA EXPEDICION'],
    'profesion': ['PROFESION', 'OCUPACION'],
    'numero_celular': ['NUMERO DE CELULAR', 'CELULAR', 'TELEFONO'],
    'direccion': ['DIRECCION'],
    'departamento': ['DEPARTAMENTO'],
    'municipio': ['MUNICIPIO'],
    'barrio': ['BARRIO', 'CODIGO BARRIO'],
    'puesto_votacion': ['PUESTO DE VOTACION', 'PUESTO VOTACION', 'CODIGO PUESTO'],
    'mesa_votacion': ['MESA DE VOTACION', 'MESA VOTACION', 'MESA'],
}
"""dict: Nombre interno -> posibles encabezados en los archivos de entrada."""

# Columnas obligatorias para procesar
COLUMNAS_OBLIGATORIAS = ['nombres', 'apellidos', 'numero_documento']

# Campos que una reimportación puede refrescar en una persona existente
CAMPOS_LOGISTICOS = ['barrio_id', 'puesto_votacion_id', 'mesa_votacion']

# Campos opcionales de texto libre copiados tal cual a la persona
CAMPOS_TEXTO_OPCIONALES = [
    'profesion', 'numero_celular', 'direccion', 'departamento', 'municipio', 'mesa_votacion'
]

OBSERVACION_MAX_CARACTERES = 2000
EDAD_MAXIMA_ANIOS = 150
TIPOS_EVIDENCIA_PREFIJO = "image/"
EXTENSIONES_HOJA_CALCULO = ('.xlsx', '.xlsm')
