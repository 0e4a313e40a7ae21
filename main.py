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

import argparse
import json
import logging
import sys

import database.config as config
from controllers.import_processor import importar_archivo
from database.setup import inicializar_base_de_datos
from models.perfil_model import PerfilModel
from utilities.errores import ErrorDominio
from utilities.logger import configurar_logging

logger = logging.getLogger(__name__)


def _construir_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seguimiento", description=config.APP_TITLE)
    sub = parser.add_subparsers(dest="comando", required=True)

    sub.add_parser("init-db", help="Crea las tablas de la base de datos")

    imp = sub.add_parser("importar", help="Importa personas desde un archivo de Excel")
    imp.add_argument("archivo", help="Ruta al archivo .xlsx")
    imp.add_argument("--actor", required=True, help="ID del perfil que importa")
    imp.add_argument("--lider", default=None, help="ID del líder dueño de las personas nuevas")

    demo = sub.add_parser("demo", help="Carga datos de demostración")
    demo.add_argument("--personas", type=int, default=100)
    return parser


def main(argv=None) -> int:
    """
    Punto de entrada de la línea de comandos.

    Comandos:
    1. init-db: crea la estructura de la base de datos.
    2. importar: reconcilia un archivo de Excel con las personas existentes e
       imprime el resumen en JSON.
    3. demo: carga la jerarquía y las personas de demostración.

    Returns:
        int: Código de salida (0 éxito, 1 error de dominio).
    """
    args = _construir_parser().parse_args(argv)
    configurar_logging(config.LOG_LEVEL)
    inicializar_base_de_datos()

    if args.comando == "init-db":
        return 0

    try:
        if args.comando == "demo":
            from database.prueba import crear_datos_demo
            print(json.dumps(crear_datos_demo(args.personas), indent=2))
            return 0

        actor = PerfilModel().obtener_actor(args.actor)
        resultado = importar_archivo(actor, args.archivo, registrado_por_id=args.lider)
    except ErrorDominio as e:
        logger.error("%s", e.mensaje)
        print(json.dumps(e.como_dict(), ensure_ascii=False), file=sys.stderr)
        return 1

    print(json.dumps({
        "importacion_id": resultado.importacion_id,
        "total_registros": resultado.total_registros,
        "creados": resultado.creados,
        "actualizados": resultado.actualizados,
        "fallidos": resultado.fallidos,
        "omitidos": [o.como_dict() for o in resultado.omitidos],
        "errores": [e.como_dict() for e in resultado.errores],
    }, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
