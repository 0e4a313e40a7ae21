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

FORMATO = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configurar_logging(nivel: str | int = "INFO") -> None:
    """Configura el logger raíz de la aplicación.

    Args:
        nivel (str | int): Nivel de logging ('DEBUG', 'INFO', ...). Valores desconocidos caen a INFO.
    """
    if isinstance(nivel, str):
        nivel = logging.getLevelName(nivel.upper())
        if not isinstance(nivel, int):
            nivel = logging.INFO
    logging.basicConfig(level=nivel, format=FORMATO)
    # SQLAlchemy es muy verboso en DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
