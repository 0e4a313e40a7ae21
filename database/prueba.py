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

"""Carga de datos de demostración: jerarquía de actores, catálogos y personas ficticias."""

import logging
import random

from faker import Faker

from database.conexion import unidad_de_trabajo
from database.models import Barrio, EstadoPersona, Perfil, Persona, PuestoVotacion, Rol, TipoDocumento
from database.setup import inicializar_base_de_datos
from models.perfil_model import PerfilModel

logger = logging.getLogger(__name__)

# Inicializar Faker
faker = Faker("es_CO")

BARRIOS_DEMO = [("B001", "Centro"), ("B002", "La Esperanza"), ("B003", "San José"), ("B004", "El Prado")]
PUESTOS_DEMO = [("P001", "Institución Educativa Central"), ("P002", "Coliseo Municipal"), ("P003", "Escuela Rural")]
DEPARTAMENTOS_DEMO = ["Antioquia", "Cundinamarca", "Valle del Cauca", "Santander", "Atlántico"]


def _perfil(rol: Rol, coordinador_id=None) -> Perfil:
    return Perfil(
        nombres=faker.first_name(),
        apellidos=faker.last_name(),
        numero_documento=str(faker.unique.random_number(digits=10, fix_len=True)),
        rol=rol,
        coordinador_id=coordinador_id,
    )


def generar_persona_aleatoria(lider_id: str, barrios: list, puestos: list) -> Persona:
    """Genera una Persona en DATOS_PENDIENTES con datos ficticios.

    Returns:
        Persona: Objeto persona listo para insertar.
    """
    return Persona(
        nombres=faker.first_name(),
        apellidos=f"{faker.last_name()} {faker.last_name()}",
        tipo_documento=TipoDocumento.CC,
        numero_documento=str(faker.unique.random_number(digits=10, fix_len=True)),
        fecha_nacimiento=faker.date_of_birth(minimum_age=18, maximum_age=90),
        numero_celular=faker.numerify("3#########"),
        direccion=faker.street_address(),
        departamento=random.choice(DEPARTAMENTOS_DEMO),
        municipio=faker.city(),
        barrio_id=random.choice(barrios).id,
        puesto_votacion_id=random.choice(puestos).id,
        mesa_votacion=str(random.randint(1, 30)),
        estado=EstadoPersona.DATOS_PENDIENTES,
        registrado_por_id=lider_id,
    )


def crear_datos_demo(n_personas: int = 100) -> dict:
    """Crea la jerarquía de demostración y `n_personas` personas repartidas entre los líderes.

    Args:
        n_personas (int, optional): Cantidad de personas. Defaults to 100.

    Returns:
        dict: IDs de los perfiles creados, por rol.
    """
    with unidad_de_trabajo() as session:
        admin = _perfil(Rol.ADMIN)
        coordinador = _perfil(Rol.COORDINADOR)
        session.add_all([admin, coordinador])
        session.flush()

        lideres = [_perfil(Rol.LIDER, coordinador_id=coordinador.id) for _ in range(3)]
        validador = _perfil(Rol.VALIDADOR)
        confirmador = _perfil(Rol.CONFIRMADOR)
        consultor = _perfil(Rol.CONSULTOR)
        session.add_all([*lideres, validador, confirmador, consultor])

        barrios = [Barrio(codigo=c, nombre=n) for c, n in BARRIOS_DEMO]
        puestos = [PuestoVotacion(codigo=c, nombre=n, direccion=faker.street_address()) for c, n in PUESTOS_DEMO]
        session.add_all(barrios + puestos)
        session.flush()

        session.add_all([
            generar_persona_aleatoria(random.choice(lideres).id, barrios, puestos)
            for _ in range(n_personas)
        ])
        ids = {
            "admin": admin.id,
            "coordinador": coordinador.id,
            "lideres": [lider.id for lider in lideres],
            "validador": validador.id,
            "confirmador": confirmador.id,
            "consultor": consultor.id,
        }

    perfiles = PerfilModel()
    perfiles.asignar_lideres(ids["validador"], ids["lideres"][:2])
    perfiles.asignar_lideres(ids["confirmador"], ids["lideres"][1:])
    logger.info("Se crearon %d personas de prueba y la jerarquía de demostración", n_personas)
    return ids


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    inicializar_base_de_datos()
    print(crear_datos_demo())
