from datetime import date, datetime

import pytest

from database.models import TipoDocumento
from utilities.errores import ErrorValidacion
from utilities.sanitizer import Sanitizer
from utilities.validaciones import validar_datos_persona, validar_observacion

HOY = date(2026, 6, 1)


def test_normaliza_los_datos_de_una_fila():
    datos = validar_datos_persona({
        "nombres": "  Ana  María ",
        "apellidos": "Gómez",
        "numero_documento": 1712345.0,
        "tipo_documento": "pasaporte",
        "fecha_nacimiento": 29221,
        "barrio": " b-01 ",
        "mesa_votacion": 7.0,
        "profesion": float("nan"),
    }, hoy=HOY)

    assert datos["nombres"] == "Ana María"
    assert datos["numero_documento"] == "1712345"
    assert datos["tipo_documento"] == TipoDocumento.PASAPORTE
    assert datos["fecha_nacimiento"] == date(1980, 1, 1)
    assert datos["barrio"] == "B01"
    assert datos["mesa_votacion"] == "7"
    assert datos["profesion"] is None
    assert datos["puesto_votacion"] == ""


def test_tipo_documento_vacio_equivale_a_cc():
    datos = validar_datos_persona({"nombres": "A", "apellidos": "B", "numero_documento": "1"}, hoy=HOY)
    assert datos["tipo_documento"] == TipoDocumento.CC


def test_errores_por_campo():
    with pytest.raises(ErrorValidacion) as exc:
        validar_datos_persona({
            "nombres": "",
            "apellidos": None,
            "numero_documento": " ",
            "tipo_documento": "NIT",
            "fecha_nacimiento": "31/02/1990",
            "fecha_expedicion": date(2027, 1, 1),
        }, hoy=HOY)
    assert set(exc.value.detalles) == {
        "nombres", "apellidos", "numero_documento", "tipo_documento", "fecha_nacimiento", "fecha_expedicion"
    }
    assert exc.value.como_dict()["tipo"] == "validation"


@pytest.mark.parametrize("fecha, valida", [
    (date(2026, 6, 1), True),
    (date(2026, 6, 2), False),
    (date(1876, 6, 1), True),
    (date(1876, 5, 31), False),
])
def test_limites_de_fecha_de_nacimiento(fecha, valida):
    datos = {"nombres": "A", "apellidos": "B", "numero_documento": "1", "fecha_nacimiento": fecha}
    if valida:
        assert validar_datos_persona(datos, hoy=HOY)["fecha_nacimiento"] == fecha
    else:
        with pytest.raises(ErrorValidacion):
            validar_datos_persona(datos, hoy=HOY)


@pytest.mark.parametrize("valor, esperado", [
    ("2024-03-05", date(2024, 3, 5)),
    ("05/03/2024", date(2024, 3, 5)),
    (datetime(2024, 3, 5, 10, 30), date(2024, 3, 5)),
    ("", None),
])
def test_limpiar_fecha(valor, esperado):
    assert Sanitizer.limpiar_fecha(valor) == esperado


@pytest.mark.parametrize("valor", [99999999, float("inf"), -99999999])
def test_serial_de_excel_fuera_de_rango_es_error_de_valor(valor):
    with pytest.raises(ValueError):
        Sanitizer.limpiar_fecha(valor)


def test_serial_fuera_de_rango_es_error_de_campo():
    datos = {"nombres": "A", "apellidos": "B", "numero_documento": "1", "fecha_nacimiento": 99999999}
    with pytest.raises(ErrorValidacion) as exc:
        validar_datos_persona(datos, hoy=HOY)
    assert set(exc.value.detalles) == {"fecha_nacimiento"}


@pytest.mark.parametrize("documento", ['12"34', "12'34", "AB|CD", "1 || x=1"])
def test_documento_con_caracteres_no_alfanumericos(documento):
    with pytest.raises(ErrorValidacion) as exc:
        validar_datos_persona({"nombres": "A", "apellidos": "B", "numero_documento": documento}, hoy=HOY)
    assert set(exc.value.detalles) == {"numero_documento"}


def test_limpiar_texto_conserva_la_enie():
    assert Sanitizer.limpiar_texto("  Año   de   Expedición ") == "AÑO DE EXPEDICION"


def test_observacion():
    assert validar_observacion("  ok ") == "ok"
    assert len(validar_observacion("x" * 2000)) == 2000
    with pytest.raises(ErrorValidacion):
        validar_observacion(None)
