from datetime import datetime

import pandas as pd
import pytest

from controllers.import_processor import ExcelEngine, importar_archivo
from database.models import TipoDocumento
from models.persona_model import PersonaModel
from services.importacion import ImportacionService
from utilities.errores import ErrorValidacion


def escribir_excel(ruta, filas):
    pd.DataFrame(filas).to_excel(ruta, index=False, engine="openpyxl")
    return str(ruta)


def test_mapea_encabezados_con_acentos_y_alias(tmp_path):
    ruta = escribir_excel(tmp_path / "lote.xlsx", [
        {"Nombres": "Ana", "Apellidos": "Gómez", "Tipo de Documento": "CC", "Número de Documento": 1001,
         "Fecha de Nacimiento": datetime(1980, 4, 15), "Celular": 3001234567, "Mesa": 4},
    ])
    engine = ExcelEngine(ruta)
    engine.cargar()

    assert engine.mapear_columnas()
    assert engine.mapa_cols["numero_documento"] == "NUMERO DE DOCUMENTO"
    assert engine.mapa_cols["tipo_documento"] == "TIPO DE DOCUMENTO"
    assert engine.mapa_cols["numero_celular"] == "CELULAR"
    assert engine.mapa_cols["mesa_votacion"] == "MESA"


def test_filas_usan_la_numeracion_de_excel_y_saltan_vacias(tmp_path):
    ruta = escribir_excel(tmp_path / "lote.xlsx", [
        {"NOMBRES": "Ana", "APELLIDOS": "Gómez", "CEDULA": "1001"},
        {"NOMBRES": None, "APELLIDOS": None, "CEDULA": None},
        {"NOMBRES": "Luis", "APELLIDOS": "Pérez", "CEDULA": "1002"},
    ])
    engine = ExcelEngine(ruta)
    engine.cargar()
    engine.mapear_columnas()

    filas = engine.filas()
    assert [f.fila for f in filas] == [2, 4]
    assert filas[1].datos["nombres"] == "Luis"


def test_faltan_columnas_obligatorias(tmp_path, jerarquia):
    ruta = escribir_excel(tmp_path / "lote.xlsx", [{"NOMBRES": "Ana", "DIRECCION": "Calle 1"}])
    with pytest.raises(ErrorValidacion) as exc:
        importar_archivo(jerarquia["actores"]["lider"], ruta)
    assert set(exc.value.detalles) == {"apellidos", "numero_documento"}


def test_extension_no_soportada(tmp_path, jerarquia):
    ruta = tmp_path / "lote.csv"
    ruta.write_text("NOMBRES,APELLIDOS,CEDULA\nAna,Gómez,1\n")
    with pytest.raises(ErrorValidacion):
        importar_archivo(jerarquia["actores"]["lider"], str(ruta))


def test_importar_archivo_de_punta_a_punta(tmp_path, jerarquia, registro):
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    ruta = escribir_excel(tmp_path / "personas.xlsx", [
        {"NOMBRES": "Ana", "APELLIDOS": "Gómez", "TIPO DOCUMENTO": "Pasaporte", "DOCUMENTO": "ab-123",
         "FECHA DE NACIMIENTO": "1990-01-31"},
        {"NOMBRES": "Luis", "APELLIDOS": "", "TIPO DOCUMENTO": "CC", "DOCUMENTO": "555",
         "FECHA DE NACIMIENTO": None},
        {"NOMBRES": "Eva", "APELLIDOS": "Ruiz", "TIPO DOCUMENTO": None, "DOCUMENTO": "AB123",
         "FECHA DE NACIMIENTO": None},
    ])

    resultado = importar_archivo(a["lider"], ruta, servicio=ImportacionService(registro=registro))

    assert resultado.total_registros == 3
    assert resultado.creados == 1
    assert [(e.fila, e.etapa) for e in resultado.errores] == [(3, "validacion"), (4, "duplicado_archivo")]
    persona = PersonaModel().search(filters={"numero_documento": "AB123"}, first=True)
    assert persona.tipo_documento == TipoDocumento.PASAPORTE
    assert persona.fecha_nacimiento.isoformat() == "1990-01-31"
    assert persona.registrado_por_id == p["lider"].id
