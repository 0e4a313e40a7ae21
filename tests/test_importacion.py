import pytest

from database.models import EstadoPersona, Persona
from database.schemas import FilaCandidata
from models.confirmacion_model import VotoConfirmacionModel
from models.importacion_model import ImportacionModel
from models.persona_model import PersonaModel
from services.confirmaciones import ConfirmacionService
from services.importacion import ImportacionService
from utilities.errores import ErrorValidacion, NoEncontrado, PermisoDenegado


def fila(n, documento, **extra):
    datos = {"nombres": "Ana", "apellidos": "Gómez", "numero_documento": documento}
    datos.update(extra)
    return FilaCandidata(fila=n, datos=datos)


def por_documento(documento) -> Persona:
    return PersonaModel().search(filters={"numero_documento": documento}, first=True)


@pytest.fixture
def servicio(registro):
    return ImportacionService(registro=registro)


def test_crea_personas_nuevas(jerarquia, fabrica, servicio, registro):
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    barrio = fabrica.barrio("B01")
    puesto = fabrica.puesto("P01")

    resultado = servicio.importar(a["lider"], [
        fila(2, "1.001", barrio="b01", puesto_votacion="P01", mesa_votacion=3),
        fila(3, "1002", fecha_nacimiento="15/04/1980"),
    ], archivo_nombre="lote.xlsx")

    assert resultado.creados == 2 and resultado.errores == [] and resultado.fallidos == 0
    nueva = por_documento("1001")
    assert nueva.estado == EstadoPersona.DATOS_PENDIENTES
    assert nueva.es_importado is True
    assert nueva.importacion_id == resultado.importacion_id
    assert nueva.registrado_por_id == p["lider"].id
    assert (nueva.barrio_id, nueva.puesto_votacion_id, nueva.mesa_votacion) == (barrio.id, puesto.id, "3")
    assert registro.registrados == [("1001", p["lider"].id), ("1002", p["lider"].id)]

    lote = ImportacionModel().get_by_id(resultado.importacion_id)
    assert (lote.total_registros, lote.registros_exitosos, lote.registros_fallidos) == (2, 2, 0)
    assert lote.archivo_nombre == "lote.xlsx"
    assert lote.usuario_id == p["lider"].id


def test_duplicado_en_el_archivo_referencia_la_primera_fila(jerarquia, servicio):
    """Escenario: el documento 123 aparece en las filas 3 y 7."""
    a = jerarquia["actores"]
    resultado = servicio.importar(a["lider"], [fila(3, "123"), fila(7, "123", nombres="Otra")])

    assert resultado.creados == 1
    assert len(resultado.errores) == 1
    error = resultado.errores[0]
    assert (error.fila, error.etapa) == (7, "duplicado_archivo")
    assert "fila 3" in error.mensaje
    assert por_documento("123").nombres == "Ana"


def test_persona_confirmada_se_omite_sin_cambios(jerarquia, fabrica, servicio, almacen, imagen):
    """Escenario: reimportar un documento con confirmación activa no toca a la persona."""
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    viejo = fabrica.barrio("B01")
    fabrica.barrio("B02")
    persona = fabrica.persona(p["lider"], documento="555", estado=EstadoPersona.CONFIRMADO,
                              barrio_id=viejo.id, mesa_votacion="1")
    confirmacion = ConfirmacionService(almacen=almacen).confirmar(a["lider"], persona.id, imagen)

    resultado = servicio.importar(a["lider"], [fila(2, "555", nombres="Cambiado", barrio="B02", mesa_votacion="9")])

    assert resultado.actualizados == 0
    assert [(o.fila, o.numero_documento, o.persona_id) for o in resultado.omitidos] == [(2, "555", persona.id)]
    assert resultado.documentos_omitidos == ["555"]
    assert resultado.fallidos == 1
    guardada = fabrica.recargar(persona.id)
    assert guardada.estado == EstadoPersona.COMPLETADO
    assert (guardada.nombres, guardada.barrio_id, guardada.mesa_votacion) == (persona.nombres, viejo.id, "1")
    assert VotoConfirmacionModel().activa(persona.id).id == confirmacion.id

    lote = ImportacionModel().get_by_id(resultado.importacion_id)
    assert lote.omitidos == [{"fila": 2, "numero_documento": "555", "persona_id": persona.id}]


def test_actualizacion_solo_toca_campos_logisticos(jerarquia, fabrica, servicio, registro):
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    fabrica.barrio("B01")
    nuevo_barrio = fabrica.barrio("B02")
    puesto = fabrica.puesto("P01")
    persona = fabrica.persona(p["lider"], documento="777", estado=EstadoPersona.VERIFICADO, mesa_votacion="1")

    resultado = servicio.importar(a["coordinador"], [
        fila(2, "777", nombres="Otro Nombre", apellidos="Otro", barrio="B02", puesto_votacion="P01",
             mesa_votacion="12", tipo_documento="CE"),
    ])

    assert resultado.actualizados == 1 and resultado.creados == 0
    guardada = fabrica.recargar(persona.id)
    assert (guardada.barrio_id, guardada.puesto_votacion_id, guardada.mesa_votacion) == (nuevo_barrio.id, puesto.id, "12")
    assert (guardada.nombres, guardada.apellidos) == (persona.nombres, persona.apellidos)
    assert guardada.tipo_documento == persona.tipo_documento
    assert guardada.estado == EstadoPersona.VERIFICADO
    assert guardada.registrado_por_id == p["lider"].id
    assert registro.registrados == []


def test_campos_logisticos_vacios_no_borran_los_existentes(jerarquia, fabrica, servicio):
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    barrio = fabrica.barrio("B01")
    persona = fabrica.persona(p["lider"], documento="888", barrio_id=barrio.id, mesa_votacion="4")

    servicio.importar(a["lider"], [fila(2, "888")])

    guardada = fabrica.recargar(persona.id)
    assert (guardada.barrio_id, guardada.mesa_votacion) == (barrio.id, "4")


def test_colision_fuera_de_alcance_es_error(jerarquia, fabrica, servicio):
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    ajena = fabrica.persona(p["ajeno"], documento="999")

    resultado = servicio.importar(a["lider"], [fila(2, "999", barrio="B01")])

    assert [(e.fila, e.etapa) for e in resultado.errores] == [(2, "duplicado_bd")]
    assert fabrica.recargar(ajena.id).registrado_por_id == p["ajeno"].id

    # El admin siempre va por la ruta de actualización
    fabrica.barrio("B01")
    resultado_admin = servicio.importar(a["admin"], [fila(2, "999", barrio="B01")])
    assert resultado_admin.actualizados == 1


def test_registro_externo_rechaza_con_atribucion(jerarquia, servicio, registro):
    a = jerarquia["actores"]
    registro.documentos["4444"] = "Campaña Azul"

    resultado = servicio.importar(a["lider"], [fila(2, "4444"), fila(3, "5555")])

    assert resultado.creados == 1
    assert resultado.errores[0].etapa == "registro_externo"
    assert "Campaña Azul" in resultado.errores[0].mensaje
    assert por_documento("4444") is None


def test_primera_etapa_que_descalifica_gana(jerarquia, fabrica, servicio):
    """Una fila inválida y con código desconocido solo reporta el error de validación."""
    a = jerarquia["actores"]
    resultado = servicio.importar(a["lider"], [
        fila(2, "1", nombres="", barrio="NOEXISTE"),
        fila(3, "2", barrio="NOEXISTE"),
        fila(4, "3", fecha_nacimiento="2999-01-01"),
    ])

    assert [(e.fila, e.etapa) for e in resultado.errores] == [(2, "validacion"), (3, "codigos"), (4, "validacion")]
    assert resultado.creados == 0
    lote = ImportacionModel().get_by_id(resultado.importacion_id)
    assert lote.registros_fallidos == 3
    assert [e["etapa"] for e in lote.errores] == ["validacion", "codigos", "validacion"]


def test_reimportar_es_idempotente(jerarquia, servicio):
    a = jerarquia["actores"]
    filas = [fila(2, "100"), fila(3, "200")]
    primero = servicio.importar(a["lider"], filas)
    segundo = servicio.importar(a["lider"], filas)

    assert (primero.creados, primero.actualizados) == (2, 0)
    assert (segundo.creados, segundo.actualizados) == (0, 2)
    assert PersonaModel().count({"numero_documento": ["100", "200"]}) == 2


def test_permisos_de_importacion(jerarquia, servicio):
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    with pytest.raises(PermisoDenegado):
        servicio.importar(a["validador"], [fila(2, "1")])
    with pytest.raises(PermisoDenegado):
        servicio.importar(a["lider"], [fila(2, "1")], registrado_por_id=p["lider2"].id)

    resultado = servicio.importar(a["coordinador"], [fila(2, "1")], registrado_por_id=p["lider2"].id)
    assert por_documento("1").registrado_por_id == p["lider2"].id
    assert resultado.creados == 1


def test_fecha_serial_fuera_de_rango_falla_solo_su_fila(jerarquia, servicio):
    a = jerarquia["actores"]
    resultado = servicio.importar(a["lider"], [fila(2, "111"), fila(3, "222", fecha_nacimiento=99999999)])

    assert resultado.creados == 1
    assert [(e.fila, e.etapa) for e in resultado.errores] == [(3, "validacion")]
    assert por_documento("222") is None
    lote = ImportacionModel().get_by_id(resultado.importacion_id)
    assert (lote.registros_exitosos, lote.registros_fallidos) == (1, 1)


def test_dueno_explicito_debe_ser_un_lider_existente(jerarquia, servicio):
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    with pytest.raises(NoEncontrado):
        servicio.importar(a["admin"], [fila(2, "333")], registrado_por_id="01HZZZZZZZZZZZZZZZZZZZZZZZ")
    with pytest.raises(ErrorValidacion):
        servicio.importar(a["admin"], [fila(2, "333")], registrado_por_id=p["validador"].id)

    assert por_documento("333") is None
    assert ImportacionModel().count() == 0


def test_lote_interrumpido_conserva_sus_contadores(jerarquia, fabrica, servicio, registro, monkeypatch):
    a, p = jerarquia["actores"], jerarquia["perfiles"]
    fabrica.persona(p["lider"], documento="444")

    def _falla(self, fila, resultado):
        raise RuntimeError("conexión perdida")

    monkeypatch.setattr(ImportacionService, "_actualizar", _falla)
    with pytest.raises(RuntimeError):
        servicio.importar(a["lider"], [fila(2, "111"), fila(3, "444"), fila(4, "")])

    lote = ImportacionModel().search(first=True)
    assert (lote.total_registros, lote.registros_exitosos, lote.registros_fallidos) == (3, 1, 1)
    assert [e["fila"] for e in lote.errores] == [4]
    assert por_documento("111").importacion_id == lote.id
    assert registro.registrados == [("111", p["lider"].id)]
