import pytest

from database.models import Rol
from models.perfil_model import PerfilModel
from utilities.errores import NoEncontrado


def test_alcance_por_rol(jerarquia):
    p, a = jerarquia["perfiles"], jerarquia["actores"]

    assert PerfilModel.resolver_alcance(a["admin"]).universal
    assert PerfilModel.resolver_alcance(a["consultor"]).universal

    coord = PerfilModel.resolver_alcance(a["coordinador"])
    assert not coord.universal
    assert coord.lideres == {p["coordinador"].id, p["lider"].id, p["lider2"].id}

    assert PerfilModel.resolver_alcance(a["lider"]).lideres == {p["lider"].id}
    assert PerfilModel.resolver_alcance(a["validador"]).lideres == {p["lider"].id}
    assert PerfilModel.resolver_alcance(a["confirmador"]).incluye(p["lider"].id)
    assert not PerfilModel.resolver_alcance(a["confirmador"]).incluye(p["lider2"].id)


def test_obtener_actor_carga_lideres_asignados(jerarquia):
    p = jerarquia["perfiles"]
    actor = PerfilModel().obtener_actor(p["validador"].id)
    assert actor.rol == Rol.VALIDADOR
    assert actor.lideres_asignados_ids == frozenset({p["lider"].id})

    lider = PerfilModel().obtener_actor(p["lider"].id)
    assert lider.coordinador_id == p["coordinador"].id
    assert lider.lideres_asignados_ids == frozenset()


def test_obtener_actor_inexistente_o_inactivo(fabrica):
    with pytest.raises(NoEncontrado):
        PerfilModel().obtener_actor("01HZZZZZZZZZZZZZZZZZZZZZZZ")

    inactivo = fabrica.perfil(Rol.LIDER)
    PerfilModel().update(inactivo.id, {"activo": False})
    with pytest.raises(NoEncontrado):
        PerfilModel().obtener_actor(inactivo.id)


def test_reasignar_lideres_reemplaza_el_conjunto(jerarquia):
    p = jerarquia["perfiles"]
    PerfilModel().asignar_lideres(p["validador"].id, [p["lider2"].id, p["lider2"].id])
    actor = PerfilModel().obtener_actor(p["validador"].id)
    assert actor.lideres_asignados_ids == frozenset({p["lider2"].id})


def test_cambiar_los_vinculos_cambia_el_acceso(jerarquia, fabrica):
    from database.conexion import unidad_de_trabajo
    from services.acceso import cargar_persona

    p, a = jerarquia["perfiles"], jerarquia["actores"]
    persona = fabrica.persona(p["lider2"])

    def visible(actor):
        try:
            with unidad_de_trabajo() as session:
                cargar_persona(session, actor, persona.id)
            return True
        except NoEncontrado:
            return False

    assert visible(a["coordinador"]) and not visible(a["otro_coordinador"])
    assert not visible(a["validador"])

    PerfilModel().update(p["lider2"].id, {"coordinador_id": p["otro_coordinador"].id})
    PerfilModel().asignar_lideres(p["validador"].id, [p["lider"].id, p["lider2"].id])

    assert not visible(a["coordinador"]) and visible(a["otro_coordinador"])
    assert visible(fabrica.actor(p["validador"]))


def test_alcance_y_guardia_coinciden_para_perfiles_no_lideres(jerarquia, fabrica):
    from database.conexion import unidad_de_trabajo
    from services.acceso import cargar_persona

    p, a = jerarquia["perfiles"], jerarquia["actores"]
    subordinado = fabrica.perfil(Rol.VALIDADOR, coordinador_id=p["coordinador"].id)
    persona = fabrica.persona(subordinado)

    alcance = PerfilModel.resolver_alcance(a["coordinador"])
    assert not alcance.incluye(subordinado.id)
    with pytest.raises(NoEncontrado):
        with unidad_de_trabajo() as session:
            cargar_persona(session, a["coordinador"], persona.id)
