import pytest
import requests
from faker import Faker
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError

from database.conexion import Base, SessionLocal, unidad_de_trabajo
from database.models import Barrio, EstadoPersona, Perfil, Persona, PuestoVotacion, Rol, TipoDocumento
from database.schemas import ArchivoEvidencia, ArtefactoGuardado
from models.perfil_model import PerfilModel
from utilities.errores import ErrorDependencia

faker = Faker("es_CO")


@pytest.fixture(autouse=True)
def bd_temporal(tmp_path):
    """Cada prueba corre contra su propia base SQLite en disco."""
    engine = create_engine(f"sqlite:///{tmp_path / 'prueba.db'}")
    Base.metadata.create_all(engine)
    SessionLocal.configure(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def sin_red(monkeypatch):
    def _bloqueado(*args, **kwargs):
        raise AssertionError("Acceso a red no permitido en pruebas")

    monkeypatch.setattr(requests.sessions.Session, "request", _bloqueado)


@pytest.fixture
def falla_al_actualizar_persona():
    """Devuelve un activador que hace fallar todo UPDATE de personas dentro del flush."""
    def _falla(mapper, connection, target):
        raise OperationalError("UPDATE personas", {}, Exception("disk I/O error"))

    activa = []

    def activar():
        event.listen(Persona, "before_update", _falla)
        activa.append(True)

    yield activar
    if activa:
        event.remove(Persona, "before_update", _falla)


class FakeAlmacen:
    """Almacén en memoria; `fallar_guardar` simula un almacén caído."""

    def __init__(self):
        self.archivos = {}
        self.eliminados = []
        self.fallar_guardar = False

    def guardar(self, ruta, contenido, tipo_contenido=""):
        if self.fallar_guardar:
            raise ErrorDependencia("almacén no disponible")
        self.archivos[ruta] = contenido
        return ArtefactoGuardado(url=f"https://cdn.test/{ruta}", path=ruta)

    def eliminar(self, ruta):
        self.eliminados.append(ruta)
        self.archivos.pop(ruta, None)


class FakeRegistro:
    """Registro externo en memoria: {documento: etiqueta}."""

    def __init__(self, documentos=None, habilitado=True):
        self.documentos = dict(documentos or {})
        self.habilitado = habilitado
        self.registrados = []
        self.eliminados = []

    def consultar(self, numero_documento):
        if not self.habilitado or numero_documento not in self.documentos:
            return None
        return {"etiqueta": self.documentos[numero_documento]}

    def registrar(self, numero_documento, lider_id, etiqueta=None):
        self.registrados.append((numero_documento, lider_id))

    def eliminar(self, numero_documento):
        self.eliminados.append(numero_documento)


class Fabrica:
    """Crea perfiles, personas y catálogos directamente en la base de pruebas."""

    def perfil(self, rol: Rol, coordinador_id=None, lideres=None) -> Perfil:
        with unidad_de_trabajo() as session:
            perfil = Perfil(
                nombres=faker.first_name(),
                apellidos=faker.last_name(),
                numero_documento=str(faker.unique.random_number(digits=10, fix_len=True)),
                rol=rol,
                coordinador_id=coordinador_id,
            )
            session.add(perfil)
        if lideres:
            PerfilModel().asignar_lideres(perfil.id, [lider.id for lider in lideres])
        return perfil

    def actor(self, perfil: Perfil):
        return PerfilModel().obtener_actor(perfil.id)

    def persona(self, lider: Perfil, estado=EstadoPersona.DATOS_PENDIENTES, documento=None, **extra) -> Persona:
        with unidad_de_trabajo() as session:
            persona = Persona(
                nombres=faker.first_name(),
                apellidos=faker.last_name(),
                tipo_documento=TipoDocumento.CC,
                numero_documento=documento or str(faker.unique.random_number(digits=10, fix_len=True)),
                estado=estado,
                registrado_por_id=lider.id,
                **extra,
            )
            session.add(persona)
        return persona

    def barrio(self, codigo: str, nombre: str = "Centro") -> Barrio:
        with unidad_de_trabajo() as session:
            barrio = Barrio(codigo=codigo, nombre=nombre)
            session.add(barrio)
        return barrio

    def puesto(self, codigo: str, nombre: str = "Colegio") -> PuestoVotacion:
        with unidad_de_trabajo() as session:
            puesto = PuestoVotacion(codigo=codigo, nombre=nombre)
            session.add(puesto)
        return puesto

    @staticmethod
    def recargar(persona_id: str) -> Persona:
        with SessionLocal() as session:
            return session.get(Persona, persona_id)


@pytest.fixture
def fabrica():
    return Fabrica()


@pytest.fixture
def jerarquia(fabrica):
    """Admin, un coordinador con dos líderes, un líder ajeno, validador, confirmador y consultor."""
    admin = fabrica.perfil(Rol.ADMIN)
    coordinador = fabrica.perfil(Rol.COORDINADOR)
    lider = fabrica.perfil(Rol.LIDER, coordinador_id=coordinador.id)
    lider2 = fabrica.perfil(Rol.LIDER, coordinador_id=coordinador.id)
    otro_coordinador = fabrica.perfil(Rol.COORDINADOR)
    ajeno = fabrica.perfil(Rol.LIDER, coordinador_id=otro_coordinador.id)
    validador = fabrica.perfil(Rol.VALIDADOR, lideres=[lider])
    confirmador = fabrica.perfil(Rol.CONFIRMADOR, lideres=[lider])
    consultor = fabrica.perfil(Rol.CONSULTOR)
    perfiles = {
        "admin": admin,
        "coordinador": coordinador,
        "lider": lider,
        "lider2": lider2,
        "otro_coordinador": otro_coordinador,
        "ajeno": ajeno,
        "validador": validador,
        "confirmador": confirmador,
        "consultor": consultor,
    }
    return {
        "perfiles": perfiles,
        "actores": {k: fabrica.actor(p) for k, p in perfiles.items()},
    }


@pytest.fixture
def almacen():
    return FakeAlmacen()


@pytest.fixture
def registro():
    return FakeRegistro()


@pytest.fixture
def imagen():
    return ArchivoEvidencia(nombre="voto.jpg", contenido=b"\xff\xd8\xff\xe0" + b"0" * 128, tipo_contenido="image/jpeg")
