from dataclasses import dataclass, field
from typing import List, Any, Optional, FrozenSet

from database.models import Rol


@dataclass(frozen=True)
class Actor:
    """
    Contexto del actor ya autenticado que invoca una operación.
    Se pasa explícitamente a cada guardia y transición; el núcleo no consulta sesiones globales.
    """
    id: str
    rol: Rol
    coordinador_id: Optional[str] = None
    lideres_asignados_ids: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Alcance:
    """Conjunto de líderes cuyas personas puede tocar un actor."""
    universal: bool = False
    lideres: FrozenSet[str] = frozenset()

    def incluye(self, lider_id: Optional[str]) -> bool:
        return self.universal or (lider_id is not None and lider_id in self.lideres)


@dataclass
class ArchivoEvidencia:
    """Archivo de evidencia recibido por el caller (imagen de confirmación)."""
    nombre: str
    contenido: bytes
    tipo_contenido: str

    @property
    def tamano(self) -> int:
        return len(self.contenido)


@dataclass(frozen=True)
class ArtefactoGuardado:
    """Resultado del almacén de artefactos: URL pública y ruta interna."""
    url: str
    path: str


@dataclass
class FilaCandidata:
    """
    Fila externa (p. ej. de una hoja de cálculo) antes de validar.
    `fila` es la posición visible para el usuario (en Excel, la fila 1 es el encabezado).
    """
    fila: int
    datos: dict = field(default_factory=dict)


@dataclass
class ErrorFila:
    """Error estructurado de una fila del lote."""
    fila: int
    etapa: str       # 'validacion', 'duplicado_archivo', 'duplicado_bd', 'registro_externo', 'codigos', 'aplicacion'
    mensaje: str
    numero_documento: Optional[str] = None

    def como_dict(self) -> dict:
        return {
            "fila": self.fila,
            "etapa": self.etapa,
            "mensaje": self.mensaje,
            "numero_documento": self.numero_documento,
        }


@dataclass
class FilaOmitida:
    """Fila no aplicada porque la persona ya tiene una confirmación activa."""
    fila: int
    numero_documento: str
    persona_id: str

    def como_dict(self) -> dict:
        return {"fila": self.fila, "numero_documento": self.numero_documento, "persona_id": self.persona_id}


@dataclass
class ResultadoImportacion:
    """Resumen final de una corrida de reconciliación."""
    importacion_id: Optional[str] = None
    total_registros: int = 0
    creados: int = 0
    actualizados: int = 0
    omitidos: List[FilaOmitida] = field(default_factory=list)
    errores: List[ErrorFila] = field(default_factory=list)
    documentos_creados: List[str] = field(default_factory=list)

    @property
    def exitosos(self) -> int:
        return self.creados + self.actualizados

    @property
    def fallidos(self) -> int:
        return len(self.errores) + len(self.omitidos)

    @property
    def documentos_omitidos(self) -> List[str]:
        return [o.numero_documento for o in self.omitidos]


@dataclass
class FilaValidada:
    """Fila que superó la validación de esquema, con datos ya normalizados."""
    fila: int
    numero_documento: str
    datos: dict[str, Any]
    persona_id: Optional[str] = None          # destino en la ruta de actualización
    barrio_id: Optional[str] = None
    puesto_votacion_id: Optional[str] = None
