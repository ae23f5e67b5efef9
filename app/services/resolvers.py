# app/services/resolvers.py
"""
Capacidades externas que consume el núcleo.

Los servicios reciben estas interfaces como argumentos; las implementaciones
por defecto leen las tablas de datos maestros y de documentos.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy import func
from sqlmodel import Session, select

from app.core.exceptions import NotFound
from app.models.catalog import Item, Unit
from app.models.document import DebtDocument, TransactionDocument
from app.models.enums import AttachmentOwner
from app.models.person import Person
from app.models.project import Project

PERSON = "person"
PROJECT = "project"
ITEM = "item"
UNIT = "unit"

_LABELS = {
    PERSON: "Persona",
    PROJECT: "Proyecto",
    ITEM: "Ítem",
    UNIT: "Unidad",
}


@dataclass(frozen=True)
class Reference:
    id: int
    title: str


class MasterDataResolver(Protocol):
    def exists(self, kind: str, id: int) -> bool: ...

    def get(self, kind: str, id: int) -> Reference: ...


class AttachmentCounter(Protocol):
    def count_attachments(self, owner_type: AttachmentOwner, owner_id: int) -> int: ...


class SqlMasterDataResolver:
    _models = {
        PERSON: Person,
        PROJECT: Project,
        ITEM: Item,
        UNIT: Unit,
    }

    def __init__(self, session: Session):
        self.session = session

    def _load(self, kind: str, id: int):
        model = self._models.get(kind)
        if model is None:
            raise ValueError(f"Tipo de dato maestro desconocido: {kind}")
        return self.session.get(model, id)

    def exists(self, kind: str, id: int) -> bool:
        return self._load(kind, id) is not None

    def get(self, kind: str, id: int) -> Reference:
        record = self._load(kind, id)
        if record is None:
            raise NotFound(f"{_LABELS[kind]} no encontrado (id: {id})")
        if kind == PERSON:
            return Reference(id=record.id, title=record.display_name)
        return Reference(id=record.id, title=record.title)


class SqlAttachmentCounter:
    def __init__(self, session: Session):
        self.session = session

    def count_attachments(self, owner_type: AttachmentOwner, owner_id: int) -> int:
        if owner_type == AttachmentOwner.debt:
            statement = select(func.count()).select_from(DebtDocument).where(DebtDocument.debt_id == owner_id)
        else:
            statement = (
                select(func.count())
                .select_from(TransactionDocument)
                .where(TransactionDocument.transaction_id == owner_id)
            )
        return self.session.exec(statement).one() or 0


def require(resolver: MasterDataResolver, kind: str, id: Optional[int]) -> None:
    """Lanza NotFound si la referencia no existe."""
    if id is None or not resolver.exists(kind, id):
        raise NotFound(f"{_LABELS[kind]} no encontrado (id: {id})")
