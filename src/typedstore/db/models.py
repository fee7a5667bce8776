"""SQLAlchemy integration for typed stores.

Usage:
    class Base(DeclarativeBase):
        pass

    class Task(TypedStoreModel, Base):
        __tablename__ = "tasks"

        id: Mapped[int] = mapped_column(primary_key=True)
        params: Mapped[dict | None] = mapped_column(DocumentType)

    with typed_store(Task, "params") as s:
        s.field("task_id", "integer")

Documents are mutated in place by the accessors, which SQLAlchemy does not
see on its own. A ``before_flush`` listener compares each loaded document
with its snapshot and flags changed ones so they are written.
"""

from __future__ import annotations

import logging
from itertools import chain
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified, set_committed_value

from typedstore.store import TypedStoreMixin

logger = logging.getLogger(__name__)


class TypedStoreModel(TypedStoreMixin):
    """Mixin for declarative models carrying typed store documents."""

    def _assign_store_document(self, attribute: str, document: dict[str, Any]) -> None:
        # Persistent rows: creating an empty document or swapping in its
        # guarded copy must not schedule an UPDATE by itself.
        if inspect(self).has_identity:
            set_committed_value(self, attribute, document)
        else:
            setattr(self, attribute, document)

    def _loaded_store_attributes(self) -> list[str]:
        loaded = inspect(self).dict
        return [a for a in type(self).__typed_stores__ if a in loaded]


@event.listens_for(TypedStoreModel, "load", propagate=True)
def _on_load(target: TypedStoreModel, context: Any) -> None:
    target.load_typed_stores()


@event.listens_for(TypedStoreModel, "refresh", propagate=True)
def _on_refresh(target: TypedStoreModel, context: Any, attrs: Any) -> None:
    # attrs is None for a full refresh, else the keys that were reloaded
    target.load_typed_stores(attrs)


@event.listens_for(Session, "before_flush")
def _flag_changed_documents(session: Session, flush_context: Any, instances: Any) -> None:
    """Flag documents mutated in place since their last snapshot.

    In-place mutation emits no attribute events, so every persistent typed
    store model in the identity map is checked. Each check converts the
    loaded documents to JSON primitives, so a flush costs time proportional
    to the size of the typed store documents held by the session. Documents
    that were never loaded (deferred or expired) are skipped.
    """
    for obj in list(session.identity_map.values()):
        if not isinstance(obj, TypedStoreModel):
            continue
        for attribute in obj._loaded_store_attributes():
            if obj.store_attribute_changed(attribute):
                logger.debug(
                    "Flagging %s.%s as modified", type(obj).__name__, attribute
                )
                flag_modified(obj, attribute)


@event.listens_for(Session, "after_flush")
def _snapshot_flushed_documents(session: Session, flush_context: Any) -> None:
    for obj in chain(session.new, session.dirty):
        if isinstance(obj, TypedStoreModel):
            obj.commit_typed_stores()
