from __future__ import annotations

from ..extensions import db
from nexus.time_utils import format_timestamp


class StoredCollection(db.Model):
    """
    One named collection (or singleton record) of the record store.

    The payload is the whole collection serialized as JSON text; every save
    rewrites it. version_id gives per-collection optimistic locking, so two
    writers racing on the same collection surface a StaleDataError instead
    of silently losing an update.
    """
    __tablename__ = "record_collections"

    key = db.Column(db.String(128), primary_key=True)
    payload = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<StoredCollection key={self.key!r} version={self.version_id}>"

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "size": len(self.payload or ""),
            "version_id": self.version_id,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }
