from __future__ import annotations

from ..extensions import db


class StoredRecord(db.Model):
    """
    One record of one named collection.

    The record itself is kept as an opaque JSON document; only the collection
    name and the record's key are columns. ``seq`` preserves insertion order
    within a collection so that a clear-and-rewrite reproduces the tree order.
    """
    __tablename__ = "estate_records"
    __table_args__ = (
        db.Index("ix_estate_records_collection_seq", "collection", "seq"),
    )

    collection = db.Column(db.String(64), primary_key=True)
    record_key = db.Column(db.String(128), primary_key=True)
    seq = db.Column(db.Integer, nullable=False, default=0)
    data = db.Column(db.JSON, nullable=False)

    def to_dict(self) -> dict:
        return dict(self.data or {})
