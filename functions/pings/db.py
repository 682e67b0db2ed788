"""
Document store abstraction: in-memory, DynamoDB and SQL implementations.

Every table is addressed by a partition key and an optional sort key. Records
are plain dicts and each write is a single put of the whole record.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Mapping, Optional, Protocol

import boto3
from boto3.dynamodb.conditions import Key
from sqlalchemy import JSON, Column, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from pings.config import Settings


class DocumentStore(Protocol):
    """Interface for record access by primary key."""

    def put(self, table: str, item: dict) -> None:
        ...

    def get(self, table: str, key: dict) -> Optional[dict]:
        ...

    def delete(self, table: str, key: dict) -> None:
        ...

    def query(
        self,
        table: str,
        partition_value: str,
        *,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> list[dict]:
        ...


@dataclass(frozen=True)
class KeySchema:
    partition_key: str
    sort_key: Optional[str] = None

    def key_of(self, item: Mapping) -> tuple[str, str]:
        """Return (partition, sort) values; sort is "" for single-key tables."""
        partition = item.get(self.partition_key)
        if partition in (None, ""):
            raise ValueError(f"Missing key attribute: {self.partition_key}")
        if self.sort_key is None:
            return str(partition), ""
        sort = item.get(self.sort_key)
        if sort in (None, ""):
            raise ValueError(f"Missing key attribute: {self.sort_key}")
        return str(partition), str(sort)

    def key_dict(self, item: Mapping) -> dict:
        partition, sort = self.key_of(item)
        key = {self.partition_key: partition}
        if self.sort_key is not None:
            key[self.sort_key] = sort
        return key


# Logical table name -> key layout. Physical names come from Settings.
TABLE_KEYS: Dict[str, KeySchema] = {
    "checkins": KeySchema("userId", "timestamp"),
    "medications": KeySchema("userId", "timestamp"),
    "photos": KeySchema("photoId"),
    "family": KeySchema("userId"),
    "users": KeySchema("userId"),
    "tokens": KeySchema("userId", "deviceToken"),
}


def key_schemas_for(settings: Settings) -> Dict[str, KeySchema]:
    """Map the configured physical table names onto their key layouts."""
    names = settings.table_names()
    return {names[logical]: schema for logical, schema in TABLE_KEYS.items()}


class _SchemaLookup:
    schemas: Dict[str, KeySchema]

    def schema_for(self, table: str) -> KeySchema:
        try:
            return self.schemas[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None


class InMemoryDocumentStore(_SchemaLookup):
    """Simple in-memory document store for development and tests."""

    def __init__(self, schemas: Mapping[str, KeySchema]):
        self.schemas = dict(schemas)
        self.tables: Dict[str, Dict[tuple[str, str], dict]] = {}

    def put(self, table: str, item: dict) -> None:
        key = self.schema_for(table).key_of(item)
        self.tables.setdefault(table, {})[key] = copy.deepcopy(item)

    def get(self, table: str, key: dict) -> Optional[dict]:
        row = self.tables.get(table, {}).get(self.schema_for(table).key_of(key))
        return copy.deepcopy(row) if row is not None else None

    def delete(self, table: str, key: dict) -> None:
        self.tables.get(table, {}).pop(self.schema_for(table).key_of(key), None)

    def query(
        self,
        table: str,
        partition_value: str,
        *,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> list[dict]:
        self.schema_for(table)
        matches = [
            (sort, row)
            for (partition, sort), row in self.tables.get(table, {}).items()
            if partition == partition_value
        ]
        matches.sort(key=lambda pair: pair[0], reverse=newest_first)
        rows = [copy.deepcopy(row) for _, row in matches]
        return rows[:limit] if limit is not None else rows

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.tables.clear()


def to_dynamo_item(item: dict) -> dict:
    """DynamoDB rejects floats; numbers are written as Decimal."""
    return json.loads(json.dumps(item), parse_float=Decimal)


def from_dynamo_value(value):
    """Turn boto3's Decimal numbers back into int/float, recursively."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {key: from_dynamo_value(inner) for key, inner in value.items()}
    if isinstance(value, list):
        return [from_dynamo_value(inner) for inner in value]
    return value


@dataclass
class DynamoDocumentStore(_SchemaLookup):
    """
    DynamoDB-backed store. Table key layouts must match ``schemas``.
    """

    schemas: Dict[str, KeySchema]
    region: Optional[str] = None
    endpoint: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    def __post_init__(self):
        self._resource = boto3.resource(
            "dynamodb",
            region_name=self.region,
            endpoint_url=self.endpoint,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def _table(self, table: str):
        self.schema_for(table)
        return self._resource.Table(table)

    def put(self, table: str, item: dict) -> None:
        self._table(table).put_item(Item=to_dynamo_item(item))

    def get(self, table: str, key: dict) -> Optional[dict]:
        key = self.schema_for(table).key_dict(key)
        response = self._table(table).get_item(Key=key)
        item = response.get("Item")
        return from_dynamo_value(item) if item is not None else None

    def delete(self, table: str, key: dict) -> None:
        key = self.schema_for(table).key_dict(key)
        self._table(table).delete_item(Key=key)

    def query(
        self,
        table: str,
        partition_value: str,
        *,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> list[dict]:
        schema = self.schema_for(table)
        params = {
            "KeyConditionExpression": Key(schema.partition_key).eq(partition_value),
            "ScanIndexForward": not newest_first,
        }
        if limit is not None:
            params["Limit"] = limit
        items: list[dict] = []
        while True:
            response = self._table(table).query(**params)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key or (limit is not None and len(items) >= limit):
                break
            params["ExclusiveStartKey"] = last_key
        items = [from_dynamo_value(item) for item in items]
        return items[:limit] if limit is not None else items


class SqlDocumentStore(_SchemaLookup):
    """
    SQLAlchemy-backed store keeping every logical table in one ``documents``
    table. Accepts any SQLAlchemy URL (e.g., Postgres, or SQLite for tests).
    """

    def __init__(self, database_url: str, schemas: Mapping[str, KeySchema]):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentStore")
        self.schemas = dict(schemas)
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _row_key(self, table: str, item: Mapping) -> tuple[str, str, str]:
        partition, sort = self.schema_for(table).key_of(item)
        return table, partition, sort

    def put(self, table: str, item: dict) -> None:
        row_key = self._row_key(table, item)
        with self.Session() as session:
            existing = session.get(DocumentRow, row_key)
            if existing:
                existing.data = item
            else:
                session.add(
                    DocumentRow(
                        table_name=row_key[0],
                        partition_value=row_key[1],
                        sort_value=row_key[2],
                        data=item,
                    )
                )
            session.commit()

    def get(self, table: str, key: dict) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(DocumentRow, self._row_key(table, key))
            return row.data if row else None

    def delete(self, table: str, key: dict) -> None:
        with self.Session() as session:
            row = session.get(DocumentRow, self._row_key(table, key))
            if row:
                session.delete(row)
                session.commit()

    def query(
        self,
        table: str,
        partition_value: str,
        *,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> list[dict]:
        self.schema_for(table)
        order = (
            DocumentRow.sort_value.desc()
            if newest_first
            else DocumentRow.sort_value.asc()
        )
        stmt = (
            select(DocumentRow)
            .where(
                DocumentRow.table_name == table,
                DocumentRow.partition_value == partition_value,
            )
            .order_by(order)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.Session() as session:
            return [row.data for row in session.execute(stmt).scalars()]


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    table_name = Column(String, primary_key=True)
    partition_value = Column(String, primary_key=True)
    sort_value = Column(String, primary_key=True, default="")
    data = Column("document", JSON, nullable=False)
