"""
Repositorio Postgres (psycopg) para el motor de sincronizacion.

Operaciones que el motor necesita del almacenamiento (y ninguna otra):
- lookup por campo de enlace (ID externo)
- lookup secundario por email
- insert / update de una entidad
- actualizacion del estado de sync
- advisory lock por categoria para evitar corridas simultaneas

Cada registro se confirma por separado: el caller controla commits.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from akemisflow.shared.constants.sync_constants import SyncStatus
from akemisflow.shared.exceptions.sync import PersistenceError

from .sync_config import EntitySyncConfig
from .types import utc_now


def _adapt(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return Jsonb(value)
    return value


class PostgresEntityRepository:
    def __init__(self, dsn: str) -> None:
        self._dsn = dsn

    def connect(self) -> psycopg.Connection:
        """
        Abre conexion (autocommit False). El caller controla commits.
        """
        try:
            return psycopg.connect(self._dsn, row_factory=dict_row)
        except psycopg.OperationalError as e:
            raise PersistenceError(
                f"No se pudo conectar a Postgres: {e}. "
                f"Verifica que DATABASE_URL sea accesible desde donde ejecutas el sync."
            ) from e

    def try_advisory_lock(self, conn: psycopg.Connection, lock_key: int) -> bool:
        """
        Evita ejecuciones simultaneas del mismo job.
        """
        row = self._fetch_one(conn, "SELECT pg_try_advisory_lock(%s) AS locked", (lock_key,))
        return bool(row and row.get("locked"))

    def release_advisory_lock(self, conn: psycopg.Connection, lock_key: int) -> None:
        self._fetch_one(conn, "SELECT pg_advisory_unlock(%s) AS unlocked", (lock_key,))

    def commit(self, conn: psycopg.Connection) -> None:
        try:
            conn.commit()
        except psycopg.Error as e:
            raise PersistenceError(f"Commit fallido: {e}") from e

    def rollback(self, conn: psycopg.Connection) -> None:
        try:
            conn.rollback()
        except psycopg.Error as e:
            raise PersistenceError(f"Rollback fallido: {e}") from e

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    def find_by_id(
        self, conn: psycopg.Connection, *, config: EntitySyncConfig, entity_id: str
    ) -> Optional[dict[str, Any]]:
        return self._fetch_one(
            conn,
            f'SELECT * FROM {self._table(config)} WHERE "id" = %s',
            (entity_id,),
        )

    def find_by_link_id(
        self, conn: psycopg.Connection, *, config: EntitySyncConfig, external_id: str
    ) -> Optional[dict[str, Any]]:
        """Lookup primario: por el ID externo guardado en el campo de enlace."""
        return self._fetch_one(
            conn,
            f'SELECT * FROM {self._table(config)} WHERE "{config.link_column}" = %s LIMIT 1',
            (external_id,),
        )

    def find_by_email(
        self, conn: psycopg.Connection, *, config: EntitySyncConfig, email: str, limit: int = 2
    ) -> list[dict[str, Any]]:
        """
        Lookup secundario: filas sin enlace cuyo email coincide (case-insensitive).

        Solo considera filas con el campo de enlace vacio, para no reasignar
        nunca un enlace existente. Retorna hasta `limit` candidatos para que el
        caller pueda detectar ambiguedad.
        """
        sql = (
            f'SELECT * FROM {self._table(config)} '
            f'WHERE lower("email") = lower(%s) AND "{config.link_column}" IS NULL'
        )
        params: list[Any] = [email]
        scope = config.email_scope
        if scope and scope.exclude:
            sql += f' AND ("{scope.column}" IS NULL OR NOT ("{scope.column}" = ANY(%s)))'
            params.append(list(scope.values))
        elif scope:
            sql += f' AND "{scope.column}" = ANY(%s)'
            params.append(list(scope.values))
        sql += ' ORDER BY "created_at" LIMIT %s'
        params.append(limit)

        try:
            with conn.cursor() as cur:
                cur.execute(sql, tuple(params))
                return list(cur.fetchall())
        except psycopg.Error as e:
            raise PersistenceError(f"Error buscando {config.entity_label} por email: {e}") from e

    # ------------------------------------------------------------------
    # Escrituras
    # ------------------------------------------------------------------

    def insert_entity(
        self, conn: psycopg.Connection, *, config: EntitySyncConfig, row: dict[str, Any]
    ) -> dict[str, Any]:
        now = utc_now()
        values = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **row}
        columns = list(values.keys())
        cols_sql = ", ".join(f'"{c}"' for c in columns)
        placeholders = ", ".join(["%s"] * len(columns))
        sql = f"INSERT INTO {self._table(config)} ({cols_sql}) VALUES ({placeholders}) RETURNING *"

        created = self._fetch_one(conn, sql, tuple(_adapt(values[c]) for c in columns))
        if created is None:
            raise PersistenceError(f"INSERT de {config.entity_label} no devolvio fila")
        return created

    def update_entity(
        self,
        conn: psycopg.Connection,
        *,
        config: EntitySyncConfig,
        entity_id: str,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        """
        UPDATE parcial: solo las columnas presentes en `row` se escriben.
        """
        values = {c: v for c, v in row.items() if c != "id"}
        values["updated_at"] = utc_now()
        columns = list(values.keys())
        set_sql = ", ".join(f'"{c}" = %s' for c in columns)
        sql = f'UPDATE {self._table(config)} SET {set_sql} WHERE "id" = %s RETURNING *'

        updated = self._fetch_one(conn, sql, (*(_adapt(values[c]) for c in columns), entity_id))
        if updated is None:
            raise PersistenceError(f"{config.entity_label} {entity_id} desaparecio durante el UPDATE")
        return updated

    def update_sync_status(
        self,
        conn: psycopg.Connection,
        *,
        config: EntitySyncConfig,
        entity_id: str,
        status: SyncStatus,
        error: Optional[str],
    ) -> None:
        now = utc_now()
        sql = (
            f'UPDATE {self._table(config)} '
            f'SET "airwallex_sync_status" = %s, "airwallex_sync_error" = %s, '
            f'"airwallex_last_sync_at" = %s, "updated_at" = %s '
            f'WHERE "id" = %s'
        )
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (status.value, error, now, now, entity_id))
        except psycopg.Error as e:
            raise PersistenceError(f"Error actualizando estado de {config.entity_label} {entity_id}: {e}") from e

    # ------------------------------------------------------------------

    @staticmethod
    def _table(config: EntitySyncConfig) -> str:
        return f'"{config.target_schema}"."{config.target_table}"'

    @staticmethod
    def _fetch_one(conn: psycopg.Connection, sql: str, params: tuple[Any, ...]) -> Optional[dict[str, Any]]:
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchone()
        except psycopg.Error as e:
            raise PersistenceError(str(e)) from e
