"""Admin data exports over the dashboard tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from errors import NotFoundError, ValidationError
from repositories.base import BaseRepository
from shared.datetime_utils import Clock, utc_now
from shared.export_utils import csv_bundle, rows_to_csv, to_json
from shared.logging import get_logger

log = get_logger(__name__)

ExportFormat = Literal["json", "csv"]

EXPORT_TABLES = ("business_profiles", "user_profiles", "team_members")


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    media_type: str
    filename: str


class ExportService:
    def __init__(
        self, tables: dict[str, BaseRepository], clock: Clock = utc_now
    ) -> None:
        self._tables = tables
        self._clock = clock

    def _stamp(self) -> str:
        return self._clock().strftime("%Y-%m-%d")

    async def _rows(self, table: str) -> list[dict]:
        repo = self._tables.get(table)
        if repo is None:
            raise NotFoundError(f"Unknown export table: {table}")
        return await repo.dump_all()

    async def export_all(self, fmt: ExportFormat) -> ExportFile:
        data = {table: await self._rows(table) for table in EXPORT_TABLES}
        log.info(
            "data_export_all",
            format=fmt,
            counts={table: len(rows) for table, rows in data.items()},
        )
        if fmt == "csv":
            return ExportFile(
                content=csv_bundle(data),
                media_type="application/zip",
                filename=f"formation-portal-export-{self._stamp()}.zip",
            )
        payload = {**data, "exported_at": self._clock().isoformat()}
        return ExportFile(
            content=to_json(payload).encode("utf-8"),
            media_type="application/json",
            filename=f"formation-portal-export-{self._stamp()}.json",
        )

    async def export_table(self, table: str, fmt: ExportFormat) -> ExportFile:
        rows = await self._rows(table)
        log.info("data_export_table", table=table, format=fmt, count=len(rows))
        if fmt == "csv":
            content = rows_to_csv(rows)
            if content is None:
                raise ValidationError(f"No data available to export for {table}")
            return ExportFile(
                content=content.encode("utf-8"),
                media_type="text/csv",
                filename=f"{table}-{self._stamp()}.csv",
            )
        return ExportFile(
            content=to_json(rows).encode("utf-8"),
            media_type="application/json",
            filename=f"{table}-{self._stamp()}.json",
        )
