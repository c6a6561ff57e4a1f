"""Application export – file sinks that build artifacts across steps.

Both sinks keep a checkpoint in the :class:`SinkHandle` stored with the job
state.  ``rollback`` discards anything written after the checkpoint so a
retried step never duplicates rows.
"""
from __future__ import annotations

import asyncio
import csv
import dataclasses
import io
import json
import os
from pathlib import Path
from typing import Any, Protocol, Sequence, runtime_checkable

from entry_export.application.export.escaping import escape_value
from entry_export.config import ExportSettings
from entry_export.domain import ColumnPlan, ExportFormat, Row, SinkHandle
from entry_export.kernel.errors import DownstreamWriteError

__all__ = ["CsvFileSink", "FileSink", "SinkRegistry", "XlsxFileSink"]

BOM_UTF8 = "\ufeff"


def _require_openpyxl() -> Any:
    try:
        import openpyxl  # noqa: PLC0415
        return openpyxl
    except ImportError as exc:
        raise ImportError(
            "openpyxl is required for Excel export. "
            "Install it with: pip install openpyxl"
        ) from exc


@runtime_checkable
class FileSink(Protocol):
    """Port: incremental artifact writer."""

    async def open(self, job_id: str, columns: ColumnPlan) -> SinkHandle: ...

    async def append_rows(self, handle: SinkHandle, columns: ColumnPlan, rows: Sequence[Row]) -> SinkHandle: ...

    async def rollback(self, handle: SinkHandle) -> None: ...

    async def finalize(self, handle: SinkHandle, columns: ColumnPlan) -> str: ...

    async def cleanup(self, handle: SinkHandle) -> None: ...


def _append_at(path: Path, checkpoint: int, payload: bytes) -> int:
    """Write *payload* at byte *checkpoint*, dropping anything after it."""
    with path.open("r+b") as fh:
        fh.truncate(checkpoint)
        fh.seek(checkpoint)
        fh.write(payload)
        fh.flush()
        os.fsync(fh.fileno())
    return checkpoint + len(payload)


def _truncate_at(path: Path, checkpoint: int) -> None:
    if path.exists() and path.stat().st_size > checkpoint:
        with path.open("r+b") as fh:
            fh.truncate(checkpoint)


class CsvFileSink:
    """CSV artifact on local disk, one line per row, every cell quoted."""

    format = ExportFormat.CSV

    def __init__(self, directory: str | Path, *, bom: bool = False, delimiter: str = ",") -> None:
        self._directory = Path(directory)
        self._bom = bom
        self._delimiter = delimiter

    def path_for(self, job_id: str) -> Path:
        return self._directory / f"{job_id}{self.format.extension}"

    def _encode(self, rows: Sequence[Sequence[str]]) -> bytes:
        buf = io.StringIO()
        writer = csv.writer(
            buf, delimiter=self._delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n"
        )
        writer.writerows(rows)
        return buf.getvalue().encode("utf-8")

    def _write_header(self, path: Path, columns: ColumnPlan) -> int:
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self._encode([[escape_value(label) for label in columns.labels()]])
        if self._bom:
            data = BOM_UTF8.encode("utf-8") + data
        path.write_bytes(data)
        return len(data)

    async def open(self, job_id: str, columns: ColumnPlan) -> SinkHandle:
        path = self.path_for(job_id)
        try:
            size = await asyncio.to_thread(self._write_header, path, columns)
        except OSError as exc:
            raise DownstreamWriteError(f"Could not create {path.name}: {exc}", cause=exc) from exc
        return SinkHandle(job_id=job_id, format=self.format, path=str(path), checkpoint=size)

    async def append_rows(self, handle: SinkHandle, columns: ColumnPlan, rows: Sequence[Row]) -> SinkHandle:
        payload = self._encode([[row.get(col_id, "") for col_id in columns] for row in rows])
        try:
            checkpoint = await asyncio.to_thread(
                _append_at, Path(handle.path), handle.checkpoint, payload
            )
        except OSError as exc:
            raise DownstreamWriteError(f"Could not write to {Path(handle.path).name}: {exc}", cause=exc) from exc
        return dataclasses.replace(handle, checkpoint=checkpoint)

    async def rollback(self, handle: SinkHandle) -> None:
        try:
            await asyncio.to_thread(_truncate_at, Path(handle.path), handle.checkpoint)
        except OSError as exc:
            raise DownstreamWriteError(f"Could not roll back {Path(handle.path).name}: {exc}", cause=exc) from exc

    async def finalize(self, handle: SinkHandle, columns: ColumnPlan) -> str:
        await self.rollback(handle)
        return handle.path

    async def cleanup(self, handle: SinkHandle) -> None:
        return None


class XlsxFileSink:
    """XLSX artifact: rows spooled as JSON lines, workbook built on finalize.

    The spool lives next to the workbook as ``<job_id>.xlsx.jsonl`` and
    survives ``finalize``, so a final step can be rebuilt until ``cleanup``
    removes it.
    """

    format = ExportFormat.XLSX

    def __init__(self, directory: str | Path, *, sheet_title: str = "Entries") -> None:
        self._directory = Path(directory)
        self._sheet_title = sheet_title[:31]  # sheet name limit

    def path_for(self, job_id: str) -> Path:
        return self._directory / f"{job_id}{self.format.extension}"

    @staticmethod
    def spool_for(path: str | Path) -> Path:
        path = Path(path)
        return path.with_name(path.name + ".jsonl")

    @staticmethod
    def _encode(rows: Sequence[Sequence[str]]) -> bytes:
        return "".join(json.dumps(list(row), ensure_ascii=False) + "\n" for row in rows).encode("utf-8")

    def _create_spool(self, spool: Path) -> None:
        spool.parent.mkdir(parents=True, exist_ok=True)
        spool.write_bytes(b"")

    def _build_workbook(self, path: Path, checkpoint: int, columns: ColumnPlan) -> None:
        openpyxl = _require_openpyxl()
        from openpyxl.cell import WriteOnlyCell  # noqa: PLC0415
        from openpyxl.styles import Font  # noqa: PLC0415

        spool = self.spool_for(path)
        wb = openpyxl.Workbook(write_only=True)
        ws = wb.create_sheet(title=self._sheet_title)
        header = []
        for label in columns.labels():
            cell = WriteOnlyCell(ws, value=escape_value(label))
            cell.font = Font(bold=True)
            header.append(cell)
        ws.append(header)

        with spool.open("rb") as fh:
            for line in io.BytesIO(fh.read(checkpoint)):
                if line.strip():
                    ws.append(json.loads(line))
        wb.save(path)

    async def open(self, job_id: str, columns: ColumnPlan) -> SinkHandle:
        path = self.path_for(job_id)
        try:
            await asyncio.to_thread(self._create_spool, self.spool_for(path))
        except OSError as exc:
            raise DownstreamWriteError(f"Could not create {path.name}: {exc}", cause=exc) from exc
        return SinkHandle(job_id=job_id, format=self.format, path=str(path), checkpoint=0)

    async def append_rows(self, handle: SinkHandle, columns: ColumnPlan, rows: Sequence[Row]) -> SinkHandle:
        spool = self.spool_for(handle.path)
        payload = self._encode([[row.get(col_id, "") for col_id in columns] for row in rows])
        try:
            checkpoint = await asyncio.to_thread(_append_at, spool, handle.checkpoint, payload)
        except OSError as exc:
            raise DownstreamWriteError(f"Could not write to {spool.name}: {exc}", cause=exc) from exc
        return dataclasses.replace(handle, checkpoint=checkpoint)

    async def rollback(self, handle: SinkHandle) -> None:
        spool = self.spool_for(handle.path)
        try:
            await asyncio.to_thread(_truncate_at, spool, handle.checkpoint)
        except OSError as exc:
            raise DownstreamWriteError(f"Could not roll back {spool.name}: {exc}", cause=exc) from exc

    async def finalize(self, handle: SinkHandle, columns: ColumnPlan) -> str:
        path = Path(handle.path)
        if path.exists() and not self.spool_for(path).exists():
            return handle.path
        try:
            await asyncio.to_thread(self._build_workbook, path, handle.checkpoint, columns)
        except (OSError, ValueError) as exc:
            raise DownstreamWriteError(f"Could not build {path.name}: {exc}", cause=exc) from exc
        return handle.path

    async def cleanup(self, handle: SinkHandle) -> None:
        """Drop the spool once the completed state is persisted."""
        spool = self.spool_for(handle.path)
        try:
            await asyncio.to_thread(spool.unlink, missing_ok=True)
        except OSError as exc:
            raise DownstreamWriteError(f"Could not remove {spool.name}: {exc}", cause=exc) from exc


class SinkRegistry:
    """Pick the sink for an export format."""

    def __init__(self, sinks: Sequence[CsvFileSink | XlsxFileSink | FileSink]) -> None:
        self._sinks: dict[ExportFormat, FileSink] = {}
        for sink in sinks:
            self._sinks[ExportFormat(getattr(sink, "format"))] = sink

    @classmethod
    def local(cls, directory: str | Path, *, bom: bool = False) -> "SinkRegistry":
        return cls([CsvFileSink(directory, bom=bom), XlsxFileSink(directory)])

    @classmethod
    def from_settings(cls, settings: ExportSettings) -> "SinkRegistry":
        """Local sinks under ``settings.output_dir`` honouring ``csv_bom``."""
        return cls.local(settings.output_dir, bom=settings.csv_bom)

    def for_format(self, fmt: ExportFormat | str) -> FileSink:
        try:
            return self._sinks[ExportFormat(fmt)]
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unsupported export format: {fmt!r}") from exc
