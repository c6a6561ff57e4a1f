"""Domain – column plan and the resumable export state."""
from __future__ import annotations

import dataclasses
import math
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Mapping, Sequence

from entry_export.domain.entries import FormSchema, parse_datetime
from entry_export.domain.request import ExportFormat, ExportRequest

__all__ = ["ColumnPlan", "ExportState", "ExportStatus", "Row", "SinkHandle", "total_steps_for"]

Row = dict[str, str]
"""Column id -> escaped cell value, in column plan order."""


def total_steps_for(count: int, page_size: int) -> int:
    return math.ceil(count / page_size) if count > 0 else 0


@dataclasses.dataclass(frozen=True)
class ColumnPlan:
    """Ordered column id -> label mapping shared by every step of a job."""

    columns: tuple[tuple[str, str], ...] = ()

    @classmethod
    def of(cls, pairs: Mapping[str, str] | Sequence[Sequence[str]]) -> "ColumnPlan":
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        return cls(tuple((str(k), str(v)) for k, v in items))

    def __iter__(self) -> Iterator[str]:
        return (col_id for col_id, _ in self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __contains__(self, col_id: object) -> bool:
        return any(col_id == c for c, _ in self.columns)

    def ids(self) -> list[str]:
        return [c for c, _ in self.columns]

    def labels(self) -> list[str]:
        return [label for _, label in self.columns]

    def label(self, col_id: str) -> str:
        for c, label in self.columns:
            if c == col_id:
                return label
        raise KeyError(col_id)

    def as_dict(self) -> dict[str, str]:
        return dict(self.columns)

    def to_list(self) -> list[list[str]]:
        return [[c, label] for c, label in self.columns]


class ExportStatus(str, Enum):
    CREATED = "created"
    STEPPING = "stepping"
    COMPLETE = "complete"


@dataclasses.dataclass(frozen=True)
class SinkHandle:
    """Where an artifact is being written and how much of it is committed.

    ``checkpoint`` is the committed byte length of the file being appended to.
    """

    job_id: str
    format: ExportFormat
    path: str
    checkpoint: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "format": self.format.value,
            "path": self.path,
            "checkpoint": self.checkpoint,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SinkHandle":
        return cls(
            job_id=data["job_id"],
            format=ExportFormat(data["format"]),
            path=data["path"],
            checkpoint=int(data.get("checkpoint", 0)),
        )


@dataclasses.dataclass(frozen=True)
class ExportState:
    """Persisted progress of one export job.

    Invariants: ``0 <= current_step <= total_steps`` and
    ``total_steps == ceil(count / request.page_size)``.
    """

    job_id: str
    request: ExportRequest
    form: FormSchema
    columns: ColumnPlan
    count: int
    sink: SinkHandle
    total_steps: int = -1
    current_step: int = 0
    status: ExportStatus = ExportStatus.CREATED
    location: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        expected = total_steps_for(self.count, self.request.page_size)
        if self.total_steps == -1:
            object.__setattr__(self, "total_steps", expected)
        elif self.total_steps != expected:
            raise ValueError(
                f"total_steps {self.total_steps} does not match count {self.count} "
                f"with page size {self.request.page_size}"
            )
        if not 0 <= self.current_step <= self.total_steps:
            raise ValueError(f"current_step {self.current_step} outside [0, {self.total_steps}]")

    @property
    def page_size(self) -> int:
        return self.request.page_size

    @property
    def offset(self) -> int:
        return self.current_step * self.page_size

    @property
    def is_complete(self) -> bool:
        return self.status is ExportStatus.COMPLETE

    @property
    def is_exhausted(self) -> bool:
        return self.offset >= self.count

    def advance(self, sink: SinkHandle) -> "ExportState":
        """State after one successful step."""
        return dataclasses.replace(
            self,
            current_step=min(self.current_step + 1, self.total_steps),
            status=ExportStatus.STEPPING,
            sink=sink,
        )

    def complete(self, location: str, sink: SinkHandle | None = None) -> "ExportState":
        return dataclasses.replace(
            self,
            status=ExportStatus.COMPLETE,
            location=location,
            sink=sink or self.sink,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "request": self.request.normalized(),
            "form": self.form.to_dict(),
            "columns": self.columns.to_list(),
            "count": self.count,
            "total_steps": self.total_steps,
            "current_step": self.current_step,
            "status": self.status.value,
            "sink": self.sink.to_dict(),
            "location": self.location,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExportState":
        return cls(
            job_id=data["job_id"],
            request=ExportRequest.from_dict(data["request"]),
            form=FormSchema.from_dict(data["form"]),
            columns=ColumnPlan.of(data["columns"]),
            count=int(data["count"]),
            total_steps=int(data["total_steps"]),
            current_step=int(data["current_step"]),
            status=ExportStatus(data["status"]),
            sink=SinkHandle.from_dict(data["sink"]),
            location=data.get("location"),
            created_at=parse_datetime(data["created_at"]) if data.get("created_at") else None,
        )
