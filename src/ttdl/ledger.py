"""Append-only record of per-URL outcomes for the session summary."""

from __future__ import annotations

from ttdl.config import OutcomeStatus
from ttdl.models import OutcomeRecord


class SessionLedger:
    def __init__(self) -> None:
        self._records: list[OutcomeRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def record(self, outcome: OutcomeRecord) -> None:
        self._records.append(outcome)

    def summary(self) -> tuple[OutcomeRecord, ...]:
        return tuple(self._records)

    @property
    def succeeded(self) -> int:
        return sum(1 for record in self._records if record.status == OutcomeStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return len(self._records) - self.succeeded
