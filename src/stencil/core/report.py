from __future__ import annotations

"""
Render report: what a render did and where the time went.

Filled in by the step executor, the walker, the include action and the
commit phase; returned to the caller inside the render result.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class RenderReport:
    started_at: float = field(default_factory=time.perf_counter)
    finished_at: float | None = None
    duration_s: float | None = None

    steps_run: int = 0
    steps_skipped: int = 0
    steps_by_action: Dict[str, int] = field(default_factory=dict)

    files_included: int = 0
    files_modified: int = 0
    files_committed: int = 0

    time_by_stage: Dict[str, float] = field(
        default_factory=lambda: {
            'steps': 0.0,
            'commit_dry_run': 0.0,
            'commit': 0.0,
        }
    )

    errors: List[str] = field(default_factory=list)

    def mark_step(self, action: str, *, skipped: bool = False) -> None:
        if skipped:
            self.steps_skipped += 1
            return
        self.steps_run += 1
        self.steps_by_action[action] = self.steps_by_action.get(action, 0) + 1

    def add_time(self, stage: str, seconds: float) -> None:
        self.time_by_stage[stage] = self.time_by_stage.get(stage, 0.0) + seconds

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def finish(self) -> None:
        self.finished_at = time.perf_counter()
        self.duration_s = self.finished_at - self.started_at

    def to_json(self, *, indent: int = 2) -> str:
        return json.dumps(
            {
                'started_at': self.started_at,
                'finished_at': self.finished_at,
                'duration_s': self.duration_s,
                'steps_run': self.steps_run,
                'steps_skipped': self.steps_skipped,
                'steps_by_action': self.steps_by_action,
                'files_included': self.files_included,
                'files_modified': self.files_modified,
                'files_committed': self.files_committed,
                'time_by_stage': self.time_by_stage,
                'errors': self.errors,
            },
            indent=indent,
        )


class StageTimer:
    def __init__(self, report: RenderReport, stage: str):
        self._report = report
        self._stage = stage
        self._t0: float | None = None

    def __enter__(self):
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._t0 is not None:
            self._report.add_time(self._stage, time.perf_counter() - self._t0)
        return False
