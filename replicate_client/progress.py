import re
from dataclasses import dataclass
from typing import Optional, Union

import tqdm

from .job import Job

# tqdm style: " 76%|█████████     | 7568/10000 [00:33<00:10, 229.00it/s]"
PROGRESS_PATTERN = re.compile(r"^\s*(\d+)%\s*\|.+?\|\s*(\d+)/(\d+)")


@dataclass(frozen=True)
class Progress:
    percentage: float
    current: int
    total: int


def parse_progress_from_logs(logs: Union[Job, str, None]) -> Optional[Progress]:
    """Returns the most recent progress bar found in a job's logs, or None."""
    if isinstance(logs, Job):
        logs = logs.logs
    if not logs or not isinstance(logs, str):
        return None

    for line in reversed(logs.split("\n")):
        match = PROGRESS_PATTERN.match(line)
        if match:
            return Progress(
                percentage=int(match.group(1)) / 100,
                current=int(match.group(2)),
                total=int(match.group(3)),
            )
    return None


class ProgressBarObserver:
    """Polling observer mirroring the progress a job reports in its logs on a tqdm bar."""

    def __init__(self, tqdm_bar=tqdm.tqdm, description: Optional[str] = None):
        self.tqdm_bar = tqdm_bar
        self.description = description
        self.bar = None

    def __call__(self, job: Job):
        progress = parse_progress_from_logs(job)
        if progress is not None:
            if self.bar is None:
                self.bar = self.tqdm_bar(
                    total=progress.total, desc=self.description or job.id
                )
            if self.bar.total != progress.total:
                self.bar.total = progress.total
            self.bar.update(progress.current - self.bar.n)
        if job.is_terminal:
            self.close()

    def close(self):
        if self.bar is not None:
            self.bar.close()
            self.bar = None
