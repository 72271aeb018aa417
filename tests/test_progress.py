from replicate_client import Prediction, Progress, parse_progress_from_logs
from replicate_client.progress import ProgressBarObserver

from .helpers import job_json

LOGS = """Using seed: 1234
  0%|          | 0/50 [00:00<?, ?it/s]
 18%|█▊        | 9/50 [00:01<00:05,  8.01it/s]
 76%|███████▌  | 38/50 [00:04<00:01,  8.60it/s]
Loading LoRA weights"""


def test_parse_progress_from_logs():
    assert parse_progress_from_logs(LOGS) == Progress(
        percentage=0.76, current=38, total=50
    )


def test_no_progress():
    assert parse_progress_from_logs("Booting model") is None
    assert parse_progress_from_logs("") is None
    assert parse_progress_from_logs(None) is None


def test_parse_progress_from_job():
    job = Prediction.from_json(job_json("processing", logs=LOGS))
    assert parse_progress_from_logs(job).current == 38


class FakeBar:
    instances = []

    def __init__(self, total, desc):
        self.total = total
        self.desc = desc
        self.n = 0
        self.closed = False
        FakeBar.instances.append(self)

    def update(self, n):
        self.n += n

    def close(self):
        self.closed = True


def test_progress_bar_observer():
    FakeBar.instances = []
    observer = ProgressBarObserver(FakeBar, description="acme/model")

    observer(Prediction.from_json(job_json("starting")))
    assert FakeBar.instances == []

    observer(Prediction.from_json(job_json("processing", logs=LOGS)))
    (bar,) = FakeBar.instances
    assert bar.desc == "acme/model"
    assert (bar.n, bar.total) == (38, 50)

    done = LOGS + "\n100%|██████████| 50/50 [00:06<00:00,  8.60it/s]"
    observer(Prediction.from_json(job_json("succeeded", logs=done)))
    assert bar.n == 50
    assert bar.closed
    assert observer.bar is None
