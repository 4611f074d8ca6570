"""
Pytest configuration and shared fixtures.
"""

import itertools
import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from inference.backend import PollResult, RequestHandle  # noqa: E402
from inference.model import EmotionDetectionModel  # noqa: E402


TEST_LABELS = ["neutral", "happiness", "sadness", "surprise", "anger"]


def one_hot_rows(class_ids, num_labels=len(TEST_LABELS), score=0.9):
    """Output tensor (N, num_labels, 1, 1) whose argmax per row is class_ids[i]."""
    rest = (1.0 - score) / (num_labels - 1)
    out = np.full((len(class_ids), num_labels), rest, dtype=np.float32)
    for i, k in enumerate(class_ids):
        out[i, k] = score
    return out.reshape(len(class_ids), num_labels, 1, 1)


class FakeBackend:
    """
    Scriptable backend for lifecycle tests.

    By default batch position i is classified as label i % num_labels.
    """

    def __init__(
        self,
        outputs=None,
        num_labels=len(TEST_LABELS),
        fail_with=None,
        raise_on_submit=None,
        raise_on_wait=None,
        pending_polls=0,
    ):
        self.outputs = outputs
        self.num_labels = num_labels
        self.fail_with = fail_with
        self.raise_on_submit = raise_on_submit
        self.raise_on_wait = raise_on_wait
        self.pending_polls = pending_polls
        self.batches = []
        self.poll_calls = 0
        self.wait_calls = 0
        self._ids = itertools.count(1)

    def run_batch(self, images):
        if self.raise_on_submit is not None:
            raise self.raise_on_submit
        self.batches.append(images)
        return RequestHandle(request_id=next(self._ids), batch_size=len(images))

    def _result(self, handle):
        if self.fail_with is not None:
            return PollResult.failed(self.fail_with)
        if callable(self.outputs):
            return PollResult.done(self.outputs(self.batches[-1]))
        if self.outputs is not None:
            return PollResult.done(np.asarray(self.outputs))
        ids = [i % self.num_labels for i in range(handle.batch_size)]
        return PollResult.done(one_hot_rows(ids, self.num_labels))

    def poll(self, handle):
        self.poll_calls += 1
        if self.raise_on_wait is not None:
            raise self.raise_on_wait
        if self.pending_polls > 0:
            self.pending_polls -= 1
            return PollResult.pending()
        return self._result(handle)

    def wait(self, handle, timeout=None):
        self.wait_calls += 1
        if self.raise_on_wait is not None:
            raise self.raise_on_wait
        return self._result(handle)


@pytest.fixture
def emotion_model():
    """Model descriptor with a 32x32 RGB input and five labels."""
    return EmotionDetectionModel.create(
        labels=TEST_LABELS,
        input_size=(32, 32),
        max_batch_size=8,
        model_name="test-emotions",
    )


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def frame():
    """A 480x640 BGR frame with a gradient so crops differ."""
    img = np.zeros((480, 640, 3), dtype=np.uint8)
    img[:, :, 0] = np.arange(640, dtype=np.uint32) % 256
    img[:, :, 1] = (np.arange(480, dtype=np.uint32) % 256)[:, np.newaxis]
    return img


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "model": {
            "name": "emotions-recognition-retail-0003",
            "labels": list(TEST_LABELS),
            "input_shape": [1, 3, 64, 64],
            "output_shape": [1, 5, 1, 1],
            "max_batch_size": 16,
        },
        "inference": {
            "backend": "opencv",
            "blocking_fetch": True,
            "fetch_timeout": None,
            "filter_conditions": "",
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
model:
  labels: ["neutral", "happy", "sad", "surprise", "anger"]
  input_shape: [1, 3, 64, 64]
  max_batch_size: 16

inference:
  backend: "opencv"
  blocking_fetch: true

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir
