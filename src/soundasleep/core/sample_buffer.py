"""Fixed-capacity sliding window for the live EEG trace."""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterator, Tuple

import numpy as np

from .errors import GeneratorError
from .models import Sample

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 256
DISPLAY_RANGE = (-100.0, 100.0)

SampleGenerator = Callable[["SampleBuffer"], float]


class SampleBuffer:
    """
    Ring buffer that always holds exactly ``capacity`` samples.

    The buffer starts pre-filled with ``fill_value`` (sequences
    ``0..capacity-1``). Every :meth:`tick` overwrites the oldest slot, so the
    window slides by one sample in O(1). Sequence numbers are not stored:
    the window is contiguous, so slot ``i`` holds ``first_sequence + i``.

    Owned and mutated from a single thread (the Qt main thread); consumers
    get copies via :meth:`snapshot` / :meth:`values`.
    """

    __slots__ = ("_values", "_start", "_next_sequence", "_value_range")

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        fill_value: float = 0.0,
        *,
        value_range: Tuple[float, float] = DISPLAY_RANGE,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        lo, hi = float(value_range[0]), float(value_range[1])
        if not lo < hi:
            raise ValueError("value_range must be an increasing (low, high) pair")
        fill = float(fill_value)
        if not math.isfinite(fill):
            raise ValueError("fill_value must be finite")
        self._value_range = (lo, hi)
        self._values = np.full(int(capacity), min(hi, max(lo, fill)), dtype=np.float64)
        self._start = 0
        self._next_sequence = int(capacity)

    @classmethod
    def initialize(cls, capacity: int, fill_value: float = 0.0) -> "SampleBuffer":
        return cls(capacity, fill_value)

    # ------------------------------------------------------------------ ingest
    def tick(self, generator: SampleGenerator) -> Sample | None:
        """
        Ask ``generator`` for one value and slide the window by one sample.

        Returns the appended :class:`Sample`, or ``None`` when the generator
        failed or produced a non-finite value; in that case the buffer is
        left exactly as it was.
        """
        try:
            value = self._validate(generator(self))
        except GeneratorError as exc:
            logger.warning("Skipping sample tick: %s", exc)
            return None
        except Exception:
            logger.exception("Sample generator raised; skipping tick")
            return None
        return self._push(value)

    def _validate(self, raw: object) -> float:
        try:
            value = float(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise GeneratorError(f"generator returned non-numeric value {raw!r}") from exc
        if not math.isfinite(value):
            raise GeneratorError(f"generator returned non-finite value {value!r}")
        lo, hi = self._value_range
        return min(hi, max(lo, value))

    def _push(self, value: float) -> Sample:
        self._values[self._start] = value
        self._start = (self._start + 1) % self.capacity
        sample = Sample(self._next_sequence, value)
        self._next_sequence += 1
        return sample

    # ------------------------------------------------------------------- query
    @property
    def capacity(self) -> int:
        return int(self._values.shape[0])

    @property
    def value_range(self) -> Tuple[float, float]:
        return self._value_range

    @property
    def first_sequence(self) -> int:
        """Sequence number of the oldest visible sample."""
        return self._next_sequence - self.capacity

    @property
    def next_sequence(self) -> int:
        return self._next_sequence

    def __len__(self) -> int:
        return self.capacity

    def __getitem__(self, index: int) -> Sample:
        size = self.capacity
        if index < 0:
            index += size
        if index < 0 or index >= size:
            raise IndexError("SampleBuffer index out of range")
        physical = (self._start + index) % size
        return Sample(self.first_sequence + index, float(self._values[physical]))

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.snapshot())

    def oldest(self) -> Sample:
        return self[0]

    def latest(self) -> Sample:
        return self[-1]

    def values(self) -> np.ndarray:
        """Return the values oldest-first as a new ``float64`` array."""
        return np.roll(self._values, -self._start)

    def sequences(self) -> np.ndarray:
        first = self.first_sequence
        return np.arange(first, first + self.capacity, dtype=np.int64)

    def snapshot(self) -> Tuple[Sample, ...]:
        """Return an immutable, oldest-first copy of the window."""
        first = self.first_sequence
        return tuple(
            Sample(first + idx, float(value)) for idx, value in enumerate(self.values())
        )


class SyntheticEeg:
    """
    Stand-in EEG source: a slow sinusoid with phase jitter plus white noise.

    ``value = sin(n / 8 + U[0, 0.2)) * 40 + (U[0, 1) - 0.5) * 8`` where ``n``
    is the sequence number the new sample will receive.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        *,
        amplitude: float = 40.0,
        period_divisor: float = 8.0,
        phase_jitter: float = 0.2,
        noise: float = 8.0,
    ) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()
        self.amplitude = float(amplitude)
        self.period_divisor = max(1e-6, float(period_divisor))
        self.phase_jitter = float(phase_jitter)
        self.noise = float(noise)

    def __call__(self, buffer: SampleBuffer) -> float:
        phase = buffer.next_sequence / self.period_divisor
        jitter = self._rng.random() * self.phase_jitter
        noise = (self._rng.random() - 0.5) * self.noise
        return math.sin(phase + jitter) * self.amplitude + noise


__all__ = ["DEFAULT_CAPACITY", "DISPLAY_RANGE", "SampleBuffer", "SampleGenerator", "SyntheticEeg"]
