# history.py
"""
Bounded trajectory log.

History keeps one full copy of the position array per tick so the run
can be replayed as vector paths. Its memory is capped: once the next
snapshot would push it over the cap, the oldest snapshot is dropped.
"""
import logging
from collections import deque
import numpy as np

# --- Data Contracts ---
#
# class History:
#   - __init__(self, initial: np.ndarray, memory_cap: int):
#     - Inputs:
#       - initial: (N, 2) position array, stored as the first snapshot.
#       - memory_cap: maximum total bytes of all stored snapshots.
#     - Invariants:
#       - self.nbytes <= memory_cap whenever one snapshot fits in the cap.
#       - At least one snapshot is always held.
#       - Snapshots are evicted strictly oldest first.


class History:
    """
    Fixed-capacity ring buffer of position snapshots.
    """
    def __init__(self, initial: np.ndarray, memory_cap: int):
        self.snapshot_bytes = initial.nbytes
        self.capacity = max(1, memory_cap // max(self.snapshot_bytes, 1))
        self.snapshots = deque([initial.copy()], maxlen=self.capacity)
        self.evicted = 0

        logging.debug(
            f"History capacity: {self.capacity} snapshots of "
            f"{self.snapshot_bytes} bytes (cap {memory_cap} bytes)."
        )

    def append(self, positions: np.ndarray) -> None:
        """Stores a copy of `positions`, evicting the oldest snapshot if full."""
        if len(self.snapshots) == self.capacity:
            self.evicted += 1
            if self.evicted == 1:
                logging.info(
                    f"History reached its capacity of {self.capacity} snapshots; "
                    f"oldest snapshots are now dropped."
                )
        self.snapshots.append(positions.copy())

    @property
    def nbytes(self) -> int:
        return sum(s.nbytes for s in self.snapshots)

    def __len__(self) -> int:
        return len(self.snapshots)

    def __iter__(self):
        return iter(self.snapshots)

    def __getitem__(self, idx: int) -> np.ndarray:
        return self.snapshots[idx]

    def as_array(self) -> np.ndarray:
        """All snapshots stacked oldest first, shape (T, N, 2)."""
        return np.stack(self.snapshots)
