"""Kuhn-Munkres (Hungarian) solver for the assignment problem."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

__all__ = ["KuhnMunkres"]

_STAR = 1
_PRIME = 2
_FLT_MAX = np.finfo(np.float32).max


class KuhnMunkres:
    """Finds the row-to-column assignment with the least total dissimilarity."""

    def __init__(self, greedy: bool = False) -> None:
        self.greedy = greedy
        self._n = 0
        self._dm = np.zeros((0, 0), dtype=np.float32)
        self._marked = np.zeros((0, 0), dtype=np.int8)
        self._row_visited = np.zeros(0, dtype=bool)
        self._col_visited = np.zeros(0, dtype=bool)

    def solve(self, dissimilarity_matrix: ArrayLike) -> list[int]:
        """Return the chosen column for every row, or -1 where a row has none."""
        matrix = np.asarray(dissimilarity_matrix, dtype=np.float32)
        if matrix.ndim != 2:
            raise ValueError("The dissimilarity matrix must be two-dimensional")
        rows, cols = matrix.shape
        n = max(rows, cols)

        self._n = n
        self._dm = np.zeros((n, n), dtype=np.float32)
        self._dm[:rows, :cols] = matrix
        self._marked = np.zeros((n, n), dtype=np.int8)
        self._row_visited = np.zeros(n, dtype=bool)
        self._col_visited = np.zeros(n, dtype=bool)

        self._run()

        results = [-1] * rows
        for i, j in zip(*np.nonzero(self._marked[:rows, :cols] == _STAR)):
            results[int(i)] = int(j)
        return results

    def _try_simple_case(self) -> None:
        col_taken = np.zeros(self._n, dtype=bool)
        for row, values in enumerate(self._dm):
            values -= values.min()
            free = np.flatnonzero((values == 0) & ~col_taken)
            if free.size:
                col = int(free[0])
                self._marked[row, col] = _STAR
                col_taken[col] = True

    def _check_if_optimum_is_found(self) -> bool:
        stars = self._marked == _STAR
        self._col_visited[stars.any(axis=0)] = True
        return int(stars.sum()) >= self._n

    def _find_uncovered_min_val_pos(self) -> tuple[int, int]:
        uncovered = ~self._row_visited[:, None] & ~self._col_visited[None, :]
        candidates = np.where(uncovered & (self._dm < _FLT_MAX), self._dm, np.inf)
        row, col = divmod(int(np.argmin(candidates)), self._n)
        if not np.isfinite(candidates[row, col]):
            raise ValueError("The dissimilarity matrix has no finite uncovered entry")
        return row, col

    def _update_dissimilarity_matrix(self, value: np.float32) -> None:
        self._dm[self._row_visited, :] += value
        self._dm[:, ~self._col_visited] -= value

    def _find_in_row(self, row: int, what: int) -> int:
        hits = np.flatnonzero(self._marked[row] == what)
        return int(hits[0]) if hits.size else -1

    def _find_in_col(self, col: int, what: int) -> int:
        hits = np.flatnonzero(self._marked[:, col] == what)
        return int(hits[0]) if hits.size else -1

    def _run(self) -> None:
        self._try_simple_case()
        if self.greedy:
            return
        while not self._check_if_optimum_is_found():
            while True:
                row, col = self._find_uncovered_min_val_pos()
                min_val = self._dm[row, col]
                if min_val > 0:
                    self._update_dissimilarity_matrix(min_val)
                    continue
                self._marked[row, col] = _PRIME
                star_col = self._find_in_row(row, _STAR)
                if star_col >= 0:
                    self._row_visited[row] = True
                    self._col_visited[star_col] = False
                    continue
                self._augment(row, col)
                break

    def _augment(self, row: int, col: int) -> None:
        path = [(row, col)]
        while True:
            star_row = self._find_in_col(path[-1][1], _STAR)
            if star_row < 0:
                break
            path.append((star_row, path[-1][1]))
            prime_col = self._find_in_row(star_row, _PRIME)
            path.append((star_row, prime_col))

        for r, c in path:
            self._marked[r, c] = 0 if self._marked[r, c] == _STAR else _STAR

        self._row_visited[:] = False
        self._col_visited[:] = False
        self._marked[self._marked == _PRIME] = 0