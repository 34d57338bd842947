from __future__ import annotations

import logging
import math

import numpy as np

from ..core._errors import InvalidParameterError
from ..core._helpers import AnalysisOptions, GraphChange

logger = logging.getLogger(__name__)

_MIN_DIST = 0.01


def _pairwise(pos):
    delta = pos[:, None, :] - pos[None, :, :]  # delta[i, j] = pos[i] - pos[j]
    dist = np.linalg.norm(delta, axis=-1)
    dist = np.maximum(dist, _MIN_DIST)
    np.fill_diagonal(dist, 1.0)
    return delta / dist[..., None], dist


class Layouts:
    # Layout engine: writes vertex positions, never topology

    def set_canvas_size(self, width: float, height: float):
        if width <= 0 or height <= 0:
            raise InvalidParameterError(f"canvas size must be positive, got {width}x{height}")
        self.canvas_width, self.canvas_height = float(width), float(height)

    def optimal_distance(self, n: int | None = None) -> float:
        """``sqrt(width * height / n)``, the ideal edge length for ``n`` vertices."""
        n = len(self._vertices) if n is None else n
        if n <= 0:
            return 0.0
        return math.sqrt(self.canvas_width * self.canvas_height / n)

    def _positions_array(self):
        return np.array([[v.x, v.y] for v in self._vertices], dtype=float).reshape(-1, 2)

    def _tie_mask(self):
        n = len(self._vertices)
        mask = np.zeros((n, n), dtype=bool)
        for i, v in enumerate(self._vertices):
            for t in self._visible_out(v):
                j = self.vertex_to_idx[t]
                if i != j:
                    mask[i, j] = mask[j, i] = True
        return mask

    def _write_positions(self, name, pos, ids=None):
        pos = np.column_stack(
            (np.clip(pos[:, 0], 0.0, self.canvas_width), np.clip(pos[:, 1], 0.0, self.canvas_height))
        )
        targets = self._vertices if ids is None else [self._v(i) for i in ids]
        for v, (x, y) in zip(targets, pos):
            v.x, v.y = float(x), float(y)
        self._mark_modified(GraphChange.POSITIONS, layout=name, moved=len(targets))
        return self.positions()

    def _iterations(self, max_iterations):
        it = self.settings.layout_iterations if max_iterations is None else max_iterations
        if isinstance(it, bool) or not isinstance(it, int) or it < 1:
            raise InvalidParameterError(f"max_iterations must be a positive int, got {max_iterations!r}")
        return it

    def layout_spring_embedder(self, max_iterations=None):
        """Eades spring embedder.

        Tied pairs attract with ``k * log(d / k)``; untied pairs repel with
        ``k^3 / d^2``; each vertex moves by ``0.1`` times its net force, capped
        at ``k`` per iteration. ``k`` is :meth:`optimal_distance`.
        """
        iters = self._iterations(max_iterations)
        pos = self._positions_array()
        n = len(pos)
        if n < 2:
            return self.positions()
        k = self.optimal_distance(n)
        tied = self._tie_mask()
        with self._computation("layout_spring_embedder", total=iters, vertices=n) as tick:
            for it in range(iters):
                unit, dist = _pairwise(pos)
                rep = np.where(tied, 0.0, k**3 / dist**2)
                att = np.where(tied, k * np.log(dist / k), 0.0)
                np.fill_diagonal(rep, 0.0)
                np.fill_diagonal(att, 0.0)
                disp = 0.1 * ((rep - att)[..., None] * unit).sum(axis=1)
                length = np.maximum(np.linalg.norm(disp, axis=1), _MIN_DIST)
                pos += disp / length[:, None] * np.minimum(length, k)[:, None]
                tick(it + 1)
        return self._write_positions("spring_embedder", pos)

    def layout_fruchterman_reingold(self, max_iterations=None):
        """Fruchterman-Reingold.

        Every pair repels with ``k^2 / d``, tied pairs attract with ``d^2 / k``;
        displacement is limited by a temperature starting at ``width / 10``
        and cooling linearly to zero.
        """
        iters = self._iterations(max_iterations)
        pos = self._positions_array()
        n = len(pos)
        if n < 2:
            return self.positions()
        k = self.optimal_distance(n)
        tied = self._tie_mask()
        t0 = temperature = self.canvas_width / 10.0
        with self._computation("layout_fruchterman_reingold", total=iters, vertices=n) as tick:
            for it in range(iters):
                unit, dist = _pairwise(pos)
                rep = k**2 / dist
                att = np.where(tied, dist**2 / k, 0.0)
                np.fill_diagonal(rep, 0.0)
                np.fill_diagonal(att, 0.0)
                disp = ((rep - att)[..., None] * unit).sum(axis=1)
                length = np.maximum(np.linalg.norm(disp, axis=1), _MIN_DIST)
                pos += disp / length[:, None] * np.minimum(length, temperature)[:, None]
                pos[:, 0] = np.clip(pos[:, 0], 0.0, self.canvas_width)
                pos[:, 1] = np.clip(pos[:, 1], 0.0, self.canvas_height)
                temperature = t0 * (1.0 - (it + 1) / iters)
                tick(it + 1)
        return self._write_positions("fruchterman_reingold", pos)

    def layout_kamada_kawai(
        self,
        max_iterations=None,
        weighted=None,
        inverse_weights=None,
        drop_isolates=None,
        initial: str = "current",
        seed=None,
        options=None,
        epsilon: float = 1e-4,
    ):
        """Kamada-Kawai energy minimization.

        Springs of length ``L * d_ij`` and stiffness ``1 / d_ij^2`` join every
        pair, ``d_ij`` being the geodesic distance (either direction);
        unreachable pairs use the largest finite distance plus one. Each
        iteration moves the vertex with the largest energy gradient by one
        Newton-Raphson step.

        Parameters
        --
        initial : {"current", "random"}
            Start from the current positions or from random ones.

        """
        iters = self._iterations(max_iterations)
        if initial not in ("current", "random"):
            raise InvalidParameterError(f"initial must be 'current' or 'random', got {initial!r}")
        opts = AnalysisOptions.coerce(
            options, weighted=weighted, inverse_weights=inverse_weights, drop_isolates=drop_isolates
        )
        res = self.geodesics(opts)
        ids = list(res.vertices)
        n = len(ids)
        if n < 2:
            return self.positions()
        d = np.minimum(res.distances, res.distances.T)
        finite = np.isfinite(d)
        d = np.where(finite, d, (d[finite].max() if finite.any() else 0.0) + 1.0)
        np.fill_diagonal(d, 1.0)
        d = np.maximum(d, _MIN_DIST)

        L = min(self.canvas_width, self.canvas_height) / max(float(d.max()), 1.0)
        length = L * d
        stiff = 1.0 / d**2
        np.fill_diagonal(stiff, 0.0)

        if initial == "random":
            rng = np.random.default_rng(self.settings.random_seed if seed is None else seed)
            pos = rng.uniform(0, 1, size=(n, 2)) * [self.canvas_width, self.canvas_height]
        else:
            pos = np.array([[self._v(v).x, self._v(v).y] for v in ids], dtype=float)

        with self._computation("layout_kamada_kawai", total=iters, vertices=n) as tick:
            for it in range(iters):
                delta = pos[:, None, :] - pos[None, :, :]
                dist = np.maximum(np.linalg.norm(delta, axis=-1), _MIN_DIST)
                np.fill_diagonal(dist, 1.0)
                coef = stiff * (1.0 - length / dist)
                grad = (coef[..., None] * delta).sum(axis=1)
                energy = np.linalg.norm(grad, axis=1)
                m = int(np.argmax(energy))
                if energy[m] < epsilon:
                    tick(iters)
                    break
                dx, dy = delta[m, :, 0], delta[m, :, 1]
                cube = dist[m] ** 3
                exx = np.sum(stiff[m] * (1.0 - length[m] * dy**2 / cube))
                eyy = np.sum(stiff[m] * (1.0 - length[m] * dx**2 / cube))
                exy = np.sum(stiff[m] * length[m] * dx * dy / cube)
                det = exx * eyy - exy * exy
                if abs(det) < 1e-12:
                    tick(it + 1)
                    continue
                ex, ey = grad[m]
                pos[m, 0] += (-ex * eyy + ey * exy) / det
                pos[m, 1] += (-ey * exx + ex * exy) / det
                tick(it + 1)

        # centre the drawing on the canvas
        pos += np.array([self.canvas_width, self.canvas_height]) / 2.0 - pos.mean(axis=0)
        logger.debug("kamada-kawai placed %d vertices", n)
        return self._write_positions("kamada_kawai", pos, ids=ids)

    def layout_random(self, seed=None):
        """Uniform random positions over the canvas."""
        rng = np.random.default_rng(self.settings.random_seed if seed is None else seed)
        pos = rng.uniform(0, 1, size=(len(self._vertices), 2)) * [self.canvas_width, self.canvas_height]
        return self._write_positions("random", pos)

    def layout_circular(self, x0=None, y0=None, radius=None):
        """Vertices evenly spaced on a circle (canvas centre by default)."""
        n = len(self._vertices)
        x0 = self.canvas_width / 2.0 if x0 is None else x0
        y0 = self.canvas_height / 2.0 if y0 is None else y0
        radius = 0.4 * min(self.canvas_width, self.canvas_height) if radius is None else radius
        if radius < 0:
            raise InvalidParameterError("radius must be >= 0")
        angles = 2.0 * np.pi * np.arange(n) / max(n, 1)
        pos = np.column_stack((x0 + radius * np.cos(angles), y0 + radius * np.sin(angles)))
        return self._write_positions("circular", pos)

    def layout_by_index(self, index: str = "DC", kind: str = "radial", options=None, **kw):
        """Place (or size) vertices by a prominence index.

        Parameters
        --
        index : str
            Any index accepted by ``prominence`` (``DC``, ``CC``, ``BC``, ...).
        kind : {"radial", "level", "size"}
            ``radial``: more prominent vertices closer to the centre;
            ``level``: more prominent vertices higher on the canvas;
            ``size``: vertex sizes grow with prominence (positions untouched).

        Notes
        -
        Undefined scores are treated as 0.
        """
        if kind not in ("radial", "level", "size"):
            raise InvalidParameterError(f"kind must be 'radial', 'level' or 'size', got {kind!r}")
        result = self.prominence(index, options, **kw)
        s = np.nan_to_num(result.std, nan=0.0)
        top = s.max() if s.size else 0.0
        s = s / top if top > 0 else np.zeros_like(s)
        ids = list(result.vertices)
        n = len(ids)
        w, h = self.canvas_width, self.canvas_height

        if kind == "size":
            for vid, x in zip(ids, s):
                self.set_vertex_size(vid, 4 + int(round(16 * x)))
            return {vid: self.vertex_size(vid) for vid in ids}

        if kind == "radial":
            max_r = 0.45 * min(w, h)
            angles = 2.0 * np.pi * np.arange(n) / max(n, 1)
            r = max_r * (1.0 - s)
            pos = np.column_stack((w / 2.0 + r * np.cos(angles), h / 2.0 + r * np.sin(angles)))
        else:
            margin = 0.05 * h
            xs = 0.05 * w + (np.arange(n) + 0.5) * (0.9 * w) / max(n, 1)
            ys = margin + (1.0 - s) * (h - 2 * margin)
            pos = np.column_stack((xs, ys))
        return self._write_positions(f"by_index_{kind}", pos, ids=ids)
