from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from .datastructures import BOTTOM, BOUNDARY_TOL, LEFT, RIGHT, TOP, Triangle, TriangleIndex
from .errors import InputInconsistencyError, OrientationMismatchError

if TYPE_CHECKING:
    import meshio

log = logging.getLogger(__name__)


def _edge_key(u: int, v: int) -> tuple[int, int]:
    return (u, v) if u < v else (v, u)


@dataclass
class Triangulation:
    """
    Triangular mesh with its adjacency structures.

    Attributes
    ----------
    points : ndarray (n_nodes, 2)
        Node coordinates.
    triangles : ndarray (n_elem, 3)
        Counter-clockwise vertex triples, unique up to rotation.
    edge_tags : dict
        Optional tag per undirected edge ``(min(u, v), max(u, v))``, used to
        split the boundary into segments.
    adjacent : dict
        ``(u, v) -> w`` such that (u, v, w) is a positively oriented triangle.
    adjacent2vertex : dict
        ``w -> {(u, v), ...}``, all edges whose apex is ``w``.
    neighbours : dict
        ``u -> {v, ...}``, the connectivity graph.
    """

    points: NDArray[np.float64]
    triangles: NDArray[np.int64]
    edge_tags: dict[tuple[int, int], int] = field(default_factory=dict)

    adjacent: dict[tuple[int, int], int] = field(init=False, repr=False)
    adjacent2vertex: dict[int, set[tuple[int, int]]] = field(init=False, repr=False)
    neighbours: dict[int, set[int]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.points = np.array(self.points, dtype=np.float64)
        self.triangles = np.array(self.triangles, dtype=np.int64)
        if self.points.ndim != 2 or self.points.shape[1] != 2:
            raise InputInconsistencyError(f"Expected points of shape (N, 2), got {self.points.shape}")
        if self.triangles.ndim != 2 or self.triangles.shape[1] != 3:
            raise InputInconsistencyError(f"Expected triangles of shape (T, 3), got {self.triangles.shape}")
        self.points.setflags(write=False)
        self.triangles.setflags(write=False)

        self._validate_triangles()
        self._build_adjacency()

    @property
    def num_points(self) -> int:
        return len(self.points)

    @property
    def num_triangles(self) -> int:
        return len(self.triangles)

    def _validate_triangles(self) -> None:
        if len(self.triangles) and (self.triangles.min() < 0 or self.triangles.max() >= self.num_points):
            raise InputInconsistencyError("Triangle vertex index out of range")

        seen = set()
        for T in self.triangles:
            key = tuple(sorted(int(v) for v in T))
            if len(set(key)) != 3:
                raise InputInconsistencyError(f"Triangle {tuple(T.tolist())} repeats a vertex")
            if key in seen:
                raise InputInconsistencyError(f"Duplicate triangle {tuple(T.tolist())}")
            seen.add(key)

    def _build_adjacency(self) -> None:
        self.adjacent = {}
        self.adjacent2vertex = {}
        self.neighbours = {}
        for T in self.index:
            for (u, v), w in zip(T.edges(), (T.k, T.i, T.j)):
                if (u, v) in self.adjacent:
                    raise InputInconsistencyError(
                        f"Oriented edge {(u, v)} belongs to two triangles; "
                        "the mesh is not consistently oriented",
                        edge=(u, v),
                    )
                self.adjacent[(u, v)] = w
                self.adjacent2vertex.setdefault(w, set()).add((u, v))
                self.neighbours.setdefault(u, set()).add(v)
                self.neighbours.setdefault(v, set()).add(u)

    @cached_property
    def index(self) -> TriangleIndex:
        return TriangleIndex(self.triangles.tolist())

    def get_point(self, i: int) -> NDArray[np.float64]:
        return self.points[i]

    def get_adjacent(self, u: int, v: int) -> int:
        """Apex of the triangle containing the oriented edge (u, v)."""
        try:
            return self.adjacent[(u, v)]
        except KeyError:
            raise InputInconsistencyError(
                f"No triangle contains the oriented edge {(u, v)}", edge=(u, v)
            ) from None

    def is_boundary_edge(self, u: int, v: int) -> bool:
        """True if (u, v) is in the mesh and (v, u) is not."""
        return (u, v) in self.adjacent and (v, u) not in self.adjacent

    def boundary_edges(self) -> list[tuple[int, int]]:
        """Oriented edges without a twin, i.e. the counter-clockwise boundary."""
        return [(u, v) for (u, v) in self.adjacent if (v, u) not in self.adjacent]

    def boundary_cycle(self) -> list[int]:
        """Boundary nodes in counter-clockwise order, starting at the smallest index."""
        successor: dict[int, int] = {}
        for u, v in self.boundary_edges():
            if u in successor:
                raise InputInconsistencyError(
                    f"Boundary is pinched at node {u}", edge=(u, v)
                )
            successor[u] = v
        if not successor:
            raise InputInconsistencyError("Triangulation has no boundary")

        start = min(successor)
        cycle = [start]
        v = successor[start]
        while v != start:
            cycle.append(v)
            v = successor[v]
        if len(cycle) != len(successor):
            raise InputInconsistencyError(
                f"Boundary has more than one component ({len(successor)} boundary nodes, "
                f"{len(cycle)} reached from node {start})"
            )
        return cycle

    def boundary_segments(self, edge_tags: dict[tuple[int, int], int] | None = None) -> list[list[int]]:
        """
        Split the boundary cycle into segments where the edge tag changes.

        Each segment starts where the previous one ended, and the last one ends
        at the first node of the first. A boundary with a single tag is returned
        as one segment without the closing node.
        """
        tags = self.edge_tags if edge_tags is None else edge_tags
        cycle = self.boundary_cycle()
        n = len(cycle)
        edge_tag = [tags.get(_edge_key(cycle[m], cycle[(m + 1) % n]), -1) for m in range(n)]
        if len(set(edge_tag)) == 1:
            return [cycle]

        # Start at a tag change so that no segment wraps around
        shift = next(m for m in range(n) if edge_tag[m] != edge_tag[m - 1])
        cycle = cycle[shift:] + cycle[:shift]
        edge_tag = edge_tag[shift:] + edge_tag[:shift]

        segments = []
        current = [cycle[0]]
        for m in range(n):
            current.append(cycle[(m + 1) % n])
            if m == n - 1 or edge_tag[m + 1] != edge_tag[m]:
                segments.append(current)
                current = [cycle[(m + 1) % n]]
        return segments

    def bounding_box_tags(self, tol: float = BOUNDARY_TOL) -> dict[tuple[int, int], int]:
        """Tag boundary edges LEFT/RIGHT/BOTTOM/TOP by the side of the bounding box they lie on."""
        x_min, y_min = self.points.min(axis=0)
        x_max, y_max = self.points.max(axis=0)

        tags = {}
        for va, vb in self.boundary_edges():
            xa, ya = self.points[va]
            xb, yb = self.points[vb]

            side = None
            if abs(xa - x_min) < tol and abs(xb - x_min) < tol:
                side = LEFT
            elif abs(xa - x_max) < tol and abs(xb - x_max) < tol:
                side = RIGHT
            elif abs(ya - y_min) < tol and abs(yb - y_min) < tol:
                side = BOTTOM
            elif abs(ya - y_max) < tol and abs(yb - y_max) < tol:
                side = TOP

            if side is not None:
                tags[_edge_key(va, vb)] = side
        return tags

    @classmethod
    def rectangle(
        cls,
        x0: float,
        y0: float,
        L1: float,
        L2: float,
        noelms1: int,
        noelms2: int,
    ) -> Triangulation:
        """
        Structured triangulation of [x0, x0+L1] x [y0, y0+L2].

        Each of the noelms1 x noelms2 cells is split along its UL-LR diagonal.
        Nodes are numbered column by column, top to bottom.
        """
        nonodes1 = noelms1 + 1
        nonodes2 = noelms2 + 1
        noelms = noelms1 * noelms2 * 2

        temp_x = np.linspace(x0, x0 + L1, nonodes1)
        temp_y = np.linspace(y0 + L2, y0, nonodes2)
        XX, YY = np.meshgrid(temp_x, temp_y)
        points = np.column_stack([XX.flatten(order="F"), YY.flatten(order="F")])

        col, row = np.meshgrid(np.arange(noelms1), np.arange(noelms2))
        col, row = col.flatten(order="F"), row.flatten(order="F")

        UL = row + col * nonodes2
        LL = UL + 1
        UR = UL + nonodes2
        LR = UR + 1

        triangles = np.empty((noelms, 3), dtype=np.int64)
        # Upper triangles: [UL, LR, UR]
        triangles[0::2, 0] = UL
        triangles[0::2, 1] = LR
        triangles[0::2, 2] = UR
        # Lower triangles: [LL, LR, UL]
        triangles[1::2, 0] = LL
        triangles[1::2, 1] = LR
        triangles[1::2, 2] = UL

        tri = cls(points, triangles)
        tri.edge_tags = tri.bounding_box_tags(tol=BOUNDARY_TOL * max(L1, L2, 1.0))
        return tri

    @classmethod
    def from_meshio(cls, mesh: meshio.Mesh | str | Path, reorient: bool = True) -> Triangulation:
        """
        Create a Triangulation from a meshio mesh or mesh file.

        Physical tags of line cells (``gmsh:physical``) become edge tags.

        Mesh generators do not agree on a winding order, so with ``reorient`` the
        loader reorders clockwise triangles to counter-clockwise and logs a
        warning. With ``reorient=False`` a clockwise triangle raises
        ``OrientationMismatchError``. Geometry construction itself never
        reorders triangles.
        """
        import meshio as mio

        if isinstance(mesh, (str, Path)):
            mesh = mio.read(mesh)

        points = np.asarray(mesh.points[:, :2], dtype=np.float64)

        triangles = None
        for cell_block in mesh.cells:
            if cell_block.type == "triangle":
                triangles = cell_block.data.astype(np.int64)
                break
        if triangles is None:
            raise InputInconsistencyError("No triangle cells found in mesh")

        p = points[triangles]
        orient = (p[:, 1, 0] - p[:, 0, 0]) * (p[:, 2, 1] - p[:, 0, 1]) - (
            p[:, 1, 1] - p[:, 0, 1]
        ) * (p[:, 2, 0] - p[:, 0, 0])
        clockwise = orient < 0
        if np.any(clockwise) and not reorient:
            first = np.flatnonzero(clockwise)[0]
            T = tuple(int(v) for v in triangles[first])
            raise OrientationMismatchError(
                f"{int(clockwise.sum())} clockwise triangle(s) in mesh, first {T}", triangle=T
            )
        if np.any(clockwise):
            log.warning(f"Reordering {int(clockwise.sum())} clockwise triangles")
            triangles = triangles.copy()
            triangles[clockwise] = triangles[clockwise][:, [0, 2, 1]]

        edge_tags = {}
        if "line" in mesh.cells_dict and "gmsh:physical" in mesh.cell_data_dict:
            line_tags = mesh.cell_data_dict["gmsh:physical"].get("line")
            if line_tags is not None:
                for (n1, n2), tag in zip(mesh.cells_dict["line"], line_tags):
                    edge_tags[_edge_key(int(n1), int(n2))] = int(tag)

        log.info(f"Loaded mesh with {len(points)} nodes and {len(triangles)} triangles")
        return cls(points, triangles, edge_tags)
