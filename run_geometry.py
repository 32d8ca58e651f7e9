"""
Geometry driver using Hydra for configuration.

Usage:
    python run_geometry.py mesh.N1=32 mesh.N2=32
    python run_geometry.py mesh.type=file mesh.path=meshes/square.msh output=geometry.vtu
"""

import logging
import sys
from pathlib import Path

import hydra
from omegaconf import DictConfig, OmegaConf

sys.path.insert(0, str(Path(__file__).parent / "src"))

from FVM import GeometryParameters, Triangulation, build_geometry  # noqa: E402

log = logging.getLogger(__name__)


def create_triangulation(cfg: DictConfig) -> Triangulation:
    if cfg.mesh.type == "rectangle":
        return Triangulation.rectangle(
            x0=cfg.mesh.x0, y0=cfg.mesh.y0,
            L1=cfg.mesh.L1, L2=cfg.mesh.L2,
            noelms1=cfg.mesh.N1, noelms2=cfg.mesh.N2,
        )
    elif cfg.mesh.type == "file":
        path = hydra.utils.to_absolute_path(cfg.mesh.path)
        return Triangulation.from_meshio(path, reorient=cfg.mesh.reorient)
    else:
        raise ValueError(f"Unknown mesh type: {cfg.mesh.type}")


def create_segments(tri: Triangulation, cfg: DictConfig, params: GeometryParameters) -> list[list[int]]:
    if cfg.boundary.tags == "none":
        return tri.boundary_segments(edge_tags={})
    elif cfg.boundary.tags == "auto":
        tags = tri.edge_tags or tri.bounding_box_tags(tol=params.boundary_tol)
        return tri.boundary_segments(edge_tags=tags)
    else:
        raise ValueError(f"Unknown boundary tag mode: {cfg.boundary.tags}")


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig):
    log.info(f"Output directory: {Path.cwd()}")
    params = GeometryParameters(**OmegaConf.to_container(cfg.geometry, resolve=True))

    tri = create_triangulation(cfg)
    segments = create_segments(tri, cfg, params)
    geo = build_geometry(tri, segments, params)

    for key, value in geo.summary().items():
        log.info(f"{key:>22s}: {value}")

    if cfg.output:
        import meshio

        meshio.write(cfg.output, geo.to_meshio())
        log.info(f"Saved {cfg.output}")


if __name__ == "__main__":
    main()
