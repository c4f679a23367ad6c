"""Demo script for point cloud cleanup with synthetic data.

This script creates a synthetic room scan, writes it as ASCII PLY,
then loads it through a `ProcessingSession` and applies voxel
downsampling and outlier removal.

Usage:
    python examples/demo_cleanup.py
"""

import sys
from pathlib import Path

import numpy as np

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from pointprep.common.ply_io import write_ascii_ply
from pointprep.common.point_cloud import PointCloud
from pointprep.session import ProcessingSession, ProcessOptions


def create_synthetic_room_scan(
    n_points: int = 50000,
    room_size: tuple = (6.0, 4.0, 2.5),
    n_noise: int = 50
) -> PointCloud:
    """Create a synthetic indoor scan.

    Creates a point cloud with:
    - Floor, ceiling and four walls sampled uniformly
    - Repeated sweeps over the same surfaces (duplicate samples)
    - A handful of stray points far outside the room
    - Grey-ish RGB per surface

    Parameters
    ----------
    n_points : int
        Number of surface samples before duplication.
    room_size : tuple
        Room extent (x, y, z) in metres.
    n_noise : int
        Number of stray points.

    Returns
    -------
    PointCloud
        Coloured point cloud.
    """
    print("Creating synthetic room scan...")
    sx, sy, sz = room_size

    # Six surfaces, each fixing one coordinate to a room boundary
    surfaces = [(2, 0.0), (2, sz), (0, 0.0), (0, sx), (1, 0.0), (1, sy)]
    per_surface = n_points // len(surfaces)
    chunks = []
    colors = []
    for i, (axis, value) in enumerate(surfaces):
        pts = np.random.uniform(0, 1, (per_surface, 3)) * [sx, sy, sz]
        pts[:, axis] = value + np.random.normal(0, 0.002, per_surface)
        chunks.append(pts)
        shade = 90 + 25 * i
        colors.append(np.random.randint(shade - 10, shade + 10, (per_surface, 3)))
    print(f"  - Surface points: {per_surface * len(surfaces):,}")

    # Second sweep: same surfaces, slightly jittered
    sweep = np.vstack(chunks) + np.random.normal(0, 0.001, (per_surface * len(surfaces), 3))
    print(f"  - Duplicate sweep: {len(sweep):,}")

    noise = np.random.uniform(20, 40, (n_noise, 3)) * np.random.choice([-1, 1], (n_noise, 3))
    print(f"  - Stray points: {n_noise}")

    points = np.vstack(chunks + [sweep, noise])
    rgb = np.vstack(colors + colors + [np.random.randint(0, 256, (n_noise, 3))])

    print(f"✓ Created {len(points):,} points")
    return PointCloud(points=points, colors=rgb.astype(np.uint8))


def main():
    """Run demo cleanup."""
    print("="*70)
    print("Point Cloud Cleanup - Demo")
    print("="*70)
    print()

    output_dir = Path("output/demo_cleanup")
    output_dir.mkdir(parents=True, exist_ok=True)

    scan_path = output_dir / "room_scan.ply"
    write_ascii_ply(create_synthetic_room_scan(), scan_path)
    print(f"  Written to {scan_path}")
    print()

    with ProcessingSession() as session:
        info = session.load(scan_path)
        count = session.process(ProcessOptions(
            voxel_size=0.05,
            remove_outliers=True,
            outlier_k=20,
            outlier_std=2.0
        ))
        session.export(output_dir / "room_clean.ply")
        session.export(output_dir / "room_clean.csv")
        status = session.status()

    print()
    print("="*70)
    print("Demo Complete!")
    print("="*70)
    print(f"Input points:   {info.point_count:,}")
    print(f"Output points:  {count:,}")
    print(f"Final stage:    {status.stage} ({status.progress:.0%})")
    print()
    print("Output files:")
    print(f"  • {output_dir / 'room_clean.ply'}")
    print(f"  • {output_dir / 'room_clean.csv'}")
    print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
