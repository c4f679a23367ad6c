"""Command line entry point for point cloud cleanup.

Loads an ASCII PLY file, applies voxel downsampling and/or outlier
removal, and optionally writes the result.

Usage:
    python -m pointprep.cli scan.ply --voxel-size 0.05 --remove-outliers --output clean.ply
"""

import argparse
import sys
from typing import List, Optional

from .common.errors import PointCloudError
from .session import ProcessingSession, ProcessOptions
from .utils.logging import get_logger, set_log_level

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pointprep",
        description="Load an ASCII PLY point cloud and clean it up"
    )
    parser.add_argument(
        "input",
        type=str,
        help="Path to input PLY file"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the processed cloud here (.ply, .csv or .parquet)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with processing options"
    )
    parser.add_argument(
        "--voxel-size",
        type=float,
        default=None,
        help="Voxel edge length for downsampling"
    )
    parser.add_argument(
        "--remove-outliers",
        action="store_true",
        default=None,
        help="Remove points far from the cloud centroid"
    )
    parser.add_argument(
        "--outlier-k",
        type=int,
        default=None,
        help="Minimum number of points before outlier removal applies (default: 20)"
    )
    parser.add_argument(
        "--outlier-std",
        type=float,
        default=None,
        help="Standard deviation multiplier for outlier removal (default: 2.0)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)
    set_log_level(args.log_level)

    try:
        options = ProcessOptions()
        if args.config:
            options = ProcessOptions.from_config(args.config)
        options = options.merged(
            voxel_size=args.voxel_size,
            remove_outliers=args.remove_outliers,
            outlier_k=args.outlier_k,
            outlier_std=args.outlier_std,
        )

        with ProcessingSession() as session:
            info = session.load(args.input)
            (x_min, y_min, z_min), (x_max, y_max, z_max) = info.bounds
            logger.info(
                f"Bounds: ({x_min:.3f}, {y_min:.3f}, {z_min:.3f}) - "
                f"({x_max:.3f}, {y_max:.3f}, {z_max:.3f})"
            )
            session.process(options)
            if args.output:
                session.export(args.output)
    except (PointCloudError, ValueError) as e:
        logger.error(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
