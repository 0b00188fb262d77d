#!/usr/bin/env python3
"""Demo script for stereo point cloud reconstruction.

Reads rectified stereo pairs from a dataset directory, reconstructs a
colored point cloud for each pair, and writes the last one as PLY. With
--rerun the images and clouds are streamed to a Rerun viewer.

Usage:
    python examples/stereo_demo.py --data-dir data/stereo --config stereo.yaml
"""

import argparse
import logging
from pathlib import Path

from stereoflow import DatasetCamera, DatasetReader, StereoCamera, load_stereo_camera_config


def main() -> None:
    """Run the stereo reconstruction demo."""
    parser = argparse.ArgumentParser(
        description="Reconstruct point clouds from a stereo dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--data-dir", type=Path, required=True, help="Dataset directory")
    parser.add_argument("--config", type=Path, required=True, help="Stereo camera YAML")
    parser.add_argument("--output", type=Path, default=Path("cloud.ply"), help="PLY output")
    parser.add_argument("--max-frames", type=int, default=None, help="Stop after N pairs")
    parser.add_argument("--rerun", action="store_true", help="Stream to a Rerun viewer")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")

    config = load_stereo_camera_config(args.config)
    reader = DatasetReader(str(args.data_dir))
    camera = StereoCamera(
        config,
        DatasetCamera(reader, side="left"),
        DatasetCamera(reader, side="right"),
    )

    visualizer = None
    if args.rerun:
        from stereoflow.visualization import RerunVisualizer

        visualizer = RerunVisualizer("stereoflow-stereo")

    n_frames = len(reader) if args.max_frames is None else min(args.max_frames, len(reader))
    print(f"Baseline: {config.distance_meters:.4f} m, focal length: {config.focal_length_pixels:.1f} px")
    print(f"Processing {n_frames} stereo pairs...")

    cloud = None
    for i in range(n_frames):
        cloud = camera.next_point_cloud()

        if visualizer is not None:
            left, right, timestamp_ns = reader.get_next_stereo_pair()
            visualizer.set_time(timestamp_ns / 1e9)
            visualizer.log_stereo_pair(left, right)
            visualizer.log_point_cloud(cloud)

        if len(cloud) > 0:
            depth = cloud.points[:, 2]
            print(
                f"Pair {i:4d}: {len(cloud):6d} points, "
                f"depth {depth.min():.2f}-{depth.max():.2f} m"
            )
        else:
            print(f"Pair {i:4d}: no accepted disparities")

    if cloud is not None:
        cloud.save_ply(args.output)
        print(f"Wrote {len(cloud)} points to {args.output}")

    camera.close()


if __name__ == "__main__":
    main()
