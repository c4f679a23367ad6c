"""Integration tests for the processing session."""

import threading
from dataclasses import replace

import numpy as np
import pytest

import pointprep.session as session_module
from pointprep.common.errors import CloudReadError, NoCloudLoadedError
from pointprep.common.ply_io import read_ascii_ply, write_ascii_ply
from pointprep.common.point_cloud import PointCloud
from pointprep.preprocessing.voxel_filter import voxel_downsample
from pointprep.session import (
    LoadResult,
    ProcessingSession,
    ProcessingStatus,
    ProcessOptions,
)


class TestProcessingSession:
    """Integration tests for ProcessingSession."""

    def create_scan(self, path, grid=8, seed=0):
        """Write a synthetic coloured scan with duplicates and far noise.

        The scan holds one point in each cell of a `grid`^3 lattice with
        0.1 spacing, a near duplicate of every lattice point in the same
        0.1 voxel, and five stray points far away from the lattice.
        """
        rng = np.random.default_rng(seed)
        base = np.indices((grid, grid, grid)).reshape(3, -1).T * 0.1 + 0.03
        duplicates = base + 0.001
        noise = rng.uniform(50.0, 60.0, size=(5, 3))
        points = np.vstack([base, duplicates, noise])
        colors = rng.integers(0, 256, size=(len(points), 3)).astype(np.uint8)
        write_ascii_ply(PointCloud(points=points, colors=colors), path)
        return path

    def test_load_reports_summary(self, tmp_path):
        """Test load returns count, colour flag and bounds."""
        path = tmp_path / "scan.ply"
        write_ascii_ply(PointCloud(points=np.array([
            [0.0, 1.0, 2.0],
            [3.0, -1.0, 0.5],
            [1.0, 0.0, 9.0],
        ])), path)

        with ProcessingSession() as session:
            result = session.load(path)

        assert isinstance(result, LoadResult)
        assert result.point_count == 3
        assert result.has_colors is False
        assert result.bounds == ((0.0, -1.0, 0.5), (3.0, 1.0, 9.0))
        assert result.to_dict()["point_count"] == 3

    def test_load_empty_cloud_bounds(self, tmp_path):
        """Test an empty file reports zero bounds."""
        path = tmp_path / "empty.ply"
        write_ascii_ply(PointCloud(), path)

        result = ProcessingSession().load(path)

        assert result.point_count == 0
        assert result.bounds == ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_failed_load_keeps_previous_cloud(self, tmp_path):
        """Test a missing file leaves the loaded cloud untouched."""
        path = self.create_scan(tmp_path / "scan.ply", grid=3)
        session = ProcessingSession()
        session.load(path)

        with pytest.raises(CloudReadError):
            session.load(tmp_path / "nonexistent.ply")

        assert session.has_cloud
        assert session.process(ProcessOptions()) == 59

    def test_process_without_cloud(self):
        """Test process before load raises a distinct error."""
        session = ProcessingSession()

        with pytest.raises(NoCloudLoadedError, match="no point cloud loaded"):
            session.process(ProcessOptions(voxel_size=0.1))

        assert session.status() == ProcessingStatus()

    def test_process_downsample_then_filter(self, tmp_path):
        """Test the full load and process workflow."""
        path = self.create_scan(tmp_path / "scan.ply")
        session = ProcessingSession()
        session.load(path)

        count = session.process(ProcessOptions(
            voxel_size=0.1,
            remove_outliers=True,
            outlier_k=10,
            outlier_std=2.0,
        ))

        # duplicates share a voxel with their lattice point, the five far
        # points are stripped by the outlier filter
        assert count == 512
        status = session.status()
        assert status.stage == "Complete"
        assert status.progress == 1.0
        assert status.point_count == count

        out = session.export(tmp_path / "clean.ply")
        cloud = read_ascii_ply(out)
        assert len(cloud) == count
        assert len(cloud.colors) == count
        assert cloud.points.max() < 50.0

    def test_process_uses_default_k(self, tmp_path):
        """Test the default k of 20 disables filtering on small clouds."""
        path = tmp_path / "small.ply"
        points = np.vstack([np.zeros((10, 3)) + np.arange(10)[:, None] * 0.01, [[100.0, 0, 0]]])
        write_ascii_ply(PointCloud(points=points), path)
        session = ProcessingSession()
        session.load(path)

        assert session.process(ProcessOptions(remove_outliers=True)) == 11
        assert session.process(ProcessOptions(remove_outliers=True, outlier_k=5)) == 10

    def test_process_without_steps(self, tmp_path):
        """Test that empty options only update the status."""
        path = self.create_scan(tmp_path / "scan.ply", grid=2)
        session = ProcessingSession()
        session.load(path)

        assert session.process() == 21
        assert session.status().stage == "Complete"

    def test_status_polled_while_processing(self, tmp_path, monkeypatch):
        """Test status() answers from another thread during process()."""
        path = self.create_scan(tmp_path / "scan.ply", grid=2)
        session = ProcessingSession()
        session.load(path)

        started = threading.Event()
        release = threading.Event()

        def blocking_downsample(cloud, voxel_size):
            started.set()
            assert release.wait(timeout=10)
            return voxel_downsample(cloud, voxel_size)

        monkeypatch.setattr(session_module, "voxel_downsample", blocking_downsample)
        results = []
        worker = threading.Thread(
            target=lambda: results.append(session.process(ProcessOptions(voxel_size=0.1)))
        )
        worker.start()
        try:
            assert started.wait(timeout=10)
            status = session.status()
            assert status.stage == "Processing"
            assert status.progress == 0.0
        finally:
            release.set()
            worker.join(timeout=10)

        assert not worker.is_alive()
        # 8 lattice cells plus the 5 far points
        assert results == [13]
        assert session.status() == ProcessingStatus("Complete", 1.0, 13)

    def test_failed_step_sets_failed_status(self, tmp_path):
        """Test a step error does not leave the status at Processing."""
        path = self.create_scan(tmp_path / "scan.ply", grid=2)
        session = ProcessingSession()
        session.load(path)
        options = ProcessOptions(voxel_size=0.1)
        options.voxel_size = -1.0

        with pytest.raises(ValueError):
            session.process(options)

        status = session.status()
        assert status.stage == "Failed"
        assert status.progress == 0.0
        assert status.point_count == 21
        assert session.process() == 21

    def test_status_is_a_snapshot(self, tmp_path):
        """Test that status() returns a copy."""
        session = ProcessingSession()
        snapshot = session.status()
        snapshot.stage = "Tampered"

        assert session.status().stage == ""

    def test_close_drops_cloud(self, tmp_path):
        """Test close() resets the session."""
        path = self.create_scan(tmp_path / "scan.ply", grid=2)
        session = ProcessingSession()
        session.load(path)
        session.process()

        session.close()

        assert not session.has_cloud
        assert session.status() == ProcessingStatus()

    def test_export_without_cloud(self, tmp_path):
        """Test export before load raises."""
        with pytest.raises(NoCloudLoadedError):
            ProcessingSession().export(tmp_path / "out.ply")


class TestProcessOptions:
    """Test suite for ProcessOptions."""

    def test_defaults(self):
        """Test default outlier parameters."""
        options = ProcessOptions(remove_outliers=True)

        assert options.voxel_size is None
        assert options.k == 20
        assert options.std_ratio == 2.0

    def test_from_dict_nested(self):
        """Test options under a processing section."""
        options = ProcessOptions.from_dict({
            "processing": {"voxel_size": 0.5, "remove_outliers": True, "outlier_k": 8}
        })

        assert options.voxel_size == 0.5
        assert options.remove_outliers is True
        assert options.k == 8
        assert options.std_ratio == 2.0

    def test_from_dict_unknown_key(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ValueError, match="voxel"):
            ProcessOptions.from_dict({"voxel": 0.5})

    @pytest.mark.parametrize("size", [0.0, -0.1, float("nan"), float("inf")])
    def test_invalid_voxel_size(self, size):
        """Test invalid voxel sizes are rejected up front."""
        with pytest.raises(ValueError):
            ProcessOptions(voxel_size=size)

    @pytest.mark.parametrize("values", [
        {"voxel_size": "abc"},
        {"voxel_size": True},
        {"outlier_k": "5"},
        {"outlier_k": 2.5},
        {"outlier_std": [1.0]},
        {"remove_outliers": "yes please"},
    ])
    def test_wrong_types_rejected(self, values):
        """Test values of the wrong type raise ValueError."""
        with pytest.raises(ValueError):
            ProcessOptions.from_dict(values)

    def test_numbers_are_normalised(self):
        """Test integer sizes and numpy scalars are accepted."""
        options = ProcessOptions(voxel_size=1, outlier_k=np.int64(7), outlier_std=3)

        assert options.voxel_size == 1.0 and isinstance(options.voxel_size, float)
        assert options.k == 7 and type(options.k) is int
        assert options.std_ratio == 3.0

    def test_negative_k(self):
        """Test a negative outlier_k is rejected."""
        with pytest.raises(ValueError):
            ProcessOptions(outlier_k=-1)

    def test_merged_skips_none(self):
        """Test merged() only applies values that are set."""
        base = ProcessOptions(voxel_size=0.2, outlier_std=3.0)

        merged = base.merged(voxel_size=None, remove_outliers=True, outlier_std=1.5)

        assert merged == replace(base, remove_outliers=True, outlier_std=1.5)
        assert base.remove_outliers is False

    def test_from_config_missing_file(self, tmp_path):
        """Test a missing config file gives the defaults."""
        assert ProcessOptions.from_config(tmp_path / "missing.yaml") == ProcessOptions()
