"""Pytest configuration and fixtures for dxfcloud tests."""

import sys
from pathlib import Path

import pytest

# Add src and the test data factories to the Python path
src_path = Path(__file__).parent.parent / "src"
data_path = Path(__file__).parent / "data"
sys.path.insert(0, str(src_path))
sys.path.insert(0, str(data_path))


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def write_dxf(tmp_path):
    """Return a function writing group code/value pairs to a DXF file."""
    from dxf_factory import pairs_to_text

    def _write(pairs, name="drawing.dxf"):
        path = tmp_path / name
        path.write_text(pairs_to_text(pairs), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def survey_dxf_file(tmp_path):
    """Return path to a DXF file written by ezdxf with a survey layer."""
    pytest.importorskip("ezdxf")
    from dxf_factory import create_survey_dxf

    return create_survey_dxf(tmp_path / "survey.dxf")


@pytest.fixture
def sample_points():
    """Return sample Point3D objects for testing."""
    from dxfcloud.models import Point3D

    return {
        1: Point3D(x=0.0, y=0.0, z=0.0),
        2: Point3D(x=3.0, y=4.0, z=0.0),
        3: Point3D(x=3.0, y=4.0, z=3.0),
        4: Point3D(x=-2.0, y=-2.0, z=-5.0),
    }


@pytest.fixture
def cloud(sample_points):
    """Return a point cloud filled with the sample points."""
    from dxfcloud.process import PointCloud

    point_cloud = PointCloud()
    for point_id, point in sample_points.items():
        point_cloud.add_point(point_id, point)
    return point_cloud
