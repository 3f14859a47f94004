"""Shared pytest fixtures for the annotation uploader test suite."""

import io
import zipfile
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Path fixtures
# ---------------------------------------------------------------------------

TESTS_DIR = Path(__file__).parent
DATA_DIR = TESTS_DIR / "data"
EDGE_CASES_DIR = DATA_DIR / "edge_cases"


@pytest.fixture()
def data_dir() -> Path:
    """Return the path to the test data directory."""
    return DATA_DIR


@pytest.fixture()
def edge_cases_dir() -> Path:
    """Return the path to the edge-cases test data directory."""
    return EDGE_CASES_DIR


# ---------------------------------------------------------------------------
# Sample file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def annotations_csv(data_dir: Path) -> bytes:
    """CSV with one valid LOCATION, AREA and LINE row."""
    return (data_dir / "annotations.csv").read_bytes()


@pytest.fixture()
def mixed_rows_csv(data_dir: Path) -> bytes:
    """CSV with one valid row and five rows that must be skipped."""
    return (data_dir / "mixed_rows.csv").read_bytes()


@pytest.fixture()
def features_geojson(data_dir: Path) -> bytes:
    """FeatureCollection with Point, Polygon (with hole), LineString,
    one unsupported MultiPoint and one feature without geometry."""
    return (data_dir / "features.geojson").read_bytes()


@pytest.fixture()
def site_plan_kml(data_dir: Path) -> bytes:
    """KML with nested Folders, a 2-point polygon, a nameless Placemark
    and a Placemark without supported geometry."""
    return (data_dir / "site_plan.kml").read_bytes()


@pytest.fixture()
def site_plan_kmz(site_plan_kml: bytes) -> bytes:
    """KMZ archive wrapping ``site_plan.kml`` after a non-KML entry."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("files/", "")
        archive.writestr("files/icon.png", b"\x89PNG\r\n")
        archive.writestr("doc.KML", site_plan_kml)
        archive.writestr("other.kml", b"<kml><Document/></kml>")
    return buffer.getvalue()


@pytest.fixture()
def kmz_without_kml() -> bytes:
    """KMZ archive that contains no ``.kml`` entry."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("readme.txt", "no placemarks here")
    return buffer.getvalue()
