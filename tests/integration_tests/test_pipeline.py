"""End-to-end tests of the timeline pipeline against an in-memory server."""

import json
from unittest.mock import MagicMock

import pytest

from immich_timeline.main import TimelineGenerator, find_album_id
from immich_timeline.models import AlbumNotFoundError, AppConfig, RemoteError
from immich_timeline.processing.scheduler import BatchScheduler


def quiet_scheduler(client, concurrency):
    """Scheduler without pacing delays or progress output."""
    return BatchScheduler(client, concurrency=concurrency, on_progress=None, delay=0)


@pytest.fixture
def ten_assets(detail_factory):
    """Four photos around (37.77, -122.42) and six unique places."""
    shared = [
        ("s1", 37.7749, -122.4194, "2024-01-04T09:00:00.000Z"),
        ("s2", 37.7712, -122.4188, "2024-01-01T09:00:00.000Z"),
        ("s3", 37.7731, -122.4222, "2024-01-03T09:00:00.000Z"),
        ("s4", 37.7701, -122.4160, "2024-01-02T09:00:00.000Z"),
    ]
    singles = [
        ("u1", 48.8566, 2.3522),
        ("u2", 51.5074, -0.1278),
        ("u3", -33.8688, 151.2093),
        ("u4", 35.6762, 139.6503),
        ("u5", 40.7128, -74.0060),
        ("u6", 52.5200, 13.4050),
    ]
    details = {}
    order = ["u1", "s1", "u2", "s2", "u3", "s3", "u4", "s4", "u5", "u6"]
    for asset_id, lat, lon, created in shared:
        details[asset_id] = detail_factory(latitude=lat, longitude=lon, created=created)
    for asset_id, lat, lon in singles:
        details[asset_id] = detail_factory(latitude=lat, longitude=lon, created="2024-02-01T00:00:00.000Z")
    return {asset_id: details[asset_id] for asset_id in order}


def make_config(tmp_path, **overrides):
    values = {
        "immich_url": "https://immich.example.com",
        "api_key": "test-key",
        "output_path": str(tmp_path / "Records.json"),
        "skip_camera_selection": True,
        "concurrency": 3,
    }
    values.update(overrides)
    return AppConfig(**values)


def test_pipeline_exports_shared_location(tmp_path, fake_client_factory, ten_assets):
    """Test only the location with enough photos is exported, in time order."""
    client = fake_client_factory(ten_assets)
    config = make_config(tmp_path)

    timeline = TimelineGenerator(config, client=client, scheduler_factory=quiet_scheduler).run()

    data = json.loads((tmp_path / "Records.json").read_text(encoding="utf-8"))
    locations = data["locations"]
    assert len(timeline) == 4
    assert len(locations) == 4
    assert [entry["timestamp"] for entry in locations] == [
        "2024-01-01T09:00:00.000Z",
        "2024-01-02T09:00:00.000Z",
        "2024-01-03T09:00:00.000Z",
        "2024-01-04T09:00:00.000Z",
    ]
    for entry in locations:
        assert round(entry["latitudeE7"] / 1e7, 2) == 37.77
        assert round(entry["longitudeE7"] / 1e7, 2) == -122.42
        assert entry["accuracy"] == 10


def test_pipeline_album_lookup_is_case_insensitive(tmp_path, fake_client_factory, ten_assets):
    """Test an album name matches regardless of case."""
    albums = [{"id": "other", "albumName": "Family"}, {"id": "travel-id", "albumName": "Travel Photos"}]
    client = fake_client_factory(ten_assets, albums=albums)
    config = make_config(tmp_path, album_name="travel photos")

    TimelineGenerator(config, client=client, scheduler_factory=quiet_scheduler).run()

    assert client.album_ids == ["travel-id"]


def test_pipeline_album_not_found(tmp_path, fake_client_factory, ten_assets):
    """Test a missing album stops the run before any assets are fetched."""
    client = fake_client_factory(ten_assets, albums=[{"id": "1", "albumName": "Family"}])
    config = make_config(tmp_path, album_name="Travel Photos")

    with pytest.raises(AlbumNotFoundError):
        TimelineGenerator(config, client=client, scheduler_factory=quiet_scheduler).run()

    assert client.album_ids == []
    assert client.detail_calls == []
    assert not (tmp_path / "Records.json").exists()


def test_pipeline_empty_result_writes_nothing(tmp_path, fake_client_factory, ten_assets, capsys):
    """Test no output file is written when nothing survives filtering."""
    client = fake_client_factory(ten_assets)
    config = make_config(tmp_path, min_photos_per_location=5)

    timeline = TimelineGenerator(config, client=client, scheduler_factory=quiet_scheduler).run()

    assert timeline == []
    assert not (tmp_path / "Records.json").exists()
    assert "No location data found" in capsys.readouterr().out


def test_pipeline_remote_failure_writes_nothing(tmp_path, fake_client_factory):
    """Test a listing failure propagates and leaves no output file."""
    client = fake_client_factory({})
    client.list_assets = MagicMock(side_effect=RemoteError("Failed to fetch assets: 500", status_code=500))
    config = make_config(tmp_path)

    with pytest.raises(RemoteError):
        TimelineGenerator(config, client=client, scheduler_factory=quiet_scheduler).run()

    assert not (tmp_path / "Records.json").exists()


def test_pipeline_camera_selection(tmp_path, fake_client_factory, detail_factory):
    """Test camera selection filters points before the location threshold."""
    details = {}
    for i in range(3):
        details[f"canon-{i}"] = detail_factory(make="Canon", model="EOS R5", created=f"2024-01-0{i + 1}T00:00:00Z")
        details[f"pixel-{i}"] = detail_factory(make=None, model="Pixel 8", created=f"2024-02-0{i + 1}T00:00:00Z")
    client = fake_client_factory(details)
    config = make_config(tmp_path, skip_camera_selection=False)
    selections = []

    class ScriptedSelector:
        def __init__(self, points):
            selections.append(len(points))

        def run(self):
            return {"Pixel 8"}

    timeline = TimelineGenerator(
        config, client=client, scheduler_factory=quiet_scheduler, camera_selector_factory=ScriptedSelector
    ).run()

    assert selections == [6]
    assert len(timeline) == 3
    assert {p.camera_label for p in timeline} == {"Pixel 8"}


def test_find_album_id():
    """Test album matching ignores case but not spelling."""
    albums = [{"id": "a", "albumName": "Travel Photos"}]

    assert find_album_id(albums, "TRAVEL PHOTOS") == "a"
    with pytest.raises(AlbumNotFoundError):
        find_album_id(albums, "Travel")
