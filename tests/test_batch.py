"""Tests for batch processing of a route data directory."""

import pytest

from route_analyzer.core.exceptions import BatchInProgressError
from route_analyzer.pipeline import BatchProcessor, candidate_filenames
from route_analyzer.storage import ROUTES

from conftest import L_ROUTE


def write_route_csv(path, coords):
    lines = ["Step_ID,Latitude,Longitude"]
    lines += [f"{i + 1},{lat},{lng}" for i, (lat, lng) in enumerate(coords)]
    path.write_text("\n".join(lines) + "\n")


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "index.csv").write_text(
        "BU Code,Row Labels,Customer Name,Location\n"
        "D01,42,Acme Stores,Palakkad\n"
        "D01,99,Missing Route,Thrissur\n"
    )
    write_route_csv(tmp_path / "D01_0042.csv", L_ROUTE)
    return tmp_path


class TestCandidateFilenames:
    def test_order(self):
        names = candidate_filenames("D01", "42")
        assert names[:3] == ["D01_42.xlsx", "D01_42.gpx", "D01_42.csv"]
        assert "D01_0042.csv" in names
        assert "D01_042.gpx" in names
        assert "D01_0000000042.xlsx" in names
        assert names[-1] == "42.csv"

    def test_no_duplicates(self):
        names = candidate_filenames("D01", "0000000042")
        assert len(names) == len(set(names))


class TestBatchProcessor:
    def test_run(self, make_analyzer, store, data_dir):
        progress = []
        processor = BatchProcessor(make_analyzer())
        run = processor.run(data_dir, on_progress=lambda r: progress.append(r.processed_routes))

        assert run.status == 'complete'
        assert run.total_routes == 2
        assert run.processed_routes == 2
        assert progress == [1, 2]
        assert run.errors == []

        stats = run.statistics
        assert stats.total_with_coordinates == 1
        assert stats.total_without_coordinates == 1
        assert stats.total_waypoints == 5
        assert stats.average_waypoints == 5
        assert stats.total_distance_km > 2

        found, missing = run.entries
        assert found.filename == "D01_0042.csv"
        assert found.analysis.route.key == "D01_42"
        assert found.analysis.route.customer_name == "Acme Stores"
        assert missing.has_coordinates is False
        assert missing.to_dict()['filename'] == "No file found"
        assert "D01_99.csv" in missing.to_dict()['expectedFilenames']

        assert len(store.find_by_route(ROUTES, "D01_42")) == 1

    def test_report_document(self, make_analyzer, data_dir):
        run = BatchProcessor(make_analyzer()).run(data_dir)
        document = run.to_dict()
        assert document['runId'] == run.run_id
        assert document['statistics']['totalWithCoordinates'] == 1
        assert document['routes'][0]['hasCoordinates'] is True
        assert document['routes'][0]['totalSteps'] == 5
        assert document['startTime'] is not None
        assert document['endTime'] is not None

    def test_unreadable_route_file(self, make_analyzer, data_dir):
        (data_dir / "D01_0042.csv").write_text("name,value\nA,1\n")
        run = BatchProcessor(make_analyzer()).run(data_dir)
        assert run.status == 'complete'
        assert run.statistics.total_without_coordinates == 2
        assert len(run.errors) == 1
        assert run.errors[0].startswith("D01_0042.csv:")

    def test_malformed_gpx_route(self, make_analyzer, data_dir):
        (data_dir / "D01_99.gpx").write_text("<gpx")
        run = BatchProcessor(make_analyzer()).run(data_dir)
        assert run.status == 'complete'
        assert run.processed_routes == 2
        assert run.statistics.total_with_coordinates == 1
        assert run.statistics.total_without_coordinates == 1
        assert len(run.errors) == 1
        assert run.errors[0].startswith("D01_99.gpx: Malformed GPX file")

    def test_missing_directory(self, make_analyzer, tmp_path):
        run = BatchProcessor(make_analyzer()).run(tmp_path / "nope")
        assert run.status == 'error'
        assert run.errors == ["Route data directory does not exist"]

    def test_no_index(self, make_analyzer, tmp_path):
        write_route_csv(tmp_path / "D01_42.csv", L_ROUTE)
        run = BatchProcessor(make_analyzer()).run(tmp_path)
        assert run.status == 'error'
        assert run.errors == ["No route index CSV found"]

    def test_concurrent_run_rejected(self, make_analyzer, data_dir):
        processor = BatchProcessor(make_analyzer())
        processor._lock.acquire()
        try:
            with pytest.raises(BatchInProgressError) as exc:
                processor.run(data_dir)
        finally:
            processor._lock.release()
        assert exc.value.to_dict()['error'] == 'batch_in_progress'
        # The lock is free again afterwards
        assert processor.run(data_dir).status == 'complete'

    def test_runs_have_distinct_ids(self, make_analyzer, data_dir):
        processor = BatchProcessor(make_analyzer())
        first = processor.run(data_dir)
        second = processor.run(data_dir)
        assert first.run_id != second.run_id
        assert processor.current_run is second
