"""Batch analysis of every route listed in a data directory's index CSVs."""

import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from ..core.exceptions import BatchInProgressError
from ..core.loaders import load_route_index, load_waypoints
from ..hazards.models import Route, RouteAnalysis, utcnow

logger = logging.getLogger(__name__)

INDEX_COLUMNS = ('BU Code', 'Row Labels')
ROUTE_SUFFIXES = ('.xlsx', '.gpx', '.csv')


def candidate_filenames(bu_code: str, row_label: str) -> List[str]:
    """File names a route may be stored under, most specific first."""
    stems = [
        f"{bu_code}_{row_label}",
        f"{bu_code}_00{row_label}",
        f"{bu_code}_0{row_label}",
        f"{bu_code}_{row_label.zfill(10)}",
        row_label,
    ]
    names = []
    for stem in stems:
        for suffix in ROUTE_SUFFIXES:
            name = f"{stem}{suffix}"
            if name not in names:
                names.append(name)
    return names


@dataclass
class BatchStatistics:
    total_with_coordinates: int = 0
    total_without_coordinates: int = 0
    total_waypoints: int = 0
    total_distance_km: float = 0.0
    average_waypoints: int = 0
    processing_time_s: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalWithCoordinates": self.total_with_coordinates,
            "totalWithoutCoordinates": self.total_without_coordinates,
            "totalWaypoints": self.total_waypoints,
            "totalDistanceKm": round(self.total_distance_km, 2),
            "averageWaypoints": self.average_waypoints,
            "processingTimeS": round(self.processing_time_s, 2),
        }


@dataclass
class BatchEntry:
    """One index row and what became of it."""

    depot_code: str
    consumer_code: str
    customer_name: str = ""
    location: str = ""
    filename: Optional[str] = None
    expected_filenames: List[str] = field(default_factory=list)
    analysis: Optional[RouteAnalysis] = None

    @property
    def has_coordinates(self) -> bool:
        return self.analysis is not None

    def to_dict(self) -> Dict[str, Any]:
        doc = {
            "routeKey": Route.make_key(self.depot_code, self.consumer_code),
            "depotCode": self.depot_code,
            "consumerCode": self.consumer_code,
            "customerName": self.customer_name,
            "location": self.location,
            "filename": self.filename or "No file found",
            "hasCoordinates": self.has_coordinates,
        }
        if self.analysis is not None:
            route = self.analysis.route
            doc["totalSteps"] = len(route.waypoints)
            doc["totalDistanceKm"] = round(route.total_distance_km, 2)
            doc["status"] = self.analysis.status
            doc["hazards"] = len(self.analysis.hazards())
            doc["errors"] = list(self.analysis.errors)
        else:
            doc["totalSteps"] = 0
            doc["expectedFilenames"] = list(self.expected_filenames)
        return doc


@dataclass
class BatchRun:
    """Progress and results of one batch run."""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: str = "idle"
    total_routes: int = 0
    processed_routes: int = 0
    current_route: str = ""
    errors: List[str] = field(default_factory=list)
    started_at: Optional[Any] = None
    finished_at: Optional[Any] = None
    statistics: BatchStatistics = field(default_factory=BatchStatistics)
    entries: List[BatchEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runId": self.run_id,
            "status": self.status,
            "totalRoutes": self.total_routes,
            "processedRoutes": self.processed_routes,
            "currentRoute": self.current_route,
            "errors": list(self.errors),
            "startTime": self.started_at.isoformat() if self.started_at else None,
            "endTime": self.finished_at.isoformat() if self.finished_at else None,
            "statistics": self.statistics.to_dict(),
            "routes": [entry.to_dict() for entry in self.entries],
        }


class BatchProcessor:
    """
    Analyze every route listed in the index CSVs of a directory.

    Only one run may be in flight per processor; a second concurrent call
    raises BatchInProgressError.
    """

    def __init__(self, analyzer):
        self.analyzer = analyzer
        self.current_run: Optional[BatchRun] = None
        self._lock = Lock()

    def run(self, data_dir, enhanced: bool = False,
            on_progress: Optional[Callable[[BatchRun], None]] = None) -> BatchRun:
        if not self._lock.acquire(blocking=False):
            active = self.current_run.run_id if self.current_run else None
            raise BatchInProgressError(
                "A batch run is already in progress", details={"runId": active}
            )
        try:
            run = BatchRun(status="processing", started_at=utcnow())
            self.current_run = run
            self._process(run, Path(data_dir), enhanced, on_progress)
            return run
        finally:
            self._lock.release()

    def _process(self, run: BatchRun, data_dir: Path, enhanced: bool, on_progress):
        started = time.time()

        if not data_dir.is_dir():
            logger.warning("Route data directory does not exist: %s", data_dir)
            run.status = "error"
            run.errors.append("Route data directory does not exist")
            run.finished_at = utcnow()
            return

        files = {p.name for p in data_dir.iterdir() if p.is_file()}
        index_rows = []
        for csv_path in sorted(data_dir.glob("*.csv")):
            rows = self._read_index(csv_path)
            if rows is not None:
                index_rows.extend(rows)

        if not index_rows:
            logger.error("No route index CSV found in %s", data_dir)
            run.status = "error"
            run.errors.append("No route index CSV found")
            run.finished_at = utcnow()
            return

        run.total_routes = len(index_rows)
        logger.info("Batch %s: %d routes in %s", run.run_id, run.total_routes, data_dir)

        for i, row in enumerate(index_rows):
            entry = BatchEntry(
                depot_code=row.get('BU Code', ''),
                consumer_code=row.get('Row Labels', ''),
                customer_name=row.get('Customer Name', ''),
                location=row.get('Location', ''),
            )
            run.current_route = Route.make_key(entry.depot_code, entry.consumer_code)
            self._process_entry(run, entry, data_dir, files, enhanced)
            run.entries.append(entry)
            run.processed_routes = i + 1
            if on_progress is not None:
                on_progress(run)

        stats = run.statistics
        stats.processing_time_s = time.time() - started
        if stats.total_with_coordinates:
            stats.average_waypoints = round(stats.total_waypoints / stats.total_with_coordinates)
        run.status = "complete"
        run.finished_at = utcnow()
        logger.info("Batch %s complete: %d with coordinates, %d without",
                    run.run_id, stats.total_with_coordinates, stats.total_without_coordinates)

    def _read_index(self, csv_path: Path) -> Optional[List[Dict[str, str]]]:
        try:
            rows = load_route_index(csv_path)
        except (OSError, ValueError, pd.errors.ParserError) as e:
            logger.debug("Skipping %s: %s", csv_path.name, e)
            return None
        if not rows or not all(col in rows[0] for col in INDEX_COLUMNS):
            return None
        return rows

    def _process_entry(self, run: BatchRun, entry: BatchEntry, data_dir: Path,
                       files, enhanced: bool):
        stats = run.statistics
        entry.expected_filenames = candidate_filenames(entry.depot_code, entry.consumer_code)
        filename = next((n for n in entry.expected_filenames if n in files), None)

        waypoints = []
        if filename is not None:
            try:
                waypoints = load_waypoints(data_dir / filename)
            except (OSError, ValueError) as e:
                logger.warning("Could not read %s: %s", filename, e)
                run.errors.append(f"{filename}: {e}")

        if not waypoints:
            stats.total_without_coordinates += 1
            return

        entry.filename = filename
        route = Route.from_waypoints(
            Route.make_key(entry.depot_code, entry.consumer_code),
            waypoints,
            depot_code=entry.depot_code,
            consumer_code=entry.consumer_code,
            customer_name=entry.customer_name,
            location=entry.location,
            filename=filename,
        )
        entry.analysis = self.analyzer.analyze(route, enhanced=enhanced)

        stats.total_with_coordinates += 1
        stats.total_waypoints += len(route.waypoints)
        stats.total_distance_km += route.total_distance_km
