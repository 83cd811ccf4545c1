"""Route file loading: GPX, CSV and Excel waypoint lists, plus CSV route indexes."""

import logging
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

import gpxpy
import gpxpy.gpx
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from ..hazards.models import Waypoint

logger = logging.getLogger(__name__)

LAT_COLUMNS = ('Latitude', 'latitude', 'LAT', 'lat')
LNG_COLUMNS = ('Longitude', 'longitude', 'LON', 'lng', 'lon')
STEP_COLUMNS = ('Step_ID', 'step_id')

SUPPORTED_SUFFIXES = ('.gpx', '.csv', '.xlsx', '.xls')


def load_waypoints(path) -> List[Waypoint]:
    """
    Load waypoints from a route file.

    Args:
        path: Path to a .gpx, .csv, .xlsx or .xls file

    Returns:
        Valid waypoints in travel order

    Raises:
        ValueError: If the file type is unsupported, the file is malformed or
            no coordinate columns exist
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == '.gpx':
        waypoints = _load_gpx(path)
    elif suffix == '.csv':
        waypoints = _load_frame(pd.read_csv(path), path)
    elif suffix in ('.xlsx', '.xls'):
        try:
            frame = pd.read_excel(path)
        except (zipfile.BadZipFile, InvalidFileException) as e:
            raise ValueError(f"Malformed Excel file {path.name}: {e}")
        waypoints = _load_frame(frame, path)
    else:
        raise ValueError(f"Unsupported route file type: {path.suffix}")

    valid = [wp for wp in waypoints if wp.is_valid]
    dropped = len(waypoints) - len(valid)
    if dropped:
        logger.debug("%s: dropped %d invalid points", path.name, dropped)
    return valid


def _load_gpx(path: Path) -> List[Waypoint]:
    with open(path) as f:
        try:
            gpx = gpxpy.parse(f)
        except gpxpy.gpx.GPXException as e:
            raise ValueError(f"Malformed GPX file {path.name}: {e}")

    points = []

    # Try tracks first
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                points.append((point.latitude, point.longitude))

    # Fall back to waypoints if no tracks
    if not points:
        for waypoint in gpx.waypoints:
            points.append((waypoint.latitude, waypoint.longitude))

    return [
        Waypoint(lat=lat, lng=lng, sequence_id=i)
        for i, (lat, lng) in enumerate(points)
    ]


def _find_column(df: pd.DataFrame, candidates) -> Optional[str]:
    for name in candidates:
        if name in df.columns:
            return name
    return None


def _load_frame(df: pd.DataFrame, path: Path) -> List[Waypoint]:
    lat_col = _find_column(df, LAT_COLUMNS)
    lng_col = _find_column(df, LNG_COLUMNS)
    if lat_col is None or lng_col is None:
        raise ValueError(f"No latitude/longitude columns in {path.name}")

    step_col = _find_column(df, STEP_COLUMNS)
    if step_col is not None:
        df = df.sort_values(step_col, kind='stable')

    extra_cols = [c for c in df.columns if c not in (lat_col, lng_col, step_col)]
    lats = pd.to_numeric(df[lat_col], errors='coerce')
    lngs = pd.to_numeric(df[lng_col], errors='coerce')

    waypoints = []
    for i, (idx, row) in enumerate(df.iterrows()):
        sequence_id = i
        if step_col is not None and pd.notna(row[step_col]):
            try:
                sequence_id = int(row[step_col])
            except (TypeError, ValueError):
                sequence_id = i
        waypoints.append(Waypoint(
            lat=float(lats[idx]),
            lng=float(lngs[idx]),
            sequence_id=sequence_id,
            extra={
                str(c): str(row[c]) for c in extra_cols if pd.notna(row[c])
            },
        ))
    return waypoints


def load_route_index(path) -> List[Dict[str, str]]:
    """
    Load a route index CSV (``BU Code``, ``Row Labels``, ``Customer Name``,
    ``Location``) as a list of string dicts.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip() for c in df.columns]
    return [
        {k: str(v).strip() for k, v in row.items()}
        for row in df.to_dict(orient='records')
    ]
