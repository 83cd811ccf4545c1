"""Hazard detection criteria configuration management."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.exceptions import ConfigError

logger = logging.getLogger(__name__)


class HazardCriteria:
    """Parse and manage detector thresholds and risk mappings."""

    # Default criteria (used if no config file provided)
    DEFAULT_SHARP_TURNS = {
        'threshold_deg': 60.0,
        'high_angle_deg': 75.0,
        'critical_angle_deg': 90.0,
        'risk_scores': {'critical': 9, 'high': 7, 'moderate': 5},
        'recommended_speed_kmh': {'critical': 20, 'default': 30},
    }

    DEFAULT_BLIND_SPOTS = {
        'threshold_deg': 30.0,
        'sharp_curve_deg': 60.0,
        'risk_scores': {'sharp_curve': 8, 'curve': 6},
        'visibility_distance_m': {'sharp_curve': 50, 'curve': 100},
    }

    DEFAULT_ROAD_CONDITIONS = {
        'samples': 20,
        'lookup_radius_m': 50,
        'default_lanes': 2,
        'default_maxspeed_kmh': 60,
        'surfaces': {
            'poor': ['unpaved', 'dirt', 'gravel'],
            'moderate': ['compacted', 'fine_gravel'],
        },
        'risk_scores': {'critical': 8, 'poor': 7, 'moderate': 5, 'good': 3},
    }

    DEFAULT_NETWORK_COVERAGE = {
        'samples': 15,
        'risk_scores': {0: 8, 1: 6, 2: 4, 3: 2, 4: 1},
    }

    DEFAULT_ACCIDENT_AREAS = {
        'min_risk_score': 7,
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize hazard criteria.

        Args:
            config_file: Path to YAML config file. If None, uses defaults.
        """
        self.sharp_turns = copy.deepcopy(self.DEFAULT_SHARP_TURNS)
        self.blind_spots = copy.deepcopy(self.DEFAULT_BLIND_SPOTS)
        self.road_conditions = copy.deepcopy(self.DEFAULT_ROAD_CONDITIONS)
        self.network_coverage = copy.deepcopy(self.DEFAULT_NETWORK_COVERAGE)
        self.accident_areas = copy.deepcopy(self.DEFAULT_ACCIDENT_AREAS)
        # Raw bearing arithmetic misreads turns that cross due north
        self.normalize_bearing_wrap = True

        if config_file:
            self._load_config(config_file)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'HazardCriteria':
        """
        Load criteria from YAML file, falling back to defaults.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            HazardCriteria instance
        """
        yaml_file = Path(yaml_path)

        if not yaml_file.exists():
            logger.warning("Criteria file not found: %s, using defaults", yaml_path)
            return cls()

        return cls(config_file=yaml_path)

    def _load_config(self, config_file: str):
        """Load configuration from YAML file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise ConfigError(f"Criteria file not found: {config_file}")

        try:
            with open(config_path) as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in criteria file: {e}")

        if not isinstance(config, dict):
            raise ConfigError(f"Criteria file must contain a mapping: {config_file}")

        _merge(self.sharp_turns, config.get('sharp_turns'))
        _merge(self.blind_spots, config.get('blind_spots'))
        _merge(self.road_conditions, config.get('road_conditions'))
        _merge(self.network_coverage, config.get('network_coverage'))
        _merge(self.accident_areas, config.get('accident_areas'))

        if 'bearings' in config:
            self.normalize_bearing_wrap = bool(
                config['bearings'].get('normalize_wrap', True)
            )

    # Sharp turns

    def turn_risk_score(self, angle: float) -> int:
        """Risk score for a turn angle (monotonic in angle)."""
        scores = self.sharp_turns['risk_scores']
        if angle > self.sharp_turns['critical_angle_deg']:
            return int(scores['critical'])
        elif angle > self.sharp_turns['high_angle_deg']:
            return int(scores['high'])
        return int(scores['moderate'])

    def recommended_speed(self, angle: float) -> int:
        speeds = self.sharp_turns['recommended_speed_kmh']
        if angle > self.sharp_turns['critical_angle_deg']:
            return int(speeds['critical'])
        return int(speeds['default'])

    def turn_visibility(self, angle: float) -> str:
        if angle > self.sharp_turns['critical_angle_deg']:
            return 'poor'
        return 'moderate'

    # Blind spots

    def blind_spot_type(self, change: float) -> str:
        if change > self.blind_spots['sharp_curve_deg']:
            return 'sharp_curve'
        return 'curve'

    # Road conditions

    def surface_quality(self, surface: Optional[str], under_construction: bool) -> str:
        """Classify surface quality. Construction overrides the surface."""
        if under_construction:
            return 'critical'
        surfaces = self.road_conditions['surfaces']
        surface = (surface or '').lower()
        if surface in surfaces.get('poor', []):
            return 'poor'
        elif surface in surfaces.get('moderate', []):
            return 'moderate'
        return 'good'

    def surface_risk_score(self, quality: str) -> int:
        return int(self.road_conditions['risk_scores'].get(quality, 3))

    # Network coverage

    def coverage_risk_score(self, signal_strength: int) -> int:
        scores = self.network_coverage['risk_scores']
        # YAML may give string keys
        value = scores.get(signal_strength, scores.get(str(signal_strength)))
        if value is None:
            return 8 if signal_strength <= 0 else 1
        return int(value)

    # Accident-prone areas

    @property
    def accident_min_risk_score(self) -> int:
        return int(self.accident_areas['min_risk_score'])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sharp_turns': self.sharp_turns,
            'blind_spots': self.blind_spots,
            'road_conditions': self.road_conditions,
            'network_coverage': self.network_coverage,
            'accident_areas': self.accident_areas,
            'bearings': {'normalize_wrap': self.normalize_bearing_wrap},
        }


def stride(count: int, samples: int) -> int:
    """Sampling step that yields roughly ``samples`` points from ``count``."""
    return max(1, count // samples)


def _merge(target: dict, overrides: Optional[dict]):
    """Recursively update ``target`` with ``overrides``."""
    if not overrides:
        return
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value
