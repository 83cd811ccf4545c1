"""Configuration management for the route analyzer."""

import configparser
import os
from pathlib import Path
from typing import Dict, List, Optional

from .exceptions import ConfigError


class Config:
    """Parse and manage provider, enrichment and analysis settings."""

    # Emergency services queried along the route
    DEFAULT_EMERGENCY_CATEGORIES = {
        "hospital": {"amenity": ["hospital"]},
        "police": {"amenity": ["police"]},
        "fire_station": {"amenity": ["fire_station"]},
        "fuel": {"amenity": ["fuel"]},
        "school": {"amenity": ["school"]},
    }

    # Protected and eco-sensitive areas
    DEFAULT_ECO_CATEGORIES = {
        "protected_area": {"boundary": ["protected_area"]},
        "national_park": {"boundary": ["national_park"]},
        "wood": {"natural": ["wood"]},
        "forest": {"landuse": ["forest"]},
        "nature_reserve": {"leisure": ["nature_reserve"]},
    }

    DEFAULT_PROVIDERS = {
        "overpass_url": "https://overpass-api.de/api/interpreter",
        "overpass_timeout": 30.0,
        "weather_url": "https://api.openweathermap.org/data/2.5/weather",
        "weather_timeout": 5.0,
        "traffic_url": "https://api.tomtom.com/traffic/services/4/flowSegmentData/absolute/10/json",
        "traffic_timeout": 5.0,
        "geocoding_url": "https://api.mapbox.com/geocoding/v5/mapbox.places",
        "geocoding_timeout": 5.0,
    }

    DEFAULT_ANALYSIS = {
        "cache_ttl": 3600,
        "max_workers": 8,
        "sampler_workers": 4,
        "branch_timeout": 300.0,
        "emergency_buffer_deg": 0.05,
        "eco_buffer_deg": 0.02,
    }

    # Garmin symbols for GPX export
    DEFAULT_SYMBOLS = {
        "sharp_turn": "Danger Area",
        "blind_spot": "Danger Area",
        "accident_prone_area": "Skull and Crossbones",
        "road_condition": "Road Closed",
        "network_coverage": "Radio Beacon",
        "emergency_service": "Medical Facility",
        "eco_zone": "Park",
        "traffic": "Car",
        "weather": "Information",
    }

    # Environment variables override file settings
    ENV_KEYS = {
        "weather_api_key": "OPENWEATHER_API_KEY",
        "traffic_api_key": "TOMTOM_API_KEY",
        "geocoding_api_key": "MAPBOX_API_KEY",
    }

    def __init__(self, config_file: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to INI file. If None, uses defaults.
            environ: Environment mapping (defaults to os.environ)
        """
        self.emergency_categories = {k: dict(v) for k, v in self.DEFAULT_EMERGENCY_CATEGORIES.items()}
        self.eco_categories = {k: dict(v) for k, v in self.DEFAULT_ECO_CATEGORIES.items()}
        self.providers = self.DEFAULT_PROVIDERS.copy()
        self.analysis = self.DEFAULT_ANALYSIS.copy()
        self.symbols = self.DEFAULT_SYMBOLS.copy()
        self.api_keys: Dict[str, Optional[str]] = {name: None for name in self.ENV_KEYS}

        if config_file:
            self._load_config(config_file)

        self._load_environment(os.environ if environ is None else environ)

    def _load_config(self, config_file: str):
        """Load configuration from INI file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_file}")

        parser = configparser.ConfigParser()
        try:
            parser.read(config_path)
        except configparser.Error as e:
            raise ConfigError(f"Invalid config file {config_file}: {e}")

        # Category sections replace the defaults as a whole
        emergency = self._parse_categories(parser, "emergency:")
        if emergency:
            self.emergency_categories = emergency
        eco = self._parse_categories(parser, "eco:")
        if eco:
            self.eco_categories = eco

        if "providers" in parser:
            for key, value in parser["providers"].items():
                if key.endswith("_api_key"):
                    self.api_keys[key] = value or None
                elif key.endswith("_timeout"):
                    self.providers[key] = self._parse_number(key, value, float)
                else:
                    self.providers[key] = value

        if "analysis" in parser:
            for key, value in parser["analysis"].items():
                default = self.DEFAULT_ANALYSIS.get(key)
                cast = int if isinstance(default, int) else float
                self.analysis[key] = self._parse_number(key, value, cast)

        if "garmin_symbols" in parser:
            for kind, symbol in parser["garmin_symbols"].items():
                self.symbols[kind] = symbol

    @staticmethod
    def _parse_categories(parser, prefix: str) -> Dict[str, Dict[str, List[str]]]:
        categories = {}
        for section in parser.sections():
            if not section.startswith(prefix):
                continue
            name = section[len(prefix):].strip()
            filters = {}
            for key in parser[section]:
                values = [v.strip() for v in parser[section][key].split(',') if v.strip()]
                filters[key] = values
            categories[name] = filters
        return categories

    @staticmethod
    def _parse_number(key: str, value: str, cast):
        try:
            return cast(value)
        except ValueError:
            raise ConfigError(f"Invalid value for {key}: {value!r}")

    def _load_environment(self, environ):
        for name, env_var in self.ENV_KEYS.items():
            if environ.get(env_var):
                self.api_keys[name] = environ[env_var]
        if environ.get("OVERPASS_API_URL"):
            self.providers["overpass_url"] = environ["OVERPASS_API_URL"]

    def get_api_key(self, name: str) -> Optional[str]:
        """Get API key (``weather``, ``traffic`` or ``geocoding``)."""
        return self.api_keys.get(f"{name}_api_key")

    def get_timeout(self, provider: str) -> float:
        return float(self.providers.get(f"{provider}_timeout", 10.0))

    def get_url(self, provider: str) -> str:
        return self.providers[f"{provider}_url"]

    def get_symbol(self, kind: str) -> str:
        """Get Garmin symbol for a hazard kind."""
        return self.symbols.get(kind, "Flag, Blue")

    @property
    def cache_ttl(self) -> int:
        return int(self.analysis["cache_ttl"])

    @property
    def max_workers(self) -> int:
        return max(1, int(self.analysis["max_workers"]))

    @property
    def sampler_workers(self) -> int:
        return max(1, int(self.analysis["sampler_workers"]))

    @property
    def branch_timeout(self) -> float:
        return float(self.analysis["branch_timeout"])

    def enabled_providers(self) -> Dict[str, bool]:
        """Which optional remote providers have credentials."""
        return {
            "weather": bool(self.get_api_key("weather")),
            "traffic": bool(self.get_api_key("traffic")),
            "geocoding": bool(self.get_api_key("geocoding")),
        }
