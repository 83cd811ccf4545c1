"""Route analysis orchestration: detectors, enrichment, persistence and caching."""

import copy
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import replace
from typing import Callable, Dict, Optional

from ..core.config import Config
from ..core.exceptions import StorageError
from ..enrichment import (
    EcoZoneLocator,
    EmergencyServiceLocator,
    SampleBatch,
    TrafficSampler,
    WeatherSampler,
)
from ..hazards import (
    AccidentRiskAggregator,
    BlindSpotDetector,
    HazardCriteria,
    NetworkCoverageSampler,
    RoadConditionClassifier,
    SharpTurnDetector,
)
from ..hazards.models import (
    DETECTOR_FIELDS,
    ENRICHMENT_FIELDS,
    FIELD_TYPES,
    Route,
    RouteAnalysis,
    camel_case,
)
from ..providers import Providers, build_providers
from ..storage import ROUTES
from .cache import RouteCache

logger = logging.getLogger(__name__)

# Branches that run concurrently; accident areas are derived after the join.
CONCURRENT_DETECTORS = (
    "sharp_turns",
    "blind_spots",
    "road_conditions",
    "network_coverages",
)


class RouteAnalyzer:
    """
    Run every hazard detector for a route and, when asked, the enrichment lookups.

    One analyzer can serve many routes and threads. Per-route state lives in
    the returned RouteAnalysis only.
    """

    def __init__(
        self,
        providers: Optional[Providers] = None,
        criteria: Optional[HazardCriteria] = None,
        config: Optional[Config] = None,
        store=None,
        cache: Optional[RouteCache] = None,
        coverage_provider=None,
        blind_spot_gate=None,
    ):
        """
        Initialize analyzer.

        Args:
            providers: Remote clients (built from config when omitted)
            criteria: Detector thresholds
            config: Provider, category and concurrency settings
            store: Optional HazardStore results are saved to
            cache: Route cache (a TTL cache from config when omitted)
            coverage_provider: Signal-strength source for coverage sampling
            blind_spot_gate: Extra filter applied to blind-spot candidates
        """
        self.config = config or Config()
        self.providers = providers if providers is not None else build_providers(self.config)
        self.criteria = criteria or HazardCriteria()
        self.store = store
        self.cache = cache if cache is not None else RouteCache(self.config.cache_ttl)

        self.turn_detector = SharpTurnDetector(self.criteria)
        self.blind_spot_detector = BlindSpotDetector(self.criteria, blind_spot_gate)
        self.road_classifier = (
            RoadConditionClassifier(self.providers.overpass, self.criteria)
            if self.providers.overpass is not None else None
        )
        self.coverage_sampler = NetworkCoverageSampler(coverage_provider, self.criteria)
        self.aggregator = AccidentRiskAggregator(self.criteria)

    def analyze(self, route: Route, enhanced: bool = False, use_cache: bool = True) -> RouteAnalysis:
        """
        Analyze a route.

        Args:
            route: Route to analyze
            enhanced: Also run the paid third-party enrichment lookups
            use_cache: Serve and store results through the route cache

        Returns:
            RouteAnalysis with status ``complete`` (possibly with error notes)
            or ``error`` when the pipeline itself failed
        """
        if use_cache:
            cached = self.cache.get(route.key, enhanced)
            if cached is not None:
                logger.debug("%s: served from cache", route.key)
                return replace(copy.deepcopy(cached), from_cache=True)

        analysis = RouteAnalysis(route=route, enhanced=enhanced)
        analysis.status = "running"
        started = time.time()

        if not route.waypoints:
            logger.warning("%s: no valid waypoints, nothing to analyze", route.key)

        try:
            self._run_branches(analysis)
            analysis.accident_prone_areas = self.aggregator.aggregate(
                route.key, analysis.sharp_turns, analysis.road_conditions
            )
        except Exception as e:
            logger.exception("%s: analysis failed", route.key)
            analysis.status = "error"
            analysis.errors.append(f"analysis: {e}")
            return analysis

        analysis.status = "complete"
        self._persist(analysis)

        logger.info(
            "%s: %d hazards in %.1fs (%d notes)",
            route.key, len(analysis.hazards()), time.time() - started, len(analysis.errors)
        )

        # The cache holds its own copy; callers never share lists with it
        if use_cache:
            self.cache.set(route.key, enhanced, copy.deepcopy(analysis))
        return analysis

    def _branches(self, analysis: RouteAnalysis) -> Dict[str, Callable]:
        key = analysis.route.key
        waypoints = analysis.route.waypoints
        branches = {
            "sharp_turns": lambda: self.turn_detector.detect(key, waypoints),
            "blind_spots": lambda: self.blind_spot_detector.detect(key, waypoints),
            "network_coverages": lambda: self.coverage_sampler.sample(key, waypoints),
        }
        if self.road_classifier is not None:
            branches["road_conditions"] = lambda: self.road_classifier.classify(key, waypoints)
        else:
            logger.info("%s: no map data provider, skipping road conditions", key)

        if not analysis.enhanced:
            return branches

        providers = self.providers
        workers = self.config.sampler_workers
        if providers.overpass is not None:
            emergency = EmergencyServiceLocator(
                providers.overpass,
                self.config.emergency_categories,
                geocoder=providers.geocoder,
                buffer_deg=self.config.analysis["emergency_buffer_deg"],
            )
            eco = EcoZoneLocator(
                providers.overpass,
                self.config.eco_categories,
                buffer_deg=self.config.analysis["eco_buffer_deg"],
            )
            branches["emergency_services"] = lambda: emergency.locate(key, waypoints)
            branches["eco_zones"] = lambda: eco.locate(key, waypoints)
        if providers.traffic is not None:
            traffic = TrafficSampler(providers.traffic, max_workers=workers)
            branches["traffic_data"] = lambda: traffic.sample(key, waypoints)
        if providers.weather is not None:
            weather = WeatherSampler(providers.weather, max_workers=workers)
            branches["weather_conditions"] = lambda: weather.sample(key, waypoints)
        return branches

    def _run_branches(self, analysis: RouteAnalysis):
        """Run all branches concurrently and fold results and failures into the analysis."""
        branches = self._branches(analysis)
        timeout = self.config.branch_timeout
        executor = ThreadPoolExecutor(max_workers=min(self.config.max_workers, len(branches)))
        try:
            futures = {name: executor.submit(fn) for name, fn in branches.items()}
            _, pending = wait(futures.values(), timeout=timeout)

            for name in CONCURRENT_DETECTORS + ENRICHMENT_FIELDS:
                future = futures.get(name)
                if future is None:
                    continue
                if future in pending:
                    logger.warning("%s: %s did not finish within %gs",
                                   analysis.route.key, name, timeout)
                    analysis.errors.append(f"{name}: timed out after {timeout:g}s")
                    continue
                try:
                    result = future.result()
                except Exception as e:
                    logger.warning("%s: %s failed: %s", analysis.route.key, name, e)
                    analysis.errors.append(f"{name}: {e}")
                    continue

                if isinstance(result, SampleBatch):
                    note = result.failure_note(name)
                    if note:
                        logger.warning("%s: %s", analysis.route.key, note)
                        analysis.errors.append(note)
                    result = result.records
                setattr(analysis, name, list(result))
        finally:
            # Timed-out branches keep running in the background; their results are dropped
            executor.shutdown(wait=False, cancel_futures=True)

    def _persist(self, analysis: RouteAnalysis):
        """Replace the route's documents collection by collection."""
        if self.store is None:
            return

        key = analysis.route.key
        fields = DETECTOR_FIELDS + (ENRICHMENT_FIELDS if analysis.enhanced else ())
        batches = [(ROUTES, [analysis.route.to_dict()])]
        for name in fields:
            batches.append((
                FIELD_TYPES[name].COLLECTION,
                [record.to_dict() for record in getattr(analysis, name)],
            ))

        for collection, documents in batches:
            try:
                self.store.replace_route(collection, key, documents)
            except StorageError as e:
                logger.error("%s: saving %s failed: %s", key, collection, e)
                analysis.errors.append(f"{collection}: save failed ({e.message})")

    def load_analysis(self, route_key: str) -> Optional[Dict]:
        """
        Rebuild an output document from the store.

        Enrichment collections are included only when any of them holds data.
        Returns None when the route was never saved.
        """
        if self.store is None:
            return None
        routes = self.store.find_by_route(ROUTES, route_key)
        if not routes:
            return None

        doc = {"route": routes[-1], "status": "complete"}
        for name in DETECTOR_FIELDS:
            doc[camel_case(name)] = self.store.find_by_route(FIELD_TYPES[name].COLLECTION, route_key)

        enrichment = {
            camel_case(name): self.store.find_by_route(FIELD_TYPES[name].COLLECTION, route_key)
            for name in ENRICHMENT_FIELDS
        }
        doc["enhanced"] = any(enrichment.values())
        if doc["enhanced"]:
            doc.update(enrichment)
        doc["errors"] = []
        return doc
