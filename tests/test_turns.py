"""Tests for sharp-turn and blind-spot detection."""

import math

import pytest

from route_analyzer.hazards import BlindSpotDetector, BlindSpotGate, HazardCriteria, SharpTurnDetector

from conftest import STRAIGHT_ROUTE, make_waypoints

# Heading ~350 deg, then ~80 deg: a right turn that crosses due north.
NORTH_CROSSING = [
    (10.0, 76.0),
    (10.01, 75.9982),
    (10.0118, 76.0082),
]


class TestSharpTurnDetector:
    def test_straight_route_has_no_turns(self, criteria):
        turns = SharpTurnDetector(criteria).detect("r", make_waypoints(STRAIGHT_ROUTE))
        assert turns == []

    def test_right_angle_left_turn(self, criteria, l_waypoints):
        turns = SharpTurnDetector(criteria).detect("r", l_waypoints)
        assert len(turns) == 1
        turn = turns[0]
        assert (turn.lat, turn.lng) == (10.0, 76.01)
        assert turn.direction == 'left'
        assert turn.turn_angle_deg == pytest.approx(90.0, abs=0.01)
        # Just under 90 deg on the sphere: high, not critical
        assert turn.risk_score == 7
        assert turn.recommended_speed_kmh == 30
        assert turn.visibility == 'moderate'
        assert turn.driver_action == "Reduce speed to 30 km/h for sharp left turn"

    def test_hairpin_is_critical(self, criteria):
        waypoints = make_waypoints([(10.0, 76.0), (10.0, 76.01), (9.99, 76.0)])
        turn = SharpTurnDetector(criteria).detect("r", waypoints)[0]
        assert turn.turn_angle_deg > 90
        assert turn.risk_score == 9
        assert turn.recommended_speed_kmh == 20
        assert turn.visibility == 'poor'
        assert turn.direction == 'right'
        assert turn.risk_level == 'critical'

    def test_distance_from_start(self, criteria, l_waypoints):
        turn = SharpTurnDetector(criteria).detect("r", l_waypoints)[0]
        assert turn.distance_from_start_km == pytest.approx(1.095, abs=0.01)

    def test_right_angle_right_turn(self, criteria):
        # North for one step, then east
        waypoints = make_waypoints([(10.0, 76.0), (10.01, 76.0), (10.01, 76.01)])
        turns = SharpTurnDetector(criteria).detect("r", waypoints)
        assert len(turns) == 1
        assert (turns[0].lat, turns[0].lng) == (10.01, 76.0)
        assert turns[0].direction == 'right'
        assert turns[0].risk_score == 7

    @staticmethod
    def turn_at(angle):
        """East into (10.0, 76.01), then leave turning left by ``angle`` degrees."""
        heading = math.radians(90.0 - angle)
        exit_point = (
            10.0 + 0.01 * math.cos(heading),
            76.01 + 0.01 * math.sin(heading) / math.cos(math.radians(10.0)),
        )
        return make_waypoints([(10.0, 76.0), (10.0, 76.01), exit_point])

    def test_wider_angles_stay_detected(self, criteria):
        detector = SharpTurnDetector(criteria)
        scores = []
        for angle in (65, 80, 100, 150):
            turns = detector.detect("r", self.turn_at(angle))
            assert len(turns) == 1
            assert (turns[0].lat, turns[0].lng) == (10.0, 76.01)
            assert turns[0].turn_angle_deg == pytest.approx(angle, abs=1.0)
            scores.append(turns[0].risk_score)
        assert scores == [5, 7, 9, 9]

    def test_fewer_than_three_points(self, criteria):
        detector = SharpTurnDetector(criteria)
        assert detector.detect("r", []) == []
        assert detector.detect("r", make_waypoints([(10.0, 76.0), (10.0, 76.01)])) == []

    def test_direction_uses_wrapped_delta(self, criteria):
        turns = SharpTurnDetector(criteria).detect("r", make_waypoints(NORTH_CROSSING))
        assert len(turns) == 1
        assert turns[0].direction == 'right'
        assert turns[0].turn_angle_deg == pytest.approx(90.0, abs=1.0)

    def test_raw_bearing_mode_keeps_legacy_direction(self):
        criteria = HazardCriteria()
        criteria.normalize_bearing_wrap = False
        turns = SharpTurnDetector(criteria).detect("r", make_waypoints(NORTH_CROSSING))
        assert turns[0].direction == 'left'

    def test_threshold_is_exclusive(self, l_waypoints):
        criteria = HazardCriteria()
        criteria.sharp_turns['threshold_deg'] = 90.0
        assert SharpTurnDetector(criteria).detect("r", l_waypoints) == []


class RejectAll(BlindSpotGate):
    def passes(self, waypoints, index, bearing_change):
        return False


class TestBlindSpotDetector:
    def test_right_angle_is_sharp_curve(self, criteria, l_waypoints):
        spots = BlindSpotDetector(criteria).detect("r", l_waypoints)
        assert len(spots) == 1
        spot = spots[0]
        assert (spot.lat, spot.lng) == (10.0, 76.01)
        assert spot.spot_type == 'sharp_curve'
        assert spot.risk_score == 8
        assert spot.visibility_distance_m == 50

    def test_gentle_curve(self, criteria):
        # ~45 deg change over two points either side
        waypoints = make_waypoints([
            (10.0, 76.0), (10.0, 76.005), (10.0, 76.01),
            (10.0035, 76.0135), (10.007, 76.017),
        ])
        spots = BlindSpotDetector(criteria).detect("r", waypoints)
        assert len(spots) == 1
        assert spots[0].spot_type == 'curve'
        assert spots[0].risk_score == 6
        assert spots[0].visibility_distance_m == 100

    def test_needs_five_points(self, criteria):
        waypoints = make_waypoints([(10.0, 76.0), (10.0, 76.01), (10.01, 76.01), (10.02, 76.01)])
        assert BlindSpotDetector(criteria).detect("r", waypoints) == []

    def test_straight_route(self, criteria):
        assert BlindSpotDetector(criteria).detect("r", make_waypoints(STRAIGHT_ROUTE)) == []

    def test_gate_can_veto(self, criteria, l_waypoints):
        assert BlindSpotDetector(criteria, RejectAll()).detect("r", l_waypoints) == []

    def test_gate_must_implement_passes(self):
        class Incomplete(BlindSpotGate):
            pass

        with pytest.raises(TypeError):
            Incomplete()

    def test_wrapped_change_across_north(self, criteria):
        # Heading ~350 deg before, ~10 deg after: a 20 deg change, not 340
        waypoints = make_waypoints([
            (10.0, 76.0), (10.005, 75.9991), (10.01, 75.9982),
            (10.0147, 75.9990), (10.0194, 75.9999),
        ])
        assert BlindSpotDetector(criteria).detect("r", waypoints) == []

        raw = HazardCriteria()
        raw.normalize_bearing_wrap = False
        assert len(BlindSpotDetector(raw).detect("r", waypoints)) == 1
