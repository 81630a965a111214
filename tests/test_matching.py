import math

import pytest

from donor_locator.errors import ValidationError
from donor_locator.models import DonorMatch
from donor_locator.services.matching import (
    DEFAULT_RADIUS_KM,
    EARTH_RADIUS_KM,
    great_circle_distance,
    match,
)
from tests.conftest import DELHI, MUMBAI, NEAR_DELHI, make_donor

POINTS = [
    DELHI,
    NEAR_DELHI,
    MUMBAI,
    (0.0, 0.0),
    (-33.8688, 151.2093),
    (64.1466, -21.9426),
    (90.0, 0.0),
    (-90.0, 45.0),
    (0.0, 180.0),
    (0.0, -180.0),
]


class TestGreatCircleDistance:
    @pytest.mark.parametrize("a", POINTS)
    @pytest.mark.parametrize("b", POINTS)
    def test_symmetric(self, a, b):
        assert great_circle_distance(*a, *b) == great_circle_distance(*b, *a)

    @pytest.mark.parametrize("point", POINTS)
    def test_same_point_is_exactly_zero(self, point):
        assert great_circle_distance(*point, *point) == 0.0

    def test_nearly_coincident_points_do_not_produce_nan(self):
        distance = great_circle_distance(DELHI[0], DELHI[1], DELHI[0], DELHI[1] + 1e-12)
        assert not math.isnan(distance)
        assert 0.0 <= distance < 0.01

    def test_antipodal_points_are_half_the_circumference(self):
        distance = great_circle_distance(0.0, 0.0, 0.0, 180.0)
        assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM)

    def test_one_degree_of_latitude(self):
        distance = great_circle_distance(0.0, 0.0, 1.0, 0.0)
        assert distance == pytest.approx(EARTH_RADIUS_KM * math.pi / 180)

    def test_delhi_neighbourhood(self):
        distance = great_circle_distance(*DELHI, *NEAR_DELHI)
        assert 14.0 < distance < 15.0

    def test_delhi_to_mumbai(self):
        distance = great_circle_distance(*DELHI, *MUMBAI)
        assert 1100 < distance < 1200


class TestMatch:
    def test_nearby_donor_is_included(self):
        donor = make_donor(1, *NEAR_DELHI)
        result = match(DELHI, [donor], 15)

        assert len(result) == 1
        assert isinstance(result[0], DonorMatch)
        assert result[0].id == 1
        assert result[0].distance_km == pytest.approx(great_circle_distance(*DELHI, *NEAR_DELHI))
        assert result[0].distance_km < 15

    def test_distant_donor_is_excluded(self):
        assert match(DELHI, [make_donor(1, *MUMBAI)], 15) == []

    def test_no_candidates_yields_empty_list(self):
        assert match(DELHI, []) == []

    def test_default_radius(self):
        assert DEFAULT_RADIUS_KM == 15.0
        # ~22 km away, outside the default radius
        assert match((0.0, 0.0), [make_donor(1, 0.2, 0.0)]) == []

    def test_boundary_is_excluded(self):
        donor = make_donor(1, 0.1, 0.1)
        radius = great_circle_distance(0.0, 0.0, 0.1, 0.1)

        assert match((0.0, 0.0), [donor], radius) == []
        assert [m.id for m in match((0.0, 0.0), [donor], radius + 1e-9)] == [1]

    def test_ordered_by_distance(self):
        donors = [
            make_donor(1, 0.05, 0.0),
            make_donor(2, 0.2, 0.0),
            make_donor(3, 0.01, 0.0),
            make_donor(4, 0.0, 0.08),
        ]
        result = match((0.0, 0.0), donors, 15)

        assert [m.id for m in result] == [3, 1, 4]
        distances = [m.distance_km for m in result]
        assert distances == sorted(distances)
        assert all(d < 15 for d in distances)

    def test_ties_keep_input_order(self):
        donors = [
            make_donor(7, 0.01, 0.0),
            make_donor(3, -0.01, 0.0),
            make_donor(5, 0.0, 0.0),
            make_donor(2, 0.0, 0.0),
        ]
        result = match((0.0, 0.0), donors, 15)

        assert [m.id for m in result] == [5, 2, 7, 3]
        assert result[0].distance_km == 0.0
        assert result[1].distance_km == 0.0

    def test_match_carries_public_fields_only(self):
        result = match(DELHI, [make_donor(9, *DELHI, blood_group="O-")])
        dumped = result[0].model_dump(by_alias=True)

        assert set(dumped) == {"id", "name", "bloodGroup", "phone", "latitude", "longitude", "distanceKm"}
        assert dumped["bloodGroup"] == "O-"
        assert dumped["distanceKm"] == 0.0

    def test_accepts_any_iterable(self):
        donors = (make_donor(i, 0.01 * i, 0.0) for i in range(1, 4))
        assert [m.id for m in match((0.0, 0.0), donors)] == [1, 2, 3]

    @pytest.mark.parametrize(
        "origin",
        [
            (91.0, 0.0),
            (-90.5, 0.0),
            (0.0, 180.5),
            (0.0, -181.0),
            (None, 77.2),
            (28.6, None),
            (float("nan"), 0.0),
            (0.0, float("inf")),
            ("north", 0.0),
            (True, 0.0),
            (28.6,),
            None,
        ],
    )
    def test_invalid_origin(self, origin):
        with pytest.raises(ValidationError):
            match(origin, [make_donor(1, 0.0, 0.0)])

    @pytest.mark.parametrize("radius", [0, -5, float("nan"), float("inf"), "15", None])
    def test_invalid_radius(self, radius):
        with pytest.raises(ValidationError):
            match(DELHI, [], radius)


def test_geo_point_rejects_booleans():
    with pytest.raises(ValidationError):
        match((28.6, False), [])
