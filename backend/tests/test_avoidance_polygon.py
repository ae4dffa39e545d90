"""
Tests for avoidance polygon generation

Each hazard zone becomes a closed ring of equally spaced vertices in the
routing engine's [lon, lat] order.
"""
import pytest
from hypothesis import given, strategies as st

from services.avoidance_polygon import KM_PER_DEGREE, to_polygon, to_polygons
from services.models import Coordinate, HazardZone
from utils.distance import haversine_distance


@pytest.fixture
def zone():
    """1.5 km zone in the eastern Sierra"""
    return HazardZone(center=Coordinate(36.85, -118.95), radius_km=1.5)


class TestToPolygon:

    def test_ring_is_closed(self, zone):
        polygon = to_polygon(zone)
        assert polygon.is_closed
        assert polygon.ring[0] == polygon.ring[-1]

    @pytest.mark.parametrize('point_count', [8, 16, 32, 64])
    def test_vertex_count(self, zone, point_count):
        polygon = to_polygon(zone, point_count)
        assert polygon.vertex_count == point_count
        assert len(polygon.ring) == point_count + 1

    def test_default_is_32_points(self, zone):
        assert to_polygon(zone).vertex_count == 32

    def test_too_few_points_rejected(self, zone):
        with pytest.raises(ValueError):
            to_polygon(zone, 7)

    def test_deterministic(self, zone):
        assert to_polygon(zone, 32) == to_polygon(zone, 32)

    def test_first_vertex_due_east(self, zone):
        """Angle 0 lies east of center at the same latitude"""
        first = to_polygon(zone).ring[0]
        assert first.lat == pytest.approx(zone.center.lat)
        assert first.lon > zone.center.lon

    def test_latitude_extent(self, zone):
        ring = to_polygon(zone, 32).ring
        max_lat = max(c.lat for c in ring)
        assert max_lat - zone.center.lat == pytest.approx(zone.radius_km / KM_PER_DEGREE)

    def test_vertices_near_radius(self, zone):
        """Flat projection stays within a few percent of the true radius at fire-zone scales"""
        for vertex in to_polygon(zone).ring:
            distance = haversine_distance(vertex.lat, vertex.lon, zone.center.lat, zone.center.lon)
            assert distance == pytest.approx(zone.radius_km, rel=0.02)

    def test_exterior_is_lon_lat(self, zone):
        polygon = to_polygon(zone, 8)
        exterior = polygon.exterior()
        assert exterior[0] == [polygon.ring[0].lon, polygon.ring[0].lat]
        assert polygon.__geo_interface__['type'] == 'Polygon'

    def test_shapely_contains_center(self, zone):
        from shapely.geometry import Point
        shape = to_polygon(zone).to_shapely()
        assert shape.is_valid
        assert shape.contains(Point(zone.center.lon, zone.center.lat))

    def test_small_zone_not_approximate(self, zone):
        assert to_polygon(zone).approximate is False

    def test_large_or_polar_zone_flagged(self):
        assert to_polygon(HazardZone(Coordinate(36.85, -118.95), 75.0)).approximate is True
        assert to_polygon(HazardZone(Coordinate(85.0, 10.0), 1.0)).approximate is True

    def test_antimeridian_longitudes_stay_valid(self):
        polygon = to_polygon(HazardZone(Coordinate(0.0, 179.999), 2.0))
        assert all(-180 <= c.lon <= 180 for c in polygon.ring)

    @given(
        st.floats(min_value=-60, max_value=60),
        st.floats(min_value=-170, max_value=170),
        st.floats(min_value=0.5, max_value=20),
        st.integers(min_value=8, max_value=128)
    )
    def test_closed_for_any_zone(self, lat, lon, radius_km, point_count):
        polygon = to_polygon(HazardZone(Coordinate(lat, lon), radius_km), point_count)
        assert polygon.is_closed
        assert polygon.vertex_count == point_count


class TestToPolygons:

    def test_one_polygon_per_zone_in_order(self, zone):
        other = HazardZone(center=Coordinate(37.10, -118.60), radius_km=0.5)
        polygons = to_polygons([zone, other], 16)
        assert [p.zone for p in polygons] == [zone, other]
        assert all(p.vertex_count == 16 for p in polygons)

    def test_empty(self):
        assert to_polygons([]) == []
