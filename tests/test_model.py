import pytest

from geocircle.model import CircleModel, DragState, HandleKind, LatLng, clamp, parse_center, round_meters


@pytest.fixture
def model():
    return CircleModel((-75.343, 39.984), 300, 10, 500000)


class TestParseCenter:

    def test_latlng(self):
        assert parse_center(LatLng(lat=1.5, lng=2.5)) == (2.5, 1.5)

    def test_mapping(self):
        assert parse_center({'lat': 39.984, 'lng': -75.343}) == (-75.343, 39.984)

    def test_lng_lat_sequence(self):
        assert parse_center([-75.343, 39.984]) == (-75.343, 39.984)

    def test_mapping_missing_key(self):
        with pytest.raises(ValueError):
            parse_center({'lat': 1})

    def test_unsupported_value(self):
        with pytest.raises(TypeError):
            parse_center('39.984,-75.343')


class TestHelpers:

    def test_round_half_up(self):
        assert round_meters(2.5) == 3
        assert round_meters(2.49) == 2
        assert round_meters(-0.5) == 0

    def test_clamp(self):
        assert clamp(5, 10, 20) == 10
        assert clamp(25, 10, 20) == 20
        assert clamp(15, 10, 20) == 15


class TestCircleModel:
    """Committed/edit values and the drag state machine."""

    def test_initial_radius_is_rounded_and_clamped(self):
        assert CircleModel((0, 0), 300.4, 10, 500).committed_radius == 300
        assert CircleModel((0, 0), 900, 10, 500).committed_radius == 500
        assert CircleModel((0, 0), 1, 10, 500).committed_radius == 10

    def test_starts_idle(self, model):
        assert model.state is DragState.IDLE
        assert not model.is_dragging

    def test_center_edit_commit(self, model):
        model.begin_edit(HandleKind.CENTER)
        assert model.editing_center and not model.editing_radius

        model.update_edit_center((-75.0, 40.0))
        assert model.committed_center == (-75.343, 39.984)
        assert model.active_center() == (-75.0, 40.0)

        assert model.commit() is True
        assert model.state is DragState.IDLE
        assert model.committed_center == (-75.0, 40.0)

    def test_commit_without_movement_reports_no_change(self, model):
        model.begin_edit(HandleKind.RADIUS)
        assert model.commit() is False

    def test_radius_edit_rounds_and_clamps(self, model):
        model.begin_edit(HandleKind.RADIUS)
        model.update_edit_radius(1234.6)
        assert model.active_radius() == 1235
        model.update_edit_radius(10_000_000)
        assert model.active_radius() == 500000
        model.commit()
        assert model.committed_radius == 500000

    def test_single_active_drag(self, model):
        model.begin_edit(HandleKind.CENTER)
        with pytest.raises(RuntimeError):
            model.begin_edit(HandleKind.RADIUS)

    def test_updates_ignored_for_other_kind(self, model):
        model.begin_edit(HandleKind.CENTER)
        model.update_edit_radius(1000)
        assert model.edit_radius == 300

    def test_abort_discards_edit(self, model):
        model.begin_edit(HandleKind.CENTER)
        model.update_edit_center((0.0, 0.0))
        model.abort_edit()
        assert model.state is DragState.IDLE
        assert model.active_center() == (-75.343, 39.984)

    def test_snapshot_suppresses_repeat_change(self, model):
        model.set_radius(1000)
        assert model.radius_changed()
        model.mark_radius_committed()
        model.set_radius(1000)
        assert not model.radius_changed()

    def test_set_limits_reclamps(self, model):
        model.set_limits(10, 200)
        assert model.committed_radius == 200
