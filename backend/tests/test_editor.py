"""Tests for campusmap.editor: 모드 상태 머신, 클릭 라우팅, 취소, 실패 처리."""
import json

import pytest

from campusmap import kinds
from campusmap.editor import MapEditor, NoDraft, UnknownOverlay
from campusmap.geo import LatLng
from campusmap.layers import DRAFT_LAYER, VERTEX_LAYER
from campusmap.modes import DrawFootway, Idle, PlacePoint, UnknownMode

from .fakes import CENTER, footway_row, north_of, offset_px


def _event_types(editor):
    return [e["type"] for e in editor.events]


def _levels(editor):
    return [n["level"] for n in editor.notices]


def _handle_for(editor, layer, key):
    return editor.surface.layer_handles(layer)[key]


class TestModeSwitching:

    @pytest.mark.unit
    def test_starts_idle(self, editor):
        assert isinstance(editor.mode, Idle)
        assert editor.snapshot()["banner"] == ""

    @pytest.mark.unit
    def test_set_mode_shows_banner(self, editor):
        editor.set_mode("parking")
        snap = editor.snapshot()
        assert snap["mode"] == "parking"
        assert snap["banner"]

    @pytest.mark.unit
    def test_entering_footway_mode_announces_transit(self, editor):
        editor.set_selection({"footway_transit": "vehicular"})
        editor.set_mode("footwayAB")
        assert _levels(editor) == ["info"]
        assert "차량" in editor.notices[0]["message"]

    @pytest.mark.unit
    def test_unknown_mode(self, editor):
        with pytest.raises(UnknownMode):
            editor.set_mode("room")
        assert isinstance(editor.mode, Idle)

    @pytest.mark.unit
    def test_leaving_footway_mode_clears_point_a(self, editor, viewport):
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)
        assert editor.surface.count(DRAFT_LAYER) == 1

        editor.set_mode("entrance")
        assert editor.surface.count(DRAFT_LAYER) == 0
        editor.set_mode("footwayAB")
        assert editor.mode.point_a is None


class TestIdle:

    @pytest.mark.unit
    def test_click_creates_nothing(self, editor, store):
        editor.handle_map_click(CENTER)
        assert store.inserts == []
        assert editor.events == []
        assert isinstance(editor.mode, Idle)


class TestAddBuilding:

    @pytest.mark.unit
    def test_click_selects_location_and_resets(self, editor, store):
        editor.set_mode("addBuilding")
        editor.handle_map_click(CENTER)
        assert editor.events[0] == {"type": "location_selected", "latitude": CENTER.lat, "longitude": CENTER.lng}
        assert "mode_reset" in _event_types(editor)
        assert isinstance(editor.mode, Idle)
        assert store.inserts == []


class TestFootwayAB:

    @pytest.mark.unit
    def test_first_click_records_a_without_insert(self, editor, store):
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)
        assert editor.mode.point_a == CENTER
        assert editor.mode.point_b is None
        assert store.inserts == []
        assert editor.surface.count(DRAFT_LAYER) == 1

    @pytest.mark.unit
    def test_second_click_inserts_line(self, editor, store):
        a, b = CENTER, north_of(CENTER, 40)
        editor.set_selection({"footway_transit": "pedestrian"})
        editor.set_mode("footwayAB")
        editor.handle_map_click(a)
        editor.handle_map_click(b)

        assert store.inserts == [(kinds.FOOTWAY, {
            "name": None,
            "state": "OPEN",
            "access_type": "pedestrian",
            "geom": {"type": "LineString", "coordinates": [[a.lng, a.lat], [b.lng, b.lat]]},
        })]
        assert isinstance(editor.mode, Idle)
        assert editor.surface.count(DRAFT_LAYER) == 0
        assert "success" in _levels(editor)

    @pytest.mark.unit
    def test_new_footway_is_rendered_with_vertices(self, editor):
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)
        editor.handle_map_click(north_of(CENTER, 40))
        assert editor.surface.count(kinds.FOOTWAY) == 1
        assert editor.surface.count(VERTEX_LAYER) == 2

    @pytest.mark.unit
    def test_uses_selected_transit(self, editor, store):
        editor.set_selection({"footway_transit": "both"})
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)
        editor.handle_map_click(north_of(CENTER, 40))
        assert store.inserts[0][1]["access_type"] == "both"

    @pytest.mark.unit
    def test_endpoint_snaps_to_existing_vertex(self, editor, store, viewport):
        vertex = north_of(CENTER, 60)
        store.add(kinds.FOOTWAY, **footway_row(vertex, north_of(CENTER, 100)))
        editor.load_all()

        editor.set_mode("footwayAB")
        editor.handle_map_click(offset_px(viewport, vertex, 4, 3))
        assert editor.mode.point_a == vertex

    @pytest.mark.unit
    def test_click_far_from_vertices_is_not_snapped(self, editor, store, viewport):
        vertex = north_of(CENTER, 60)
        store.add(kinds.FOOTWAY, **footway_row(vertex, north_of(CENTER, 100)))
        editor.load_all()

        click = offset_px(viewport, vertex, 30)
        editor.set_mode("footwayAB")
        editor.handle_map_click(click)
        assert editor.mode.point_a == click

    @pytest.mark.unit
    def test_vertex_marker_click_picks_exact_vertex(self, editor, store):
        v1, v2 = north_of(CENTER, 60), north_of(CENTER, 100)
        store.add(kinds.FOOTWAY, **footway_row(v1, v2))
        editor.load_all()

        editor.set_mode("footwayAB")
        editor.click_overlay(_handle_for(editor, VERTEX_LAYER, "vertex:1"))
        editor.click_overlay(_handle_for(editor, VERTEX_LAYER, "vertex:2"))
        geom = store.inserts[-1][1]["geom"]
        assert geom["coordinates"] == [[v1.lng, v1.lat], [v2.lng, v2.lat]]

    @pytest.mark.unit
    def test_vertex_pick_outside_footway_mode_is_noop(self, editor, store):
        store.add(kinds.FOOTWAY, **footway_row(CENTER, north_of(CENTER, 10)))
        editor.load_all()
        editor.pick_vertex_as_ab(CENTER)
        editor.click_overlay(_handle_for(editor, VERTEX_LAYER, "vertex:1"))
        assert isinstance(editor.mode, Idle)
        assert editor.events == []

    @pytest.mark.unit
    def test_insert_failure_keeps_mode_and_clears_points(self, editor, store):
        store.fail_insert.add(kinds.FOOTWAY)
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)
        editor.handle_map_click(north_of(CENTER, 40))

        assert isinstance(editor.mode, DrawFootway)
        assert editor.mode.point_a is None
        assert editor.mode.point_b is None
        assert editor.surface.count(DRAFT_LAYER) == 0
        assert _levels(editor)[-1] == "error"

        # 다시 시도 가능
        store.fail_insert.clear()
        editor.handle_map_click(CENTER)
        editor.handle_map_click(north_of(CENTER, 40))
        assert len(store.inserts) == 1

    @pytest.mark.unit
    def test_cancel_after_point_a(self, editor, store):
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)
        assert editor.cancel() is True

        assert store.inserts == []
        assert isinstance(editor.mode, Idle)
        assert editor.surface.count(DRAFT_LAYER) == 0
        assert _levels(editor)[-1] == "info"


class TestPlacePoint:

    @pytest.mark.unit
    def test_click_opens_draft_with_nearest_building(self, editor, store):
        store.add_building("Far", north_of(CENTER, 500))
        near = store.add_building("Near", north_of(CENTER, 5))
        store.add_building("Mid", north_of(CENTER, 50))
        editor.load_all()

        editor.set_mode("landmark")
        editor.handle_map_click(CENTER)

        draft = editor.draft
        assert draft.kind == "landmark"
        assert draft.building_id == near["id"]
        assert draft.name == ""
        assert store.inserts == []
        options = editor.snapshot()["draft"]["building_options"]
        assert options[0]["id"] == near["id"]

    @pytest.mark.unit
    def test_no_buildings_means_no_link(self, editor, store):
        editor.set_mode("parking")
        editor.handle_map_click(CENTER)
        editor.submit_draft()
        assert store.inserts[0][1]["building_id"] is None

    @pytest.mark.unit
    def test_second_click_moves_draft(self, editor):
        editor.set_mode("entrance")
        editor.handle_map_click(CENTER)
        other = north_of(CENTER, 80)
        editor.handle_map_click(other)
        assert editor.draft.coordinate == other

    @pytest.mark.unit
    def test_entrance_scenario(self, editor, store):
        b = store.add_building("B", north_of(CENTER, 3))
        store.add_building("C", north_of(CENTER, 30))
        editor.load_all()

        editor.set_mode("entrance")
        editor.set_selection({"entrance_type": "vehicular"})
        editor.handle_map_click(CENTER)
        assert editor.draft.kind == "entrance"
        assert editor.draft.building_id == b["id"]

        editor.update_draft(name="Gate 1")
        saved = editor.submit_draft()

        assert store.inserts == [(kinds.ENTRANCE, {
            "name": "Gate 1",
            "building_id": b["id"],
            "type": "vehicular",
            "is_active": True,
            "location": {"type": "Point", "coordinates": [CENTER.lng, CENTER.lat]},
        })]
        assert saved["name"] == "Gate 1"
        assert isinstance(editor.mode, Idle)
        assert editor.draft is None
        assert editor.surface.count(kinds.ENTRANCE) == 1

    @pytest.mark.unit
    def test_parking_uses_selected_type(self, editor, store):
        editor.set_selection({"parking_type": "motorcycle"})
        editor.set_mode("parking")
        editor.handle_map_click(CENTER)
        editor.submit_draft()
        kind, row = store.inserts[0]
        assert kind == kinds.PARKING
        assert row["type"] == "motorcycle"
        assert row["capacity"] is None

    @pytest.mark.unit
    def test_update_draft_building(self, editor, store):
        store.add_building("Near", north_of(CENTER, 5))
        far = store.add_building("Far", north_of(CENTER, 500))
        editor.load_all()
        editor.set_mode("entrance")
        editor.handle_map_click(CENTER)
        editor.update_draft(building_id=far["id"])
        editor.submit_draft()
        assert store.inserts[0][1]["building_id"] == far["id"]

    @pytest.mark.unit
    def test_cancel_draft(self, editor, store):
        editor.set_mode("landmark")
        editor.handle_map_click(CENTER)
        editor.cancel_draft()
        assert isinstance(editor.mode, Idle)
        assert store.inserts == []

    @pytest.mark.unit
    def test_insert_failure_clears_draft(self, editor, store):
        store.fail_insert.add(kinds.LANDMARK)
        editor.set_mode("landmark")
        editor.handle_map_click(CENTER)
        assert editor.submit_draft() is None
        assert isinstance(editor.mode, Idle)
        assert _levels(editor)[-1] == "error"

    @pytest.mark.unit
    def test_draft_operations_need_a_draft(self, editor):
        with pytest.raises(NoDraft):
            editor.update_draft(name="x")
        with pytest.raises(NoDraft):
            editor.submit_draft()
        # 취소는 초안이 없어도 오류가 아니다
        editor.cancel_draft()


class TestCancel:

    @pytest.mark.unit
    def test_cancel_with_nothing_pending_is_noop(self, editor):
        assert editor.cancel() is False
        assert editor.notices == []
        assert editor.events == []

    @pytest.mark.unit
    def test_cancel_is_idempotent(self, editor):
        editor.set_mode("entrance")
        editor.handle_map_click(CENTER)
        assert editor.cancel() is True
        assert editor.cancel() is False
        assert editor.draft is None
        assert isinstance(editor.mode, Idle)


class TestOverlayClicks:

    @pytest.mark.unit
    @pytest.mark.parametrize("mode", ["idle", "footwayAB", "entrance"])
    def test_entity_click_requests_edit(self, editor, store, mode):
        b = store.add_building("B", CENTER)
        editor.load_all()
        editor.set_mode(mode)
        editor.click_overlay(_handle_for(editor, kinds.BUILDING, f"building:{b['id']}"))
        assert {"type": "edit_request", "kind": "building", "id": b["id"]} in editor.events

    @pytest.mark.unit
    def test_each_kind_routes_to_its_edit_request(self, editor, store):
        location = {"type": "Point", "coordinates": [CENTER.lng, CENTER.lat]}
        rows = {
            kinds.FOOTWAY: store.add(kinds.FOOTWAY, **footway_row(CENTER, north_of(CENTER, 10))),
            kinds.ENTRANCE: store.add(kinds.ENTRANCE, type="pedestrian", is_active=True, location=location),
            kinds.PARKING: store.add(kinds.PARKING, type="car", is_active=True, location=location),
            kinds.LANDMARK: store.add(kinds.LANDMARK, type="bar", is_active=True, location=location),
        }
        editor.load_all()
        for kind, row in rows.items():
            editor.click_overlay(_handle_for(editor, kind, f"{kind}:{row['id']}"))
        assert [(e["kind"], e["id"]) for e in editor.events] == [(k, r["id"]) for k, r in rows.items()]

    @pytest.mark.unit
    def test_unknown_handle(self, editor):
        with pytest.raises(UnknownOverlay):
            editor.click_overlay("ov-999")


class TestModal:

    @pytest.mark.unit
    def test_modal_disables_interactions(self, editor):
        assert all(editor.interactions().values())
        editor.set_modal_open(True)
        assert not any(editor.interactions().values())
        editor.set_modal_open(False)
        assert all(editor.interactions().values())

    @pytest.mark.unit
    def test_toggle_twice_restores(self, editor):
        before = editor.interactions()
        editor.set_modal_open(True)
        editor.set_modal_open(False)
        assert editor.interactions() == before

    @pytest.mark.unit
    def test_clicks_ignored_behind_modal(self, editor, store):
        editor.set_mode("addBuilding")
        editor.set_modal_open(True)
        editor.handle_map_click(CENTER)
        assert editor.events == []
        assert editor.mode.name == "addBuilding"


class TestLoading:

    @pytest.mark.unit
    def test_click_before_viewport_is_ignored(self, store):
        editor = MapEditor(store)
        editor.load_all()
        editor.set_mode("addBuilding")
        editor.handle_map_click(CENTER)
        assert editor.events == []

    @pytest.mark.unit
    def test_query_failure_keeps_previous_layer(self, editor, store):
        store.add_building("B", CENTER)
        editor.load_all()
        assert editor.surface.count(kinds.BUILDING) == 1

        store.fail_load.add(kinds.BUILDING)
        store.add_building("C", north_of(CENTER, 10))
        assert editor.refresh(kinds.BUILDING) is False
        assert editor.surface.count(kinds.BUILDING) == 1
        assert editor.refresh(kinds.ENTRANCE) is True

    @pytest.mark.unit
    def test_reload_with_same_data_emits_no_ops(self, editor, store):
        store.add_building("B", CENTER)
        store.add(kinds.FOOTWAY, **footway_row(CENTER, north_of(CENTER, 10)))
        editor.load_all()
        editor.surface.drain_ops()
        editor.load_all()
        assert editor.surface.drain_ops() == []


class TestStatePersistence:

    @pytest.mark.unit
    def test_roundtrip_through_json(self, editor, store):
        editor.set_selection({"footway_transit": "vehicular"})
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)
        editor.set_modal_open(True)

        state = json.loads(json.dumps(editor.to_state()))
        restored = MapEditor(store, state)

        assert restored.mode.point_a == CENTER
        assert restored.selection.footway_transit == "vehicular"
        assert restored.modal_open is True
        assert restored.viewport.to_dict() == editor.viewport.to_dict()
        assert restored.surface.count(DRAFT_LAYER) == 1

    @pytest.mark.unit
    def test_completion_across_requests(self, editor, store):
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)

        nxt = MapEditor(store, json.loads(json.dumps(editor.to_state())))
        nxt.load_all()
        nxt.handle_map_click(north_of(CENTER, 40))
        assert len(store.inserts) == 1
        assert isinstance(nxt.mode, Idle)

    @pytest.mark.unit
    def test_rebuild_redraws_point_a(self, editor, store):
        store.add_building("B", north_of(CENTER, 100))
        editor.load_all()
        editor.set_mode("footwayAB")
        editor.handle_map_click(CENTER)
        before = set(editor.surface.layer_handles(kinds.BUILDING).values()) | set(
            editor.surface.layer_handles(DRAFT_LAYER).values())
        editor.surface.drain_ops()

        editor.rebuild()
        ops = editor.surface.drain_ops()
        removed = [op["handle"] for op in ops if op["op"] == "remove"]
        added = [op["handle"] for op in ops if op["op"] == "add"]
        # 이전 오버레이를 모두 지운 뒤 새 핸들로 다시 그린다
        assert set(removed) == before
        assert ops[:len(removed)] == [{"op": "remove", "handle": h} for h in removed]
        assert not set(added) & before
        assert editor.surface.count(kinds.BUILDING) == 1
        assert editor.surface.count(DRAFT_LAYER) == 1
        assert editor.surface.get(editor.surface.layer_handles(DRAFT_LAYER)["draft:A"])["coordinates"] == [
            CENTER.lat, CENTER.lng]

    @pytest.mark.unit
    def test_rebuild_after_data_change_never_reuses_handles(self, editor, store):
        first = store.add_building("B1", CENTER)
        editor.rebuild()
        old = editor.surface.layer_handles(kinds.BUILDING)[f"building:{first['id']}"]
        editor.surface.drain_ops()

        store.rows[kinds.BUILDING].clear()
        second = store.add_building("B2", north_of(CENTER, 10))
        editor.rebuild()
        ops = editor.surface.drain_ops()

        assert ops[0] == {"op": "remove", "handle": old}
        new = editor.surface.layer_handles(kinds.BUILDING)[f"building:{second['id']}"]
        assert new != old
        assert editor.surface.get(old) is None
        assert editor.surface.count(kinds.BUILDING) == 1

    @pytest.mark.unit
    def test_snapshot_drains_ops(self, editor, store):
        store.add_building("B", north_of(CENTER, 100))
        editor.load_all()
        assert editor.snapshot()["ops"]
        assert editor.snapshot()["ops"] == []


class TestFootwayScenario:

    @pytest.mark.unit
    def test_pedestrian_footway_scenario(self, editor, store):
        x1, y1 = -79.6040, -2.1490
        x2, y2 = -79.6035, -2.1485
        editor.set_selection({"footway_transit": "pedestrian"})
        editor.set_mode("footwayAB")
        editor.handle_map_click(LatLng(y1, x1))
        editor.handle_map_click(LatLng(y2, x2))

        assert len(store.inserts) == 1
        kind, row = store.inserts[0]
        assert kind == kinds.FOOTWAY
        assert row["geom"]["coordinates"] == [[x1, y1], [x2, y2]]
        assert row["state"] == "OPEN"
        assert row["access_type"] == "pedestrian"
