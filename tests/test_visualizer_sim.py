import importlib


def _reset_visualizer_state():
    vis = importlib.import_module("visualizer.app")
    if vis.sim_controller is not None:
        vis.sim_controller.pause()
        vis.sim_controller.stop()
    vis.sim_controller = None
    vis.state = None
    return vis


def test_sim_state_endpoint():
    vis = _reset_visualizer_state()
    client = vis.app.test_client()
    resp = client.get("/sim/state")
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["tick"] == 0
    assert payload["progression"]["next_level"] == 2
    assert payload["inventory"]["51"] == 2
    assert 51 in payload["unlocked_items"]
    assert 18 not in payload["unlocked_items"]
    assert "meta" in payload
    assert payload["meta"]["running"] is False


def test_sim_step():
    vis = _reset_visualizer_state()
    client = vis.app.test_client()
    step_resp = client.post("/sim/step", json={"steps": 2})
    assert step_resp.status_code == 200
    step_payload = step_resp.get_json()
    assert step_payload["steps"] == 2
    assert step_payload["tick"] == 2

    history = client.get("/sim/history").get_json()["history"]
    assert [h["tick"] for h in history] == [0, 1, 2]
    assert history[-1]["inventory"]["51"] == 2


def test_sim_play_pause():
    vis = _reset_visualizer_state()
    client = vis.app.test_client()
    play_resp = client.post("/sim/play")
    assert play_resp.status_code == 200
    assert play_resp.get_json()["status"] == "playing"

    pause_resp = client.post("/sim/pause")
    assert pause_resp.status_code == 200
    assert pause_resp.get_json()["status"] == "paused"


def test_world_tiles_and_single_tile():
    vis = _reset_visualizer_state()
    client = vis.app.test_client()

    tiles = client.get("/world/tiles").get_json()
    assert tiles["viewport"] == [-20, -12, 20, 12]
    assert len(tiles["tiles"]) == 41 * 25

    tile = client.get("/world/tile/2/2").get_json()
    assert tile["terrain"] == "DIRT"
    negative = client.get("/world/tile/-5/-3")
    assert negative.status_code == 200
    assert negative.get_json()["explored"] is True
    assert negative.get_json()["chunk"] == [-1, -1]

    bad = client.get("/world/tiles?left=a&bottom=0&right=1&top=1")
    assert bad.status_code == 400


def test_commands_over_http():
    vis = _reset_visualizer_state()
    client = vis.app.test_client()

    resp = client.post("/command/plant_seed", json={"x": 2, "y": 2})
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True
    assert client.get("/world/tile/2/2").get_json()["farm"]["growth_stage"] == 0

    again = client.post("/command/plant_seed", json={"x": 2, "y": 2}).get_json()
    assert again["ok"] is False
    assert again["failure"] == "invalid_state"

    assert client.post("/command/teleport", json={}).status_code == 400
    assert client.post("/command/harvest", json={"x": 1}).status_code == 400


def test_sim_step_rejects_bad_counts_and_clamps(monkeypatch):
    vis = _reset_visualizer_state()
    client = vis.app.test_client()

    assert client.post("/sim/step", json={"steps": "many"}).status_code == 400
    assert client.post("/sim/step", json={"steps": [1]}).status_code == 400

    monkeypatch.setattr(vis, "MAX_STEPS_PER_REQUEST", 3)
    payload = client.post("/sim/step", json={"steps": 10**9}).get_json()
    assert payload["steps"] == 3
    assert payload["tick"] == 3
