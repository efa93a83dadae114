"""
Tests for the numpy ForceSimulation adapter.
"""

import math

import pytest

from crexplorer_core.adapters.force_simulation import ForceSimulation, SimulationSettings
from crexplorer_core.domain.enums import DocType
from crexplorer_core.domain.models import GraphNode, GraphPayload
from crexplorer_core.services.graph_builder import GraphBuilder


@pytest.fixture
def payload(sample_tree):
    return GraphBuilder(sample_tree).build(ignore_types=["same"]).payload


class TestSeeding:

    def test_set_graph_positions_every_node(self, payload):
        sim = ForceSimulation()
        sim.set_graph(payload)
        assert all(n.has_position for n in payload.nodes)
        assert sim.is_running
        assert sim.alpha == 1.0

    def test_existing_positions_are_kept(self, payload):
        payload.nodes[0].x, payload.nodes[0].y, payload.nodes[0].z = 7.0, 8.0, 9.0
        ForceSimulation().set_graph(payload)
        assert (payload.nodes[0].x, payload.nodes[0].y, payload.nodes[0].z) == (7.0, 8.0, 9.0)

    def test_empty_graph_does_not_run(self):
        sim = ForceSimulation()
        sim.set_graph(GraphPayload())
        assert not sim.is_running
        assert sim.tick() is False


class TestRunning:

    def test_settles_and_fires_callback_once(self, payload):
        stops = []
        sim = ForceSimulation(SimulationSettings(cooldown_ticks=50))
        sim.set_engine_stop_callback(lambda: stops.append(sim.alpha))
        sim.set_graph(payload)
        ticks = sim.run_until_settled()
        assert ticks == 50
        assert not sim.is_running
        assert len(stops) == 1

    def test_reheat_restarts_and_fires_again(self, payload):
        stops = []
        sim = ForceSimulation(SimulationSettings(cooldown_ticks=20))
        sim.set_engine_stop_callback(lambda: stops.append(True))
        sim.set_graph(payload)
        sim.run_until_settled()
        sim.set_charge_strength(-95)
        sim.reheat()
        assert sim.is_running
        sim.run_until_settled()
        assert len(stops) == 2
        assert sim.charge_strength == -95

    def test_positions_stay_finite(self, payload):
        sim = ForceSimulation()
        sim.set_graph(payload)
        sim.run_until_settled()
        for node in payload.nodes:
            assert all(math.isfinite(v) for v in (node.x, node.y, node.z))

    def test_repulsion_spreads_nodes(self, payload):
        sim = ForceSimulation()
        sim.set_graph(payload)
        before = _spread(payload)
        sim.run_until_settled()
        assert _spread(payload) > before

    def test_deterministic(self, sample_tree):
        a = GraphBuilder(sample_tree).build().payload
        b = GraphBuilder(sample_tree).build().payload
        for p in (a, b):
            sim = ForceSimulation()
            sim.set_graph(p)
            sim.run_until_settled()
        assert [(n.x, n.y, n.z) for n in a.nodes] == [(n.x, n.y, n.z) for n in b.nodes]

    def test_chunked_charge_matches_single_block(self, sample_tree):
        """Splitting the pairwise sum into row blocks leaves the layout unchanged."""
        layouts = []
        for chunk in (2, 256):
            p = GraphBuilder(sample_tree).build().payload
            sim = ForceSimulation(SimulationSettings(cooldown_ticks=40, charge_chunk_size=chunk))
            sim.set_graph(p)
            sim.run_until_settled()
            layouts.append([(n.x, n.y, n.z) for n in p.nodes])
        for small, whole in zip(*layouts):
            assert small == pytest.approx(whole, abs=1e-9)

    def test_large_graph_runs_in_blocks(self):
        nodes = [GraphNode(id=f"N{i}", name=f"N{i}", doc_type=DocType.CRE) for i in range(600)]
        sim = ForceSimulation(SimulationSettings(cooldown_ticks=3, charge_chunk_size=64))
        sim.set_graph(GraphPayload(nodes=nodes))
        assert sim.run_until_settled() == 3
        assert all(n.has_position for n in nodes)


class TestCamera:

    def test_camera_position(self):
        sim = ForceSimulation()
        sim.camera_position((1.0, 2.0, 3.0), (0.0, 0.0, 0.0), 900)
        assert sim.camera == ((1.0, 2.0, 3.0), (0.0, 0.0, 0.0))

    def test_viewport(self):
        sim = ForceSimulation(SimulationSettings(fov=50.0, width=800, height=600))
        assert sim.camera_fov() == 50.0
        assert sim.viewport_size() == (800, 600)

    def test_zoom_to_fit_centers_on_graph(self, payload):
        sim = ForceSimulation()
        sim.set_graph(payload)
        sim.run_until_settled()
        sim.zoom_to_fit(850, 80)
        position, look_at = sim.camera
        assert position[2] > look_at[2]
        assert position[0] == pytest.approx(look_at[0])

    def test_refresh_resyncs_moved_nodes(self, payload):
        sim = ForceSimulation()
        sim.set_graph(payload)
        sim.run_until_settled()
        payload.nodes[0].x = 500.0
        sim.refresh()
        assert sim.refresh_count == 1
        sim.zoom_to_fit()
        _, look_at = sim.camera
        assert look_at[0] > 100.0


def _spread(payload):
    xs = [n.x for n in payload.nodes]
    ys = [n.y for n in payload.nodes]
    zs = [n.z for n in payload.nodes]
    return (max(xs) - min(xs)) + (max(ys) - min(ys)) + (max(zs) - min(zs))
