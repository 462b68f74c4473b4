import pytest

from acequia.allocation import Need, NeedQueue, TopologyIndex, TransferEngine, classify
from acequia.allocation.classifier import Classification
from acequia.config import AllocationConfig
from acequia.network import Network
from acequia.testing import make_canal, make_network, make_region, make_source


def run_hour(network: Network, config: AllocationConfig | None = None):
    config = config if config is not None else AllocationConfig()
    engine = TransferEngine(network, TopologyIndex.from_network(network), config)
    return engine.run(classify(network.regions, config))


class TestSingleTransfer:
    def test_limited_by_donor_safe_surplus(self, two_region_network):
        outcome = run_hour(two_region_network)

        assert len(outcome.transfers) == 1
        transfer = outcome.transfers[0]
        assert transfer.amount == pytest.approx(6.0)
        assert transfer.donor_id == "A"
        assert transfer.recipient_id == "B"
        assert transfer.source_id == "res"
        assert two_region_network.region("A").water_level == pytest.approx(4.0)
        assert two_region_network.region("B").water_level == pytest.approx(6.0)
        assert two_region_network.source("res").water_level == pytest.approx(94.0)

    def test_opens_canal_with_hourly_rate(self, two_region_network):
        run_hour(two_region_network)
        canal = two_region_network.canal("AB")
        assert canal.is_open
        assert canal.flow_rate == pytest.approx(6.0 / 3600.0)

    def test_unmet_need_is_requeued(self, two_region_network):
        outcome = run_hour(two_region_network)
        # B still lacks 2.0 after the only donor is drained to its margin,
        # so it keeps coming back until the dequeue cap ends the hour
        assert [n.region.id for n in outcome.unmet] == ["B"]
        assert outcome.unmet_deficit == pytest.approx(2.0)
        assert outcome.dequeues == 1000
        assert outcome.loop_cap_hit
        assert len(outcome.transfers) == 1

    def test_limited_by_deficit(self):
        network = make_network(
            make_region("A", water_level=20.0, water_need=0.0, water_capacity=20.0),
            make_region("B", water_level=5.0, water_need=8.0, water_capacity=10.0),
            make_source(),
            make_canal("AB", "A", "B"),
        )
        outcome = run_hour(network)
        assert outcome.transfers[0].amount == pytest.approx(3.0)
        assert outcome.unmet == []
        assert outcome.dequeues == 1

    def test_limited_by_source_level(self):
        network = make_network(
            make_region("A", water_level=20.0, water_need=0.0, water_capacity=20.0),
            make_region("B", water_level=0.0, water_need=8.0, water_capacity=10.0),
            make_source(water_level=2.5),
            make_canal("AB", "A", "B"),
        )
        outcome = run_hour(network)
        assert outcome.transfers[0].amount == pytest.approx(2.5)
        assert network.source("source").water_level == pytest.approx(0.0)

    def test_limited_by_recipient_headroom(self):
        network = make_network(
            make_region("A", water_level=20.0, water_need=0.0, water_capacity=20.0),
            make_region("B", water_level=1.0, water_need=8.0, water_capacity=4.0),
            make_source(),
            make_canal("AB", "A", "B"),
        )
        outcome = run_hour(network)
        assert outcome.transfers[0].amount == pytest.approx(3.0)
        assert network.region("B").water_level == pytest.approx(4.0)


class TestSkips:
    def test_no_canal_means_no_transfer(self, disconnected_network):
        outcome = run_hour(disconnected_network)
        assert outcome.transfers == []
        assert not outcome.transferred
        assert disconnected_network.region("B").water_level == 0.0

    def test_canal_without_source_is_skipped(self):
        network = make_network(
            make_region("A", water_level=10.0, water_need=2.0, water_capacity=20.0),
            make_region("B", water_level=0.0, water_need=8.0, water_capacity=10.0),
            make_canal("AB", "A", "B", water_source=None),
        )
        assert run_hour(network).transfers == []

    def test_exhausted_source_is_skipped(self):
        network = make_network(
            make_region("A", water_level=10.0, water_need=2.0, water_capacity=20.0),
            make_region("B", water_level=0.0, water_need=8.0, water_capacity=10.0),
            make_source("dry", water_level=0.0005),
            make_canal("AB", "A", "B", water_source="dry"),
        )
        assert run_hour(network).transfers == []
        assert network.source("dry").water_level == 0.0005

    def test_negligible_amount_is_skipped(self):
        network = make_network(
            make_region("A", water_level=20.0, water_need=0.0, water_capacity=20.0),
            make_region("B", water_level=9.9995, water_need=12.0, water_capacity=10.0),
            make_source(),
            make_canal("AB", "A", "B"),
        )
        outcome = run_hour(network)
        assert outcome.transfers == []
        assert not network.canal("AB").is_open

    def test_no_donors_ends_matching_without_dequeue(self):
        network = make_network(
            make_region("A", water_level=2.0, water_need=2.0, water_capacity=20.0),
            make_region("B", water_level=0.0, water_need=8.0, water_capacity=10.0),
            make_source(),
            make_canal("AB", "A", "B"),
        )
        outcome = run_hour(network)
        assert outcome.dequeues == 0
        assert outcome.unmet_deficit == pytest.approx(8.0)


class TestMultipleDonorsAndCanals:
    def test_parallel_canals_respect_donor_margin(self):
        network = make_network(
            make_region("A", water_level=10.0, water_need=2.0, water_capacity=20.0),
            make_region("B", water_level=0.0, water_need=10.0, water_capacity=10.0),
            make_source("s1", water_level=4.0),
            make_source("s2", water_level=100.0),
            make_canal("c1", "A", "B", water_source="s1"),
            make_canal("c2", "A", "B", water_source="s2"),
        )
        outcome = run_hour(network)

        assert [(t.canal_id, t.amount) for t in outcome.transfers] == [
            ("c1", pytest.approx(4.0)),
            ("c2", pytest.approx(2.0)),
        ]
        # margin: need 2 + 0.1 * 20
        assert network.region("A").water_level == pytest.approx(4.0)
        assert network.source("s2").water_level == pytest.approx(98.0)

    def test_second_donor_covers_remainder(self):
        network = make_network(
            make_region("A", water_level=10.0, water_need=2.0, water_capacity=20.0),
            make_region("C", water_level=10.0, water_need=2.0, water_capacity=20.0),
            make_region("B", water_level=0.0, water_need=8.0, water_capacity=10.0),
            make_source(),
            make_canal("AB", "A", "B"),
            make_canal("CB", "C", "B"),
        )
        outcome = run_hour(network)

        assert [(t.donor_id, t.amount) for t in outcome.transfers] == [
            ("A", pytest.approx(6.0)),
            ("C", pytest.approx(2.0)),
        ]
        assert network.region("B").water_level == pytest.approx(8.0)
        assert outcome.unmet == []

    def test_largest_deficit_served_first(self):
        network = make_network(
            make_region("A", water_level=10.0, water_need=2.0, water_capacity=20.0),
            make_region("small", water_level=3.0, water_need=5.0, water_capacity=10.0),
            make_region("large", water_level=0.0, water_need=5.0, water_capacity=10.0),
            make_source(),
            make_canal("A_small", "A", "small"),
            make_canal("A_large", "A", "large"),
        )
        outcome = run_hour(network)

        assert outcome.transfers[0].recipient_id == "large"
        assert outcome.transfers[0].amount == pytest.approx(5.0)
        assert outcome.transfers[1].recipient_id == "small"
        assert outcome.transfers[1].amount == pytest.approx(1.0)

    def test_records_events_on_every_entity(self, two_region_network):
        run_hour(two_region_network)
        assert len(two_region_network.region("A").events) == 1
        assert len(two_region_network.region("B").events) == 1
        assert len(two_region_network.source("res").events) == 1
        assert len(two_region_network.canal("AB").events) == 1


def blocked_largest_need_network() -> Network:
    """B has the largest deficit but no canal; C is reachable from donor A."""
    return make_network(
        make_region("A", water_level=10.0, water_need=2.0, water_capacity=20.0),
        make_region("B", water_level=0.0, water_need=8.0, water_capacity=10.0),
        make_region("C", water_level=0.0, water_need=6.0, water_capacity=10.0),
        make_source(),
        make_canal("AC", "A", "C"),
    )


class TestStalledNeeds:
    def test_unreachable_largest_need_is_retried_until_cap(self):
        network = blocked_largest_need_network()
        outcome = run_hour(network)

        assert outcome.dequeues == 1000
        assert outcome.loop_cap_hit
        assert outcome.transfers == []
        assert [(n.region.id, n.amount) for n in outcome.unmet] == [("B", 8.0), ("C", 6.0)]
        assert network.region("C").water_level == 0.0

    def test_set_aside_lets_smaller_need_be_served(self):
        network = blocked_largest_need_network()
        outcome = run_hour(network, AllocationConfig(set_aside_stalled=True))

        assert outcome.dequeues == 2
        assert [t.recipient_id for t in outcome.transfers] == ["C"]
        assert outcome.transfers[0].amount == pytest.approx(6.0)
        assert [n.region.id for n in outcome.unmet] == ["B"]
        assert not outcome.loop_cap_hit

    def test_set_aside_still_requeues_after_progress(self, two_region_network):
        outcome = run_hour(two_region_network, AllocationConfig(set_aside_stalled=True))

        # pass 1 moves 6.0 and requeues B; pass 2 moves nothing and parks it
        assert outcome.dequeues == 2
        assert [n.region.id for n in outcome.unmet] == ["B"]
        assert outcome.unmet_deficit == pytest.approx(2.0)


class TestLoopCap:
    def test_stops_after_max_loops(self):
        network = make_network(
            make_region("A", water_level=20.0, water_need=0.0, water_capacity=20.0),
            make_region("B", water_level=0.0, water_need=4.0, water_capacity=10.0),
            make_region("C", water_level=0.0, water_need=3.0, water_capacity=10.0),
            make_source(),
            make_canal("AB", "A", "B"),
            make_canal("AC", "A", "C"),
        )
        outcome = run_hour(network, AllocationConfig(max_loops=1))

        assert outcome.dequeues == 1
        assert outcome.loop_cap_hit
        assert [t.recipient_id for t in outcome.transfers] == ["B"]
        assert [(n.region.id, n.amount) for n in outcome.unmet] == [("C", 3.0)]
        assert network.region("C").water_level == 0.0

    def test_cap_hit_while_need_is_requeued(self, two_region_network):
        outcome = run_hour(two_region_network, AllocationConfig(max_loops=1))
        assert outcome.dequeues == 1
        assert outcome.loop_cap_hit
        assert outcome.unmet_deficit == pytest.approx(2.0)

    def test_cap_not_flagged_when_queue_drains(self):
        network = make_network(
            make_region("A", water_level=20.0, water_need=0.0, water_capacity=20.0),
            make_region("B", water_level=5.0, water_need=8.0, water_capacity=10.0),
            make_source(),
            make_canal("AB", "A", "B"),
        )
        outcome = run_hour(network)
        assert outcome.dequeues == 1
        assert not outcome.loop_cap_hit

    def test_logs_warning_when_cap_hit(self, two_region_network, caplog):
        with caplog.at_level("WARNING", logger="acequia.allocation.engine"):
            run_hour(two_region_network, AllocationConfig(max_loops=1))
        assert "stopped matching after 1 dequeues" in caplog.text


class TestExplicitClassification:
    def test_runs_with_given_needs_and_donors(self, two_region_network):
        config = AllocationConfig()
        engine = TransferEngine(two_region_network, TopologyIndex.from_network(two_region_network), config)
        b = two_region_network.region("B")
        classification = Classification(needs=NeedQueue([Need(b, 1.0)]), donors=[two_region_network.region("A")])
        outcome = engine.run(classification)
        assert outcome.transfers[0].amount == pytest.approx(1.0)
