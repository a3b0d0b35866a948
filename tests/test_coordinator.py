"""Tests for the coordinator agent."""

from __future__ import annotations

import pytest

from atelier.engine import CoordinatorAgent, RecordingTransport, build_backlog
from atelier.products import Product
from atelier.protocol import Announce, Assign, Confirm, HelpRequest


@pytest.fixture
def coordinator(outbox: RecordingTransport) -> CoordinatorAgent:
    return CoordinatorAgent(outbox, build_backlog(3, 2))


class TestBacklog:
    def test_build_backlog(self) -> None:
        backlog = build_backlog(2, 3)
        assert [p.name for p in backlog] == ["Product1", "Product2"]
        assert all(p.required_skills() == ["skill1", "skill2", "skill3"] for p in backlog)

    def test_build_backlog_rejects_negative(self) -> None:
        with pytest.raises(ValueError, match="count"):
            build_backlog(-1, 3)


class TestAnnounce:
    def test_assigns_head_of_backlog(self, coordinator: CoordinatorAgent, outbox: RecordingTransport) -> None:
        coordinator.handle(Announce("Robot1", {"skill1": 0.7}))

        [(recipient, msg)] = outbox.sent
        assert recipient == "Robot1"
        assert isinstance(msg, Assign)
        assert Product.deserialize(msg.product).name == "Product1"
        assert coordinator.message_count == 2
        assert coordinator.assigned == {"Product1": "Robot1"}
        assert coordinator.announced["Robot1"] == {"skill1": 0.7}

    def test_fifo_order(self, coordinator: CoordinatorAgent, outbox: RecordingTransport) -> None:
        for name in ["Robot1", "Robot2", "Robot3"]:
            coordinator.handle(Announce(name))
        names = [Product.deserialize(m.product).name for _, m in outbox.sent]  # type: ignore[union-attr]
        assert names == ["Product1", "Product2", "Product3"]

    def test_backlog_depletion(self, coordinator: CoordinatorAgent, outbox: RecordingTransport) -> None:
        """K products: the (K+1)-th Announce yields no Assign."""
        for i in range(3):
            coordinator.handle(Announce(f"Robot{i}"))
        assert len(outbox.sent) == 3

        coordinator.handle(Announce("Robot9"))

        assert len(outbox.sent) == 3
        assert outbox.to("Robot9") == []
        # 4 announces + 3 assigns
        assert coordinator.message_count == 7

    def test_empty_backlog(self, outbox: RecordingTransport) -> None:
        coordinator = CoordinatorAgent(outbox)
        coordinator.handle(Announce("Robot1"))
        assert outbox.sent == []
        assert coordinator.message_count == 1


class TestConfirm:
    def test_confirm_counts(self, coordinator: CoordinatorAgent) -> None:
        coordinator.handle(Confirm("Robot1", "Product1"))
        assert coordinator.completed_count == 1
        assert coordinator.message_count == 1

    def test_confirm_is_trusted(self, coordinator: CoordinatorAgent) -> None:
        coordinator.handle(Confirm("Robot1", "NeverAssigned"))
        assert coordinator.completed_count == 1

    def test_duplicates_are_double_counted(self, coordinator: CoordinatorAgent) -> None:
        coordinator.handle(Confirm("Robot1", "Product1"))
        coordinator.handle(Confirm("Robot2", "Product1"))
        assert coordinator.completed_count == 2
        assert coordinator.duplicate_confirmations == {"Product1": 2}
        assert coordinator.stats()["distinct_completed"] == 1

    def test_other_kinds_only_counted(self, coordinator: CoordinatorAgent, outbox: RecordingTransport) -> None:
        coordinator.handle(HelpRequest.of("Robot1", "skill1", Product.new("X", 1)))
        coordinator.handle(Assign.of("Robot1", Product.new("Y", 1)))
        assert outbox.sent == []
        assert coordinator.message_count == 2
        assert coordinator.completed_count == 0
        assert len(coordinator.pending) == 3


def test_stats(coordinator: CoordinatorAgent) -> None:
    coordinator.handle(Announce("Robot1"))
    coordinator.handle(Confirm("Robot1", "Product1"))
    stats = coordinator.stats()
    assert stats == {
        "completed": 1,
        "messages": 3,
        "assigned": 1,
        "pending": 2,
        "distinct_completed": 1,
        "duplicate_confirmations": {},
    }
