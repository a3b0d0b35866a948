"""Tests for the message protocol."""

from __future__ import annotations

import dataclasses

import pytest

from atelier.products import DecodeError, Product
from atelier.protocol import Announce, Assign, Confirm, HelpRequest, MessageKind


class TestMessages:
    def test_kinds(self) -> None:
        p = Product.new("P1", 1)
        assert Announce("Robot1").kind == MessageKind.ANNOUNCE
        assert Assign.of("Atelier", p).kind == MessageKind.ASSIGN
        assert HelpRequest.of("Robot1", "skill1", p).kind == MessageKind.HELP_REQUEST
        assert Confirm("Robot1", "P1").kind == MessageKind.CONFIRM

    def test_messages_are_frozen(self) -> None:
        msg = Confirm("Robot1", "P1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            msg.product_name = "P2"  # type: ignore[misc]

    def test_assign_carries_serialized_product(self) -> None:
        p = Product.new("P1", 2)
        msg = Assign.of("Atelier", p)
        assert msg.content == "P1,{skill1=false, skill2=false}"
        p.apply_skill("skill1")
        # Snapshot taken at send time
        assert Product.deserialize(msg.product).required_skills() == ["skill1", "skill2"]

    def test_announce_content(self) -> None:
        msg = Announce("Robot1", {"skill1": 0.5, "skill2": 0.987})
        assert msg.content == "{skill1=0.50, skill2=0.99}"

    def test_confirm_content(self) -> None:
        assert Confirm("Robot2", "P9").content == "P9"


class TestHelpRequestPayload:
    def test_content_layout(self) -> None:
        p = Product.new("P1", 2)
        p.apply_skill("skill1")
        msg = HelpRequest.of("Robot1", "skill2", p)
        assert msg.content == "skill2,P1,{skill1=true, skill2=false}"

    def test_from_content(self) -> None:
        msg = HelpRequest.from_content("Robot1", "skill2,P1,{skill1=true, skill2=false}")
        assert msg.sender == "Robot1"
        assert msg.skill == "skill2"
        product = Product.deserialize(msg.product)
        assert product.name == "P1"
        assert product.skills == {"skill1": True, "skill2": False}

    @pytest.mark.parametrize("content", ["skill2", ",P1,{}", "skill2,"])
    def test_from_content_malformed(self, content: str) -> None:
        with pytest.raises(DecodeError):
            HelpRequest.from_content("Robot1", content)
