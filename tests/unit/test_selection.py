"""Unit tests for abc9map.design.selection.select_from_args."""
from __future__ import annotations

import logging

import pytest

from abc9map.design.model import Design, Module
from abc9map.design.selection import select_from_args
from abc9map.errors import SelectionError


@pytest.fixture()
def design() -> Design:
    return Design([Module("alu_add"), Module("alu_mul"), Module("ctrl")])


class TestSelectFromArgs:
    def test_no_tokens_keeps_active_selection(self, design: Design) -> None:
        assert select_from_args(design, []) is None

    def test_exact_name(self, design: Design) -> None:
        sel = select_from_args(design, ["ctrl"])
        assert sel is not None
        assert sel.modules == {"ctrl"}

    def test_glob_pattern(self, design: Design) -> None:
        sel = select_from_args(design, ["alu_*"])
        assert sel is not None
        assert sel.modules == {"alu_add", "alu_mul"}

    def test_member_selection_is_partial(self, design: Design) -> None:
        sel = select_from_args(design, ["ctrl/state"])
        assert sel is not None
        assert sel.is_selected("ctrl")
        assert not sel.is_whole_module("ctrl")
        assert sel.members == {"ctrl": {"state"}}

    def test_option_token_rejected(self, design: Design) -> None:
        with pytest.raises(SelectionError, match="Unknown option"):
            select_from_args(design, ["-bogus"])

    def test_option_after_name_rejected(self, design: Design) -> None:
        with pytest.raises(SelectionError):
            select_from_args(design, ["ctrl", "-dff"])

    @pytest.mark.parametrize("token", ["/state", "ctrl/"])
    def test_malformed_pattern(self, design: Design, token: str) -> None:
        with pytest.raises(SelectionError, match="Malformed"):
            select_from_args(design, [token])

    def test_unmatched_pattern_warns(
        self, design: Design, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="abc9map.design.selection"):
            sel = select_from_args(design, ["nothing_*"])
        assert sel is not None
        assert not sel.modules
        assert "didn't match" in caplog.text
