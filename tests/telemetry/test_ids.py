"""Tests for IDGenerator and generate_rum_id."""

from __future__ import annotations

import random
import re
from typing import TYPE_CHECKING

from rum.core.telemetry.ids import SEQUENCE_MAX, IDGenerator, generate_rum_id

if TYPE_CHECKING:
    from tests.conftest import ManualTicker


class TestIDGenerator:
    """Test cases for IDGenerator."""

    def test_first_id_is_timestamp_plus_001(self, ticker: ManualTicker) -> None:
        generator = IDGenerator(ticker)

        assert generator.generate() == int(f"{ticker.now_ms}001")

    def test_strictly_increasing_within_one_millisecond(
        self, ticker: ManualTicker
    ) -> None:
        """Test 999 ids drawn in the same millisecond keep increasing."""
        generator = IDGenerator(ticker)

        ids = [generator.generate() for _ in range(SEQUENCE_MAX)]

        assert ids == sorted(ids)
        assert len(set(ids)) == SEQUENCE_MAX
        assert ids[-1] == int(f"{ticker.now_ms}999")

    def test_thousandth_call_wraps_to_one(self, ticker: ManualTicker) -> None:
        """Test the counter wraps 999 -> 1 without raising."""
        generator = IDGenerator(ticker)
        for _ in range(SEQUENCE_MAX):
            generator.generate()

        wrapped = generator.generate()

        assert generator.sequence == 1
        assert wrapped == int(f"{ticker.now_ms}001")

    def test_increasing_across_milliseconds(self, ticker: ManualTicker) -> None:
        generator = IDGenerator(ticker)
        first = generator.generate()
        ticker.advance(1)

        assert generator.generate() > first

    def test_uses_ticker_clock(self, ticker: ManualTicker) -> None:
        generator = IDGenerator(ticker)
        ticker.advance(42)

        generator.generate()

        assert generator.last_timestamp == ticker.now_ms

    def test_generators_are_independent(self, ticker: ManualTicker) -> None:
        """Test each generator keeps its own counter."""
        a = IDGenerator(ticker)
        b = IDGenerator(ticker)

        a.generate()
        a.generate()

        assert b.generate() == int(f"{ticker.now_ms}001")
        assert a.sequence == 2


class TestGenerateRumId:
    """Test cases for generate_rum_id."""

    def test_shape(self) -> None:
        rum_id = generate_rum_id(1_700_000_000_000, random.Random(7))

        assert len(rum_id) == 36
        assert [rum_id[i] for i in (13, 18, 23)] == ["-"] * 3
        assert rum_id[14] == "s"
        assert rum_id[19] in "89AB"

    def test_prefixed_with_timestamp(self) -> None:
        rum_id = generate_rum_id(1_700_000_000_123)

        assert rum_id[:13] == "1700000000123"

    def test_hex_body(self) -> None:
        rum_id = generate_rum_id(1_700_000_000_000, random.Random(1))

        assert re.fullmatch(r"[0-9A-F\-s]{36}", rum_id)

    def test_random_part_varies(self) -> None:
        ids = {generate_rum_id(1_700_000_000_000) for _ in range(20)}

        assert len(ids) > 1
