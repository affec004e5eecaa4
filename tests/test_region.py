"""Tests for DivisionRecord and QueryConfig."""

from __future__ import annotations

import dataclasses

import pytest

from quhua.config import DuplicatePolicy, QueryConfig
from quhua.core.region import (
    NO_PARENT,
    ROOT_CODE,
    ROOT_LEVEL,
    ROOT_NAME,
    DivisionRecord,
)


# ===================================================================
# DivisionRecord
# ===================================================================


class TestDivisionRecord:
    """Tests for the flat record model."""

    def test_root_record(self):
        root = DivisionRecord.root()
        assert root.code == ROOT_CODE
        assert root.name == ROOT_NAME
        assert root.level == ROOT_LEVEL
        assert root.parent_code == NO_PARENT
        assert root.type == 0
        assert root.avg_house_price is None
        assert root.employment_rate is None

    def test_is_top_level(self):
        assert DivisionRecord("110000000000", "北京市", 1, NO_PARENT).is_top_level
        assert not DivisionRecord("110100000000", "市辖区", 2, "110000000000").is_top_level

    def test_level_name(self):
        assert DivisionRecord("1", "a", 1, NO_PARENT).level_name == "省级"
        assert DivisionRecord("1", "a", 5, "2").level_name == "村级"
        assert DivisionRecord("1", "a", 9, "2").level_name is None

    def test_records_are_frozen(self):
        record = DivisionRecord("110000000000", "北京市", 1, NO_PARENT)
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.name = "changed"  # type: ignore[misc]

    def test_to_dict(self):
        record = DivisionRecord(
            "320100000000", "南京市", 2, "320000000000", 0, avg_house_price=31000.5
        )
        data = record.to_dict()
        assert data["code"] == "320100000000"
        assert data["parent_code"] == "320000000000"
        assert data["avg_house_price"] == 31000.5
        assert data["employment_rate"] is None

    def test_from_dict_maps_na_to_none(self):
        record = DivisionRecord.from_dict(
            {
                "code": 110000000000,
                "name": "北京市",
                "level": "1",
                "parent_code": 0,
                "employment_rate": "N/A",
            }
        )
        assert record.code == "110000000000"
        assert record.level == 1
        assert record.parent_code == NO_PARENT
        assert record.employment_rate is None
        assert record.avg_house_price is None

    def test_from_dict_keeps_zero_price(self):
        record = DivisionRecord.from_dict(
            {"code": "1", "name": "a", "level": 1, "parent_code": "0", "avg_house_price": 0}
        )
        assert record.avg_house_price == 0.0


# ===================================================================
# QueryConfig
# ===================================================================


class TestQueryConfig:
    """Tests for query configuration."""

    def test_defaults(self):
        config = QueryConfig()
        assert config.name_search_limit == 5
        assert config.count_all_matches is False
        assert config.retain_index is True
        assert config.duplicate_policy is DuplicatePolicy.FIRST_WINS

    def test_rejects_limit_below_one(self):
        with pytest.raises(ValueError):
            QueryConfig(name_search_limit=0)

    def test_policy_string_is_coerced(self):
        config = QueryConfig(duplicate_policy="reject")  # type: ignore[arg-type]
        assert config.duplicate_policy is DuplicatePolicy.REJECT

    def test_dict_round_trip(self):
        config = QueryConfig(
            name_search_limit=10,
            count_all_matches=True,
            retain_index=False,
            duplicate_policy=DuplicatePolicy.REJECT,
        )
        assert QueryConfig.from_dict(config.to_dict()) == config

    def test_from_dict_fills_defaults(self):
        assert QueryConfig.from_dict({}) == QueryConfig()
