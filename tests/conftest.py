"""
Pytest configuration and fixtures for quhua tests.
"""

from __future__ import annotations

import pytest

from quhua.config import QueryConfig
from quhua.core.region import NO_PARENT, DivisionRecord
from quhua.hierarchy import HierarchyBuilder, RegionTree
from quhua.query import RegionQueryEngine


@pytest.fixture
def sample_records() -> list[DivisionRecord]:
    """Two provinces with a few levels below each, in source order."""
    return [
        DivisionRecord("110000000000", "北京市", 1, NO_PARENT, 0),
        DivisionRecord("110100000000", "市辖区", 2, "110000000000", 0),
        DivisionRecord(
            "110101000000",
            "东城区",
            3,
            "110100000000",
            111,
            avg_house_price=98000.0,
            employment_rate="96.5%",
        ),
        DivisionRecord("110101001000", "东华门街道", 4, "110101000000", 111),
        DivisionRecord("110101001001", "多福巷社区居委会", 5, "110101001000", 111),
        DivisionRecord("110102000000", "西城区", 3, "110100000000", 111),
        DivisionRecord("320000000000", "江苏省", 1, NO_PARENT, 0),
        DivisionRecord("320100000000", "南京市", 2, "320000000000", 0, avg_house_price=31000.5),
        DivisionRecord("320102000000", "玄武区", 3, "320100000000", 111),
        DivisionRecord("320103000000", "秦淮区", 3, "320100000000", 111),
    ]


@pytest.fixture
def sample_tree(sample_records: list[DivisionRecord]) -> RegionTree:
    """Tree built from sample_records with the retained code index."""
    return HierarchyBuilder.build(sample_records)


@pytest.fixture
def engine(sample_tree: RegionTree) -> RegionQueryEngine:
    """Query engine using the retained code index."""
    return RegionQueryEngine(sample_tree)


@pytest.fixture
def scan_engine(sample_records: list[DivisionRecord]) -> RegionQueryEngine:
    """Query engine over a tree without a retained index (linear scans)."""
    config = QueryConfig(retain_index=False)
    return RegionQueryEngine(HierarchyBuilder.build(sample_records, config=config), config)


@pytest.fixture
def sample_csv_text() -> str:
    """CSV text of a small dataset, with header and optional columns."""
    return (
        "code,name,level,parent_code,type,avg_house_price,employment_rate\n"
        "110000000000,北京市,1,0,0\n"
        "110100000000,市辖区,2,110000000000,0,,N/A\n"
        "110101000000,东城区,3,110100000000,111,98000,96.5%\n"
        "320000000000,江苏省,1,0,0,0,N/A\n"
    )
