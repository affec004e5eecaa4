"""Plain-text rendering of query results."""

from __future__ import annotations

from quhua.core.region import LEVEL_NAMES
from quhua.hierarchy.tree import AncestorEntry, RegionNode
from quhua.query.engine import CodeLookupResult, NameSearchResult

_SEPARATOR = "-" * 40
_NO_DATA = "暂无数据"


def level_label(level: int) -> str:
    """Level name with its number, e.g. "省级(1)"."""
    if 0 <= level < len(LEVEL_NAMES):
        return f"{LEVEL_NAMES[level]}({level})"
    return f"未知({level})"


def format_chain(node: RegionNode, ancestors: list[AncestorEntry]) -> str:
    """Render a region and its ancestor chain as an indented tree."""
    lines = ["行政区划层级关系：", f"└─ {node.name}"]
    for entry in ancestors:
        lines.append(f"   └─ 隶属于{level_label(entry.level)}：{entry.name}")
    return "\n".join(lines)


def format_region(
    node: RegionNode, ancestors: list[AncestorEntry], show_type: bool = True
) -> str:
    """Render one region's fields followed by its ancestor chain."""
    record = node.record
    lines = [
        f"名称: {record.name}",
        f"代码: {record.code}",
        f"级别: {level_label(record.level)}",
    ]
    if show_type:
        lines.append(f"类型: {record.type}")

    if record.avg_house_price is not None and record.avg_house_price > 0:
        lines.append(f"平均房价: {record.avg_house_price:.2f}")
    else:
        lines.append(f"平均房价: {_NO_DATA}")
    lines.append(f"就业率: {record.employment_rate or _NO_DATA}")

    lines.append(format_chain(node, ancestors))
    return "\n".join(lines)


def format_lookup(result: CodeLookupResult) -> str:
    """Render the outcome of a code lookup."""
    if not result.found or result.node is None:
        return f"未找到代码为 {result.code} 的地区"
    return format_region(result.node, result.ancestors)


def format_search(result: NameSearchResult) -> str:
    """Render the outcome of a name search, with a truncation notice."""
    if not result.matches:
        return f"未找到包含 '{result.pattern}' 的地区"

    blocks = [
        format_region(match.node, match.ancestors, show_type=False)
        for match in result.matches
    ]
    text = f"\n{_SEPARATOR}\n".join(blocks)
    if result.truncated:
        text += f"\n\n结果过多，仅显示前{result.limit}条..."
    return text + f"\n\n共找到 {len(result.matches)} 个匹配项"
