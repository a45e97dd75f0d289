"""
Special data-shape detection.

Raw JSON input is classified into exactly one shape before any tabular
profiling happens. Detectors run in a fixed priority order, most specific
first, because their inputs can overlap with plain arrays of records:

1. box-plot series (five-number summaries)
2. admixture matrices (per-sample cluster proportions)
3. hierarchical trees
4. anything else is tabular
"""
import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from dashlens.core.schemas import (
    ChartRecommendation,
    ChartType,
    Confidence,
    DataAnalysis,
    FieldProfile,
    FieldType,
    Row,
)
from dashlens.services.detector import is_number
from dashlens.services.profiler import analyze_field, normalize_value

logger = logging.getLogger(__name__)

BOX_PLOT_TYPE = "boxPlot"
FIVE_NUMBER_SUMMARY = "[min, Q1, median, Q3, max]"

NAME_KEYS = ("name", "label", "id", "title", "key", "text")
CHILDREN_KEYS = ("children", "nodes", "items", "branches", "subtree")

CLUSTER_NAME_RE = re.compile(r'^k\d+$', re.IGNORECASE)
CLUSTER_NAME_MARKERS = ("cluster", "群集")

# Column sums accepted as compositional data
PROPORTION_TOTAL, PROPORTION_TOLERANCE = 1.0, 0.15
PERCENT_TOTAL, PERCENT_TOLERANCE = 100.0, 10.0

SAMPLE_FIELD = "sample"
GROUP_FIELD = "group"


@dataclass
class BoxPlotInput:
    points: List[Dict[str, Any]]


@dataclass
class Cluster:
    name: str
    values: List[float]


@dataclass
class AdmixtureInput:
    samples: List[str]
    clusters: List[Cluster]
    groups: Optional[List[Any]] = None

    @property
    def sample_count(self) -> int:
        return len(self.samples)

    @property
    def cluster_count(self) -> int:
        return len(self.clusters)

    @property
    def cluster_names(self) -> List[str]:
        return [c.name for c in self.clusters]

    @property
    def group_count(self) -> Optional[int]:
        if self.groups is None:
            return None
        return len({normalize_value(g) for g in self.groups if g is not None})


@dataclass
class TreeStats:
    depth: int = 0
    node_count: int = 0
    leaf_count: int = 0


@dataclass
class TreeInput:
    root: Dict[str, Any]
    stats: TreeStats
    nodes: List[Row] = field(default_factory=list)  # one {name, children} row per node


@dataclass
class TabularInput:
    rows: List[Row]


InputShape = Union[BoxPlotInput, AdmixtureInput, TreeInput, TabularInput]


# Box plot

def _is_five_numbers(value: Any) -> bool:
    return isinstance(value, list) and len(value) == 5 and all(is_number(v) for v in value)


def _is_box_point(entry: Any) -> bool:
    return isinstance(entry, dict) and "x" in entry and _is_five_numbers(entry.get("y"))


def _is_box_series(entry: Any) -> bool:
    if not isinstance(entry, dict) or entry.get("type") != BOX_PLOT_TYPE:
        return False
    data = entry.get("data")
    return isinstance(data, list) and len(data) > 0 and all(_is_box_point(p) for p in data)


def is_box_plot(value: Any) -> bool:
    if not isinstance(value, list) or not value:
        return False
    if _is_box_series(value[0]):
        return True
    return all(_is_box_point(entry) for entry in value)


def extract_box_plot(value: List[Any]) -> BoxPlotInput:
    if _is_box_series(value[0]):
        points = [
            {"x": p["x"], "y": list(p["y"])}
            for series in value if _is_box_series(series)
            for p in series["data"]
        ]
    else:
        points = [{"x": p["x"], "y": list(p["y"])} for p in value]
    return BoxPlotInput(points=points)


# Admixture

def _is_number_list(value: Any) -> bool:
    return isinstance(value, list) and all(is_number(v) for v in value)


def _looks_like_cluster_name(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in CLUSTER_NAME_MARKERS) or bool(CLUSTER_NAME_RE.match(name))


def _columns_are_proportions(series: List[List[float]]) -> bool:
    for column in zip(*series):
        total = sum(column)
        near_one = abs(total - PROPORTION_TOTAL) <= PROPORTION_TOLERANCE
        near_hundred = abs(total - PERCENT_TOTAL) <= PERCENT_TOLERANCE
        if not (near_one or near_hundred):
            return False
    return True


def _is_admixture_object(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    samples = value.get("samples")
    clusters = value.get("clusters")
    if not isinstance(samples, list) or not all(isinstance(s, str) for s in samples):
        return False
    if not isinstance(clusters, list) or not clusters:
        return False
    return all(
        isinstance(c, dict) and isinstance(c.get("name"), str) and _is_number_list(c.get("values"))
        for c in clusters
    )


def _is_admixture_series(value: Any) -> bool:
    if not isinstance(value, list) or len(value) < 2:
        return False
    if not all(
        isinstance(s, dict) and isinstance(s.get("name"), str) and _is_number_list(s.get("data"))
        for s in value
    ):
        return False

    lengths = {len(s["data"]) for s in value}
    if len(lengths) != 1 or 0 in lengths:
        return False

    if all(_looks_like_cluster_name(s["name"]) for s in value):
        return True
    return _columns_are_proportions([s["data"] for s in value])


def is_admixture(value: Any) -> bool:
    return _is_admixture_object(value) or _is_admixture_series(value)


def _column_names(names: List[str]) -> List[str]:
    """
    Make cluster names usable as row keys.

    A name that repeats an earlier cluster or one of the sample/group
    columns gets a numeric suffix: "sample" becomes "sample_2".
    """
    taken = {SAMPLE_FIELD, GROUP_FIELD}
    result = []
    for name in names:
        column = name
        suffix = 2
        while column in taken:
            column = f"{name}_{suffix}"
            suffix += 1
        taken.add(column)
        result.append(column)
    return result


def extract_admixture(value: Any) -> AdmixtureInput:
    if isinstance(value, dict):
        groups = value.get("groups")
        names = _column_names([c["name"] for c in value["clusters"]])
        return AdmixtureInput(
            samples=list(value["samples"]),
            clusters=[Cluster(name=n, values=list(c["values"])) for n, c in zip(names, value["clusters"])],
            groups=list(groups) if isinstance(groups, list) else None,
        )

    sample_count = len(value[0]["data"])
    names = _column_names([s["name"] for s in value])
    return AdmixtureInput(
        samples=[f"Sample {i + 1}" for i in range(sample_count)],
        clusters=[Cluster(name=n, values=list(s["data"])) for n, s in zip(names, value)],
    )


# Tree

def _node_name(node: Dict[str, Any]) -> Optional[str]:
    for key in NAME_KEYS:
        if isinstance(node.get(key), str):
            return node[key]
    return None


def _node_children(node: Dict[str, Any]) -> Optional[List[Any]]:
    """First non-empty children-like list, the same key is_tree accepts."""
    for key in CHILDREN_KEYS:
        children = node.get(key)
        if isinstance(children, list) and children:
            return children
    return None


def is_tree(value: Any) -> bool:
    if not isinstance(value, dict) or _node_name(value) is None:
        return False
    for key in CHILDREN_KEYS:
        children = value.get(key)
        if isinstance(children, list) and children:
            if any(isinstance(c, dict) and _node_name(c) is not None for c in children):
                return True
    return False


def extract_tree(value: Dict[str, Any]) -> TreeInput:
    """Walk the whole hierarchy, computing depth and node/leaf counts."""
    stats = TreeStats()
    nodes: List[Row] = []
    stack = [(value, 1)]

    while stack:
        node, depth = stack.pop()
        children = _node_children(node)
        child_nodes = [c for c in children if isinstance(c, dict)] if children else []

        stats.node_count += 1
        stats.depth = max(stats.depth, depth)
        if not children:
            stats.leaf_count += 1

        nodes.append({"name": _node_name(node), "children": len(children) if children else 0})
        # Reverse so traversal is pre-order, left to right
        for child in reversed(child_nodes):
            stack.append((child, depth + 1))

    return TreeInput(root=value, stats=stats, nodes=nodes)


# Tabular fallback

def tabular_rows(value: Any) -> List[Row]:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        for prop in value.values():
            if isinstance(prop, list):
                return prop
        return [value]
    raise ValueError("Invalid JSON format")


def classify_input(value: Any) -> InputShape:
    """
    Classify a parsed JSON value into one input shape.

    Raises:
        ValueError: If the value is neither a list nor an object
    """
    if is_box_plot(value):
        logger.debug("Input classified as box-plot series")
        return extract_box_plot(value)
    if is_admixture(value):
        logger.debug("Input classified as admixture matrix")
        return extract_admixture(value)
    if is_tree(value):
        logger.debug("Input classified as tree")
        return extract_tree(value)
    return TabularInput(rows=tabular_rows(value))


# Analyses for special shapes

def box_plot_rows(shape: BoxPlotInput) -> List[Row]:
    return [dict(p) for p in shape.points]


def box_plot_analysis(shape: BoxPlotInput) -> DataAnalysis:
    xs = [p["x"] for p in shape.points]
    flat = [v for p in shape.points for v in p["y"]]
    y_min, y_max = min(flat), max(flat)

    profiles = [
        FieldProfile(
            name="x",
            type=FieldType.CATEGORICAL,
            sample_values=xs[:5],
            unique_count=len({normalize_value(x) for x in xs}),
            null_count=0,
        ),
        FieldProfile(
            name="y",
            type=FieldType.NUMERICAL,
            sample_values=[FIVE_NUMBER_SUMMARY],
            unique_count=len({tuple(p["y"]) for p in shape.points}),
            null_count=0,
            min=y_min,
            max=y_max,
            is_percentage=(y_min >= 0 and y_max <= 100) or (y_min >= 0 and y_max <= 1),
        ),
    ]
    recommendations = [
        ChartRecommendation(
            type=ChartType.BOX_PLOT,
            title="Box Plot",
            description=f"Show the distribution spread of {len(shape.points)} groups",
            confidence=Confidence.HIGH,
            x_axis="x",
            y_axis=["y"],
            fields=["x", "y"],
        ),
        ChartRecommendation(
            type=ChartType.BAR,
            title="Category Comparison",
            description="Compare the groups as bars",
            confidence=Confidence.LOW,
            category="x",
            value="y",
            fields=["x", "y"],
        ),
    ]
    return DataAnalysis(
        row_count=len(shape.points),
        field_profiles=profiles,
        recommendations=recommendations,
        structure="boxPlot",
    )


def admixture_rows(shape: AdmixtureInput) -> List[Row]:
    rows = []
    for i, sample in enumerate(shape.samples):
        row: Row = {SAMPLE_FIELD: sample}
        for cluster in shape.clusters:
            row[cluster.name] = cluster.values[i] if i < len(cluster.values) else None
        if shape.groups is not None:
            row[GROUP_FIELD] = shape.groups[i] if i < len(shape.groups) else None
        rows.append(row)
    return rows


def admixture_analysis(shape: AdmixtureInput) -> DataAnalysis:
    rows = admixture_rows(shape)
    columns = [SAMPLE_FIELD, *shape.cluster_names]
    profiles = [analyze_field(name, [row.get(name) for row in rows]) for name in columns]

    description = f"Cluster proportions of {shape.sample_count} samples across {shape.cluster_count} clusters"
    if shape.group_count:
        description += f" in {shape.group_count} groups"

    recommendations = [
        ChartRecommendation(
            type=ChartType.ADMIXTURE,
            title="Admixture Plot",
            description=description,
            confidence=Confidence.HIGH,
            x_axis=SAMPLE_FIELD,
            y_axis=shape.cluster_names,
            fields=columns,
        ),
        ChartRecommendation(
            type=ChartType.STACKED_BAR,
            title="Stacked Comparison",
            description=f"Compare the composition of {', '.join(shape.cluster_names)} per sample",
            confidence=Confidence.MEDIUM,
            x_axis=SAMPLE_FIELD,
            y_axis=shape.cluster_names,
            fields=columns,
        ),
    ]
    return DataAnalysis(
        row_count=shape.sample_count,
        field_profiles=profiles,
        recommendations=recommendations,
        structure="admixture",
    )


def tree_analysis(shape: TreeInput) -> DataAnalysis:
    stats = shape.stats
    profiles = [
        analyze_field("name", [n["name"] for n in shape.nodes]),
        analyze_field("children", [n["children"] for n in shape.nodes]),
    ]
    recommendations = [
        ChartRecommendation(
            type=ChartType.PHYLOGENETIC,
            title="Radial Tree",
            description=(
                f"Radial tree of {stats.node_count} nodes "
                f"({stats.leaf_count} leaves), depth {stats.depth}"
            ),
            confidence=Confidence.HIGH,
            category="name",
            fields=["name", "children"],
        ),
        ChartRecommendation(
            type=ChartType.TREEMAP,
            title="Treemap",
            description="Show the hierarchy as nested blocks",
            confidence=Confidence.MEDIUM,
            category="name",
            value="children",
            fields=["name", "children"],
        ),
    ]
    return DataAnalysis(
        row_count=stats.node_count,
        field_profiles=profiles,
        recommendations=recommendations,
        is_tree_structure=True,
        structure="tree",
    )
