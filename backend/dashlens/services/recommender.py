"""
Chart recommendation rules.

This module maps a set of field profiles to chart recommendations using an
ordered battery of deterministic rules. Each rule is a pure function of the
partitioned fields and may emit zero or more recommendations. Rules are
independent and their results are concatenated in RULES order; the list is
never re-sorted, because the dashboard presents recommendations in exactly
this order.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from dashlens.core.schemas import ChartRecommendation, ChartType, Confidence, FieldProfile, FieldType

logger = logging.getLogger(__name__)

# Category cardinality thresholds
BAR_MAX_CATEGORIES = 20
BAR_HIGH_CONFIDENCE_CATEGORIES = 10
PIE_MAX_CATEGORIES = 8
DOT_PLOT_MIN_CATEGORIES = 5
DOT_PLOT_MAX_CATEGORIES = 30
RADAR_MIN_CATEGORIES = 3

# Series caps
MAX_LINE_SERIES = 3
MAX_STACKED_SERIES = 3
MAX_RADAR_AXES = 4
MAX_GRID_COLUMNS = 6


@dataclass
class FieldSet:
    """Profiles partitioned by type, each subset in original field order."""
    profiles: List[FieldProfile]
    numerical: List[FieldProfile] = field(default_factory=list)
    categorical: List[FieldProfile] = field(default_factory=list)
    temporal: List[FieldProfile] = field(default_factory=list)

    @classmethod
    def from_profiles(cls, profiles: List[FieldProfile]) -> "FieldSet":
        return cls(
            profiles=list(profiles),
            numerical=[p for p in profiles if p.type == FieldType.NUMERICAL],
            categorical=[p for p in profiles if p.type == FieldType.CATEGORICAL],
            temporal=[p for p in profiles if p.type == FieldType.TEMPORAL],
        )


Rule = Callable[[FieldSet], List[ChartRecommendation]]


def _names(profiles: List[FieldProfile]) -> List[str]:
    return [p.name for p in profiles]


def trend_rule(fs: FieldSet) -> List[ChartRecommendation]:
    """Temporal + numerical: line, area and step line."""
    if not fs.temporal or not fs.numerical:
        return []

    temporal = fs.temporal[0]
    series = _names(fs.numerical[:MAX_LINE_SERIES])
    first = fs.numerical[0].name

    return [
        ChartRecommendation(
            type=ChartType.LINE,
            title="Trend Analysis",
            description=f"Track {', '.join(series)} over {temporal.name}",
            confidence=Confidence.HIGH,
            x_axis=temporal.name,
            y_axis=series,
            fields=[temporal.name, *series],
        ),
        ChartRecommendation(
            type=ChartType.AREA,
            title="Time Series",
            description=f"Show how {first} changes over time",
            confidence=Confidence.HIGH,
            x_axis=temporal.name,
            y_axis=[first],
            fields=[temporal.name, first],
        ),
        # Suits digital signals such as on/off states
        ChartRecommendation(
            type=ChartType.STEP_LINE,
            title="Step Line",
            description=f"Show state changes of {first} across {temporal.name}",
            confidence=Confidence.MEDIUM,
            x_axis=temporal.name,
            y_axis=[first],
            fields=[temporal.name, first],
        ),
    ]


def category_comparison_rule(fs: FieldSet) -> List[ChartRecommendation]:
    """Categorical + numerical with a manageable number of categories: bar, then pie."""
    if not fs.categorical or not fs.numerical:
        return []

    categorical = fs.categorical[0]
    numerical = fs.numerical[0]
    if categorical.unique_count > BAR_MAX_CATEGORIES:
        return []

    recommendations = [
        ChartRecommendation(
            type=ChartType.BAR,
            title="Category Comparison",
            description=f"Compare {numerical.name} across {categorical.name}",
            confidence=(
                Confidence.HIGH
                if categorical.unique_count <= BAR_HIGH_CONFIDENCE_CATEGORIES
                else Confidence.MEDIUM
            ),
            category=categorical.name,
            value=numerical.name,
            fields=[categorical.name, numerical.name],
        )
    ]

    if categorical.unique_count <= PIE_MAX_CATEGORIES:
        recommendations.append(ChartRecommendation(
            type=ChartType.PIE,
            title="Distribution",
            description=f"Show the distribution of {numerical.name} by {categorical.name}",
            confidence=Confidence.MEDIUM,
            category=categorical.name,
            value=numerical.name,
            fields=[categorical.name, numerical.name],
        ))

    return recommendations


def indicator_rule(fs: FieldSet) -> List[ChartRecommendation]:
    """Single numerical value: radial gauge for percentages or constants, always a metric card."""
    if not fs.numerical:
        return []

    numerical = fs.numerical[0]
    recommendations = []

    if numerical.is_percentage or numerical.unique_count == 1:
        recommendations.append(ChartRecommendation(
            type=ChartType.RADIAL_BAR,
            title="Progress Indicator",
            description=f"Display {numerical.name} as a gauge",
            confidence=Confidence.HIGH if numerical.is_percentage else Confidence.MEDIUM,
            value=numerical.name,
            fields=[numerical.name],
        ))

    recommendations.append(ChartRecommendation(
        type=ChartType.METRIC,
        title="Key Metric",
        description=f"Highlight {numerical.name} as a key metric",
        confidence=Confidence.MEDIUM,
        value=numerical.name,
        fields=[numerical.name],
    ))
    return recommendations


def stacked_rule(fs: FieldSet) -> List[ChartRecommendation]:
    if len(fs.numerical) < 2:
        return []

    x_field: Optional[FieldProfile] = fs.temporal[0] if fs.temporal else (
        fs.categorical[0] if fs.categorical else None
    )
    if x_field is None:
        return []

    series = _names(fs.numerical[:MAX_STACKED_SERIES])
    return [ChartRecommendation(
        type=ChartType.STACKED_BAR,
        title="Stacked Comparison",
        description=f"Compare the composition of {', '.join(series)} across {x_field.name}",
        confidence=Confidence.MEDIUM,
        x_axis=x_field.name,
        y_axis=series,
        fields=[x_field.name, *series],
    )]


def correlation_rule(fs: FieldSet) -> List[ChartRecommendation]:
    """Two numerical fields: scatter; a third one adds a bubble chart sized by it."""
    if len(fs.numerical) < 2:
        return []

    x, y = fs.numerical[0], fs.numerical[1]
    recommendations = [ChartRecommendation(
        type=ChartType.SCATTER,
        title="Correlation Analysis",
        description=f"Analyze the relationship between {x.name} and {y.name}",
        confidence=Confidence.MEDIUM,
        x_axis=x.name,
        y_axis=[y.name],
        fields=[x.name, y.name],
    )]

    if len(fs.numerical) >= 3:
        size = fs.numerical[2]
        recommendations.append(ChartRecommendation(
            type=ChartType.BUBBLE,
            title="Bubble Chart",
            description=f"Show {x.name} (x), {y.name} (y) and {size.name} (size) together",
            confidence=Confidence.MEDIUM,
            x_axis=x.name,
            y_axis=[y.name, size.name],
            fields=[x.name, y.name, size.name],
        ))

    return recommendations


def dot_plot_rule(fs: FieldSet) -> List[ChartRecommendation]:
    if not fs.categorical or not fs.numerical:
        return []

    categorical = fs.categorical[0]
    numerical = fs.numerical[0]
    if not DOT_PLOT_MIN_CATEGORIES <= categorical.unique_count <= DOT_PLOT_MAX_CATEGORIES:
        return []

    return [ChartRecommendation(
        type=ChartType.DOT_PLOT,
        title="Dot Plot",
        description=f"Show the spread of {numerical.name} for each {categorical.name}",
        confidence=Confidence.LOW,
        x_axis=categorical.name,
        y_axis=[numerical.name],
        fields=[categorical.name, numerical.name],
    )]


def heatmap_rule(fs: FieldSet) -> List[ChartRecommendation]:
    if not fs.temporal or not fs.categorical or not fs.numerical:
        return []

    temporal, categorical, numerical = fs.temporal[0], fs.categorical[0], fs.numerical[0]
    return [ChartRecommendation(
        type=ChartType.HEATMAP,
        title="Heatmap",
        description=f"Show patterns of {numerical.name} across {temporal.name} and {categorical.name}",
        confidence=Confidence.MEDIUM,
        x_axis=temporal.name,
        y_axis=[categorical.name],
        value=numerical.name,
        fields=[temporal.name, categorical.name, numerical.name],
    )]


def radar_rule(fs: FieldSet) -> List[ChartRecommendation]:
    if not fs.categorical or len(fs.numerical) < 2:
        return []

    categorical = fs.categorical[0]
    if categorical.unique_count < RADAR_MIN_CATEGORIES:
        return []

    axes = _names(fs.numerical[:MAX_RADAR_AXES])
    return [ChartRecommendation(
        type=ChartType.RADAR,
        title="Radar Chart",
        description=f"Compare multiple measures across {categorical.name}",
        confidence=Confidence.MEDIUM,
        x_axis=categorical.name,
        y_axis=axes,
        fields=[categorical.name, *axes],
    )]


def flow_rule(fs: FieldSet) -> List[ChartRecommendation]:
    """Two categorical fields and a weight: sankey."""
    if len(fs.categorical) < 2 or not fs.numerical:
        return []

    source, target, weight = fs.categorical[0], fs.categorical[1], fs.numerical[0]
    return [ChartRecommendation(
        type=ChartType.SANKEY,
        title="Sankey Diagram",
        description=f"Show flows from {source.name} to {target.name} weighted by {weight.name}",
        confidence=Confidence.MEDIUM,
        source=source.name,
        target=target.name,
        value=weight.name,
        fields=[source.name, target.name, weight.name],
    )]


def treemap_rule(fs: FieldSet) -> List[ChartRecommendation]:
    # Same guard as the bar rule but no cardinality limit
    if not fs.categorical or not fs.numerical:
        return []

    category, value = fs.categorical[0], fs.numerical[0]
    return [ChartRecommendation(
        type=ChartType.TREEMAP,
        title="Treemap",
        description=f"Show the share of {value.name} by {category.name} as block sizes",
        confidence=Confidence.MEDIUM,
        category=category.name,
        value=value.name,
        fields=[category.name, value.name],
    )]


def activity_rule(fs: FieldSet) -> List[ChartRecommendation]:
    if not fs.temporal or not fs.categorical:
        return []

    return [ChartRecommendation(
        type=ChartType.ACTIVITY,
        title="Activity Timeline",
        description="List events in chronological order",
        confidence=Confidence.LOW,
        fields=[fs.temporal[0].name, fs.categorical[0].name],
    )]


def data_grid_rule(fs: FieldSet) -> List[ChartRecommendation]:
    if len(fs.profiles) < 3:
        return []

    return [ChartRecommendation(
        type=ChartType.DATA_GRID,
        title="Data Table",
        description="Browse all data as a table",
        confidence=Confidence.LOW,
        fields=_names(fs.profiles[:MAX_GRID_COLUMNS]),
    )]


RULES: List[Rule] = [
    trend_rule,
    category_comparison_rule,
    indicator_rule,
    stacked_rule,
    correlation_rule,
    dot_plot_rule,
    heatmap_rule,
    radar_rule,
    flow_rule,
    treemap_rule,
    activity_rule,
    data_grid_rule,
]


def generate_recommendations(profiles: List[FieldProfile]) -> List[ChartRecommendation]:
    """
    Generate chart recommendations for a list of field profiles.

    Args:
        profiles: Field profiles in original column order

    Returns:
        Recommendations in rule order (not sorted by confidence)
    """
    fs = FieldSet.from_profiles(profiles)
    recommendations: List[ChartRecommendation] = []

    for rule in RULES:
        recommendations.extend(rule(fs))

    logger.debug(
        f"Generated {len(recommendations)} recommendations from "
        f"{len(fs.numerical)} numerical, {len(fs.categorical)} categorical, "
        f"{len(fs.temporal)} temporal fields"
    )
    return recommendations
