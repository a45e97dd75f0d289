from enum import Enum
from typing import List, Optional, Any, Dict, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Rows are plain mappings; a missing key is read as a null cell
Row = Dict[str, Any]


class FieldType(str, Enum):
    NUMERICAL = "numerical"
    CATEGORICAL = "categorical"
    TEMPORAL = "temporal"
    UNKNOWN = "unknown"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ChartType(str, Enum):
    LINE = "line"
    AREA = "area"
    BAR = "bar"
    STEP_LINE = "stepLine"
    STACKED_BAR = "stackedBar"
    SCATTER = "scatter"
    BUBBLE = "bubble"
    DOT_PLOT = "dotPlot"
    RADAR = "radar"
    TREEMAP = "treemap"
    SANKEY = "sankey"
    HEATMAP = "heatmap"
    RADIAL_BAR = "radialBar"
    METRIC = "metric"
    PIE = "pie"
    DATA_GRID = "dataGrid"
    ACTIVITY = "activity"
    BOX_PLOT = "boxPlot"
    ADMIXTURE = "admixture"
    PHYLOGENETIC = "phylogenetic"


class CamelModel(BaseModel):
    """
    Base model that serializes with the camelCase names the dashboard UI reads.

    Results are immutable snapshots. Infinite numbers are written as the
    strings "Infinity" and "-Infinity" since JSON has no literal for them.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        ser_json_inf_nan="strings",
    )


class FieldProfile(CamelModel):
    name: str
    type: FieldType
    sample_values: List[Any] = Field(default_factory=list, max_length=5)
    unique_count: int = 0
    null_count: int = 0
    min: Optional[Union[int, float]] = None  # numerical fields only
    max: Optional[Union[int, float]] = None
    is_percentage: bool = False


class ChartRecommendation(CamelModel):
    type: ChartType
    title: str
    description: str
    confidence: Confidence
    x_axis: Optional[str] = None
    y_axis: Optional[Union[str, List[str]]] = None
    category: Optional[str] = None
    value: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    fields: List[str]

    def referenced_fields(self) -> List[str]:
        """Field names used by the axis/role bindings."""
        names = [self.x_axis, self.category, self.value, self.source, self.target]
        if isinstance(self.y_axis, list):
            names.extend(self.y_axis)
        else:
            names.append(self.y_axis)
        return [n for n in names if n is not None]


class DataAnalysis(CamelModel):
    row_count: int
    field_profiles: List[FieldProfile]
    recommendations: List[ChartRecommendation]
    is_tree_structure: Optional[bool] = None
    structure: Optional[str] = None  # 'boxPlot', 'admixture' or 'tree' when a special shape matched


class LoadResult(CamelModel):
    raw_data: List[Any] = Field(default_factory=list)
    analysis: Optional[DataAnalysis] = None
    error: Optional[str] = None


class AnalyzeRequest(BaseModel):
    rows: List[Dict[str, Any]]


class CSVRequest(BaseModel):
    text: str


class DataSourceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    rows: List[Dict[str, Any]]


class DataSourceOption(CamelModel):
    id: str
    name: str
    row_count: int
