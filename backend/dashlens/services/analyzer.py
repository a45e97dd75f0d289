"""
Dataset analysis entry points.

`analyze` profiles plain rows and recommends charts. The `load_*` functions
wrap ingestion and structure detection and never raise on bad input: any
failure is captured in `LoadResult.error` with an empty analysis.
"""
import logging
from typing import Any, List, Optional, Protocol, Tuple

from dashlens.core.performance import track_performance
from dashlens.core.sanitization import sanitize_filename, sanitize_for_logging
from dashlens.core.schemas import ChartRecommendation, DataAnalysis, FieldProfile, LoadResult, Row
from dashlens.services.parser import (
    CSV_EXTENSION,
    JSON_EXTENSION,
    decode_content,
    detect_format,
    parse_csv,
    parse_json_text,
)
from dashlens.services.profiler import profile_rows
from dashlens.services.recommender import generate_recommendations
from dashlens.services.structures import (
    AdmixtureInput,
    BoxPlotInput,
    TreeInput,
    admixture_analysis,
    admixture_rows,
    box_plot_analysis,
    box_plot_rows,
    classify_input,
    tree_analysis,
)

logger = logging.getLogger(__name__)

NO_CSV_DATA = "No data found in CSV"
INVALID_JSON = "Invalid JSON format"


class ReadableFile(Protocol):
    filename: Optional[str]

    async def read(self) -> bytes:
        ...


@track_performance("analyze")
def analyze(rows: List[Row]) -> DataAnalysis:
    """
    Profile every column of `rows` and recommend charts.

    Column order follows the keys of the first row. Pure: the same rows
    always give the same analysis.
    """
    if not rows:
        return DataAnalysis(row_count=0, field_profiles=[], recommendations=[])

    profiles = profile_rows(rows)
    recommendations = generate_recommendations(profiles)

    return DataAnalysis(
        row_count=len(rows),
        field_profiles=profiles,
        recommendations=recommendations,
    )


def analyze_input(value: Any) -> Tuple[List[Any], DataAnalysis]:
    """
    Classify a parsed JSON value and analyze it according to its shape.

    Returns:
        The normalized rows and their analysis

    Raises:
        ValueError: If the value cannot be read as a table
    """
    shape = classify_input(value)

    if isinstance(shape, BoxPlotInput):
        return box_plot_rows(shape), box_plot_analysis(shape)
    if isinstance(shape, AdmixtureInput):
        return admixture_rows(shape), admixture_analysis(shape)
    if isinstance(shape, TreeInput):
        return [shape.root], tree_analysis(shape)

    return shape.rows, analyze(shape.rows)


def load_json(value: Any) -> LoadResult:
    try:
        rows, analysis = analyze_input(value)
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning(f"Could not analyze JSON input: {e}")
        return LoadResult(error=str(e) or INVALID_JSON)

    logger.info(
        f"Analyzed JSON input: {analysis.row_count} rows, "
        f"{len(analysis.recommendations)} recommendations"
    )
    return LoadResult(raw_data=rows, analysis=analysis)


def load_csv(text: str) -> LoadResult:
    rows = parse_csv(text)
    if not rows:
        logger.warning("CSV input has no data rows")
        return LoadResult(error=NO_CSV_DATA)

    analysis = analyze(rows)
    logger.info(
        f"Analyzed CSV input: {analysis.row_count} rows, "
        f"{len(analysis.recommendations)} recommendations"
    )
    return LoadResult(raw_data=rows, analysis=analysis)


def load_text(filename: str, text: str) -> LoadResult:
    """
    Dispatch text content on the file extension.

    `.json` goes to the JSON path, `.csv` to the CSV path. Anything else is
    tried as JSON first and read as CSV when it does not parse.
    """
    file_format = detect_format(filename)

    if file_format == CSV_EXTENSION:
        return load_csv(text)

    try:
        value = parse_json_text(text)
    except (ValueError, RecursionError) as e:
        if file_format == JSON_EXTENSION:
            logger.warning(f"Invalid JSON in {sanitize_for_logging(filename)}: {e}")
            return LoadResult(error=f"{INVALID_JSON}: {e}")
        return load_csv(text)

    return load_json(value)


@track_performance("load_file")
async def load_file(file: ReadableFile) -> LoadResult:
    """Read an uploaded file and analyze its contents."""
    filename = sanitize_filename(file.filename) if file.filename else 'unknown'
    try:
        content = await file.read()
    except OSError as e:
        logger.error(f"Failed to read {sanitize_for_logging(filename)}: {e}")
        return LoadResult(error="Failed to read file")

    logger.info(f"Loading file: {sanitize_for_logging(filename)}, size: {len(content) / 1024:.2f}KB")
    return load_text(filename, decode_content(content))


class DataAnalyzer:
    """
    Stateful holder for the most recent load.

    Keeps the rows, analysis and error of the last load, plus a busy flag
    that callers can check before starting another one.
    """

    def __init__(self):
        self.raw_data: List[Any] = []
        self.analysis: Optional[DataAnalysis] = None
        self.error: Optional[str] = None
        self.is_analyzing = False

    def _apply(self, result: LoadResult) -> LoadResult:
        self.raw_data = result.raw_data
        self.analysis = result.analysis
        self.error = result.error
        return result

    def analyze_data(self, rows: List[Row]) -> DataAnalysis:
        return analyze(rows)

    def load_json(self, value: Any) -> LoadResult:
        self.is_analyzing = True
        try:
            return self._apply(load_json(value))
        finally:
            self.is_analyzing = False

    def load_csv(self, text: str) -> LoadResult:
        self.is_analyzing = True
        try:
            return self._apply(load_csv(text))
        finally:
            self.is_analyzing = False

    async def load_file(self, file: ReadableFile) -> LoadResult:
        self.is_analyzing = True
        try:
            return self._apply(await load_file(file))
        finally:
            self.is_analyzing = False

    @property
    def suggested_charts(self) -> List[ChartRecommendation]:
        return self.analysis.recommendations if self.analysis else []

    @property
    def field_profiles(self) -> List[FieldProfile]:
        return self.analysis.field_profiles if self.analysis else []

    def clear(self) -> None:
        self.raw_data = []
        self.analysis = None
        self.error = None
