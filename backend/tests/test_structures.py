"""
Unit tests for special data-shape detection.
"""
import pytest
from dashlens.core.schemas import ChartType, Confidence, FieldType
from dashlens.services.structures import (
    AdmixtureInput,
    BoxPlotInput,
    TabularInput,
    TreeInput,
    admixture_analysis,
    admixture_rows,
    box_plot_analysis,
    classify_input,
    is_admixture,
    is_box_plot,
    is_tree,
    tabular_rows,
    tree_analysis,
)


@pytest.fixture
def box_points():
    return [
        {"x": "A", "y": [1, 2, 3, 4, 5]},
        {"x": "B", "y": [2, 3, 4, 5, 60]},
    ]


@pytest.fixture
def admixture_object():
    return {
        "samples": ["s1", "s2", "s3"],
        "clusters": [
            {"name": "Ancestry A", "values": [0.7, 0.2, 0.5]},
            {"name": "Ancestry B", "values": [0.3, 0.8, 0.5]},
        ],
        "groups": ["north", "south", "north"],
    }


@pytest.fixture
def tree():
    return {
        "name": "root",
        "children": [
            {"name": "a", "children": [{"name": "a1"}, {"name": "a2", "children": []}]},
            {"name": "b"},
        ],
    }


# Box plot

@pytest.mark.unit
def test_flat_box_plot(box_points):
    """A list of {x, y: five numbers} points is a box plot."""
    shape = classify_input(box_points)

    assert isinstance(shape, BoxPlotInput)
    assert shape.points == box_points


@pytest.mark.unit
def test_box_plot_series_form(box_points):
    """Points are gathered from boxPlot series."""
    series = [{"type": "boxPlot", "name": "groups", "data": box_points}]
    shape = classify_input(series)

    assert isinstance(shape, BoxPlotInput)
    assert [p["x"] for p in shape.points] == ["A", "B"]


@pytest.mark.unit
def test_box_plot_wins_over_other_shapes():
    """Entries carrying extra keys are still box-plot points."""
    value = [{"x": "A", "y": [1, 2, 3, 4, 5], "name": "k1", "data": [0.5]}]
    assert isinstance(classify_input(value), BoxPlotInput)


@pytest.mark.unit
@pytest.mark.parametrize("value", [
    [{"x": "A", "y": [1, 2, 3, 4]}],
    [{"x": "A", "y": [1, 2, 3, 4, "5"]}],
    [{"y": [1, 2, 3, 4, 5]}],
    [{"type": "boxPlot", "data": []}],
    [],
])
def test_not_box_plot(value):
    """Wrong summary length, non-numbers, missing x and empty data are rejected."""
    assert not is_box_plot(value)


@pytest.mark.unit
def test_box_plot_analysis(box_points):
    """Box plots profile x and y and recommend boxPlot then bar."""
    analysis = box_plot_analysis(classify_input(box_points))

    assert analysis.row_count == 2
    assert analysis.structure == "boxPlot"
    x, y = analysis.field_profiles
    assert x.type == FieldType.CATEGORICAL
    assert x.unique_count == 2
    assert y.type == FieldType.NUMERICAL
    assert y.sample_values == ["[min, Q1, median, Q3, max]"]
    assert y.min == 1
    assert y.max == 60
    assert [r.type for r in analysis.recommendations] == [ChartType.BOX_PLOT, ChartType.BAR]
    assert analysis.recommendations[0].confidence == Confidence.HIGH


# Admixture

@pytest.mark.unit
def test_admixture_object_form(admixture_object):
    """The samples/clusters object form with optional groups."""
    shape = classify_input(admixture_object)

    assert isinstance(shape, AdmixtureInput)
    assert shape.sample_count == 3
    assert shape.cluster_count == 2
    assert shape.cluster_names == ["Ancestry A", "Ancestry B"]
    assert shape.group_count == 2


@pytest.mark.unit
def test_admixture_series_by_cluster_names():
    """Series named like clusters are admixture without checking sums."""
    value = [
        {"name": "K1", "data": [0.9, 0.1]},
        {"name": "K2", "data": [0.5, 0.5]},
    ]
    shape = classify_input(value)

    assert isinstance(shape, AdmixtureInput)
    assert shape.samples == ["Sample 1", "Sample 2"]
    assert shape.group_count is None


@pytest.mark.unit
@pytest.mark.parametrize("first, second", [
    ([0.6, 0.25], [0.4, 0.75]),
    ([60, 30], [40, 70]),
])
def test_admixture_series_by_column_sums(first, second):
    """Columns summing to about 1 or about 100 mark proportions."""
    value = [{"name": "north", "data": first}, {"name": "south", "data": second}]
    assert is_admixture(value)


@pytest.mark.unit
def test_series_that_are_not_proportions_are_tabular():
    """Plain named series fall through to tabular rows."""
    value = [{"name": "sales", "data": [10, 20]}, {"name": "cost", "data": [3, 4]}]

    assert not is_admixture(value)
    assert isinstance(classify_input(value), TabularInput)


@pytest.mark.unit
def test_admixture_needs_two_series_of_equal_length():
    """One series, or series of different lengths, are not admixture."""
    assert not is_admixture([{"name": "K1", "data": [1.0]}])
    assert not is_admixture([{"name": "K1", "data": [0.5]}, {"name": "K2", "data": [0.5, 0.5]}])


@pytest.mark.unit
def test_admixture_rows_and_analysis(admixture_object):
    """One row per sample with cluster columns and the group label."""
    shape = classify_input(admixture_object)
    rows = admixture_rows(shape)

    assert rows[0] == {"sample": "s1", "Ancestry A": 0.7, "Ancestry B": 0.3, "group": "north"}

    analysis = admixture_analysis(shape)
    assert analysis.row_count == 3
    assert analysis.structure == "admixture"
    assert [p.name for p in analysis.field_profiles] == ["sample", "Ancestry A", "Ancestry B"]
    assert analysis.field_profiles[1].type == FieldType.NUMERICAL
    first = analysis.recommendations[0]
    assert first.type == ChartType.ADMIXTURE
    assert first.y_axis == ["Ancestry A", "Ancestry B"]
    assert "2 groups" in first.description
    assert analysis.recommendations[1].type == ChartType.STACKED_BAR


@pytest.mark.unit
def test_admixture_series_with_cjk_cluster_names():
    """Names containing 群集 read as clusters whatever the sums."""
    value = [
        {"name": "群集1", "data": [3, 5]},
        {"name": "群集2", "data": [9, 2]},
    ]
    shape = classify_input(value)

    assert isinstance(shape, AdmixtureInput)
    assert shape.cluster_names == ["群集1", "群集2"]


@pytest.mark.unit
def test_colliding_cluster_names_get_own_columns():
    """A cluster called sample or a repeated name does not overwrite other columns."""
    value = {
        "samples": ["s1", "s2"],
        "clusters": [
            {"name": "sample", "values": [0.4, 0.1]},
            {"name": "K2", "values": [0.3, 0.5]},
            {"name": "K2", "values": [0.3, 0.4]},
        ],
    }
    shape = classify_input(value)

    assert shape.cluster_names == ["sample_2", "K2", "K2_2"]
    assert admixture_rows(shape)[0] == {"sample": "s1", "sample_2": 0.4, "K2": 0.3, "K2_2": 0.3}

    analysis = admixture_analysis(shape)
    assert [p.name for p in analysis.field_profiles] == ["sample", "sample_2", "K2", "K2_2"]
    assert analysis.field_profiles[0].type == FieldType.CATEGORICAL
    assert analysis.recommendations[0].fields == ["sample", "sample_2", "K2", "K2_2"]

# Tree

@pytest.mark.unit
def test_tree_statistics(tree):
    """Depth, node and leaf counts over the whole hierarchy."""
    shape = classify_input(tree)

    assert isinstance(shape, TreeInput)
    assert shape.stats.node_count == 5
    assert shape.stats.leaf_count == 3
    assert shape.stats.depth == 3
    assert [n["name"] for n in shape.nodes] == ["root", "a", "a1", "a2", "b"]
    assert [n["children"] for n in shape.nodes] == [2, 2, 0, 0, 0]


@pytest.mark.unit
def test_tree_with_alternate_keys():
    """label/id names and nodes children are recognized."""
    value = {"label": "top", "nodes": [{"id": "left"}, {"id": "right"}]}
    shape = classify_input(value)

    assert isinstance(shape, TreeInput)
    assert shape.stats.node_count == 3
    assert shape.stats.depth == 2


@pytest.mark.unit
def test_children_without_names_are_not_a_tree():
    """Children lacking a name-like key do not make a tree."""
    value = {"name": "root", "children": [{"value": 1}, {"value": 2}]}

    assert not is_tree(value)
    # Falls back to the first array property
    assert isinstance(classify_input(value), TabularInput)
    assert classify_input(value).rows == [{"value": 1}, {"value": 2}]


@pytest.mark.unit
def test_tree_analysis(tree):
    """Trees recommend a radial tree then a treemap."""
    analysis = tree_analysis(classify_input(tree))

    assert analysis.is_tree_structure is True
    assert analysis.structure == "tree"
    assert analysis.row_count == 5
    assert [r.type for r in analysis.recommendations] == [ChartType.PHYLOGENETIC, ChartType.TREEMAP]
    assert "5 nodes" in analysis.recommendations[0].description
    assert "depth 3" in analysis.recommendations[0].description


@pytest.mark.unit
def test_tree_children_come_from_the_non_empty_key():
    """An empty children list does not hide children stored under another key."""
    value = {"name": "root", "children": [], "nodes": [{"name": "a"}, {"name": "b"}]}
    shape = classify_input(value)

    assert isinstance(shape, TreeInput)
    assert shape.stats.node_count == 3
    assert shape.stats.leaf_count == 2
    assert shape.stats.depth == 2
    assert shape.nodes[0] == {"name": "root", "children": 2}

# Tabular

@pytest.mark.unit
def test_tabular_fallbacks():
    """Lists, the first list property, or the object as one row."""
    rows = [{"a": 1}, {"a": 2}]

    assert tabular_rows(rows) == rows
    assert tabular_rows({"meta": "x", "items": rows}) == rows
    assert tabular_rows({"a": 1, "b": "x"}) == [{"a": 1, "b": "x"}]


@pytest.mark.unit
@pytest.mark.parametrize("value", [42, "text", None, True])
def test_scalars_are_rejected(value):
    """Values that are neither lists nor objects cannot be read as rows."""
    with pytest.raises(ValueError, match="Invalid JSON format"):
        classify_input(value)
