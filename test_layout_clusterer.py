"""
Tests for table reconstruction from positioned text fragments:
row clustering, column assignment, row classification and confidence
"""
import pytest

from layout_clusterer import LayoutClusterer, bucket_y, extract_tables_from_fragments, round_half_up
from models.base_models import ReconstructedRow, RowKind, TextFragment
from row_classifier import RowClassifier, detect_section_level
from table_confidence import calculate_confidence, column_consistency


def fragments(*rows):
    """Build fragments from (y, [(x, text), ...]) tuples"""
    return [TextFragment(text=text, x=x, y=y) for y, cells in rows for x, text in cells]


def test_two_by_three_layout():
    """Two rows of three cells at x=10, 100, 200 come back in reading order"""
    page = fragments(
        (700, [(100, 'B'), (10, 'A'), (200, 'C')]),
        (680, [(10, 'D'), (200, 'F'), (100, 'E')]),
    )
    tables = extract_tables_from_fragments(page, page_number=1)

    assert len(tables) == 1
    table = tables[0]
    assert [row.cells for row in table.rows] == [['A', 'B', 'C'], ['D', 'E', 'F']]
    assert table.headers == ['A', 'B', 'C']
    assert table.page_number == 1
    # no header row: consistency 40 + data 30
    assert table.confidence == pytest.approx(70)


def test_header_row_is_latched_and_excluded_from_rows():
    page = fragments(
        (700, [(10, 'Item'), (100, 'Description'), (200, 'Qty')]),
        (680, [(10, '1'), (100, 'Concrete'), (200, '10')]),
        (660, [(10, '2'), (100, 'Item of formwork'), (200, '5')]),
    )
    table = LayoutClusterer().extract_tables(page)[0]

    assert table.headers == ['Item', 'Description', 'Qty']
    assert [row.kind for row in table.rows] == [RowKind.DATA, RowKind.DATA]
    assert table.rows[1].cells == ['2', 'Item of formwork', '5']
    assert table.confidence == pytest.approx(100)


def test_rows_within_tolerance_merge():
    page = fragments(
        (700.4, [(10, 'A')]),
        (699.8, [(100, 'B')]),
        (650, [(10, 'C'), (100, 'D')]),
    )
    table = extract_tables_from_fragments(page)[0]
    assert [row.cells for row in table.rows] == [['A', 'B'], ['C', 'D']]


def test_same_column_fragments_are_joined():
    page = fragments(
        (700, [(10, '1'), (100, 'Concrete'), (100.3, 'works'), (200, '10')]),
        (680, [(10, '2'), (100, 'Steel'), (200, '4')]),
    )
    table = extract_tables_from_fragments(page)[0]
    assert table.rows[0].cells == ['1', 'Concrete works', '10']


def test_last_column_is_open_ended():
    clusterer = LayoutClusterer()
    cells = clusterer.assign_to_columns(
        [TextFragment(text='a', x=10, y=0), TextFragment(text='z', x=450, y=0)],
        [10, 100, 200],
    )
    assert cells == ['a', 'z']


def test_empty_cells_are_filtered():
    page = fragments(
        (700, [(10, 'A'), (100, 'B'), (200, 'C')]),
        (680, [(10, 'D'), (100, '   '), (200, 'F')]),
    )
    table = extract_tables_from_fragments(page)[0]
    assert table.rows[1].cells == ['D', 'F']


def test_single_column_page_has_no_tables():
    page = fragments((700, [(10, 'Title')]), (680, [(10, 'Some paragraph')]))
    assert extract_tables_from_fragments(page) == []
    assert extract_tables_from_fragments([]) == []


def test_bucket_helpers():
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.5) == 0
    assert bucket_y(101, 2.0) == 102
    assert bucket_y(100.9, 2.0) == 100


def test_classifier_latches_first_header_only():
    classifier = RowClassifier()
    assert classifier.classify(['Item', 'Description']).kind == RowKind.HEADER
    assert classifier.header_found
    assert classifier.classify(['Unit', 'Total']).kind == RowKind.DATA

    classifier.reset()
    assert classifier.classify(['الوصف', 'الكمية']).kind == RowKind.HEADER


def test_arabic_header_spelling_variants_are_headers():
    assert RowClassifier().is_header_row(['الاجمالي'])
    assert RowClassifier().is_header_row(['الكميه'])

    page = fragments(
        (700, [(10, 'الكميه'), (100, 'الاجمالي')]),
        (680, [(10, '5'), (100, '50')]),
        (660, [(10, '2'), (100, '20')]),
    )
    table = extract_tables_from_fragments(page)[0]

    assert table.headers == ['الكميه', 'الاجمالي']
    assert [row.kind for row in table.rows] == [RowKind.DATA, RowKind.DATA]
    assert table.confidence == pytest.approx(100)


@pytest.mark.parametrize('text, level', [
    ('DIVISION 31 - Earthwork', 1),
    ('Section 2 General', 1),
    ('31.1.1 - Excavation', 3),
    ('03.2 – Concrete', 2),
])
def test_section_rows(text, level):
    row = RowClassifier().classify([text])
    assert row.kind == RowKind.SECTION
    assert row.level == level
    assert detect_section_level(text) == level


def test_plain_codes_are_data_rows():
    classifier = RowClassifier()
    classifier.header_found = True
    assert classifier.classify(['1', 'Excavation', '20']).kind == RowKind.DATA
    assert classifier.classify(['310', 'Fill', '2']).kind == RowKind.DATA


def test_confidence_scoring():
    rows = [
        ReconstructedRow(cells=['a', 'b', 'c'], kind=RowKind.HEADER),
        ReconstructedRow(cells=['1', '2', '3']),
        ReconstructedRow(cells=['4', '5']),
    ]
    assert column_consistency(rows) == pytest.approx(2 / 3)
    assert calculate_confidence(rows, header_found=True) == pytest.approx(30 + 40 * 2 / 3 + 30)
    assert calculate_confidence([], header_found=False) == 0
    assert calculate_confidence(rows[:1], header_found=True) == pytest.approx(70)


def test_explicit_tolerance_widens_rows():
    page = [TextFragment(text='A', x=10, y=700), TextFragment(text='B', x=100, y=696)]
    clusterer = LayoutClusterer()
    assert len(clusterer.cluster_rows(page)) == 2
    rows = clusterer.cluster_rows(page, tolerance=10)
    assert [[fragment.text for fragment in row] for row in rows] == [['A', 'B']]
