"""
Tests for turning mapped rows into BOQ items
"""
import pytest

from item_materializer import ItemCodeSequence, ItemMaterializer, map_rows_to_items
from models.base_models import ColumnMapping, ExtractedTable, ReconstructedRow, RowKind
from models.config_models import PipelineConfig


def test_record_rows_map_through_synonyms():
    items = map_rows_to_items([
        {'Item Code': 'A1', 'Description': 'Concrete', 'Unit': 'm3', 'Quantity': '10', 'Unit Price': '50'},
    ])

    assert len(items) == 1
    item = items[0]
    assert item.item_code == 'A1'
    assert item.unit == 'm3'
    assert item.quantity == 10
    assert item.unit_price == 50
    assert item.total_price == 500


def test_supplied_total_wins():
    items = map_rows_to_items([{'Description': 'Steel', 'Qty': 2, 'Rate': 100, 'Total': '450'}])
    assert items[0].total_price == 450


def test_blank_total_is_computed():
    items = map_rows_to_items([{'Description': 'Steel', 'Qty': 2, 'Rate': 100, 'Total': ''}])
    assert items[0].total_price == 200


def test_default_unit_is_lot():
    items = map_rows_to_items([{'Description': 'Mobilization', 'Qty': 1, 'Rate': 5000}])
    assert items[0].unit == 'LOT'


def test_fallback_codes_are_contiguous():
    rows = [
        {'Description': 'First', 'Qty': 1},
        {'Code': 'X-9', 'Description': 'Second', 'Qty': 1},
        {'Description': 'Third', 'Qty': 1},
    ]
    items = map_rows_to_items(rows)
    assert [item.item_code for item in items] == ['PDF-001', 'X-9', 'PDF-002']


def test_each_call_starts_a_new_sequence():
    rows = [{'Description': 'Pipe', 'Qty': 1}]
    assert map_rows_to_items(rows)[0].item_code == 'PDF-001'
    assert map_rows_to_items(rows)[0].item_code == 'PDF-001'


def test_shared_sequence_continues():
    sequence = ItemCodeSequence('PDF')
    rows = [{'Description': 'Pipe', 'Qty': 1}]
    map_rows_to_items(rows, sequence=sequence)
    assert map_rows_to_items(rows, sequence=sequence)[0].item_code == 'PDF-002'


def test_rows_without_signal_are_dropped():
    rows = [
        {'Description': '', 'Qty': 0, 'Rate': 10},
        {'Description': 'Provisional sum', 'Qty': 0},
        {'Description': '', 'Qty': 3},
        {},
    ]
    items = map_rows_to_items(rows)
    assert len(items) == 2
    assert items[0].description == 'Provisional sum'
    assert items[1].quantity == 3


def test_service_code_goes_to_notes():
    items = map_rows_to_items([
        {'Description': 'Valve', 'Qty': 1, 'Ref': '9123456'},
        {'Description': 'Pump', 'Qty': 1, 'Ref': 9876543.0},
        {'Description': 'Filter', 'Qty': 1, 'Ref': '91234567'},
    ])
    assert items[0].notes == 'Service Code: 9123456'
    assert items[1].notes == 'Service Code: 9876543'
    assert items[2].notes is None


def test_positional_rows_use_index_mapping():
    mapping = ColumnMapping(item_code=0, description=1, unit=2, quantity=3, unit_price=4)
    items = map_rows_to_items([['1', 'Pipe', 'm', '٥', '١٠']], mapping)

    assert items[0].item_code == '1'
    assert items[0].quantity == 5
    assert items[0].unit_price == 10
    assert items[0].total_price == 50


def test_index_mapping_selects_keyed_row_by_position():
    mapping = ColumnMapping(description=0, quantity=1, unit_price=2)
    items = map_rows_to_items([{'a': 'Pipe', 'b': 4, 'c': 10}, {'a': 'Elbow', 'b': 2, 'c': 99}], mapping)

    assert [item.description for item in items] == ['Pipe', 'Elbow']
    assert items[0].total_price == 40
    assert items[1].unit_price == 99


def test_explicit_mapping_overrides_synonyms():
    mapping = ColumnMapping(quantity='Count of units')
    items = map_rows_to_items([{'Description': 'Pipe', 'Qty': 99, 'Count of units': 3}], mapping)
    assert items[0].quantity == 3


def test_category_from_column_or_default():
    rows = [
        {'Description': 'Cable', 'Qty': 1, 'Trade': 'Electrical'},
        {'Description': 'Pipe', 'Qty': 1},
    ]
    items = map_rows_to_items(rows, default_category='General')
    assert items[0].category == 'Electrical'
    assert items[1].category == 'General'
    assert map_rows_to_items(rows[1:])[0].category is None


def test_integral_float_codes_lose_decimal():
    items = map_rows_to_items([{'Item': 12.0, 'Description': 'Pipe', 'Qty': 1}])
    assert items[0].item_code == '12'


def test_custom_defaults_from_config():
    config = PipelineConfig.get_default_config()
    config.materializer.default_unit = 'EA'
    config.materializer.fallback_code_prefix = 'XL'
    items = map_rows_to_items([{'Description': 'Pipe', 'Qty': 1}], config=config)
    assert items[0].unit == 'EA'
    assert items[0].item_code == 'XL-001'


def test_table_to_items_skips_section_rows():
    table = ExtractedTable(
        headers=['Item', 'Description', 'Qty', 'Rate'],
        rows=[
            ReconstructedRow(cells=['DIVISION 31 - Earthwork'], kind=RowKind.SECTION, level=1),
            ReconstructedRow(cells=['1', 'Excavation', '20', '15']),
            ReconstructedRow(cells=['2', 'Backfill', '10', '8']),
        ],
    )
    mapping = ColumnMapping(item_code=0, description=1, quantity=2, unit_price=3)
    items = ItemMaterializer().table_to_items(table, mapping)

    assert [item.item_code for item in items] == ['1', '2']
    assert items[0].total_price == pytest.approx(300)


def test_items_serialize_with_camel_case():
    item = map_rows_to_items([{'Code': 'A', 'Description': 'Pipe', 'Qty': 2, 'Rate': 3}])[0]
    dumped = item.model_dump(by_alias=True)
    assert dumped['itemCode'] == 'A'
    assert dumped['unitPrice'] == 3
    assert dumped['totalPrice'] == 6
