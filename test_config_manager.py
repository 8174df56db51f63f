"""
Tests for pipeline configuration models and JSON persistence
"""
import json

import pytest
from pydantic import ValidationError

from column_mapper import detect_column_mapping
from config_manager import CONFIG_DIR_ENV, CONFIG_FILE_NAME, ConfigManager
from models.config_models import CanonicalField, ClassifierConfig, ConfigUpdateRequest, PipelineConfig


def test_default_config_is_created(tmp_path):
    path = tmp_path / 'config' / 'pipeline.json'
    manager = ConfigManager(str(path))

    assert path.exists()
    assert manager.get_config() == PipelineConfig.get_default_config()
    saved = json.loads(path.read_text(encoding='utf-8'))
    assert 'الكمية' in saved['mapping']['field_synonyms']['quantity']


def test_config_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))
    manager = ConfigManager()
    assert manager.config_file == tmp_path / CONFIG_FILE_NAME
    assert manager.config_file.exists()


def test_added_synonyms_persist_and_map(tmp_path):
    path = tmp_path / 'pipeline.json'
    assert ConfigManager(str(path)).add_synonyms(CanonicalField.QUANTITY, ['Pcs', 'Qty'])

    reloaded = ConfigManager(str(path)).get_config()
    synonyms = reloaded.mapping.field_synonyms[CanonicalField.QUANTITY]
    assert synonyms.count('Pcs') == 1
    assert 'Qty' not in synonyms
    assert detect_column_mapping(['PCS'], reloaded).quantity == 0


def test_update_config(tmp_path):
    path = tmp_path / 'pipeline.json'
    manager = ConfigManager(str(path))
    request = ConfigUpdateRequest(
        row_tolerance=3.5,
        default_unit='EA',
        field_synonyms={CanonicalField.CATEGORY: ['discipline']},
    )
    assert manager.update_config(request)

    reloaded = ConfigManager(str(path)).get_config()
    assert reloaded.layout.row_tolerance == 3.5
    assert reloaded.materializer.default_unit == 'EA'
    assert 'discipline' in reloaded.mapping.field_synonyms[CanonicalField.CATEGORY]


def test_reset_to_defaults(tmp_path):
    path = tmp_path / 'pipeline.json'
    manager = ConfigManager(str(path))
    manager.update_config(ConfigUpdateRequest(outlier_std_dev_threshold=4))
    assert manager.reset_to_defaults()
    assert ConfigManager(str(path)).get_config().analysis.outlier_std_dev_threshold == 2.0


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / 'pipeline.json'
    path.write_text('{ not json', encoding='utf-8')
    manager = ConfigManager(str(path))
    assert manager.get_config() == PipelineConfig.get_default_config()


def test_config_summary(tmp_path):
    summary = ConfigManager(str(tmp_path / 'pipeline.json')).get_config_summary()
    assert summary['row_tolerance'] == 2.0
    assert summary['default_unit'] == 'LOT'
    assert summary['field_synonyms']['itemCode'] > 0


def test_validation_rules():
    with pytest.raises(ValidationError):
        ConfigUpdateRequest(row_tolerance=-1)
    with pytest.raises(ValidationError):
        ClassifierConfig(header_keywords=['item'], section_code_min=50, section_code_max=40)
    with pytest.raises(ValidationError):
        ClassifierConfig(header_keywords=['  '])

    classifier = ClassifierConfig(header_keywords=[' ITEM ', 'Qty'])
    assert classifier.header_keywords == ['item', 'qty']
