#!/usr/bin/env python3
"""
Configuration Manager for the BOQ extraction pipeline using Pydantic models.
Manages header keywords, column synonyms and analysis thresholds stored as JSON.
"""

import json
import os
from typing import Iterable, Optional
from pathlib import Path
import logging
from models.config_models import (
    CanonicalField,
    ConfigUpdateRequest,
    PipelineConfig
)

CONFIG_DIR_ENV = 'BOQ_CONFIG_DIR'
CONFIG_FILE_NAME = 'pipeline_config.json'


class ConfigManager:
    """Manages pipeline configuration using Pydantic models"""

    def __init__(self, config_file_path: Optional[str] = None):
        self.logger = logging.getLogger(self.__class__.__name__)

        # Explicit path, then $BOQ_CONFIG_DIR, then the user's home directory
        if config_file_path is None:
            self.config_dir = Path(os.environ.get(CONFIG_DIR_ENV, Path.home() / '.boq_extraction'))
            os.makedirs(self.config_dir, exist_ok=True)
            self.config_file = self.config_dir / CONFIG_FILE_NAME
        else:
            self.config_file = Path(config_file_path)
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

        self.config = self._load_config()

    def _load_config(self) -> PipelineConfig:
        """Load configuration from file, create default if doesn't exist"""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    config_data = json.load(f)
                config = PipelineConfig(**config_data)
                self.logger.info(f"Loaded configuration from {self.config_file}")
                return config
        except Exception as e:
            self.logger.error(f"Error loading config file: {e}")

        # Return default config and save it
        default_config = PipelineConfig.get_default_config()
        self._save_config(default_config)
        self.logger.info("Created default configuration")
        return default_config

    def _save_config(self, config: PipelineConfig) -> None:
        """Save configuration to file"""
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(config.model_dump(mode='json'), f, indent=2, ensure_ascii=False)
            self.logger.info(f"Configuration saved to {self.config_file}")
        except Exception as e:
            self.logger.error(f"Error saving config file: {e}")
            raise

    def get_config(self) -> PipelineConfig:
        """Get the current pipeline configuration"""
        return self.config

    def add_synonyms(self, field: CanonicalField, names: Iterable[str]) -> bool:
        """Accept additional column names for a field; existing names are kept"""
        try:
            field = CanonicalField(field)
            current = self.config.mapping.field_synonyms.setdefault(field, [])
            known = {name.strip().casefold() for name in current}
            added = []
            for name in names:
                name = name.strip()
                if name and name.casefold() not in known:
                    known.add(name.casefold())
                    added.append(name)
            current.extend(added)
            self._save_config(self.config)

            self.logger.info(f"Added {len(added)} synonyms for {field.value}")
            return True

        except Exception as e:
            self.logger.error(f"Error adding synonyms for {field}: {e}")
            return False

    def update_config(self, update_request: ConfigUpdateRequest) -> bool:
        """Update configuration based on request"""
        try:
            if update_request.row_tolerance is not None:
                self.config.layout.row_tolerance = update_request.row_tolerance
                self.logger.info(f"Updated row_tolerance to {update_request.row_tolerance}")

            if update_request.default_unit is not None:
                self.config.materializer.default_unit = update_request.default_unit
                self.logger.info(f"Updated default_unit to {update_request.default_unit}")

            if update_request.outlier_std_dev_threshold is not None:
                self.config.analysis.outlier_std_dev_threshold = update_request.outlier_std_dev_threshold
                self.logger.info(f"Updated outlier threshold to {update_request.outlier_std_dev_threshold}")

            if update_request.field_synonyms is not None:
                for field, names in update_request.field_synonyms.items():
                    current = self.config.mapping.field_synonyms.setdefault(field, [])
                    current.extend(name for name in names if name not in current)
                    self.logger.info(f"Updated synonyms for {field.value}")

            # Save the updated configuration
            self._save_config(self.config)
            self.logger.info("Configuration updated successfully")
            return True

        except Exception as e:
            self.logger.error(f"Error updating config: {e}")
            return False

    def reset_to_defaults(self) -> bool:
        """Reset configuration to defaults"""
        try:
            self.config = PipelineConfig.get_default_config()
            self._save_config(self.config)
            self.logger.info("Configuration reset to defaults")
            return True
        except Exception as e:
            self.logger.error(f"Error resetting config to defaults: {e}")
            return False

    def get_config_summary(self) -> dict:
        """Get a summary of current configuration for display"""
        try:
            return {
                "config_file": str(self.config_file),
                "row_tolerance": self.config.layout.row_tolerance,
                "header_keywords": len(self.config.classifier.header_keywords),
                "field_synonyms": {
                    field.value: len(names) for field, names in self.config.mapping.field_synonyms.items()
                },
                "default_unit": self.config.materializer.default_unit,
                "outlier_std_dev_threshold": self.config.analysis.outlier_std_dev_threshold,
            }
        except Exception as e:
            self.logger.error(f"Error getting config summary: {e}")
            return {}
