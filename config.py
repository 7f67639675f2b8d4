"""
Configuration Management for the Pima Diabetes Report

Centralized settings for the analysis, the dataset source, the rendered
report and logging.

Usage:
    from config import CONFIG

    CONFIG.get('analysis.ci_level')
    CONFIG.update('data.source', 'data/diabetes.csv')
    CONFIG.get('some.nested.key', default='default_value')
"""

import json
import os
from typing import Any, Optional, Dict
import warnings


class ConfigManager:
    """
    Centralized configuration management with hierarchical key access.

    Supports:
    - Nested dictionary access with dot notation
    - Default values and fallbacks
    - Environment variable overrides
    - Config validation
    - Runtime updates
    """

    def __init__(self, config_dict: Optional[Dict] = None):
        """
        Create a ConfigManager from the given configuration (or the defaults) and apply environment overrides.

        Parameters:
            config_dict (dict | None): Initial configuration; the built-in defaults are used when None.
        """
        self._config = config_dict or self._get_default_config()
        self._env_prefix = "PIMAREPORT_"
        self._load_env_overrides()

    @staticmethod
    def _get_default_config() -> Dict[str, Any]:
        """
        Provide the default nested configuration.

        Returns:
            Dict[str, Any]: Sections 'analysis', 'data', 'report' and 'logging'.
        """
        return {

            # ========== ANALYSIS SETTINGS ==========
            "analysis": {
                # Logistic Regression
                "logit_method": "newton",  # 'newton', 'bfgs', 'lbfgs'
                "logit_max_iter": 100,
                "ci_level": 0.95,

                # P-value display
                "pvalue_bounds_lower": 0.001,
                "pvalue_bounds_upper": 0.999,
                "pvalue_format_small": "<0.001",
                "pvalue_format_large": ">0.999",
                "pvalue_decimal_places": 3,

                # Narrative percentages
                "percent_decimal_places": 1,
            },

            # ========== DATA SETTINGS ==========
            "data": {
                "source": "openml",  # 'openml' or a path to a CSV file
                "openml_id": 37,
                "csv_na_values": ["NA", ""],
                # Measurements where a recorded 0 means "not measured"
                "zero_as_missing": [
                    "glucose",
                    "blood_pressure",
                    "skin_fold",
                    "insulin",
                    "body_mass_index",
                ],
            },

            # ========== REPORT SETTINGS ==========
            "report": {
                "title": "Diabetes in Pima Indian Women",
                "output_path": "report.html",
                "histogram_bins": 30,
                "plot_columns": 4,
                "plot_row_height": 260,
                "include_plotlyjs": "cdn",
            },

            # ========== LOGGING SETTINGS ==========
            "logging": {
                "enabled": True,
                "level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
                "format": "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
                "date_format": "%Y-%m-%d %H:%M:%S",

                # File Logging
                "file_enabled": False,
                "log_dir": "logs",
                "log_file": "report.log",
                "max_log_size": 10485760,  # 10MB in bytes
                "backup_count": 5,

                # Console Logging
                "console_enabled": True,
                "console_level": "INFO",

                # What to Log
                "log_data_operations": True,
                "log_analysis_operations": True,
                "log_performance": True,
            },
        }

    def _load_env_overrides(self) -> None:
        """
        Apply overrides from environment variables that start with PIMAREPORT_.

        PIMAREPORT_<SECTION>_<KEY>=value sets `section.key`; the part after the prefix
        is lowercased and split on the first underscore (PIMAREPORT_LOGGING_CONSOLE_LEVEL
        -> logging.console_level). Values are parsed as JSON when possible so numbers,
        booleans and lists keep their type; anything else is kept as a string.
        Overrides for unknown keys are skipped with a warning.
        """
        for key, value in os.environ.items():
            if key.startswith(self._env_prefix):
                parts = key[len(self._env_prefix):].lower().split('_')

                if len(parts) < 2:
                    continue

                section = parts[0]
                key_name = '_'.join(parts[1:])

                try:
                    parsed = json.loads(value)
                except ValueError:
                    parsed = value

                try:
                    self.update(f"{section}.{key_name}", parsed)
                except (KeyError, ValueError, TypeError) as e:
                    warnings.warn(f"Failed to set env override {key}={value}: {e}", stacklevel=2)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value using a dot-separated key path.

        Parameters:
            key (str): Dot-separated path (e.g., "analysis.ci_level").
            default: Value returned when the path does not exist.
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def update(self, key: str, value: Any) -> None:
        """
        Set an existing configuration value identified by a dot-separated path.

        Raises:
            KeyError: If any path segment or the final key does not exist.
        """
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if not isinstance(config, dict) or k not in config:
                raise KeyError(f"Config path '{'.'.join(keys[:-1])}' does not exist")
            config = config[k]

        final_key = keys[-1]
        if final_key not in config:
            raise KeyError(f"Config key '{key}' does not exist")

        config[final_key] = value

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate key configuration constraints and collect any violations.

        Checks:
        - `analysis.ci_level` lies strictly between 0 and 1.
        - `analysis.pvalue_bounds_lower` < `analysis.pvalue_bounds_upper`.
        - `analysis.logit_method` is a statsmodels solver this report supports.
        - `analysis.logit_max_iter` is a positive integer.
        - `logging.level` is a standard level name.

        Returns:
            tuple: (is_valid, errors)
        """
        errors = []

        ci_level = self.get('analysis.ci_level')
        if ci_level is None or not (0 < ci_level < 1):
            errors.append("analysis.ci_level must be between 0 and 1")

        lower = self.get('analysis.pvalue_bounds_lower')
        upper = self.get('analysis.pvalue_bounds_upper')
        if lower is None or upper is None or not (lower < upper):
            errors.append("pvalue_bounds_lower must be < pvalue_bounds_upper")

        valid_methods = ['newton', 'bfgs', 'lbfgs']
        if self.get('analysis.logit_method') not in valid_methods:
            errors.append(f"analysis.logit_method must be one of {valid_methods}")

        max_iter = self.get('analysis.logit_max_iter')
        if not isinstance(max_iter, int) or max_iter <= 0:
            errors.append("analysis.logit_max_iter must be a positive integer")

        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.get('logging.level') not in valid_levels:
            errors.append(f"logging.level must be one of {valid_levels}")

        return len(errors) == 0, errors

    def __repr__(self) -> str:
        return f"ConfigManager({len(self._config)} sections)"


# Global config instance
CONFIG = ConfigManager()
