"""
Loading of metric test cases from YAML.

A case file lists cases by setup procedure name, metric, window and expected
matrix. Environment variables are interpolated with the same rules as the main
configuration file.
"""
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from metrictest.config.parser import ConfigParser
from metrictest.exceptions import ConfigurationError
from .models import MetricTestCase, SetupProcedure
from .scenarios import SETUP_REGISTRY

logger = logging.getLogger(__name__)

ExpectedCell = Optional[Union[StrictInt, StrictStr]]


class MetricCaseConfig(BaseModel):
    """Configuration model for a single metric test case."""

    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    name: Optional[str] = None
    setup: str
    metric: str
    date_from: datetime = Field(alias='from')
    date_to: datetime = Field(alias='to')
    expected: List[List[ExpectedCell]] = Field(default_factory=list)
    debug: bool = False

    @field_validator('date_from', 'date_to', mode='before')
    @classmethod
    def dates_at_midnight(cls, v):
        """YAML dates mean the start of that day."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime(v.year, v.month, v.day)
        return v

    @model_validator(mode='after')
    def validate_window(self):
        if self.date_from > self.date_to:
            raise ValueError(f"'from' ({self.date_from}) is after 'to' ({self.date_to})")
        return self

    def to_case(self, registry: Dict[str, SetupProcedure]) -> MetricTestCase:
        """Convert to a runnable case.

        Raises:
            ConfigurationError: If the setup procedure is unknown.
        """
        setup = registry.get(self.setup)
        if setup is None:
            raise ConfigurationError(
                f"Unknown setup '{self.setup}'. Available: {sorted(registry)}"
            )
        return MetricTestCase(
            setup=setup,
            metric=self.metric,
            date_from=self.date_from,
            date_to=self.date_to,
            expected=[list(row) for row in self.expected],
            debug=self.debug,
            name=self.name,
        )


class MetricCaseFileConfig(BaseModel):
    """Top level of a case file."""
    cases: List[MetricCaseConfig] = Field(default_factory=list)


class CaseConfigLoader:
    """Reads case files into MetricTestCase lists."""

    def __init__(self, registry: Optional[Dict[str, SetupProcedure]] = None):
        self.registry = dict(SETUP_REGISTRY if registry is None else registry)
        self._parser = ConfigParser()

    def load(self, path: Union[str, Path]) -> List[MetricTestCase]:
        """
        Load cases from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as file:
                raw = yaml.safe_load(file)
        except FileNotFoundError:
            raise ConfigurationError(f"Case file '{path}' not found")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in case file '{path}': {e}")

        if not raw:
            raise ConfigurationError(f"Case file '{path}' is empty")
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Case file '{path}' must be a mapping with a 'cases' list")

        raw = self._parser._process_env_vars(raw)
        try:
            file_config = MetricCaseFileConfig(**raw)
        except ValidationError as e:
            raise ConfigurationError(f"Case file '{path}' validation failed: {e}")

        cases = [case.to_case(self.registry) for case in file_config.cases]
        logger.info(f"Loaded {len(cases)} cases from {path}")
        return cases


def load_cases(path: Union[str, Path]) -> List[MetricTestCase]:
    """Load cases using the built-in setup procedures."""
    return CaseConfigLoader().load(path)
