"""JSON export of suite results."""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union

from .models import SuiteResult

logger = logging.getLogger(__name__)

REPORT_VERSION = "1.0"


def build_report(suite_result: SuiteResult) -> Dict[str, Any]:
    """Summary and per-case details of a run as plain data."""
    return {
        'metadata': {
            'generated_at': datetime.now().isoformat(),
            'report_version': REPORT_VERSION,
            'generator': 'metrictest',
        },
        'summary': {
            'database': suite_result.database_name,
            'total_cases': suite_result.total_cases,
            'executed_cases': len(suite_result.case_results),
            'passed_cases': suite_result.passed_cases,
            'failed_cases': suite_result.failed_cases,
            'error_cases': suite_result.error_cases,
            'skipped_cases': suite_result.skipped_cases,
            'halted_for_debug': suite_result.halted_for_debug,
            'start_time': suite_result.start_time.isoformat(),
            'end_time': suite_result.end_time.isoformat() if suite_result.end_time else None,
            'execution_time': suite_result.execution_time,
        },
        'cases': [case.to_dict() for case in suite_result.case_results],
    }


def export_results(suite_result: SuiteResult, output_path: Union[str, Path]) -> Path:
    """Write the JSON report to ``output_path``."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(build_report(suite_result), f, indent=2, default=str)

    logger.info(f"JSON report generated: {output_path}")
    return output_path
