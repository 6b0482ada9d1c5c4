from dataclasses import dataclass
from typing import Any, Mapping

from dataclasses_serialization.json import JSONSerializer

from dmarc_report_analyzer.aggregation import TOP_SOURCES_LIMIT
from dmarc_report_analyzer.health import SUSPICIOUS_SOURCE_MIN_COUNT


@dataclass(frozen=True)
class AnalyzerConfig:
    top_sources_limit: int = TOP_SOURCES_LIMIT
    suspicious_source_min_count: int = SUSPICIOUS_SOURCE_MIN_COUNT


def analyzer_config_from_dict(configuration: Mapping[str, Any]) -> AnalyzerConfig:
    return JSONSerializer.deserialize(
        AnalyzerConfig, dict(configuration.get("analysis", {}))
    )
