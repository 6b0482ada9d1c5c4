import json
from datetime import datetime
from typing import Any, Dict, List, Tuple

from dataclasses_serialization.json import JSONSerializer

from dmarc_report_analyzer.health import Rating
from dmarc_report_analyzer.pipeline import ReportAnalysis


# false positive, pylint: disable=no-value-for-parameter
@JSONSerializer.register_serializer(Rating)
def rating_serializer(rating: Rating) -> str:
    return rating.value


@JSONSerializer.register_serializer(datetime)
def datetime_serializer(value: datetime) -> str:
    return value.isoformat()


@JSONSerializer.register_serializer(tuple)
def tuple_serializer(values: Tuple[Any, ...]) -> List[Any]:
    return [JSONSerializer.serialize(value) for value in values]


def analysis_to_dict(result: ReportAnalysis) -> Dict[str, Any]:
    return JSONSerializer.serialize(result)


def error_to_dict(err: Exception) -> Dict[str, Any]:
    return {"error": type(err).__name__, "message": str(err)}


def dumps(obj: Any) -> str:
    if isinstance(obj, ReportAnalysis):
        obj = analysis_to_dict(obj)
    return json.dumps(obj, indent=2)
