"""Structured-output schema for the analysis response."""

from typing import Any, Dict

from models.constants import WEEKDAYS, Efficiency

STRING: Dict[str, Any] = {"type": "string"}
STRING_LIST: Dict[str, Any] = {"type": "array", "items": STRING}

VISIT_DETAIL_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "siteName": STRING,
        "metroLine": STRING,
        "busConnection": STRING,
        "walkingMinutes": {"type": "integer"},
        "fullShift": {"type": "boolean"},
    },
    "required": ["siteName", "fullShift"],
}


def _obj(properties: Dict[str, Any], **extra: Any) -> Dict[str, Any]:
    schema = {"type": "object", "properties": properties, "required": list(properties)}
    schema.update(extra)
    return schema


def build_response_schema(detailed_visits: bool = False) -> Dict[str, Any]:
    """
    Build the JSON schema of the analysis result.

    Args:
        detailed_visits: Use structured visit objects instead of plain site names

    Returns:
        JSON schema with lower-case type names
    """
    visits = (
        {"type": "array", "items": VISIT_DETAIL_SCHEMA} if detailed_visits else STRING_LIST
    )
    schedule = _obj({label: visits for _, label in WEEKDAYS})

    return _obj(
        {
            "diagnosis": STRING,
            "currentEvaluation": _obj(
                {
                    "distanceAvg": STRING,
                    "timeAvg": STRING,
                    "criticalRegions": STRING_LIST,
                    "efficiency": {
                        "type": "string",
                        "enum": [e.value for e in Efficiency],
                    },
                    "efficiencyDescription": STRING,
                }
            ),
            "housingRecommendation": _obj(
                {
                    "topNeighborhoods": STRING_LIST,
                    "centroidDescription": STRING,
                    "comparison": _obj(
                        {
                            "currentAvgTime": STRING,
                            "suggestedAvgTime": STRING,
                            "monthlySavings": STRING,
                        }
                    ),
                }
            ),
            "clusters": {
                "type": "array",
                "items": _obj({"name": STRING, "sites": STRING_LIST, "region": STRING}),
            },
            "weeklyRoute": {
                "type": "array",
                "description": "Exemplo de uma semana típica (Padrão de Roteiro)",
                "items": _obj(
                    {
                        "day": STRING,
                        "visits": visits,
                        "estimatedTravelTime": STRING,
                        "totalTime": STRING,
                    }
                ),
            },
            "monthlyAgenda": {
                "type": "array",
                "description": "Distribuição completa das obras pelas 4 semanas",
                "items": _obj({"week": {"type": "integer"}, "schedule": schedule}),
            },
            "timeSavingsSummary": STRING,
        }
    )


def to_gemini_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a JSON schema to the Gemini ``responseSchema`` dialect (upper-case types)."""
    converted: Dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type":
            converted[key] = value.upper()
        elif key == "properties":
            converted[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items":
            converted[key] = to_gemini_schema(value)
        else:
            converted[key] = value
    return converted
