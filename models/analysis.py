"""Analysis result data model returned by the language model."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .constants import WEEKDAYS, WEEKS_PER_MONTH, Efficiency
from .errors import AnalysisDecodeError


def _require(data: Dict[str, Any], key: str, path: str) -> Any:
    if not isinstance(data, dict):
        raise AnalysisDecodeError(f"{path}: expected object, got {type(data).__name__}")
    if key not in data:
        raise AnalysisDecodeError(f"{path}: missing required field '{key}'")
    return data[key]


def _string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise AnalysisDecodeError(f"{path}: expected string, got {type(value).__name__}")
    return value


def _optional_string(value: Any, path: str) -> Optional[str]:
    if value is None:
        return None
    return _string(value, path)


def _string_list(value: Any, path: str) -> Tuple[str, ...]:
    if not isinstance(value, list):
        raise AnalysisDecodeError(f"{path}: expected list, got {type(value).__name__}")
    return tuple(_string(item, f"{path}[{idx}]") for idx, item in enumerate(value))


@dataclass(frozen=True)
class VisitDetail:
    """Structured visit with transit hints (richer response contract)."""

    site_name: str
    metro_line: Optional[str] = None
    bus_connection: Optional[str] = None
    walking_minutes: Optional[int] = None
    full_shift: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "visit") -> "VisitDetail":
        walking = data.get("walkingMinutes")
        if walking is not None:
            if (
                isinstance(walking, bool)
                or not isinstance(walking, (int, float))
                or walking != int(walking)
            ):
                raise AnalysisDecodeError(f"{path}.walkingMinutes: expected integer")
            walking = int(walking)

        full_shift = data.get("fullShift", False)
        if not isinstance(full_shift, bool):
            raise AnalysisDecodeError(f"{path}.fullShift: expected boolean")

        return cls(
            site_name=_string(_require(data, "siteName", path), f"{path}.siteName"),
            metro_line=_optional_string(data.get("metroLine"), f"{path}.metroLine"),
            bus_connection=_optional_string(
                data.get("busConnection"), f"{path}.busConnection"
            ),
            walking_minutes=walking,
            full_shift=full_shift,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"siteName": self.site_name, "fullShift": self.full_shift}
        if self.metro_line is not None:
            result["metroLine"] = self.metro_line
        if self.bus_connection is not None:
            result["busConnection"] = self.bus_connection
        if self.walking_minutes is not None:
            result["walkingMinutes"] = self.walking_minutes
        return result


Visit = Union[str, VisitDetail]


def visit_site_name(visit: Visit) -> str:
    """Return the site name of a plain or detailed visit."""
    if isinstance(visit, VisitDetail):
        return visit.site_name
    return visit


def _visits(value: Any, path: str) -> Tuple[Visit, ...]:
    if not isinstance(value, list):
        raise AnalysisDecodeError(f"{path}: expected list, got {type(value).__name__}")
    visits: List[Visit] = []
    for idx, item in enumerate(value):
        item_path = f"{path}[{idx}]"
        if isinstance(item, str):
            visits.append(item)
        elif isinstance(item, dict):
            visits.append(VisitDetail.from_dict(item, item_path))
        else:
            raise AnalysisDecodeError(f"{item_path}: expected string or object")
    return tuple(visits)


def _encode_visits(visits: Tuple[Visit, ...]) -> List[Any]:
    return [v.to_dict() if isinstance(v, VisitDetail) else v for v in visits]


@dataclass(frozen=True)
class HousingComparison:
    """Commute comparison between current and suggested housing."""

    current_avg_time: str
    suggested_avg_time: str
    monthly_savings: str


@dataclass(frozen=True)
class HousingRecommendation:
    """Suggested neighborhoods to live in."""

    top_neighborhoods: Tuple[str, ...]
    centroid_description: str
    comparison: HousingComparison


@dataclass(frozen=True)
class CurrentEvaluation:
    """Evaluation of the commute from the current home address."""

    distance_avg: str
    time_avg: str
    critical_regions: Tuple[str, ...]
    efficiency: Efficiency
    efficiency_description: str


@dataclass(frozen=True)
class Cluster:
    """Named group of sites sharing a region."""

    name: str
    region: str
    sites: Tuple[str, ...]


@dataclass(frozen=True)
class DayRoute:
    """One weekday of the typical weekly route pattern."""

    day: str
    visits: Tuple[Visit, ...]
    estimated_travel_time: str
    total_time: str


@dataclass(frozen=True)
class WeekSchedule:
    """Visits per weekday for one week of the monthly agenda."""

    monday: Tuple[Visit, ...] = ()
    tuesday: Tuple[Visit, ...] = ()
    wednesday: Tuple[Visit, ...] = ()
    thursday: Tuple[Visit, ...] = ()
    friday: Tuple[Visit, ...] = ()

    @classmethod
    def from_dict(cls, data: Any, path: str = "schedule") -> "WeekSchedule":
        """
        Decode a weekday-keyed schedule.

        Missing weekdays decode as empty; keys outside the five weekdays are
        rejected.
        """
        if not isinstance(data, dict):
            raise AnalysisDecodeError(f"{path}: expected object, got {type(data).__name__}")

        known = {wire_key: attr for attr, wire_key in WEEKDAYS}
        unknown = [key for key in data if key not in known]
        if unknown:
            raise AnalysisDecodeError(f"{path}: unknown weekday keys {unknown}")

        slots = {
            known[key]: _visits(value, f"{path}.{key}") for key, value in data.items()
        }
        return cls(**slots)

    def days(self) -> Iterator[Tuple[str, Tuple[Visit, ...]]]:
        """Iterate (weekday label, visits) in Monday..Friday order."""
        for attr, label in WEEKDAYS:
            yield label, getattr(self, attr)

    def to_dict(self) -> Dict[str, List[Any]]:
        return {label: _encode_visits(visits) for label, visits in self.days()}


@dataclass(frozen=True)
class MonthAgenda:
    """One week (1..4) of the monthly agenda."""

    week: int
    schedule: WeekSchedule


@dataclass(frozen=True)
class AnalysisResult:
    """
    Complete logistics plan produced by the language model.

    Decoding is strict: ``from_dict`` either returns a fully populated result
    or raises ``AnalysisDecodeError``.
    """

    diagnosis: str
    current_evaluation: CurrentEvaluation
    housing_recommendation: HousingRecommendation
    clusters: Tuple[Cluster, ...] = field(default_factory=tuple)
    weekly_route: Tuple[DayRoute, ...] = field(default_factory=tuple)
    monthly_agenda: Tuple[MonthAgenda, ...] = field(default_factory=tuple)
    time_savings_summary: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "AnalysisResult":
        """Decode the JSON object returned by the language model."""
        if not isinstance(data, dict):
            raise AnalysisDecodeError(
                f"result: expected object, got {type(data).__name__}"
            )

        evaluation = _require(data, "currentEvaluation", "result")
        efficiency_raw = _string(
            _require(evaluation, "efficiency", "currentEvaluation"),
            "currentEvaluation.efficiency",
        )
        try:
            efficiency = Efficiency.parse(efficiency_raw)
        except ValueError as e:
            raise AnalysisDecodeError(f"currentEvaluation.efficiency: {e}") from e

        current_evaluation = CurrentEvaluation(
            distance_avg=_string(
                _require(evaluation, "distanceAvg", "currentEvaluation"),
                "currentEvaluation.distanceAvg",
            ),
            time_avg=_string(
                _require(evaluation, "timeAvg", "currentEvaluation"),
                "currentEvaluation.timeAvg",
            ),
            critical_regions=_string_list(
                _require(evaluation, "criticalRegions", "currentEvaluation"),
                "currentEvaluation.criticalRegions",
            ),
            efficiency=efficiency,
            efficiency_description=_string(
                _require(evaluation, "efficiencyDescription", "currentEvaluation"),
                "currentEvaluation.efficiencyDescription",
            ),
        )

        housing = _require(data, "housingRecommendation", "result")
        comparison = _require(housing, "comparison", "housingRecommendation")
        housing_recommendation = HousingRecommendation(
            top_neighborhoods=_string_list(
                _require(housing, "topNeighborhoods", "housingRecommendation"),
                "housingRecommendation.topNeighborhoods",
            ),
            centroid_description=_string(
                _require(housing, "centroidDescription", "housingRecommendation"),
                "housingRecommendation.centroidDescription",
            ),
            comparison=HousingComparison(
                current_avg_time=_string(
                    _require(comparison, "currentAvgTime", "comparison"),
                    "comparison.currentAvgTime",
                ),
                suggested_avg_time=_string(
                    _require(comparison, "suggestedAvgTime", "comparison"),
                    "comparison.suggestedAvgTime",
                ),
                monthly_savings=_string(
                    _require(comparison, "monthlySavings", "comparison"),
                    "comparison.monthlySavings",
                ),
            ),
        )

        return cls(
            diagnosis=_string(_require(data, "diagnosis", "result"), "diagnosis"),
            current_evaluation=current_evaluation,
            housing_recommendation=housing_recommendation,
            clusters=cls._decode_clusters(_require(data, "clusters", "result")),
            weekly_route=cls._decode_weekly_route(_require(data, "weeklyRoute", "result")),
            monthly_agenda=cls._decode_monthly_agenda(
                _require(data, "monthlyAgenda", "result")
            ),
            time_savings_summary=_string(
                _require(data, "timeSavingsSummary", "result"), "timeSavingsSummary"
            ),
        )

    @staticmethod
    def _decode_clusters(value: Any) -> Tuple[Cluster, ...]:
        if not isinstance(value, list):
            raise AnalysisDecodeError("clusters: expected list")
        clusters = []
        for idx, item in enumerate(value):
            path = f"clusters[{idx}]"
            clusters.append(
                Cluster(
                    name=_string(_require(item, "name", path), f"{path}.name"),
                    region=_string(_require(item, "region", path), f"{path}.region"),
                    sites=_string_list(_require(item, "sites", path), f"{path}.sites"),
                )
            )
        return tuple(clusters)

    @staticmethod
    def _decode_weekly_route(value: Any) -> Tuple[DayRoute, ...]:
        if not isinstance(value, list):
            raise AnalysisDecodeError("weeklyRoute: expected list")
        days = []
        for idx, item in enumerate(value):
            path = f"weeklyRoute[{idx}]"
            days.append(
                DayRoute(
                    day=_string(_require(item, "day", path), f"{path}.day"),
                    visits=_visits(_require(item, "visits", path), f"{path}.visits"),
                    estimated_travel_time=_string(
                        _require(item, "estimatedTravelTime", path),
                        f"{path}.estimatedTravelTime",
                    ),
                    total_time=_string(
                        _require(item, "totalTime", path), f"{path}.totalTime"
                    ),
                )
            )
        return tuple(days)

    @staticmethod
    def _decode_monthly_agenda(value: Any) -> Tuple[MonthAgenda, ...]:
        if not isinstance(value, list):
            raise AnalysisDecodeError("monthlyAgenda: expected list")
        weeks = []
        for idx, item in enumerate(value):
            path = f"monthlyAgenda[{idx}]"
            week = _require(item, "week", path)
            # JSON numbers may arrive as 2.0
            if isinstance(week, bool) or not isinstance(week, (int, float)) or week != int(week):
                raise AnalysisDecodeError(f"{path}.week: expected integer, got {week!r}")
            week = int(week)
            if not 1 <= week <= WEEKS_PER_MONTH:
                raise AnalysisDecodeError(
                    f"{path}.week: {week} outside 1..{WEEKS_PER_MONTH}"
                )
            weeks.append(
                MonthAgenda(
                    week=week,
                    schedule=WeekSchedule.from_dict(
                        _require(item, "schedule", path), f"{path}.schedule"
                    ),
                )
            )
        return tuple(weeks)

    def scheduled_site_names(self) -> Iterator[str]:
        """Iterate every site name scheduled in the monthly agenda."""
        for week in self.monthly_agenda:
            for _, visits in week.schedule.days():
                for visit in visits:
                    yield visit_site_name(visit)

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the JSON shape returned by the language model."""
        evaluation = self.current_evaluation
        housing = self.housing_recommendation
        return {
            "diagnosis": self.diagnosis,
            "currentEvaluation": {
                "distanceAvg": evaluation.distance_avg,
                "timeAvg": evaluation.time_avg,
                "criticalRegions": list(evaluation.critical_regions),
                "efficiency": evaluation.efficiency.value,
                "efficiencyDescription": evaluation.efficiency_description,
            },
            "housingRecommendation": {
                "topNeighborhoods": list(housing.top_neighborhoods),
                "centroidDescription": housing.centroid_description,
                "comparison": {
                    "currentAvgTime": housing.comparison.current_avg_time,
                    "suggestedAvgTime": housing.comparison.suggested_avg_time,
                    "monthlySavings": housing.comparison.monthly_savings,
                },
            },
            "clusters": [
                {"name": c.name, "sites": list(c.sites), "region": c.region}
                for c in self.clusters
            ],
            "weeklyRoute": [
                {
                    "day": d.day,
                    "visits": _encode_visits(d.visits),
                    "estimatedTravelTime": d.estimated_travel_time,
                    "totalTime": d.total_time,
                }
                for d in self.weekly_route
            ],
            "monthlyAgenda": [
                {"week": w.week, "schedule": w.schedule.to_dict()}
                for w in self.monthly_agenda
            ],
            "timeSavingsSummary": self.time_savings_summary,
        }
