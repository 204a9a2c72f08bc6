"""Unit tests for decoding analysis results."""

import copy
import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from models.analysis import AnalysisResult, VisitDetail, WeekSchedule
from models.constants import Efficiency
from models.errors import AnalysisDecodeError

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def payload():
    """Sample reply as returned by the language model."""
    with open(FIXTURES / "sample_analysis.json", "r", encoding="utf-8") as f:
        return json.load(f)


class TestAnalysisResultDecoding:
    """Test strict decoding of the full result."""

    def test_decode_sample(self, payload):
        """Test every section of the sample reply is decoded."""
        result = AnalysisResult.from_dict(payload)

        assert result.diagnosis.startswith("A moradia atual")
        assert result.current_evaluation.efficiency is Efficiency.MEDIUM
        assert result.current_evaluation.critical_regions == ("Zona Norte", "Mogi das Cruzes")
        assert result.housing_recommendation.top_neighborhoods == ("Paraíso", "Liberdade")
        assert result.housing_recommendation.comparison.monthly_savings == "12 horas"
        assert len(result.clusters) == 4
        assert result.clusters[0].sites == ("Rio Madeira", "Rio São Francisco")
        assert [d.day for d in result.weekly_route] == [
            "Segunda", "Terça", "Quarta", "Quinta", "Sexta"
        ]
        assert result.weekly_route[2].visits == ()
        assert [w.week for w in result.monthly_agenda] == [1, 2, 3, 4]
        assert result.monthly_agenda[0].schedule.monday == ("Rio Madeira", "Rio São Francisco")
        assert result.monthly_agenda[3].schedule.friday == ("Rio Negro",)

    def test_to_dict_matches_wire_shape(self, payload):
        """Test re-encoding yields the original reply."""
        result = AnalysisResult.from_dict(payload)

        assert result.to_dict() == payload

    def test_scheduled_site_names(self, payload):
        """Test iteration over every scheduled visit."""
        result = AnalysisResult.from_dict(payload)

        assert list(result.scheduled_site_names()) == [
            "Rio Madeira", "Rio São Francisco", "Rio Tietê", "Rio Paraná", "Rio Negro"
        ]

    def test_result_is_immutable(self, payload):
        """Test decoded values cannot be mutated."""
        result = AnalysisResult.from_dict(payload)

        with pytest.raises(AttributeError):
            result.diagnosis = "changed"

    @pytest.mark.parametrize(
        "field",
        [
            "diagnosis",
            "currentEvaluation",
            "housingRecommendation",
            "clusters",
            "weeklyRoute",
            "monthlyAgenda",
            "timeSavingsSummary",
        ],
    )
    def test_missing_top_level_field(self, payload, field):
        """Test any missing top-level field fails the decode."""
        del payload[field]

        with pytest.raises(AnalysisDecodeError, match=field):
            AnalysisResult.from_dict(payload)

    def test_missing_nested_field(self, payload):
        """Test a missing nested comparison field fails the decode."""
        del payload["housingRecommendation"]["comparison"]["suggestedAvgTime"]

        with pytest.raises(AnalysisDecodeError, match="suggestedAvgTime"):
            AnalysisResult.from_dict(payload)

    def test_wrong_type(self, payload):
        """Test a number where a string is expected fails the decode."""
        payload["currentEvaluation"]["timeAvg"] = 55

        with pytest.raises(AnalysisDecodeError, match="timeAvg"):
            AnalysisResult.from_dict(payload)

    @pytest.mark.parametrize("data", [None, [], "{}", 42])
    def test_non_object_reply(self, data):
        """Test non-object replies fail the decode."""
        with pytest.raises(AnalysisDecodeError):
            AnalysisResult.from_dict(data)

    def test_empty_object(self):
        """Test an empty object fails instead of yielding a partial result."""
        with pytest.raises(AnalysisDecodeError):
            AnalysisResult.from_dict({})


class TestEfficiency:
    """Test the closed efficiency enumeration."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Alta", Efficiency.HIGH),
            ("Média", Efficiency.MEDIUM),
            ("media", Efficiency.MEDIUM),
            ("BAIXA", Efficiency.LOW),
            (" High ", Efficiency.HIGH),
        ],
    )
    def test_known_labels(self, raw, expected):
        """Test accepted efficiency labels."""
        assert Efficiency.parse(raw) is expected

    def test_unknown_label_fails_decode(self, payload):
        """Test values outside the enumeration fail the decode."""
        payload["currentEvaluation"]["efficiency"] = "Excelente"

        with pytest.raises(AnalysisDecodeError, match="efficiency"):
            AnalysisResult.from_dict(payload)


class TestMonthlyAgenda:
    """Test week numbers and the weekday-keyed schedule."""

    def test_float_week_number_accepted(self, payload):
        """Test JSON numbers such as 2.0 decode as integers."""
        payload["monthlyAgenda"][1]["week"] = 2.0

        result = AnalysisResult.from_dict(payload)
        assert result.monthly_agenda[1].week == 2

    @pytest.mark.parametrize("week", [0, 5, 1.5, "1", True])
    def test_invalid_week_number(self, payload, week):
        """Test week numbers outside 1..4 or non-integers fail the decode."""
        payload["monthlyAgenda"][0]["week"] = week

        with pytest.raises(AnalysisDecodeError, match="week"):
            AnalysisResult.from_dict(payload)

    def test_missing_weekday_is_empty(self):
        """Test weekdays absent from the schedule decode as empty."""
        schedule = WeekSchedule.from_dict({"Segunda": ["Rio Madeira"]})

        assert schedule.monday == ("Rio Madeira",)
        assert schedule.tuesday == ()
        assert schedule.friday == ()

    def test_unknown_weekday_rejected(self):
        """Test keys outside Monday..Friday fail the decode."""
        with pytest.raises(AnalysisDecodeError, match="Sábado"):
            WeekSchedule.from_dict({"Segunda": [], "Sábado": ["Rio Madeira"]})

    def test_days_in_order(self):
        """Test days() iterates Monday..Friday with wire labels."""
        schedule = WeekSchedule(wednesday=("Rio Tietê",))

        assert [label for label, _ in schedule.days()] == [
            "Segunda", "Terça", "Quarta", "Quinta", "Sexta"
        ]
        assert dict(schedule.days())["Quarta"] == ("Rio Tietê",)


class TestVisitDetail:
    """Test the richer visit contract."""

    def test_detailed_visits_decoded(self, payload):
        """Test structured visits inside the agenda and weekly route."""
        detailed = copy.deepcopy(payload)
        visit = {
            "siteName": "Rio Negro",
            "metroLine": "Linha 11-Coral",
            "busConnection": "Ônibus 395",
            "walkingMinutes": 12,
            "fullShift": True,
        }
        detailed["monthlyAgenda"][3]["schedule"]["Sexta"] = [visit]
        detailed["weeklyRoute"][4]["visits"] = [visit]

        result = AnalysisResult.from_dict(detailed)
        decoded = result.monthly_agenda[3].schedule.friday[0]

        assert decoded == VisitDetail(
            site_name="Rio Negro",
            metro_line="Linha 11-Coral",
            bus_connection="Ônibus 395",
            walking_minutes=12,
            full_shift=True,
        )
        assert result.weekly_route[4].visits[0] == decoded
        assert "Rio Negro" in list(result.scheduled_site_names())
        assert result.to_dict() == detailed

    def test_optional_fields_default(self):
        """Test only siteName is required."""
        visit = VisitDetail.from_dict({"siteName": "Rio Madeira"})

        assert visit.metro_line is None
        assert visit.walking_minutes is None
        assert visit.full_shift is False

    def test_integral_float_walking_minutes(self):
        """Test JSON numbers such as 12.0 decode as integers."""
        visit = VisitDetail.from_dict({"siteName": "Rio Negro", "walkingMinutes": 12.0})

        assert visit.walking_minutes == 12

    @pytest.mark.parametrize("minutes", [7.5, "7", True])
    def test_invalid_walking_minutes(self, minutes):
        """Test fractional or non-numeric walking times fail the decode."""
        with pytest.raises(AnalysisDecodeError, match="walkingMinutes"):
            VisitDetail.from_dict({"siteName": "Rio Negro", "walkingMinutes": minutes})

    def test_missing_site_name(self):
        """Test a visit object without siteName fails."""
        with pytest.raises(AnalysisDecodeError, match="siteName"):
            VisitDetail.from_dict({"metroLine": "Linha 1-Azul"})

    def test_invalid_visit_type(self, payload):
        """Test a number inside a visit list fails the decode."""
        payload["weeklyRoute"][0]["visits"] = [42]

        with pytest.raises(AnalysisDecodeError, match="weeklyRoute"):
            AnalysisResult.from_dict(payload)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
