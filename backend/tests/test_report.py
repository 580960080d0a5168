import pytest

from maintenance_engine.schemas.maintenance import RiskLevelEnum, TaskStatusEnum
from maintenance_engine.services.maintenance.report_service import (
    build_report,
    calculate_overall_risk,
    generate_maintenance_report,
    summarize_tasks,
)
from maintenance_engine.services.maintenance.task_factory_service import create_maintenance_task

from tests.conftest import make_analysis, make_equipment, make_reading


class TestOverallRisk:

    def test_empty_is_low(self):
        assert calculate_overall_risk([]) == RiskLevelEnum.low

    @pytest.mark.parametrize("levels,expected", [
        (["critical", "critical", "high", "critical"], RiskLevelEnum.critical),
        (["high", "medium", "critical"], RiskLevelEnum.high),
        (["low", "medium"], RiskLevelEnum.medium),
        (["low", "low", "medium"], RiskLevelEnum.low),
    ])
    def test_average_buckets(self, levels, expected):
        analyses = [make_analysis(risk_level=level) for level in levels]
        assert calculate_overall_risk(analyses) == expected


class TestReport:

    def test_sections(self):
        crit = make_analysis("a", status="critical", risk_level="critical", days=2, confidence=0.9)
        soon = make_analysis("b", status="warning", risk_level="high", days=6, confidence=0.9)
        fine = make_analysis("c", status="normal", risk_level="low", days=60, confidence=0.9)
        report = build_report([crit, soon, fine])

        assert [a.equipment_id for a in report.critical_equipment] == ["a"]
        assert [a.equipment_id for a in report.upcoming_maintenance] == ["b"]
        assert report.recommendations == [
            "CRITICAL: 1 equipment items require immediate maintenance",
            "HIGH PRIORITY: 1 equipment items need maintenance within 7 days",
            "UPCOMING: 2 equipment items predicted to fail within 30 days",
        ]

    def test_report_from_predictor(self, predictor):
        predictor.analyze_sensor_data([make_reading("gen-1", value=150) for _ in range(10)])
        report = generate_maintenance_report(
            predictor,
            [make_equipment("gen-1", "generator"), make_equipment("pump-1", "pump")],
        )

        assert [a.equipment_id for a in report.critical_equipment] == ["gen-1"]
        assert report.overall_risk == RiskLevelEnum.high
        assert report.recommendations[-1].startswith("LOW CONFIDENCE")


class TestTaskSummary:

    def test_counts_and_efficiency(self):
        done = create_maintenance_task(make_analysis(risk_level="high")).model_copy(
            update={"status": TaskStatusEnum.completed, "actual_duration": 240}
        )
        open_task = create_maintenance_task(make_analysis(risk_level="low"))
        stats = summarize_tasks([done, open_task])

        assert stats.total_tasks == 2
        assert stats.by_status == {"completed": 1, "pending": 1}
        assert stats.by_priority == {"high": 1, "low": 1}
        assert stats.average_estimated_duration == 180
        assert stats.average_actual_duration == 240
        assert stats.average_efficiency == 75

    def test_no_measurements(self):
        stats = summarize_tasks([])
        assert stats.total_tasks == 0
        assert stats.average_efficiency == 100
        assert stats.average_actual_duration is None
