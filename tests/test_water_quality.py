"""Unit tests for threshold classification and alert generation."""

import pytest

from water_quality import (
    CRITICAL,
    NORMAL,
    WARNING,
    build_alert_message,
    classify_parameter,
    classify_reading,
    generate_alerts,
    worst_status,
)

PH = {"min": 6.5, "max": 8.5}
SITE_THRESHOLDS = {
    "pH": {"min": 6.5, "max": 8.5},
    "temperature": {"min": 10, "max": 30},
    "dissolved_oxygen": {"min": 5, "max": None},
    "conductivity": {"min": None, "max": 800},
    "turbidity": {"min": None, "max": 5},
}


class TestClassifyParameter:
    @pytest.mark.parametrize("value", [6.5, 7.0, 7.9, 8.5])
    def test_when_value_within_bounds_inclusive_then_normal(self, value):
        assert classify_parameter(value, PH) == NORMAL

    @pytest.mark.parametrize("value", [8.6, 9.0, 9.3, 9.35])
    def test_when_value_above_max_within_tolerance_then_warning(self, value):
        assert classify_parameter(value, PH) == WARNING

    @pytest.mark.parametrize("value", [9.36, 9.5, 14.0])
    def test_when_value_above_max_beyond_tolerance_then_critical(self, value):
        assert classify_parameter(value, PH) == CRITICAL

    @pytest.mark.parametrize("value", [6.0, 6.4, 5.9])
    def test_when_value_below_min_within_tolerance_then_warning(self, value):
        assert classify_parameter(value, PH) == WARNING

    @pytest.mark.parametrize("value", [5.8, 4.0, 0.0])
    def test_when_value_below_min_beyond_tolerance_then_critical(self, value):
        assert classify_parameter(value, PH) == CRITICAL

    def test_ph_scenario_from_field_report(self):
        assert classify_parameter(9.5, PH) == CRITICAL
        assert classify_parameter(8.6, PH) == WARNING

    def test_conductivity_max_only(self):
        threshold = {"max": 800}
        assert classify_parameter(750, threshold) == NORMAL
        assert classify_parameter(850, threshold) == WARNING
        assert classify_parameter(880, threshold) == WARNING
        assert classify_parameter(900, threshold) == CRITICAL

    def test_when_bounds_absent_then_side_is_never_checked(self):
        assert classify_parameter(-1000, {"max": 800}) == NORMAL
        assert classify_parameter(10_000, {"min": 5}) == NORMAL
        assert classify_parameter(42, {}) == NORMAL
        assert classify_parameter(42, {"min": None, "max": None}) == NORMAL

    def test_when_bound_is_zero_then_it_is_still_checked(self):
        threshold = {"min": 0, "max": 0}
        assert classify_parameter(0, threshold) == NORMAL
        assert classify_parameter(0.5, threshold) == CRITICAL
        assert classify_parameter(-0.5, threshold) == CRITICAL


class TestWorstStatus:
    def test_empty_is_normal(self):
        assert worst_status([]) == NORMAL

    def test_picks_most_severe(self):
        assert worst_status([NORMAL, WARNING, NORMAL]) == WARNING
        assert worst_status([WARNING, CRITICAL, NORMAL]) == CRITICAL
        assert worst_status([NORMAL, NORMAL]) == NORMAL


class TestClassifyReading:
    def test_when_all_parameters_in_range_then_overall_normal(self):
        reading = {"pH": 7.2, "temperature": 22, "dissolved_oxygen": 6.5, "conductivity": 500, "turbidity": 2}

        result = classify_reading(reading, SITE_THRESHOLDS)

        assert result["overall"] == NORMAL
        assert set(result["per_parameter"]) == set(SITE_THRESHOLDS)
        assert all(status == NORMAL for status in result["per_parameter"].values())

    def test_overall_is_worst_parameter_status(self):
        reading = {"pH": 8.6, "temperature": 22, "conductivity": 900}

        result = classify_reading(reading, SITE_THRESHOLDS)

        assert result["per_parameter"] == {"pH": WARNING, "temperature": NORMAL, "conductivity": CRITICAL}
        assert result["overall"] == CRITICAL

    def test_parameters_without_threshold_are_not_evaluated(self):
        result = classify_reading({"pH": 7.0, "lead": 999}, SITE_THRESHOLDS)

        assert "lead" not in result["per_parameter"]
        assert result["overall"] == NORMAL

    def test_missing_or_non_numeric_values_are_not_evaluated(self):
        reading = {"pH": None, "temperature": "hot", "turbidity": True, "conductivity": float("nan")}

        result = classify_reading(reading, SITE_THRESHOLDS)

        assert result == {"overall": NORMAL, "per_parameter": {}}

    def test_accepts_full_reading_record(self):
        reading = {"id": "r-1", "site_id": "site-1", "parameters": {"pH": 9.5}}

        result = classify_reading(reading, SITE_THRESHOLDS)

        assert result["per_parameter"] == {"pH": CRITICAL}

    def test_when_site_has_no_thresholds_then_normal(self):
        assert classify_reading({"pH": 2.0}, {}) == {"overall": NORMAL, "per_parameter": {}}


class TestBuildAlertMessage:
    def test_ph_message_shows_value_and_range(self):
        message = build_alert_message("pH", 9.5, PH)
        assert message == "pH level 9.5 is outside acceptable range (6.5-8.5)"
        assert "9.5" in message and "8.5" in message

    def test_temperature_message_has_unit_and_one_decimal(self):
        message = build_alert_message("temperature", 35, {"min": 10, "max": 30})
        assert message == "Temperature 35.0°C is outside acceptable range (10-30°C)"

    def test_temperature_with_only_min(self):
        message = build_alert_message("temperature", 4.04, {"min": 10, "max": None})
        assert message == "Temperature 4.0°C is outside acceptable range (min: 10°C)"

    def test_dissolved_oxygen_below_minimum(self):
        message = build_alert_message("dissolved_oxygen", 4.2, {"min": 5})
        assert message == "Dissolved oxygen 4.2 mg/L is below minimum (5 mg/L)"

    def test_conductivity_rounds_to_whole_number(self):
        assert build_alert_message("conductivity", 900, {"max": 800}) == \
            "Conductivity 900 μS/cm exceeds maximum (800 μS/cm)"
        assert build_alert_message("conductivity", 850.5, {"max": 800}).startswith("Conductivity 851 ")

    def test_turbidity_rounds_half_up(self):
        assert build_alert_message("turbidity", 7.25, {"max": 5}) == \
            "Turbidity 7.3 NTU exceeds maximum (5 NTU)"

    def test_single_bound_template_falls_back_to_range_for_other_side(self):
        message = build_alert_message("turbidity", 0.2, {"min": 1, "max": 5})
        assert message == "Turbidity 0.2 NTU is outside acceptable range (1-5 NTU)"

    def test_unknown_parameter_gets_generic_message(self):
        message = build_alert_message("lead", 12.345, {"max": 10})
        assert message == "Lead 12.35 is outside acceptable range (max: 10)"


class TestGenerateAlerts:
    def test_one_alert_per_non_normal_parameter(self):
        reading = {"id": "reading-1", "parameters": {"pH": 9.5, "temperature": 22, "conductivity": 850}}
        result = classify_reading(reading, SITE_THRESHOLDS)

        alerts = generate_alerts(reading, result["per_parameter"], SITE_THRESHOLDS)

        by_parameter = {alert["parameter"]: alert for alert in alerts}
        assert set(by_parameter) == {"pH", "conductivity"}
        assert by_parameter["pH"]["severity"] == "high"
        assert by_parameter["conductivity"]["severity"] == "medium"
        for alert in alerts:
            assert alert["reading_id"] == "reading-1"
            assert alert["acknowledged"] is False
            assert alert["acknowledged_by"] is None
            assert alert["acknowledged_at"] is None
            assert alert["id"]
        assert len({alert["id"] for alert in alerts}) == 2

    def test_no_alerts_when_overall_normal(self):
        reading = {"id": "reading-2", "parameters": {"pH": 7.0, "turbidity": 1.0}}
        result = classify_reading(reading, SITE_THRESHOLDS)

        assert result["overall"] == NORMAL
        assert generate_alerts(reading, result["per_parameter"], SITE_THRESHOLDS) == []

    def test_every_non_normal_parameter_gets_an_alert_even_without_template(self):
        thresholds = {"mercury": {"min": None, "max": 1}, "nitrates": {"min": None, "max": 50}}
        reading = {"id": "reading-3", "parameters": {"mercury": 3.0, "nitrates": 55}}
        result = classify_reading(reading, thresholds)

        alerts = generate_alerts(reading, result["per_parameter"], thresholds)

        assert sorted(alert["parameter"] for alert in alerts) == ["mercury", "nitrates"]
        assert all(alert["message"] for alert in alerts)


class TestMessageNumberFormatting:
    def test_huge_value_is_rounded_without_error(self):
        message = build_alert_message("conductivity", 1e30, {"max": 800})
        assert message == f"Conductivity 1{'0' * 30} μS/cm exceeds maximum (800 μS/cm)"

    def test_huge_value_keeps_template_decimals(self):
        message = build_alert_message("turbidity", 1e28, {"max": 5})
        assert message == f"Turbidity 1{'0' * 28}.0 NTU exceeds maximum (5 NTU)"

    def test_generate_alerts_survives_extreme_reading(self):
        thresholds = {"conductivity": {"min": None, "max": 800}}
        reading = {"id": "reading-4", "parameters": {"conductivity": 1e30}}
        result = classify_reading(reading, thresholds)

        alerts = generate_alerts(reading, result["per_parameter"], thresholds)

        assert result["overall"] == CRITICAL
        assert len(alerts) == 1 and alerts[0]["severity"] == "high"

    def test_large_bound_is_written_out(self):
        message = build_alert_message("conductivity", 1500000, {"max": 1234567})
        assert message == "Conductivity 1500000 μS/cm exceeds maximum (1234567 μS/cm)"

    def test_small_bound_is_written_out(self):
        message = build_alert_message("mercury", 0.5, {"min": None, "max": 0.00001})
        assert message == "Mercury 0.50 is outside acceptable range (max: 0.00001)"

    def test_small_range_bounds(self):
        message = build_alert_message("cadmium", 0.01, {"min": 0.00002, "max": 0.005})
        assert message == "Cadmium 0.01 is outside acceptable range (0.00002-0.005)"

    def test_decimal_halves_round_up(self):
        message = build_alert_message("temperature", 30.45, {"min": 10, "max": 30})
        assert message == "Temperature 30.5°C is outside acceptable range (10-30°C)"
