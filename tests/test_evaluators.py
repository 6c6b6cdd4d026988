#!/usr/bin/env python3
"""
Unit tests for factor evaluators and age baseline
"""

import pytest
import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fertility_engine.baseline import evaluate_age_baseline, find_age_band, OUT_OF_RANGE
from fertility_engine.evaluators import (
    evaluate_bmi, evaluate_cycle, evaluate_pcos, evaluate_endometriosis, evaluate_myoma,
    evaluate_adenomyosis, evaluate_polyp, evaluate_hsg, evaluate_otb, evaluate_amh,
    evaluate_prolactin, evaluate_tsh, evaluate_homa, evaluate_infertility_duration,
    evaluate_pelvic_surgeries, evaluate_male_factor, evaluate_factors
)
from fertility_engine.schema import (ClinicalInput, FactorName, MyomaType, AdenomyosisType,
                                     PolypType, HsgResult)

class TestAgeBaseline:
    """Test age band lookup"""

    @pytest.mark.parametrize("age,expected", [
        (20, 27.5), (24, 27.5), (25, 22.5), (29, 22.5), (30, 17.5), (34, 17.5),
        (35, 12.5), (37, 12.5), (38, 7.5), (40, 7.5), (41, 4.0), (42, 4.0), (43, 1.5), (48, 1.5)
    ])
    def test_band_boundaries(self, age, expected):
        """Bands are contiguous with no gap or overlap"""
        baseline, _ = evaluate_age_baseline(age)
        assert baseline == expected

    def test_adjacent_ages_fall_in_different_bands(self):
        for lower, upper in [(24, 25), (29, 30), (34, 35), (37, 38), (40, 41), (42, 43)]:
            assert find_age_band(lower) != find_age_band(upper)

    def test_fractional_age_uses_next_band(self):
        assert evaluate_age_baseline(24.5)[0] == 22.5

    def test_out_of_range_age(self):
        """Out-of-range ages produce a zero baseline instead of an error"""
        assert evaluate_age_baseline(0) == (0.0, OUT_OF_RANGE)
        assert evaluate_age_baseline(60) == (0.0, OUT_OF_RANGE)

class TestSingleFactorEvaluators:
    """Test the per-domain evaluators"""

    def test_bmi(self):
        assert evaluate_bmi(17.0).factor == 0.8
        assert evaluate_bmi(17.0).diagnostic == "underweight"
        assert evaluate_bmi(18.5).factor == 1.0
        assert evaluate_bmi(24.9).factor == 1.0
        assert evaluate_bmi(25.0).factor == 0.85
        assert evaluate_bmi(25.0).diagnostic == "overweight/obese"

    def test_bmi_missing(self):
        result = evaluate_bmi(None)
        assert result.factor is None
        assert result.missing is not None

    def test_cycle(self):
        assert evaluate_cycle(21).factor == 1.0
        assert evaluate_cycle(35).factor == 1.0
        assert evaluate_cycle(20).factor == 0.7
        assert evaluate_cycle(36).diagnostic == "irregular"
        assert evaluate_cycle(None).factor is None
        assert evaluate_cycle(None).missing

    def test_pcos_absent_is_neutral(self):
        assert evaluate_pcos(False, 35, 60).factor == 1.0

    def test_pcos_multipliers_compose(self):
        assert evaluate_pcos(True, 22, 28).factor == 1.0
        assert evaluate_pcos(True, 26, 28).factor == pytest.approx(0.9)
        assert evaluate_pcos(True, 22, 40).factor == pytest.approx(0.85)
        assert evaluate_pcos(True, 26, 40).factor == pytest.approx(0.9 * 0.85)

    def test_pcos_severity(self):
        assert evaluate_pcos(True, 22, 28).diagnostic == "mild"
        assert evaluate_pcos(True, 26, 28).diagnostic == "moderate"
        assert evaluate_pcos(True, 31, 28).diagnostic == "severe"
        assert evaluate_pcos(True, 22, 50).diagnostic == "severe"
        assert evaluate_pcos(True, None, None).factor == 1.0

    def test_endometriosis(self):
        assert evaluate_endometriosis(0).factor == 1.0
        assert evaluate_endometriosis(1).factor == 0.85
        assert evaluate_endometriosis(2).factor == 0.85
        assert evaluate_endometriosis(3).factor == 0.60
        assert evaluate_endometriosis(4).factor == 0.60

    def test_myoma(self):
        assert evaluate_myoma(MyomaType.SUBMUCOSAL).factor == 0.30
        assert evaluate_myoma(MyomaType.INTRAMURAL_LARGE).factor == 0.60
        assert evaluate_myoma(MyomaType.SUBSEROSAL).factor == 1.0
        assert evaluate_myoma(MyomaType.NONE).factor == 1.0

    def test_adenomyosis(self):
        assert evaluate_adenomyosis(AdenomyosisType.FOCAL).factor == 0.8
        assert evaluate_adenomyosis(AdenomyosisType.DIFFUSE).factor == 0.5
        assert evaluate_adenomyosis(AdenomyosisType.NONE).factor == 1.0

    def test_polyp(self):
        assert evaluate_polyp(PolypType.SMALL).factor == 0.85
        assert evaluate_polyp(PolypType.LARGE).factor == 0.70
        assert evaluate_polyp(PolypType.OSTIUM).factor == 0.50
        assert evaluate_polyp(PolypType.NONE).factor == 1.0

    def test_hsg(self):
        assert evaluate_hsg(HsgResult.NORMAL).factor == 1.0
        assert evaluate_hsg(HsgResult.UNILATERAL).factor == 0.7
        assert evaluate_hsg(HsgResult.BILATERAL).factor == 0.0
        assert evaluate_hsg(HsgResult.MALFORMATION).factor == 0.3

        unknown = evaluate_hsg(HsgResult.UNKNOWN)
        assert unknown.factor is None
        assert unknown.missing

    def test_otb(self):
        assert evaluate_otb(True).factor == 0.0
        assert evaluate_otb(False).factor == 1.0

    @pytest.mark.parametrize("amh,expected", [
        (5.0, 0.9), (4.0, 1.0), (2.0, 1.0), (1.99, 0.85), (1.0, 0.85),
        (0.99, 0.6), (0.5, 0.6), (0.49, 0.3), (0.0, 0.3)
    ])
    def test_amh(self, amh, expected):
        assert evaluate_amh(amh).factor == expected

    def test_amh_very_low_diagnostic(self):
        assert evaluate_amh(0.4).diagnostic == "very low ovarian reserve"
        assert evaluate_amh(None).missing

    def test_prolactin_and_tsh(self):
        assert evaluate_prolactin(25).factor == 0.7
        assert evaluate_prolactin(25).diagnostic == "hyperprolactinemia"
        assert evaluate_prolactin(24.9).factor == 1.0
        assert evaluate_prolactin(None).missing

        assert evaluate_tsh(2.6).factor == 0.8
        assert evaluate_tsh(2.6).diagnostic == "suboptimal for fertility"
        assert evaluate_tsh(2.5).factor == 1.0
        assert evaluate_tsh(None).missing

    def test_homa(self):
        assert evaluate_homa(2.4).factor == 1.0
        assert evaluate_homa(2.5).factor == 0.95
        assert evaluate_homa(3.99).factor == 0.95
        assert evaluate_homa(4.0).factor == 0.90

        absent = evaluate_homa(None)
        assert absent.factor is None
        assert absent.missing is None

    def test_infertility_duration(self):
        assert evaluate_infertility_duration(None).factor is None
        assert evaluate_infertility_duration(2).factor == 1.0
        assert evaluate_infertility_duration(3).factor == 0.93
        assert evaluate_infertility_duration(4).factor == 0.93
        assert evaluate_infertility_duration(5).factor == 0.85

    def test_pelvic_surgeries(self):
        assert evaluate_pelvic_surgeries(0).factor == 1.0
        assert evaluate_pelvic_surgeries(1).factor == 0.95
        assert evaluate_pelvic_surgeries(2).factor == 0.88
        assert evaluate_pelvic_surgeries(4).factor == 0.88

class TestMaleFactor:
    """Test semen-analysis fold"""

    def test_single_abnormality(self):
        """Only the concentration check fires"""
        result = evaluate_male_factor(3, 50, 6)
        assert result.factor == 0.25
        assert result.diagnostic == "severe oligozoospermia"

    def test_worst_score_and_all_labels(self):
        result = evaluate_male_factor(10, 25, 3)
        assert result.factor == 0.5
        assert result.diagnostic == "mild-moderate oligozoospermia, mild asthenozoospermia, teratozoospermia"

    def test_severe_motility_is_worst(self):
        result = evaluate_male_factor(10, 10, None)
        assert result.factor == 0.4
        assert result.diagnostic == "mild-moderate oligozoospermia, severe asthenozoospermia"

    def test_all_absent(self):
        result = evaluate_male_factor(None, None, None)
        assert result.factor == 1.0
        assert result.missing

    def test_partial_analysis_reports_absent_parameters(self):
        result = evaluate_male_factor(40, None, None)
        assert result.factor == 1.0
        assert result.diagnostic == "normal parameters"
        assert result.missing == "Semen analysis: progressive motility, normal morphology"

    def test_partial_abnormal_analysis(self):
        result = evaluate_male_factor(None, 10, 6)
        assert result.factor == 0.4
        assert result.missing == "Semen analysis: sperm concentration"

    def test_partial_analysis_in_missing_data(self):
        evaluated = evaluate_factors(ClinicalInput(age=30, sperm_concentration=40))
        assert evaluated.diagnostics.missing_data[-1] == "Semen analysis: progressive motility, normal morphology"
        assert "Complete semen analysis" not in evaluated.diagnostics.missing_data

    def test_all_normal(self):
        result = evaluate_male_factor(40, 45, 8)
        assert result.factor == 1.0
        assert result.diagnostic == "normal parameters"
        assert result.missing is None

class TestEvaluateFactors:
    """Test the accumulator pass"""

    def test_age_only_record(self):
        evaluated = evaluate_factors(ClinicalInput(age=32))
        assert evaluated.baseline == 17.5
        assert FactorName.BMI not in evaluated.factors
        assert FactorName.HSG not in evaluated.factors
        assert evaluated.factors.get(FactorName.BMI) == 1.0
        assert evaluated.factors.suboptimal() == []
        assert len(evaluated.diagnostics.missing_data) == 7

    def test_missing_data_order(self):
        evaluated = evaluate_factors(ClinicalInput(age=32, bmi=22))
        assert evaluated.diagnostics.missing_data == [
            "Menstrual cycle length",
            "Hysterosalpingography (HSG) result",
            "Anti-Mullerian hormone (AMH)",
            "Prolactin level",
            "TSH level",
            "Complete semen analysis",
        ]

    def test_homa_derived_from_fasting_values(self):
        evaluated = evaluate_factors(ClinicalInput(age=30, fasting_insulin=15, fasting_glucose=100))
        # 15 * 100 / 405 = 3.70
        assert evaluated.factors.get(FactorName.HOMA) == 0.95

    def test_comments_recorded(self):
        evaluated = evaluate_factors(ClinicalInput(age=30, bmi=17, amh=0.4, hsg_result="unilateral"))
        assert evaluated.diagnostics.comment(FactorName.BMI) == "underweight"
        assert evaluated.diagnostics.comment(FactorName.AMH) == "very low ovarian reserve"
        assert evaluated.diagnostics.comment(FactorName.HSG) == "unilateral tubal obstruction"
        assert evaluated.factors.suboptimal() == [FactorName.BMI, FactorName.HSG, FactorName.AMH]
