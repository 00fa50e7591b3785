from decimal import Decimal

import pytest

from naijapaye.backend.app.models import AdditionalDeductions, SalaryComponents, SalaryInputError
from naijapaye.backend.app.services.calculators import compute_deductions, compute_rent_relief
from naijapaye.backend.config.schema import Reliefs, StatutoryRates

RATES = StatutoryRates()


def _salary() -> SalaryComponents:
    return SalaryComponents(
        basic=100_000,
        housing=50_000,
        transport=25_000,
        entertainment=10_000,
        meal_subsidy=5_000,
        medical=5_000,
        benefits_in_kind=5_000,
    )


def test_pension_uses_basic_housing_and_transport_only() -> None:
    deductions = compute_deductions(_salary(), RATES)

    assert deductions.gross_emolument == Decimal("200000")
    assert deductions.pensionable_emoluments == Decimal("175000")
    assert deductions.employee_pension == Decimal("14000")
    assert deductions.employer_pension == Decimal("17500")


def test_nhf_is_levied_on_basic_salary() -> None:
    deductions = compute_deductions(_salary(), RATES)

    assert deductions.nhf == Decimal("2500")
    assert deductions.nhf_exempt is False


def test_nhf_exemption_zeroes_the_contribution() -> None:
    deductions = compute_deductions(
        _salary(), RATES, AdditionalDeductions(exempt_from_nhf=True)
    )

    assert deductions.nhf == 0
    assert deductions.nhf_exempt is True


def test_itf_requires_five_employees() -> None:
    small = compute_deductions(_salary(), RATES, AdditionalDeductions(employee_count=4))
    large = compute_deductions(_salary(), RATES, AdditionalDeductions(employee_count=5))

    assert small.itf == 0
    assert small.itf_applicable is False
    assert small.total_employer_contributions == Decimal("19500")

    assert large.itf == Decimal("2000")
    assert large.itf_applicable is True
    assert large.total_employer_contributions == Decimal("21500")


def test_flat_deductions_are_passed_through() -> None:
    extra = AdditionalDeductions(
        nhis=1_000, life_assurance=500, gratuities=250, additional_pension=1_000
    )

    deductions = compute_deductions(_salary(), RATES, extra)

    assert deductions.nhis == Decimal("1000")
    assert deductions.life_assurance == Decimal("500")
    assert deductions.gratuities == Decimal("250")
    assert deductions.total_pension == Decimal("15000")
    assert deductions.total_employee_deductions == Decimal("19250")


def test_employee_total_matches_components() -> None:
    deductions = compute_deductions(_salary(), RATES)

    assert deductions.total_employee_deductions == (
        deductions.employee_pension + deductions.nhf
    )


def test_invalid_components_are_reported_together() -> None:
    salary = SalaryComponents(basic=-1, housing=float("nan"), medical=200_000_000)

    with pytest.raises(SalaryInputError) as excinfo:
        compute_deductions(salary, RATES)

    assert set(excinfo.value.problems) == {"basic", "housing", "medical"}
    assert excinfo.value.problems["basic"] == "cannot be negative"
    assert "basic" in str(excinfo.value)


def test_component_at_cap_is_accepted() -> None:
    deductions = compute_deductions(SalaryComponents(basic=100_000_000), RATES)

    assert deductions.gross_emolument == Decimal("100000000")


def test_employee_count_must_be_positive() -> None:
    with pytest.raises(SalaryInputError) as excinfo:
        compute_deductions(_salary(), RATES, AdditionalDeductions(employee_count=0))

    assert "employee_count" in excinfo.value.problems


def test_boolean_amounts_are_rejected() -> None:
    with pytest.raises(SalaryInputError):
        SalaryComponents(basic=True)


@pytest.mark.parametrize(
    ("rent", "expected"),
    [
        (0, Decimal("0")),
        (1_000_000, Decimal("200000")),
        (2_500_000, Decimal("500000")),
        (3_000_000, Decimal("500000")),
    ],
)
def test_rent_relief_is_capped(rent: int, expected: Decimal) -> None:
    assert compute_rent_relief(rent, Reliefs()) == expected


def test_rent_relief_rejects_negative_rent() -> None:
    with pytest.raises(ValueError):
        compute_rent_relief(-1, Reliefs())


def test_rent_relief_follows_configured_rules() -> None:
    reliefs = Reliefs(rent_relief="0.10", rent_relief_cap=50_000)

    assert compute_rent_relief(300_000, reliefs) == Decimal("30000")
    assert compute_rent_relief(900_000, reliefs) == Decimal("50000")
