"""Unit tests for job pricing and password rules."""

import pytest

from app.core.password_policy import validate_password
from app.core.pricing import add_money, calc_job_total, labor_total, line_subtotal, sub_money


def test_job_total_with_tax():
    # 2h at 85/h + 150 parts = 320, plus 8% tax
    assert calc_job_total(120, 85, 150, 8, 0) == 345.60


def test_discount_comes_off_after_tax():
    assert calc_job_total(120, 85, 150, 8, 30) == 315.60


def test_job_total_treats_missing_inputs_as_zero():
    assert calc_job_total(None, None, None, None, None) == 0.0
    assert calc_job_total(90, 100, None, None, None) == 150.0


def test_labor_total_rounds_to_cents():
    assert labor_total(20, 50) == 16.67


def test_line_subtotal():
    assert line_subtotal(12.5, 4) == 50.0
    assert line_subtotal(None, 3) == 0.0


def test_parts_total_add_then_remove_restores_exact_value():
    start = 10.10
    lines = [0.1, 0.2, 19.99, 7.33]
    total = start
    for line in lines:
        total = add_money(total, line)
    for line in reversed(lines):
        total = sub_money(total, line)
    assert total == start


def test_strong_password_passes():
    assert validate_password("Sup3r$ecret") == []


@pytest.mark.parametrize(
    "password, message",
    [
        ("Ab1!", "Password must be at least 8 characters long"),
        ("lowercase1!", "Password must contain at least one uppercase letter"),
        ("UPPERCASE1!", "Password must contain at least one lowercase letter"),
        ("NoDigits!!", "Password must contain at least one number"),
        ("NoSpecial123", "Password must contain at least one special character"),
        ("Aa1!" + "x" * 130, "Password must be at most 128 characters long"),
    ],
)
def test_password_rule_violations(password, message):
    assert message in validate_password(password)


def test_all_violations_reported_together():
    assert len(validate_password("abc")) == 4
