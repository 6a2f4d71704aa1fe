import math
import os
import sys
from dataclasses import replace

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.fire_calculator import MAX_AGE, fire_number, project_fire
from model.ProjectionData import FireInputs


def test_fire_number():
    assert fire_number(40000, 4) == pytest.approx(1000000)
    assert math.isinf(fire_number(40000, 0))
    assert math.isinf(fire_number(40000, -1))


class TestProjectFire:
    def setup_method(self):
        self.inputs = FireInputs()
        self.result = project_fire(self.inputs)

    def test_savings(self):
        assert self.result.annual_savings == 30000
        assert self.result.savings_rate == pytest.approx(0.375)
        assert self.result.fire_number == pytest.approx(1250000)

    def test_fire_age_is_first_year_over_target(self):
        ages = [point.age for point in self.result.points]
        index = ages.index(self.result.fire_age)
        assert self.result.points[index].nominal_balance >= self.result.fire_number
        assert self.result.points[index - 1].nominal_balance < self.result.fire_number
        assert self.result.years_to_fire == self.result.fire_age - self.inputs.current_age

    def test_projection_runs_to_max_age(self):
        assert self.result.points[-1].age == MAX_AGE

    def test_already_independent(self):
        result = project_fire(replace(self.inputs, net_worth=2000000))
        assert result.fire_age == self.inputs.current_age
        assert result.years_to_fire == 0

    def test_spending_above_income(self):
        result = project_fire(replace(self.inputs, annual_spending=90000, growth_rate=0))
        assert result.annual_savings == 0
        assert result.savings_rate == 0
        assert result.fire_age is None
        assert result.years_to_fire is None

    def test_zero_withdrawal_rate_is_unreachable(self):
        result = project_fire(replace(self.inputs, withdrawal_rate=0))
        assert math.isinf(result.fire_number)
        assert result.fire_age is None

    def test_zero_income(self):
        result = project_fire(replace(self.inputs, annual_income=0))
        assert result.savings_rate == 0
