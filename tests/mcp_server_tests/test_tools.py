"""Tests for the MCP tool implementations."""

import json
import os
import sys

import pytest

# Add src and mcp-server to path for imports
MCP_SERVER_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../mcp-server'))
SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../src'))

if MCP_SERVER_PATH not in sys.path:
    sys.path.insert(0, MCP_SERVER_PATH)
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

import importlib.util
tools_spec = importlib.util.spec_from_file_location("tools", os.path.join(MCP_SERVER_PATH, "tools.py"))
tools_module = importlib.util.module_from_spec(tools_spec)
tools_spec.loader.exec_module(tools_module)
EngineTools = tools_module.EngineTools
ScenarioTools = tools_module.ScenarioTools
to_payload = tools_module.to_payload

# Repository root, which holds input-parameters/
BASE_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '../..'))


@pytest.fixture
def tools():
    return EngineTools()


class TestToPayload:
    def test_infinite_values_become_none(self):
        assert to_payload({"a": float('inf'), "b": [1.5, float('nan')]}) == {"a": None, "b": [1.5, None]}

    def test_payload_is_json_serializable(self, tools):
        payload = tools.analyze_refinance({
            "current_balance": 200000, "current_payment": 1000, "current_remaining_cost": 250000,
            "refinance_rate": 7.5
        })
        json.dumps(payload, allow_nan=False)


class TestEngineTools:
    def test_compute_tax(self, tools):
        result = tools.compute_tax({"jurisdiction": "US", "wages": 95000, "long_term_gains": 4000,
                                    "pretax_deductions": 5000})
        assert result["jurisdiction"] == "US"
        assert result["taxable_income"] == pytest.approx(75000)
        assert result["total_tax"] == pytest.approx(19281.5)
        assert isinstance(result["brackets_breakdown"], list)
        assert result["brackets_breakdown"][-1]["upper_bound"] == pytest.approx(103350)

    def test_compute_tax_itemized(self, tools):
        result = tools.compute_tax({
            "jurisdiction": "US", "wages": 95000, "deduction_method": "itemized",
            "itemized": {"mortgage_interest": 18000}
        })
        assert result["deduction_used"] == pytest.approx(18000)
        assert result["recommended_deduction_method"] == "itemized"

    def test_compute_tax_unknown_jurisdiction(self, tools):
        with pytest.raises(ValueError):
            tools.compute_tax({"jurisdiction": "DE", "wages": 1000})

    def test_amortization_schedule(self, tools):
        result = tools.build_amortization_schedule({"principal": 300000, "annual_rate": 6.5, "term_years": 30})
        assert result["payoff_period"] == 360
        assert len(result["schedule"]) == 360

    def test_amortization_without_schedule(self, tools):
        result = tools.build_amortization_schedule({"principal": 300000, "annual_rate": 6.5, "term_years": 30,
                                                     "extra_payment": 200, "include_schedule": False})
        assert "schedule" not in result
        assert result["payoff_period"] < 360

    def test_refinance_from_original_loan(self, tools):
        result = tools.analyze_refinance({
            "principal": 300000, "annual_rate": 6.5, "term_years": 30, "months_paid": 24,
            "refinance_rate": 5.5, "closing_costs": 5000
        })
        assert result["current"]["remaining_periods"] == 336
        assert len(result["refinance"]) == 3
        assert "schedule" not in result["baseline"]

    def test_refinance_with_candidates(self, tools):
        result = tools.analyze_refinance({
            "current_balance": 200000, "current_payment": 1500, "current_remaining_cost": 400000,
            "candidates": [{"term_years": 15, "rate": 5.0, "closing_costs": 3000}]
        })
        scenario = result["scenarios"][0]
        assert scenario["option"]["term_years"] == 15
        assert scenario["break_even_months"] is None
        assert scenario["is_viable"]

    def test_refinance_never_breaking_even_is_null(self, tools):
        result = tools.analyze_refinance({
            "current_balance": 200000, "current_payment": 1000, "current_remaining_cost": 250000,
            "refinance_rate": 7.5
        })
        assert all(s["break_even_months"] is None for s in result["scenarios"])

    def test_simulate_retirement(self, tools):
        result = tools.simulate_retirement({
            "current_age": 40, "retirement_age": 65,
            "balances": {"pre_tax": 100000, "tax_free": 20000},
            "monthly_contributions": {"pre_tax": 1500},
            "strategy": "Aggressive"
        })
        assert result["is_valid"]
        assert result["nominal_return_rate"] == 9.0
        assert result["projections"][0]["nominal_balance"] == 120000

    def test_simulate_retirement_invalid(self, tools):
        result = tools.simulate_retirement({"current_age": 70, "retirement_age": 65})
        assert result["is_valid"] is False
        assert result["validation_error"]

    def test_project_balance(self, tools):
        result = tools.project_balance({"monthly_contribution": 1000, "growth_rate": 7, "horizon_years": 30})
        assert len(result["points"]) == 31
        assert result["points"][-1]["nominal_balance"] > 360000
        assert "states" not in result

    def test_project_balance_with_drawdown(self, tools):
        result = tools.project_balance({
            "current_balance": 100000, "horizon_years": 10, "start_age": 60,
            "retirement_age": 60, "annual_withdrawal_real": 30000
        })
        assert result["solvency_age"] == 64

    def test_solve_goal_nominal_target(self, tools):
        result = tools.solve_goal({"target_nominal": 1000000, "current_balance": 50000,
                                   "annual_rate": 7, "years": 30})
        assert result["required_monthly_contribution"] > 0
        assert result["required_return"] > 7

    def test_solve_goal_income_target(self, tools):
        result = tools.solve_goal({"desired_monthly_income": 5000, "years": 25, "annual_rate": 7})
        assert result["target_real"] == pytest.approx(1500000)
        assert not result["is_on_track"]

    def test_project_education(self, tools):
        result = tools.project_education({"country": "CA", "child_age": 5})
        assert result["account_name"] == "RESP"
        assert result["annual_contribution_limit"] is None
        assert "is_shortfall" in result

    def test_project_fire(self, tools):
        result = tools.project_fire({"annual_income": 100000, "annual_spending": 40000})
        assert result["fire_number"] == pytest.approx(1000000)
        assert result["fire_age"] is not None

    def test_project_fire_unreachable(self, tools):
        result = tools.project_fire({"withdrawal_rate": 0})
        assert result["fire_number"] is None


class TestScenarioTools:
    def test_list_scenarios(self):
        result = ScenarioTools(BASE_PATH).list_scenarios()
        assert "example" in result["available_scenarios"]
        assert result["default_scenario"] == result["available_scenarios"][0]

    def test_configured_default(self):
        result = ScenarioTools(BASE_PATH, "uk-example").list_scenarios()
        assert result["default_scenario"] == "uk-example"

    @pytest.mark.parametrize("mode", ['Tax', 'Amortization', 'Refinance', 'Retirement', 'Goal', 'Education', 'Fire'])
    def test_run_every_mode(self, mode):
        result = ScenarioTools(BASE_PATH).run_scenario(mode, "example")
        assert result["scenario"] == "example"
        assert result["mode"] == mode
        json.dumps(result["result"], allow_nan=False)

    def test_uses_default_scenario(self):
        result = ScenarioTools(BASE_PATH, "uk-example").run_scenario("Tax")
        assert result["scenario"] == "uk-example"
        assert result["result"]["jurisdiction"] == "UK"

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown mode"):
            ScenarioTools(BASE_PATH).run_scenario("Paycheck", "example")

    def test_unknown_scenario(self):
        with pytest.raises(ValueError, match="not found"):
            ScenarioTools(BASE_PATH).run_scenario("Tax", "missing")

    def test_no_scenarios(self, tmp_path):
        with pytest.raises(ValueError, match="No scenarios"):
            ScenarioTools(str(tmp_path)).run_scenario("Tax")
