"""Personal Finance Engine Tools for MCP Server.

This module provides the tool implementations that wrap the engine's
calculators and expose their results through MCP. Every tool returns a
JSON-ready dict; infinite sentinels (e.g. a refinance that never breaks
even) become null.
"""

import os
import sys
import math
import logging
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from calc import scenario
from calc.amortization_calculator import build_schedule
from calc.education_calculator import project_education
from calc.fire_calculator import project_fire
from calc.goal_solver import analyze_goal, future_value, required_contribution, required_return
from calc.refinance_calculator import analyze_mortgage, analyze_refinance, standard_refinance_options
from calc.retirement_simulator import nominal_return_rate, run_retirement_simulation, simulate
from model.AmortizationData import RefinanceOption
from model.EducationData import EducationInputs
from model.ProjectionData import BucketAmounts, FireInputs, InvestmentStrategy, RetirementInputs, TargetType, WithdrawalPhase
from model.TaxResult import DeductionMethod, FilingStatus, ItemizedDeductionInputs, TaxInputs
from tax.TaxRegime import compute_tax

logger = logging.getLogger(__name__)

SCENARIO_MODES = ('Tax', 'Amortization', 'Refinance', 'Retirement', 'Goal', 'Education', 'Fire')


def to_payload(value: Any) -> Any:
    """Convert engine records to plain JSON values (non-finite floats become None)."""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _buckets(values: Optional[dict], default: BucketAmounts) -> BucketAmounts:
    if values is None:
        return default
    return BucketAmounts(
        pre_tax=values.get('pre_tax', 0.0),
        tax_free=values.get('tax_free', 0.0),
        taxable=values.get('taxable', 0.0)
    )


class EngineTools:
    """Stateless tools: each call computes one result from its arguments."""

    def compute_tax(self, arguments: Dict[str, Any]) -> dict:
        itemized = arguments.get('itemized', {})
        inputs = TaxInputs(
            wages=arguments.get('wages', 0.0),
            other_income=arguments.get('other_income', 0.0),
            long_term_gains=arguments.get('long_term_gains', 0.0),
            pretax_deductions=arguments.get('pretax_deductions', 0.0),
            filing_status=FilingStatus(arguments.get('filing_status', FilingStatus.SINGLE.value)),
            deduction_method=DeductionMethod(arguments.get('deduction_method', DeductionMethod.STANDARD.value)),
            itemized=ItemizedDeductionInputs(**itemized)
        )
        result = compute_tax(arguments.get('jurisdiction', 'US'), inputs, arguments.get('tax_year'))
        return to_payload(result)

    def build_amortization_schedule(self, arguments: Dict[str, Any]) -> dict:
        result = build_schedule(
            arguments['principal'],
            arguments['annual_rate'],
            arguments['term_years'],
            extra_payment=arguments.get('extra_payment', 0.0),
            extra_payment_start_period=arguments.get('extra_payment_start_period', 0)
        )
        payload = to_payload(result)
        if not arguments.get('include_schedule', True):
            payload.pop('schedule')
        return payload

    def analyze_refinance(self, arguments: Dict[str, Any]) -> dict:
        """Compare an existing loan against explicit candidates or the standard 30/20/15 year offers."""
        if 'principal' in arguments:
            analysis = analyze_mortgage(scenario.mortgage_inputs_from_spec({'mortgage': {
                'principal': arguments['principal'],
                'annualRate': arguments['annual_rate'],
                'termYears': arguments['term_years'],
                'monthsPaid': arguments.get('months_paid', 0),
                'extraPayment': arguments.get('extra_payment', 0.0),
                'currentRateOverride': arguments.get('current_rate_override'),
                'refinance': {
                    'rate': arguments.get('refinance_rate'),
                    'closingCosts': arguments.get('closing_costs', 0.0),
                    'rollInCosts': arguments.get('roll_in_costs', False)
                }
            }}))
            payload = to_payload(analysis)
            # Schedules are available from build_amortization_schedule
            payload['baseline'].pop('schedule')
            payload['accelerated'].pop('schedule')
            return payload

        if 'candidates' in arguments:
            candidates = [RefinanceOption(**candidate) for candidate in arguments['candidates']]
        else:
            candidates = standard_refinance_options(
                arguments['refinance_rate'],
                arguments.get('closing_costs', 0.0),
                arguments.get('roll_in_costs', False)
            )
        scenarios = analyze_refinance(
            arguments['current_balance'],
            arguments['current_payment'],
            arguments['current_remaining_cost'],
            candidates
        )
        return {"scenarios": to_payload(scenarios)}

    def simulate_retirement(self, arguments: Dict[str, Any]) -> dict:
        defaults = RetirementInputs()
        inputs = RetirementInputs(
            current_age=arguments.get('current_age', defaults.current_age),
            retirement_age=arguments.get('retirement_age', defaults.retirement_age),
            life_expectancy=arguments.get('life_expectancy', defaults.life_expectancy),
            balances=_buckets(arguments.get('balances'), defaults.balances),
            taxable_basis=arguments.get('taxable_basis'),
            monthly_contributions=_buckets(arguments.get('monthly_contributions'), defaults.monthly_contributions),
            strategy=InvestmentStrategy(arguments.get('strategy', defaults.strategy.value)),
            custom_return_rate=arguments.get('custom_return_rate', defaults.custom_return_rate),
            inflation_rate=arguments.get('inflation_rate', defaults.inflation_rate),
            withdrawal_rate=arguments.get('withdrawal_rate', defaults.withdrawal_rate),
            retirement_tax_rate=arguments.get('retirement_tax_rate', defaults.retirement_tax_rate),
            external_income_monthly=arguments.get('external_income_monthly', defaults.external_income_monthly),
            target_type=TargetType(arguments.get('target_type', defaults.target_type.value)),
            target_value=arguments.get('target_value', defaults.target_value)
        )
        return to_payload(run_retirement_simulation(inputs))

    def project_balance(self, arguments: Dict[str, Any]) -> dict:
        """Single-balance projection, with an optional drawdown after retirement_age."""
        phase = None
        if arguments.get('retirement_age') is not None:
            phase = WithdrawalPhase(
                retirement_age=arguments['retirement_age'],
                annual_withdrawal_real=arguments.get('annual_withdrawal_real', 0.0),
                withdrawal_rate=arguments.get('withdrawal_rate', 4.0)
            )
        contributions = arguments.get('annual_contributions')
        if contributions is None:
            contributions = arguments.get('monthly_contribution', 0.0) * 12
        outcome = simulate(
            arguments.get('current_balance', 0.0),
            contributions,
            arguments.get('growth_rate', 0.0),
            arguments.get('inflation_rate', 0.0),
            arguments['horizon_years'],
            withdrawal_phase=phase,
            start_age=arguments.get('start_age', 0)
        )
        payload = to_payload(outcome)
        payload.pop('states')
        return payload

    def solve_goal(self, arguments: Dict[str, Any]) -> dict:
        """Either a retirement income goal (desired_monthly_income) or a plain nominal target."""
        years = arguments['years']
        if 'desired_monthly_income' in arguments:
            return to_payload(analyze_goal(
                arguments['desired_monthly_income'],
                arguments.get('current_balance', 0.0),
                arguments.get('monthly_contribution', 0.0),
                arguments.get('annual_rate', 7.0),
                years,
                inflation_rate=arguments.get('inflation_rate', 3.0),
                withdrawal_rate=arguments.get('withdrawal_rate', 4.0),
                external_income_monthly=arguments.get('external_income_monthly', 0.0)
            ))

        target = arguments['target_nominal']
        current_balance = arguments.get('current_balance', 0.0)
        monthly = arguments.get('monthly_contribution', 0.0)
        annual_rate = arguments.get('annual_rate', 7.0)
        return {
            "target_nominal": target,
            "projected_nominal": future_value(current_balance, monthly, annual_rate, years),
            "required_monthly_contribution": required_contribution(target, current_balance, annual_rate, years),
            "required_return": required_return(target, current_balance, monthly, years)
        }

    def project_education(self, arguments: Dict[str, Any]) -> dict:
        projection = project_education(EducationInputs(**arguments))
        payload = to_payload(projection)
        payload['is_shortfall'] = projection.is_shortfall
        return payload

    def project_fire(self, arguments: Dict[str, Any]) -> dict:
        return to_payload(project_fire(FireInputs(**arguments)))


class ScenarioTools:
    """Runs the calculators against the scenarios in input-parameters.

    Scenarios are re-read on every call so edits to spec.json files are
    picked up without restarting the server.
    """

    def __init__(self, base_path: str, default_scenario: Optional[str] = None):
        """
        base_path: repository root containing input-parameters/
        default_scenario: scenario used when a call does not name one
        """
        self.base_path = base_path
        self.default_scenario = default_scenario

    def list_scenarios(self) -> dict:
        names = scenario.list_scenarios(self.base_path)
        default = self.default_scenario
        if default is None and names:
            default = names[0]
        return {
            "available_scenarios": names,
            "default_scenario": default
        }

    def _resolve(self, name: Optional[str]) -> str:
        name = name or self.list_scenarios()["default_scenario"]
        if name is None:
            raise ValueError("No scenarios found in input-parameters")
        return name

    def run_scenario(self, mode: str, name: Optional[str] = None) -> dict:
        if mode not in SCENARIO_MODES:
            raise ValueError(f"Unknown mode '{mode}'. Available modes: {list(SCENARIO_MODES)}")
        name = self._resolve(name)
        spec = scenario.load_scenario(name, self.base_path)
        logger.info("Running %s for scenario %s", mode, name)

        if mode == 'Tax':
            jurisdiction, inputs, tax_year = scenario.tax_inputs_from_spec(spec)
            result = to_payload(compute_tax(jurisdiction, inputs, tax_year))
        elif mode in ('Amortization', 'Refinance'):
            analysis = to_payload(analyze_mortgage(scenario.mortgage_inputs_from_spec(spec)))
            if mode == 'Amortization':
                result = analysis['accelerated']
            else:
                analysis['baseline'].pop('schedule')
                analysis['accelerated'].pop('schedule')
                result = analysis
        elif mode == 'Retirement':
            result = to_payload(run_retirement_simulation(scenario.retirement_inputs_from_spec(spec)))
        elif mode == 'Goal':
            retirement = scenario.retirement_inputs_from_spec(spec)
            return_rate = nominal_return_rate(retirement.strategy, retirement.custom_return_rate)
            result = to_payload(analyze_goal(**scenario.goal_arguments_from_spec(spec, return_rate)))
        elif mode == 'Education':
            result = to_payload(project_education(scenario.education_inputs_from_spec(spec)))
        else:
            result = to_payload(project_fire(scenario.fire_inputs_from_spec(spec)))

        return {"scenario": name, "mode": mode, "result": result}
