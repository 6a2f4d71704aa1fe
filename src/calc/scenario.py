"""Scenario files: input-parameters/<name>/spec.json.

A scenario is a camelCase JSON document with one optional section per
calculator ("tax", "mortgage", "retirement", "goal", "education", "fire").
The builders below turn a section into the calculator's input record;
missing keys fall back to the record defaults.
"""

import json
import os
from typing import List, Optional, Tuple

from model.AmortizationData import MortgageInputs
from model.EducationData import EducationInputs
from model.ProjectionData import BucketAmounts, FireInputs, InvestmentStrategy, RetirementInputs, TargetType
from model.TaxResult import DeductionMethod, FilingStatus, ItemizedDeductionInputs, TaxInputs

BASE_PATH = os.path.normpath(os.path.join(os.path.dirname(__file__), '..', '..'))


def scenarios_dir(base_path: str = BASE_PATH) -> str:
    return os.path.join(base_path, 'input-parameters')


def scenario_path(name: str, base_path: str = BASE_PATH) -> str:
    return os.path.join(scenarios_dir(base_path), name, 'spec.json')


def list_scenarios(base_path: str = BASE_PATH) -> List[str]:
    """Names of the scenario folders that contain a spec.json."""
    directory = scenarios_dir(base_path)
    if not os.path.exists(directory):
        return []
    return sorted(
        name for name in os.listdir(directory)
        if os.path.isfile(os.path.join(directory, name, 'spec.json'))
    )


def load_scenario(name: str, base_path: str = BASE_PATH) -> dict:
    path = scenario_path(name, base_path)
    if not os.path.exists(path):
        raise ValueError(f"Scenario '{name}' not found: {path}")
    with open(path, 'r') as f:
        return json.load(f)


def _buckets(section: Optional[dict], default: BucketAmounts) -> BucketAmounts:
    if section is None:
        return default
    return BucketAmounts(
        pre_tax=section.get('preTax', 0.0),
        tax_free=section.get('taxFree', 0.0),
        taxable=section.get('taxable', 0.0)
    )


def tax_inputs_from_spec(spec: dict) -> Tuple[str, TaxInputs, Optional[int]]:
    """(jurisdiction, inputs, tax year) for the scenario's "tax" section."""
    tax = spec.get('tax', {})
    itemized = tax.get('itemized', {})
    inputs = TaxInputs(
        wages=tax.get('wages', 0.0),
        other_income=tax.get('otherIncome', 0.0),
        long_term_gains=tax.get('longTermGains', 0.0),
        pretax_deductions=tax.get('pretaxDeductions', 0.0),
        filing_status=FilingStatus(tax.get('filingStatus', FilingStatus.SINGLE.value)),
        deduction_method=DeductionMethod(tax.get('deductionMethod', DeductionMethod.STANDARD.value)),
        itemized=ItemizedDeductionInputs(
            state_local_taxes=itemized.get('stateLocalTaxes', 0.0),
            mortgage_interest=itemized.get('mortgageInterest', 0.0),
            charitable=itemized.get('charitable', 0.0),
            medical=itemized.get('medical', 0.0),
            other=itemized.get('other', 0.0)
        )
    )
    jurisdiction = tax.get('jurisdiction', spec.get('jurisdiction', 'US'))
    return jurisdiction, inputs, tax.get('taxYear')


def mortgage_inputs_from_spec(spec: dict) -> MortgageInputs:
    mortgage = spec.get('mortgage', {})
    refinance = mortgage.get('refinance', {})
    defaults = MortgageInputs()
    return MortgageInputs(
        principal=mortgage.get('principal', defaults.principal),
        annual_rate=mortgage.get('annualRate', defaults.annual_rate),
        term_years=mortgage.get('termYears', defaults.term_years),
        months_paid=mortgage.get('monthsPaid', 0),
        extra_payment=mortgage.get('extraPayment', 0.0),
        current_rate_override=mortgage.get('currentRateOverride'),
        refinance_rate=refinance.get('rate'),
        closing_costs=refinance.get('closingCosts', 0.0),
        roll_in_costs=refinance.get('rollInCosts', False)
    )


def retirement_inputs_from_spec(spec: dict) -> RetirementInputs:
    retirement = spec.get('retirement', {})
    defaults = RetirementInputs()
    return RetirementInputs(
        current_age=retirement.get('currentAge', defaults.current_age),
        retirement_age=retirement.get('retirementAge', defaults.retirement_age),
        life_expectancy=retirement.get('lifeExpectancy', defaults.life_expectancy),
        balances=_buckets(retirement.get('balances'), defaults.balances),
        taxable_basis=retirement.get('balances', {}).get('taxableBasis'),
        monthly_contributions=_buckets(retirement.get('monthlyContributions'), defaults.monthly_contributions),
        strategy=InvestmentStrategy(retirement.get('strategy', defaults.strategy.value)),
        custom_return_rate=retirement.get('customReturnRate', defaults.custom_return_rate),
        inflation_rate=retirement.get('inflationRate', defaults.inflation_rate),
        withdrawal_rate=retirement.get('withdrawalRate', defaults.withdrawal_rate),
        retirement_tax_rate=retirement.get('retirementTaxRate', defaults.retirement_tax_rate),
        external_income_monthly=retirement.get('externalIncomeMonthly', defaults.external_income_monthly),
        target_type=TargetType(retirement.get('targetType', defaults.target_type.value)),
        target_value=retirement.get('targetValue', defaults.target_value)
    )


def goal_arguments_from_spec(spec: dict, return_rate: float) -> dict:
    """Keyword arguments for goal_solver.analyze_goal.

    Ages, balances and rates come from the "retirement" section; the "goal"
    section only supplies the desired income and optional overrides.
    """
    retirement = retirement_inputs_from_spec(spec)
    goal = spec.get('goal', {})
    retirement_age = goal.get('retirementAge', retirement.retirement_age)
    # A corpus target has no income to fall back on
    default_income = retirement.target_value / 12 if retirement.target_type == TargetType.INCOME else 0.0
    return {
        'desired_monthly_income': goal.get('desiredMonthlyIncome', default_income),
        'current_balance': retirement.balances.total,
        'monthly_contribution': retirement.monthly_contributions.total,
        'annual_return': goal.get('annualReturn', return_rate),
        'years': max(0, retirement_age - retirement.current_age),
        'inflation_rate': retirement.inflation_rate,
        'withdrawal_rate': retirement.withdrawal_rate,
        'external_income_monthly': goal.get('externalIncomeMonthly', retirement.external_income_monthly)
    }


def education_inputs_from_spec(spec: dict) -> EducationInputs:
    education = spec.get('education', {})
    defaults = EducationInputs()
    return EducationInputs(
        country=education.get('country', spec.get('jurisdiction', defaults.country)),
        child_age=education.get('childAge', defaults.child_age),
        college_start_age=education.get('collegeStartAge', defaults.college_start_age),
        current_savings=education.get('currentSavings', defaults.current_savings),
        monthly_contribution=education.get('monthlyContribution', defaults.monthly_contribution),
        annual_cost=education.get('annualCost'),
        education_inflation=education.get('educationInflation', defaults.education_inflation),
        investment_return=education.get('investmentReturn', defaults.investment_return),
        state_tax_rate=education.get('stateTaxRate')
    )


def fire_inputs_from_spec(spec: dict) -> FireInputs:
    fire = spec.get('fire', {})
    defaults = FireInputs()
    return FireInputs(
        current_age=fire.get('currentAge', defaults.current_age),
        net_worth=fire.get('netWorth', defaults.net_worth),
        annual_income=fire.get('annualIncome', defaults.annual_income),
        annual_spending=fire.get('annualSpending', defaults.annual_spending),
        growth_rate=fire.get('growthRate', defaults.growth_rate),
        withdrawal_rate=fire.get('withdrawalRate', defaults.withdrawal_rate),
        inflation_rate=fire.get('inflationRate', defaults.inflation_rate)
    )
