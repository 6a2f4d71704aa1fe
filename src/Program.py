import sys
import os
import argparse
import logging
from calc.scenario import list_scenarios, load_scenario, scenario_path, tax_inputs_from_spec, \
    mortgage_inputs_from_spec, retirement_inputs_from_spec, goal_arguments_from_spec, \
    education_inputs_from_spec, fire_inputs_from_spec
from calc.refinance_calculator import analyze_mortgage
from calc.retirement_simulator import nominal_return_rate, run_retirement_simulation
from calc.goal_solver import analyze_goal
from calc.education_calculator import project_education
from calc.fire_calculator import project_fire
from tax.TaxRegime import compute_tax
from render.renderers import TaxRenderer, AmortizationRenderer, RefinanceRenderer, RetirementRenderer, \
    GoalRenderer, EducationRenderer, FireRenderer, RENDERER_REGISTRY

ALL_MODES = list(RENDERER_REGISTRY.keys())


def run_mode(mode: str, spec: dict) -> None:
    """Compute and render one mode for a loaded scenario."""
    if mode == 'Tax':
        jurisdiction, inputs, tax_year = tax_inputs_from_spec(spec)
        TaxRenderer().render(compute_tax(jurisdiction, inputs, tax_year))
    elif mode == 'Amortization':
        analysis = analyze_mortgage(mortgage_inputs_from_spec(spec))
        AmortizationRenderer().render(analysis.accelerated)
    elif mode == 'Refinance':
        RefinanceRenderer().render(analyze_mortgage(mortgage_inputs_from_spec(spec)))
    elif mode == 'Retirement':
        RetirementRenderer().render(run_retirement_simulation(retirement_inputs_from_spec(spec)))
    elif mode == 'Goal':
        retirement = retirement_inputs_from_spec(spec)
        return_rate = nominal_return_rate(retirement.strategy, retirement.custom_return_rate)
        GoalRenderer().render(analyze_goal(**goal_arguments_from_spec(spec, return_rate)))
    elif mode == 'Education':
        EducationRenderer().render(project_education(education_inputs_from_spec(spec)))
    elif mode == 'Fire':
        FireRenderer().render(project_fire(fire_inputs_from_spec(spec)))
    else:
        raise ValueError(f"Unknown mode: {mode}")


def main():
    parser = argparse.ArgumentParser(
        description='Personal finance calculator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  Tax           Income tax, payroll contributions and net pay (default)
  Amortization  Mortgage payoff schedule including extra payments
  Refinance     Current loan position and refinance comparison
  Retirement    Retirement savings and drawdown projection
  Goal          Required contribution and return for a retirement income goal
  Education     Education savings projection
  Fire          Financial independence projection
  All           Every mode above

Examples:
  python src/Program.py example
  python src/Program.py example --mode Refinance
  python src/Program.py uk-example --mode All
  python src/Program.py --list
        """
    )
    parser.add_argument('scenario_name', nargs='?', help='Name of the scenario (folder in input-parameters)')
    parser.add_argument('--mode', '-m',
                        choices=ALL_MODES + ['All'],
                        default='Tax',
                        help='Output mode: Tax (default), ..., or All')
    parser.add_argument('--list', '-l',
                        action='store_true',
                        help='List the available scenarios and exit')
    parser.add_argument('--verbose', '-v',
                        action='store_true',
                        help='Log calculation details to stderr')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr
    )

    if args.list:
        for name in list_scenarios():
            print(name)
        sys.exit(0)

    if not args.scenario_name:
        parser.error("scenario_name is required (or use --list to see the available scenarios)")

    # Build path to spec.json
    spec_path = scenario_path(args.scenario_name)
    if not os.path.exists(spec_path):
        print(f"Spec file not found: {spec_path}")
        sys.exit(1)
    spec = load_scenario(args.scenario_name)

    modes = ALL_MODES if args.mode == 'All' else [args.mode]
    for mode in modes:
        run_mode(mode, spec)


if __name__ == "__main__":
    main()
