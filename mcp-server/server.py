#!/usr/bin/env python3
"""MCP Server for the Personal Finance Engine.

This server exposes the tax, mortgage, retirement, goal, education and
FIRE calculators as MCP tools, allowing AI assistants to run projections
directly or against the scenarios in input-parameters.
"""

import os
import sys
import json
import asyncio
import logging
from typing import Any

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from tools import EngineTools, ScenarioTools, SCENARIO_MODES

# stdout carries the protocol, so logs go to stderr
logging.basicConfig(level=logging.INFO, stream=sys.stderr, format='%(levelname)s %(name)s: %(message)s')
logger = logging.getLogger(__name__)

# Create the MCP server
server = Server("personal-finance-engine")

engine_tools = EngineTools()

# Global scenario tools instance (initialized on first use)
scenario_tools: ScenarioTools | None = None


def get_scenario_tools() -> ScenarioTools:
    """Get or initialize the scenario tools instance."""
    global scenario_tools
    if scenario_tools is None:
        # Default scenario can be set via FINANCIAL_ENGINE_SCENARIO env var
        default_scenario = os.environ.get('FINANCIAL_ENGINE_SCENARIO')
        base_path = os.path.join(os.path.dirname(__file__), '..')
        scenario_tools = ScenarioTools(base_path, default_scenario)
    return scenario_tools


PERCENT = "Whole-number percentage, e.g. 6.5 for 6.5%"

BUCKETS_PARAM = {
    "type": "object",
    "description": "Amounts by tax treatment",
    "properties": {
        "pre_tax": {"type": "number"},
        "tax_free": {"type": "number"},
        "taxable": {"type": "number"}
    }
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available engine tools."""
    return [
        Tool(
            name="compute_tax",
            description="Compute income tax, payroll contributions, net pay, effective and marginal rates for the US, UK or Canada. Reports both standard and itemized deduction amounts and which one is larger.",
            inputSchema={
                "type": "object",
                "properties": {
                    "jurisdiction": {"type": "string", "enum": ["US", "UK", "CA"]},
                    "wages": {"type": "number", "description": "Wages subject to payroll contributions"},
                    "other_income": {"type": "number", "description": "Other ordinary income (interest, short-term gains)"},
                    "long_term_gains": {"type": "number", "description": "Long-term capital gains"},
                    "pretax_deductions": {"type": "number", "description": "Pre-tax retirement or benefit deductions"},
                    "filing_status": {"type": "string", "enum": ["single", "married_joint", "head_of_household"]},
                    "deduction_method": {"type": "string", "enum": ["standard", "itemized"]},
                    "itemized": {
                        "type": "object",
                        "properties": {
                            "state_local_taxes": {"type": "number"},
                            "mortgage_interest": {"type": "number"},
                            "charitable": {"type": "number"},
                            "medical": {"type": "number"},
                            "other": {"type": "number"}
                        }
                    },
                    "tax_year": {"type": "integer", "description": "Optional: reference year (latest available by default)"}
                },
                "required": ["jurisdiction"]
            }
        ),
        Tool(
            name="build_amortization_schedule",
            description="Build a monthly loan payoff schedule with optional extra principal payments starting at a given period.",
            inputSchema={
                "type": "object",
                "properties": {
                    "principal": {"type": "number"},
                    "annual_rate": {"type": "number", "description": PERCENT},
                    "term_years": {"type": "number"},
                    "extra_payment": {"type": "number", "description": "Extra principal paid each month"},
                    "extra_payment_start_period": {"type": "integer", "description": "Zero-based period where extra payments begin"},
                    "include_schedule": {"type": "boolean", "description": "Return every period (default true)"}
                },
                "required": ["principal", "annual_rate", "term_years"]
            }
        ),
        Tool(
            name="analyze_refinance",
            description="Compare refinance options against an existing loan. Either describe the original loan (principal, annual_rate, term_years, months_paid, refinance_rate) or pass the current balance, payment and remaining cost with explicit candidates.",
            inputSchema={
                "type": "object",
                "properties": {
                    "principal": {"type": "number"},
                    "annual_rate": {"type": "number", "description": PERCENT},
                    "term_years": {"type": "number"},
                    "months_paid": {"type": "integer"},
                    "extra_payment": {"type": "number"},
                    "current_rate_override": {"type": "number", "description": PERCENT},
                    "current_balance": {"type": "number"},
                    "current_payment": {"type": "number"},
                    "current_remaining_cost": {"type": "number"},
                    "refinance_rate": {"type": "number", "description": PERCENT},
                    "closing_costs": {"type": "number"},
                    "roll_in_costs": {"type": "boolean"},
                    "candidates": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "term_years": {"type": "number"},
                                "rate": {"type": "number"},
                                "closing_costs": {"type": "number"},
                                "roll_in_costs": {"type": "boolean"}
                            },
                            "required": ["term_years", "rate"]
                        }
                    }
                },
                "required": []
            }
        ),
        Tool(
            name="simulate_retirement",
            description="Project retirement savings by tax bucket until retirement and draw them down until life expectancy. Returns targets, projected income, solvency age and whether the plan is on track.",
            inputSchema={
                "type": "object",
                "properties": {
                    "current_age": {"type": "integer"},
                    "retirement_age": {"type": "integer"},
                    "life_expectancy": {"type": "integer"},
                    "balances": BUCKETS_PARAM,
                    "taxable_basis": {"type": "number"},
                    "monthly_contributions": BUCKETS_PARAM,
                    "strategy": {"type": "string", "enum": ["Conservative", "Balanced", "Aggressive", "Custom"]},
                    "custom_return_rate": {"type": "number", "description": PERCENT},
                    "inflation_rate": {"type": "number", "description": PERCENT},
                    "withdrawal_rate": {"type": "number", "description": PERCENT},
                    "retirement_tax_rate": {"type": "number", "description": PERCENT},
                    "external_income_monthly": {"type": "number"},
                    "target_type": {"type": "string", "enum": ["income", "corpus"]},
                    "target_value": {"type": "number"}
                },
                "required": []
            }
        ),
        Tool(
            name="project_balance",
            description="Project a single balance year by year with growth, contributions and an optional drawdown phase.",
            inputSchema={
                "type": "object",
                "properties": {
                    "current_balance": {"type": "number"},
                    "monthly_contribution": {"type": "number"},
                    "annual_contributions": {"type": "array", "items": {"type": "number"}, "description": "Optional: one annual amount per year"},
                    "growth_rate": {"type": "number", "description": PERCENT},
                    "inflation_rate": {"type": "number", "description": PERCENT},
                    "horizon_years": {"type": "integer"},
                    "start_age": {"type": "integer"},
                    "retirement_age": {"type": "integer"},
                    "annual_withdrawal_real": {"type": "number"},
                    "withdrawal_rate": {"type": "number", "description": PERCENT}
                },
                "required": ["horizon_years"]
            }
        ),
        Tool(
            name="solve_goal",
            description="Solve for the monthly contribution and the annual return needed to reach a target. Give target_nominal for a plain balance goal or desired_monthly_income for a retirement income goal.",
            inputSchema={
                "type": "object",
                "properties": {
                    "target_nominal": {"type": "number"},
                    "desired_monthly_income": {"type": "number"},
                    "current_balance": {"type": "number"},
                    "monthly_contribution": {"type": "number"},
                    "annual_rate": {"type": "number", "description": PERCENT},
                    "years": {"type": "integer"},
                    "inflation_rate": {"type": "number", "description": PERCENT},
                    "withdrawal_rate": {"type": "number", "description": PERCENT},
                    "external_income_monthly": {"type": "number"}
                },
                "required": ["years"]
            }
        ),
        Tool(
            name="project_education",
            description="Project an education savings account (529, Junior ISA, RESP) through the end of study, with shortfall and required monthly contribution.",
            inputSchema={
                "type": "object",
                "properties": {
                    "country": {"type": "string", "enum": ["US", "UK", "CA"]},
                    "child_age": {"type": "integer"},
                    "college_start_age": {"type": "integer"},
                    "current_savings": {"type": "number"},
                    "monthly_contribution": {"type": "number"},
                    "annual_cost": {"type": "number", "description": "Annual cost in today's money"},
                    "education_inflation": {"type": "number", "description": PERCENT},
                    "investment_return": {"type": "number", "description": PERCENT},
                    "state_tax_rate": {"type": "number", "description": PERCENT}
                },
                "required": []
            }
        ),
        Tool(
            name="project_fire",
            description="Financial independence projection: savings rate, FIRE number and the age at which net worth reaches it.",
            inputSchema={
                "type": "object",
                "properties": {
                    "current_age": {"type": "integer"},
                    "net_worth": {"type": "number"},
                    "annual_income": {"type": "number"},
                    "annual_spending": {"type": "number"},
                    "growth_rate": {"type": "number", "description": PERCENT},
                    "withdrawal_rate": {"type": "number", "description": PERCENT},
                    "inflation_rate": {"type": "number", "description": PERCENT}
                },
                "required": []
            }
        ),
        Tool(
            name="list_scenarios",
            description="List the scenarios available in input-parameters and the default scenario.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="run_scenario",
            description="Run one calculator against a saved scenario.",
            inputSchema={
                "type": "object",
                "properties": {
                    "mode": {"type": "string", "enum": list(SCENARIO_MODES)},
                    "scenario": {
                        "type": "string",
                        "description": "The scenario name (folder in input-parameters). If not specified, uses the default scenario."
                    }
                },
                "required": ["mode"]
            }
        )
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        arguments = arguments or {}
        if name == "compute_tax":
            result = engine_tools.compute_tax(arguments)
        elif name == "build_amortization_schedule":
            result = engine_tools.build_amortization_schedule(arguments)
        elif name == "analyze_refinance":
            result = engine_tools.analyze_refinance(arguments)
        elif name == "simulate_retirement":
            result = engine_tools.simulate_retirement(arguments)
        elif name == "project_balance":
            result = engine_tools.project_balance(arguments)
        elif name == "solve_goal":
            result = engine_tools.solve_goal(arguments)
        elif name == "project_education":
            result = engine_tools.project_education(arguments)
        elif name == "project_fire":
            result = engine_tools.project_fire(arguments)
        elif name == "list_scenarios":
            result = get_scenario_tools().list_scenarios()
        elif name == "run_scenario":
            result = get_scenario_tools().run_scenario(arguments["mode"], arguments.get("scenario"))
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]
    except Exception as e:
        logger.exception("Tool %s failed", name)
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e)}, indent=2)
        )]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())
