import json
import os
from functools import lru_cache

ASSUMPTIONS_PATH = os.path.join(os.path.dirname(__file__), 'reference', 'planning-assumptions.json')


@lru_cache(maxsize=None)
def load_planning_assumptions(path: str = ASSUMPTIONS_PATH) -> dict:
    """Read investment-strategy and education settings from the reference file."""
    if not os.path.exists(path):
        raise ValueError(f"Planning assumptions not found: {path}")
    with open(path, 'r') as f:
        data = json.load(f)
    for section in ("investmentStrategies", "education"):
        if section not in data:
            raise ValueError(f"{os.path.basename(path)} is missing the '{section}' section")
    return data


def strategy_settings(strategy: str) -> dict:
    strategies = load_planning_assumptions()["investmentStrategies"]
    if strategy not in strategies:
        raise ValueError(f"Unknown investment strategy: {strategy}")
    return strategies[strategy]


def education_settings(country: str) -> dict:
    countries = load_planning_assumptions()["education"]
    code = country.upper()
    if code not in countries:
        raise ValueError(f"No education settings for country: {country}")
    return countries[code]
