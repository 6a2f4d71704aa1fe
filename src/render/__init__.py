"""Render module for engine output display."""

from render.renderers import (
    BaseRenderer,
    TaxRenderer,
    AmortizationRenderer,
    RefinanceRenderer,
    RetirementRenderer,
    GoalRenderer,
    EducationRenderer,
    FireRenderer,
    format_months,
    RENDERER_REGISTRY,
)

__all__ = [
    'BaseRenderer',
    'TaxRenderer',
    'AmortizationRenderer',
    'RefinanceRenderer',
    'RetirementRenderer',
    'GoalRenderer',
    'EducationRenderer',
    'FireRenderer',
    'format_months',
    'RENDERER_REGISTRY',
]
