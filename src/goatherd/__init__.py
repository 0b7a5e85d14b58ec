"""Goat herd analytics.

This package derives the herd-management views of a goat dairy from the
records kept by its sync layer: life-stage classification, growth against
targets, and lactation cycles with cohort comparisons.

Subpackages:
- goatherd.core: Configuration, units and calendar helpers
- goatherd.data: Herd records, herd configuration and snapshot loading
- goatherd.lifecycle: Zootechnic category classifier
- goatherd.growth: Target curve, weighing series and milestones
- goatherd.lactation: Lactation cycles and drying-off candidates
- goatherd.analysis: Population statistics, cohort curves and growth reports
- goatherd.cli: Command-line tools
"""

# Re-export common items for convenience
from goatherd.core import settings
from goatherd.data import AppConfig, HerdSnapshot, load_snapshot
from goatherd.growth import growth_status, target_weight_at_age, weight_at_age
from goatherd.lactation import build_lactation_cycles
from goatherd.lifecycle import Category, classify, classify_herd

__all__ = [
    "settings",
    "AppConfig",
    "HerdSnapshot",
    "load_snapshot",
    "Category",
    "classify",
    "classify_herd",
    "target_weight_at_age",
    "weight_at_age",
    "growth_status",
    "build_lactation_cycles",
]

__version__ = "0.1.0"
