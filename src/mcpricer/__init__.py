"""mcpricer package public API."""

from .config import SimulationParameters
from .gbm import next_price, simulate_path, simulate_price_path
from .payoff import call_payoff, discounted_payoff
from .pricer import EuropeanCallPricer, PricingResult, compare_strategies
from .seeds import SeedTable, generate_seeds
from .stats import autocrit, ci_mean, standard_error
from .timing import Timer

__all__ = [
    "SimulationParameters",
    "SeedTable",
    "generate_seeds",
    "next_price",
    "simulate_path",
    "simulate_price_path",
    "call_payoff",
    "discounted_payoff",
    "EuropeanCallPricer",
    "PricingResult",
    "compare_strategies",
    "Timer",
    "autocrit",
    "ci_mean",
    "standard_error",
]

__version__ = "0.1.0"
