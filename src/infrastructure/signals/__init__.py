"""
Signal sources.

ModelSignalSource adapts a price prediction model; DeterministicSignalSource
replays fixed signals for tests and demos.
"""

from .deterministic_source import DeterministicSignalSource
from .model_source import ModelSignalSource
from .momentum_model import MomentumModel
from .technical_indicators import TechnicalIndicatorsCalculator

__all__ = [
    "DeterministicSignalSource",
    "ModelSignalSource",
    "MomentumModel",
    "TechnicalIndicatorsCalculator",
]
