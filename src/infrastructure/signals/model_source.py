"""
Model-backed signal source.

Adapts a black-box PricePredictionModel to the ISignalSource interface.
"""

import math

from loguru import logger

from src.core.constants import DIRECTION_BAND_PERCENT
from src.core.enums import SignalDirection
from src.core.exceptions.backtest import DataError, SignalError
from src.core.interfaces.signal import ISignalSource
from src.core.models.market import Candle, Signal
from src.core.protocols import PricePredictionModel
from src.core.types.financial import HUNDRED, clamp
from src.infrastructure.data.csv_utils import CSVUtils

from .technical_indicators import TechnicalIndicatorsCalculator

# Bounds applied to model confidence
MIN_MODEL_CONFIDENCE = 0.01
MAX_MODEL_CONFIDENCE = 0.99


class ModelSignalSource(ISignalSource):
    """
    Signal source that asks a price model for the next price.

    The window is converted to an OHLCV frame, indicator columns are added
    and the model's predicted price is classified against the current close:
    moves beyond +/- ``band_percent`` are "up"/"down", anything else "hold".
    """

    def __init__(
        self,
        model: PricePredictionModel,
        indicators: TechnicalIndicatorsCalculator | None = None,
        band_percent: float = DIRECTION_BAND_PERCENT,
    ):
        self._model = model
        self._indicators = indicators or TechnicalIndicatorsCalculator()
        self._band_percent = band_percent

    @property
    def model_version(self) -> str:
        return self._model.version

    def predict(self, window: list[Candle]) -> Signal:
        """
        Predict the next move from ``window``.

        Raises:
            SignalError: If the window is empty or the model fails
        """
        if not window:
            raise SignalError("Cannot predict from an empty candle window")

        current_price = window[-1].close
        try:
            features = self._indicators.calculate_all_indicators(CSVUtils.candles_to_frame(window))
            predicted_price, confidence = self._model.predict(features)
        except DataError as e:
            raise SignalError(f"Failed to prepare model features: {e}") from e
        except Exception as e:
            logger.error(f"Model {self._model.version} prediction failed: {e}")
            raise SignalError(f"Model {self._model.version} prediction failed") from e

        if not math.isfinite(predicted_price) or predicted_price <= 0:
            raise SignalError(f"Model returned an invalid price: {predicted_price}")
        if not math.isfinite(confidence):
            raise SignalError(f"Model returned an invalid confidence: {confidence}")

        change_percent = (predicted_price - current_price) / current_price * HUNDRED
        return Signal(
            direction=SignalDirection.from_price_change(change_percent, self._band_percent),
            confidence=clamp(confidence, MIN_MODEL_CONFIDENCE, MAX_MODEL_CONFIDENCE),
            predicted_price=predicted_price,
        )
