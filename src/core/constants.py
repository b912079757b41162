"""
Core constants and limits.

Defines system-wide constants, defaults and resource limits used by the
request validator, the simulation driver and the job manager.
"""

# Request Limits
MAX_BACKTEST_DURATION_DAYS = 365  # Maximum span between start and end
MIN_STARTING_CAPITAL = 0.0  # Starting capital must be strictly greater
MAX_STARTING_CAPITAL = 1000000.0  # Ceiling on starting capital (1M)

# Strategy Parameter Bounds
MIN_STOP_LOSS_PERCENT = 0.0
MAX_STOP_LOSS_PERCENT = 50.0
MIN_TAKE_PROFIT_PERCENT = 0.0
MAX_TAKE_PROFIT_PERCENT = 200.0
MIN_CONFIDENCE_THRESHOLD = 0.1
MAX_CONFIDENCE_THRESHOLD = 1.0
MIN_OPEN_POSITIONS = 1
MAX_OPEN_POSITIONS = 10
MAX_RISK_PER_TRADE = 100.0  # Percent of portfolio value

# Strategy Defaults
DEFAULT_STOP_LOSS_PERCENT = 5.0
DEFAULT_TAKE_PROFIT_PERCENT = 10.0
DEFAULT_CONFIDENCE_THRESHOLD = 0.7
DEFAULT_MAX_OPEN_POSITIONS = 3
DEFAULT_RISK_PER_TRADE = 10.0
DEFAULT_SIGNAL_LOOKBACK = 30  # Candles handed to the signal source
MAX_SIGNAL_LOOKBACK = 1000
DEFAULT_STARTING_CAPITAL = 10000.0

# Fee Constants (percent of notional)
DEFAULT_MAKER_FEE_PERCENT = 0.1  # 0.1% maker fee, applied to sells
DEFAULT_TAKER_FEE_PERCENT = 0.15  # 0.15% taker fee, applied to buys
DEFAULT_MINIMUM_FEE = 0.01
DEFAULT_MAXIMUM_FEE = 100.0

# Trading Limits
MIN_TRADE_SIZE = 0.00000001  # Smallest tradable quantity (1 satoshi)
MAX_TRADE_SIZE = 1000000  # Maximum single trade quantity

# Signal Thresholds
DIRECTION_BAND_PERCENT = 0.5  # Predicted move inside +/-0.5% is a hold

# Analytics
DAYS_PER_YEAR = 365
MIN_RETURN_STD = 1e-12  # Standard deviation floor for the sharpe ratio

# System Limits
MAX_CONCURRENT_RUNS_PER_USER = 3
DEFAULT_PROGRESS_INTERVAL = 10  # Candles between progress reports
SUPPORTED_INTERVALS = ("1h", "4h", "1d")
