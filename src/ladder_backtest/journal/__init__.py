"""Trade journal reconstructed from the bot log.

TradeReconstructor   Event-driven FSM that emits completed trades
reconstruct_trades   One-shot helper over a full event list
filter_window        Keep trades inside the reporting window
"""

from .reconstructor import TradeReconstructor, filter_window, reconstruct_trades

__all__ = ["TradeReconstructor", "filter_window", "reconstruct_trades"]
