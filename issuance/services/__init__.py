"""Service modules"""
from .conversion import ConversionEngine
from .ledger import PositionLedger
from .controller import IssuanceController

__all__ = ["ConversionEngine", "PositionLedger", "IssuanceController"]
