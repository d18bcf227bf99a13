"""Bonus conversion feature module for DeepBank Terminal."""

from deepbank.features.bonus.handlers import BonusHandlersMixin
from deepbank.features.bonus.screen import BonusPanel
from deepbank.features.bonus.service import BonusService
from deepbank.features.bonus.validators import BonusStepValidators

__all__ = ["BonusHandlersMixin", "BonusPanel", "BonusService", "BonusStepValidators"]
