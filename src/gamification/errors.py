"""
Game Errors
Expected, recoverable failures raised by engine components
"""


class GameError(Exception):
    """Base class for failures that are reported back to the player"""
    kind = 'GameError'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InsufficientFunds(GameError):
    """Not enough coins for a spin or purchase"""
    kind = 'InsufficientFunds'


class InvalidSelection(GameError):
    """Unknown or ineligible pet, food, or catalog item"""
    kind = 'InvalidSelection'


class Exhausted(GameError):
    """Pet has no energy left to play"""
    kind = 'Exhausted'


class NotFound(GameError):
    """Quest id is not in any active set"""
    kind = 'NotFound'
