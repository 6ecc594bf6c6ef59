"""
Shop
Food, theme, and profile-frame purchases
"""
from typing import Any, Dict

from .economy import economy_ledger
from .errors import InvalidSelection
from .models import GameState
from .pet_library import pet_library
from .pet_manager import pet_manager


class Shop:
    """Coin sinks outside the gacha"""

    def __init__(self, ledger=None, library=None, manager=None):
        self.ledger = ledger or economy_ledger
        self.pet_library = library or pet_library
        self.pet_manager = manager or pet_manager

    def price_of(self, game: GameState, item: Dict[str, Any], quantity: int = 1) -> int:
        return self.ledger.shop_price(game, item['cost']) * quantity

    def buy_food(self, game: GameState, food_id: str, quantity: int = 1) -> Dict[str, Any]:
        food = self.pet_library.get_food(food_id)
        if not food:
            raise InvalidSelection(f"Unknown food '{food_id}'.")
        if quantity < 1:
            raise InvalidSelection("Quantity must be at least 1.")

        price = self.price_of(game, food, quantity)
        self.ledger.spend(game, price, f"Bought {quantity}x {food['name']}")
        self.pet_manager.add_food(game, food_id, quantity)
        return {'food': food, 'quantity': quantity, 'price': price}

    def buy_theme(self, game: GameState, theme_id: str) -> Dict[str, Any]:
        theme = self.pet_library.get_theme(theme_id)
        if not theme:
            raise InvalidSelection(f"Unknown theme '{theme_id}'.")
        if theme_id in game.unlocked_themes:
            raise InvalidSelection(f"You already own {theme['name']}.")

        price = self.price_of(game, theme)
        self.ledger.spend(game, price, f"Unlocked theme: {theme['name']}")
        game.unlocked_themes.append(theme_id)
        return {'theme': theme, 'price': price}

    def equip_theme(self, game: GameState, theme_id: str):
        if theme_id not in game.unlocked_themes:
            raise InvalidSelection("You haven't unlocked that theme yet.")
        game.current_theme = theme_id

    def buy_frame(self, game: GameState, frame_id: str) -> Dict[str, Any]:
        frame = self.pet_library.get_frame(frame_id)
        if not frame:
            raise InvalidSelection(f"Unknown frame '{frame_id}'.")
        if frame_id in game.unlocked_frames:
            raise InvalidSelection(f"You already own {frame['name']}.")

        price = self.price_of(game, frame)
        self.ledger.spend(game, price, f"Unlocked frame: {frame['name']}")
        game.unlocked_frames.append(frame_id)
        return {'frame': frame, 'price': price}

    def equip_frame(self, game: GameState, frame_id: str):
        if frame_id not in game.unlocked_frames:
            raise InvalidSelection("You haven't unlocked that frame yet.")
        game.current_frame = frame_id

    def unequip_frame(self, game: GameState):
        game.current_frame = None


# Global shop instance
shop = Shop()
