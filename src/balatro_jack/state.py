"""Game configuration and the canonical game state record."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Self

from balatro_jack.deck import Deck
from balatro_jack.hand import Hand


class GamePhase(Enum):
    """Current phase of the game."""

    PLAYING = auto()  # Playing hands against a blind
    GAME_OVER = auto()  # Run ended (win or loss)


BLIND_NAMES = {
    1: "Small Blind",
    2: "Big Blind",
    3: "Boss Blind",
}


@dataclass(frozen=True)
class GameConfig:
    """Starting values for a new game."""

    # Hand sizes
    hand_size: int = 5
    joker_slots: int = 4
    consumable_slots: int = 2

    # Progression
    hands_per_blind: int = 4
    blinds_per_ante: int = 3
    total_antes: int = 8

    # Resources
    starting_money: int = 24
    discard_budget: int = 4

    # Score needed and money paid for each blind of the first ante
    blind_requirements: tuple[int, ...] = (40, 60, 80)
    blind_rewards: tuple[int, ...] = (4, 6, 8)

    # Economy
    interest_rate: float = 0.1
    interest_cap: int = 40

    # Requirement and reward growth per ante
    ante_scaling: float = 1.5


@dataclass
class HandSet:
    """The four hands a player owns."""

    main: Hand = field(default_factory=Hand)
    played: Hand = field(default_factory=Hand)
    joker: Hand = field(default_factory=Hand)
    consumable: Hand = field(default_factory=Hand)

    def items(self) -> list[tuple[str, Hand]]:
        return [
            ("main", self.main),
            ("played", self.played),
            ("joker", self.joker),
            ("consumable", self.consumable),
        ]


@dataclass
class GameState:
    """Complete state of one game session."""

    deck: Deck
    hands: HandSet = field(default_factory=HandSet)

    # Progression
    ante: int = 1
    blind: int = 1
    blinds_per_ante: int = 3
    total_antes: int = 8
    blind_name: str = BLIND_NAMES[1]
    endless_mode: bool = False
    phase: GamePhase = GamePhase.PLAYING

    # Hand sizes
    hand_size: int = 5
    joker_slots: int = 4
    consumable_slots: int = 2

    # Resources
    money: int = 24
    total_hands: int = 4
    hands_played: int = 0
    discard_budget: int = 4
    discards_used: int = 0

    # Blind thresholds for the current ante
    blind_requirements: list[int] = field(default_factory=lambda: [40, 60, 80])
    blind_rewards: list[int] = field(default_factory=lambda: [4, 6, 8])
    interest_cap: int = 40

    # Scoring accumulators
    round_score: float = 0
    hand_score: float = 0
    hand_mult: float = 1

    @classmethod
    def from_config(cls, config: GameConfig, deck: Deck) -> Self:
        """Fresh state for a new game."""
        return cls(
            deck=deck,
            blinds_per_ante=config.blinds_per_ante,
            total_antes=config.total_antes,
            hand_size=config.hand_size,
            joker_slots=config.joker_slots,
            consumable_slots=config.consumable_slots,
            money=config.starting_money,
            total_hands=config.hands_per_blind,
            discard_budget=config.discard_budget,
            blind_requirements=list(config.blind_requirements),
            blind_rewards=list(config.blind_rewards),
            interest_cap=config.interest_cap,
        )

    @property
    def discards_remaining(self) -> int:
        return self.discard_budget - self.discards_used

    @property
    def hands_remaining(self) -> int:
        return self.total_hands - self.hands_played

    def _blind_slot(self) -> int:
        return min(self.blind, len(self.blind_requirements)) - 1

    @property
    def min_score(self) -> int:
        """Round score needed to beat the current blind."""
        return self.blind_requirements[self._blind_slot()]

    @property
    def base_reward(self) -> int:
        """Money paid for beating the current blind."""
        return self.blind_rewards[min(self.blind, len(self.blind_rewards)) - 1]

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER
