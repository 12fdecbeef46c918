"""Joker definitions and effect system.

CRITICAL: Joker order matters. For every event the hook is invoked once per
joker, left to right in the joker hand, and some jokers look at their
neighbours:

- Mirror jokers run the hook of the joker to their left instead of their own
- Blueprint jokers first run the hook of every joker to their left, nearest
  first, then their own

Both are wrappers (``JokerDecorator``) around an ordinary joker, so any joker
type can be given either behaviour.

Hooks:
- on_round_start: opening hand of a blind has been dealt
- on_blind_start: a blind is about to be dealt
- on_draw: a card was drawn into the main hand
- on_joker_enter / on_joker_leave: joker added to / removed from the joker hand
- on_scoring_start, on_card_score, on_scoring_end: scoring pass

Joker types register themselves by name at import time; ``create_joker``
builds one by name.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Callable

from balatro_jack.hand_evaluation import blackjack_score, is_soft_hand
from balatro_jack.models import Card, Suit

if TYPE_CHECKING:
    from balatro_jack.scoring import ScoringContext

logger = logging.getLogger(__name__)


class JokerHook(Enum):
    """Lifecycle events a joker can react to. Values are method names."""

    ON_ROUND_START = "on_round_start"
    ON_BLIND_START = "on_blind_start"
    ON_DRAW = "on_draw"
    ON_JOKER_ENTER = "on_joker_enter"
    ON_JOKER_LEAVE = "on_joker_leave"
    ON_SCORING_START = "on_scoring_start"
    ON_SCORING_END = "on_scoring_end"
    ON_CARD_SCORE = "on_card_score"


ALL_HOOKS = frozenset(JokerHook)


class Joker(Card):
    """A joker card. Subclasses override the hooks they care about.

    ``state`` holds per-instance values (banked chips, counters, ...).
    """

    def __init__(self, name: str):
        super().__init__(suit=Suit.JOKER, rank=name)
        self.state: dict = {}

    @property
    def name(self) -> str:
        return self.rank

    def invoke(self, hook: JokerHook, ctx: "ScoringContext") -> None:
        """Run this joker's handler for ``hook``."""
        getattr(self, hook.value)(ctx)

    def implements(self, hook: JokerHook) -> bool:
        """True if this joker type does something on ``hook``."""
        return getattr(type(self), hook.value) is not getattr(Joker, hook.value)

    def on_round_start(self, ctx: "ScoringContext") -> None:
        pass

    def on_blind_start(self, ctx: "ScoringContext") -> None:
        pass

    def on_draw(self, ctx: "ScoringContext") -> None:
        pass

    def on_joker_enter(self, ctx: "ScoringContext") -> None:
        pass

    def on_joker_leave(self, ctx: "ScoringContext") -> None:
        pass

    def on_scoring_start(self, ctx: "ScoringContext") -> None:
        pass

    def on_scoring_end(self, ctx: "ScoringContext") -> None:
        pass

    def on_card_score(self, ctx: "ScoringContext") -> None:
        pass


# =============================================================================
# Dispatch
# =============================================================================


def joker_neighbor(ctx: "ScoringContext", offset: int) -> Joker | None:
    """Joker ``offset`` slots away from the acting joker (negative = left).

    Returns None past either end of the joker hand.
    """
    if ctx.joker_index is None:
        return None
    index = ctx.joker_index + offset
    jokers = ctx.game.state.hands.joker
    if 0 <= index < len(jokers):
        neighbor = jokers[index]
        if isinstance(neighbor, Joker):
            return neighbor
    return None


def borrow(ctx: "ScoringContext", joker: Joker, index: int | None) -> "ScoringContext":
    """Context for running ``joker``'s handler on behalf of the acting joker."""
    return replace(ctx, joker=joker, joker_index=index)


def invoke_at(joker: Joker, index: int, hook: JokerHook, ctx: "ScoringContext") -> None:
    """Invoke ``hook`` on ``joker`` acting from slot ``index``."""
    joker.invoke(hook, replace(ctx, joker=joker, joker_index=index, actor=joker))


def dispatch_hook(hook: JokerHook, ctx: "ScoringContext") -> None:
    """Invoke ``hook`` once on every joker, in joker-hand order."""
    jokers = list(ctx.game.state.hands.joker)
    for index, joker in enumerate(jokers):
        if isinstance(joker, Joker):
            invoke_at(joker, index, hook, ctx)


def leaf_targets(
    joker: Joker, hook: JokerHook, ctx: "ScoringContext"
) -> list[tuple[Joker, "ScoringContext"]]:
    """Unwrapped jokers whose handlers run when ``joker`` gets ``hook``.

    Each comes with the context it runs in. Wrappers are resolved
    recursively, so no entry is ever a ``JokerDecorator``.
    """
    if isinstance(joker, JokerDecorator):
        if hook in joker.intercepts:
            return joker.targets(hook, ctx)
        return leaf_targets(joker.inner, hook, ctx)
    return [(joker, ctx)]


# =============================================================================
# Wrappers
# =============================================================================


class JokerDecorator(Joker):
    """Wraps a joker and intercepts some of its hooks.

    Hooks not in ``intercepts`` go straight to the wrapped joker. The
    wrapper shares the wrapped joker's state.

    Entry effects are remembered: ``entered`` lists the jokers whose
    on_joker_enter ran for this wrapper, and leaving runs on_joker_leave on
    exactly those, wherever they are by then.
    """

    kind = "decorator"

    def __init__(self, inner: Joker, intercepts: Iterable[JokerHook] = ALL_HOOKS):
        super().__init__(inner.name)
        self.inner = inner
        self.state = inner.state
        self.intercepts = frozenset(intercepts)
        self.entered: list[Joker] = []

    def implements(self, hook: JokerHook) -> bool:
        return hook in self.intercepts or self.inner.implements(hook)

    def invoke(self, hook: JokerHook, ctx: "ScoringContext") -> None:
        if hook not in self.intercepts:
            self.inner.invoke(hook, ctx)
            return
        if hook == JokerHook.ON_JOKER_LEAVE and JokerHook.ON_JOKER_ENTER in self.intercepts:
            self.leave(ctx)
            return

        targets = self.targets(hook, ctx)
        if hook == JokerHook.ON_JOKER_ENTER:
            self.entered = [joker for joker, _ in targets]
        for joker, joker_ctx in targets:
            joker.invoke(hook, joker_ctx)

    def targets(self, hook: JokerHook, ctx: "ScoringContext") -> list[tuple[Joker, "ScoringContext"]]:
        """Jokers that run ``hook`` for this wrapper. Defaults to the wrapped one."""
        return leaf_targets(self.inner, hook, ctx)

    def leave(self, ctx: "ScoringContext") -> None:
        """Undo the entry effects this wrapper applied, last first."""
        entered, self.entered = self.entered, []
        for joker in reversed(entered):
            joker.invoke(JokerHook.ON_JOKER_LEAVE, borrow(ctx, joker, ctx.joker_index))


class MirrorJoker(JokerDecorator):
    """Runs the left neighbour's hook in place of its own.

    Falls back to the wrapped joker when there is no left neighbour or the
    neighbour does nothing on this hook.
    """

    kind = "mirror"

    def targets(self, hook: JokerHook, ctx: "ScoringContext") -> list[tuple[Joker, "ScoringContext"]]:
        left = joker_neighbor(ctx, -1)
        if left is not None and left.implements(hook):
            logger.debug(f"{self.name} mirrors {left.name} on {hook.value}")
            return leaf_targets(left, hook, borrow(ctx, left, ctx.joker_index - 1))
        return leaf_targets(self.inner, hook, ctx)


class BlueprintJoker(JokerDecorator):
    """Runs every joker to its left (nearest first), then itself."""

    kind = "blueprint"

    def targets(self, hook: JokerHook, ctx: "ScoringContext") -> list[tuple[Joker, "ScoringContext"]]:
        targets: list[tuple[Joker, "ScoringContext"]] = []
        if ctx.joker_index is not None:
            jokers = ctx.game.state.hands.joker
            for index in range(ctx.joker_index - 1, -1, -1):
                left = jokers[index]
                if isinstance(left, Joker):
                    targets += leaf_targets(left, hook, borrow(ctx, left, index))
        return targets + leaf_targets(self.inner, hook, ctx)


WRAPPER_TYPES: dict[str, type[JokerDecorator]] = {
    cls.kind: cls for cls in (JokerDecorator, MirrorJoker, BlueprintJoker)
}


# =============================================================================
# Built-in jokers
# =============================================================================


class LuckyRabbit(Joker):
    """+2 Chips for every card drawn, paid out when scoring starts."""

    def __init__(self):
        super().__init__("lucky_rabbit")

    def on_draw(self, ctx: "ScoringContext") -> None:
        self.state["chips"] = self.state.get("chips", 0) + 2

    def on_scoring_start(self, ctx: "ScoringContext") -> None:
        chips = self.state.pop("chips", 0)
        if chips:
            ctx.engine.add_chips(ctx, chips)


class StickShift(Joker):
    """+1 discard while held."""

    def __init__(self):
        super().__init__("stick_shift")

    def on_joker_enter(self, ctx: "ScoringContext") -> None:
        ctx.game.state.discard_budget += 1
        ctx.game.ui.update_scoreboard(
            {"discardsRemaining": ctx.game.state.discards_remaining}
        )

    def on_joker_leave(self, ctx: "ScoringContext") -> None:
        ctx.game.state.discard_budget -= 1
        ctx.game.ui.update_scoreboard(
            {"discardsRemaining": ctx.game.state.discards_remaining}
        )


class EvenSteven(Joker):
    """+0.2 Mult if the hand score is even."""

    def __init__(self):
        super().__init__("even_steven")

    def on_scoring_end(self, ctx: "ScoringContext") -> None:
        if ctx.score % 2 == 0:
            ctx.engine.add_mult(ctx, 0.2)


class OddRod(Joker):
    """+0.2 Mult if the hand score is odd."""

    def __init__(self):
        super().__init__("odd_rod")

    def on_scoring_end(self, ctx: "ScoringContext") -> None:
        if ctx.score % 2 == 1:
            ctx.engine.add_mult(ctx, 0.2)


class CardCounter(Joker):
    """Draw one extra card when a round starts."""

    def __init__(self):
        super().__init__("card_counter")

    def on_round_start(self, ctx: "ScoringContext") -> None:
        ctx.game.draw_to_main_hand()


class FaceValue(Joker):
    """+1 Chip for each scored Ace or face card."""

    def __init__(self):
        super().__init__("face_value")

    def on_card_score(self, ctx: "ScoringContext") -> None:
        if ctx.card is not None and (ctx.card.is_ace or ctx.card.is_face):
            ctx.engine.add_chips(ctx, 1)


class Softie(Joker):
    """+3 Chips if the played hand is soft (an Ace still counts 11)."""

    def __init__(self):
        super().__init__("softie")

    def on_scoring_end(self, ctx: "ScoringContext") -> None:
        if is_soft_hand(ctx.game.state.hands.played):
            ctx.engine.add_chips(ctx, 3)


class Natural(Joker):
    """+0.5 Mult if the played hand totals exactly 21."""

    def __init__(self):
        super().__init__("natural")

    def on_scoring_end(self, ctx: "ScoringContext") -> None:
        if blackjack_score(ctx.game.state.hands.played) == 21:
            ctx.engine.add_mult(ctx, 0.5)


# =============================================================================
# Registry
# =============================================================================

JOKER_TYPES: dict[str, Callable[[], Joker]] = {}


def register_joker(name: str, factory: Callable[[], Joker]) -> None:
    """Make a joker type available to ``create_joker``."""
    JOKER_TYPES[name] = factory


def create_joker(name: str) -> Joker:
    """Create a joker instance by type name."""
    factory = JOKER_TYPES.get(name)
    if factory is None:
        raise ValueError(f"Unknown joker type: {name}")
    return factory()


def get_joker_types() -> list[str]:
    """Get list of all registered joker type names."""
    return list(JOKER_TYPES.keys())


register_joker("lucky_rabbit", LuckyRabbit)
register_joker("stick_shift", StickShift)
register_joker("even_steven", EvenSteven)
register_joker("odd_rod", OddRod)
register_joker("card_counter", CardCounter)
register_joker("face_value", FaceValue)
register_joker("softie", Softie)
register_joker("natural", Natural)
register_joker("mirror_mask", lambda: MirrorJoker(Joker("mirror_mask")))
register_joker("blueprint", lambda: BlueprintJoker(Joker("blueprint")))
