"""Blackjack round engine with state machine."""

from random import Random
from typing import Callable

from transitions import Machine

from core.cards import Card, Deck, create_deck, draw
from core.dealer import dealer_should_draw
from core.hand import Score
from core.outcome import Outcome, resolve_outcome
from core.player import Player, validate_player_name
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import GameState


class BlackjackGame:
    """
    Single-player blackjack against an automated dealer.

    Every round gets its own freshly built deck. Draws happen one at a time
    inside synchronous calls, so each card has left the deck and joined its
    hand before the next one is dealt. Communication with the presentation
    layer happens through events and return values only.
    """

    # State machine states
    STATES = [s.name.lower() for s in GameState]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_deal", "source": ["waiting_to_deal", "round_complete"], "dest": "dealing"},
        {"trigger": "deal_complete", "source": "dealing", "dest": "player_turn"},
        {"trigger": "natural_dealt", "source": "dealing", "dest": "resolving"},
        {"trigger": "player_action", "source": "player_turn", "dest": "player_turn"},
        {"trigger": "player_done", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "player_busts", "source": "player_turn", "dest": "resolving"},
        {"trigger": "dealer_done", "source": "dealer_turn", "dest": "resolving"},
        {"trigger": "resolve", "source": "resolving", "dest": "round_complete"},
    ]

    def __init__(
        self,
        player_name: str = "Player",
        hits_soft_17: bool = True,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a new game. No cards are dealt until ``start_round``.

        Args:
            player_name: Display name of the human player
            hits_soft_17: Dealer draws on soft 17
            rng: Random number generator for reproducible games
        """
        self.player = Player(validate_player_name(player_name))
        self.dealer = Player.dealer()
        self.hits_soft_17 = hits_soft_17
        self.rng = rng or Random()
        self.deck: Deck = create_deck(rng=self.rng)

        self.player_natural = False
        self.dealer_natural = False
        self.outcome: Outcome | None = None
        self.events = EventEmitter()

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="waiting_to_deal",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> GameState:
        """Get current game state as enum."""
        return GameState[self._machine_state.upper()]  # type: ignore

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def start_round(self) -> bool:
        """
        Shuffle up a fresh deck and deal player, dealer, player, dealer.

        A natural on either side ends the round immediately. The event
        history only holds the current round.

        Returns:
            True if a round was dealt
        """
        if self.state not in (GameState.WAITING_TO_DEAL, GameState.ROUND_COMPLETE):
            self.events.emit_new(
                EventType.INVALID_ACTION,
                message="Round already in progress",
                state=self.state.name,
            )
            return False

        self.events.clear_history()
        self.deck = create_deck(rng=self.rng)
        self.player.hand.clear()
        self.dealer.hand.clear()
        self.player_natural = False
        self.dealer_natural = False
        self.outcome = None

        self.begin_deal()
        self.events.emit_new(EventType.ROUND_STARTED, player=self.player.name)

        self._deal_card_to(self.player)
        self._deal_card_to(self.dealer)
        self._deal_card_to(self.player)
        self._deal_card_to(self.dealer, face_up=False)

        self.player_natural = self.player.hand.is_natural
        self.dealer_natural = self.dealer.hand.is_natural

        if self.player_natural:
            self.events.emit_new(EventType.PLAYER_BLACKJACK)
        if self.dealer_natural:
            self._reveal_hole_card()
            self.events.emit_new(EventType.DEALER_BLACKJACK)

        if self.player_natural or self.dealer_natural:
            self.natural_dealt()
            return self._resolve_round()

        self.deal_complete()
        return True

    def _deal_card_to(self, player: Player, face_up: bool = True) -> Card:
        """Deal a card from this round's deck to a player."""
        card = draw(self.deck, player.hand)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card) if face_up else "??",
            hand="dealer" if player.is_dealer else "player",
            hand_value=player.hand.value if face_up else None,
            hole_card=not face_up,
            cards_remaining=len(self.deck),
        )
        return card

    def _reveal_hole_card(self) -> None:
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=str(self.dealer.hand.cards[1]),
            hand_value=self.dealer.hand.value,
        )

    def hit(self) -> bool:
        """Player takes another card; a bust ends the round."""
        if self.state != GameState.PLAYER_TURN:
            self.events.emit_new(EventType.INVALID_ACTION, message="Cannot hit now")
            return False

        self._deal_card_to(self.player)
        self.events.emit_new(EventType.PLAYER_HIT, hand_value=self.player.hand.value)

        if self.player.hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_value=self.player.hand.value)
            self.player_busts()
            return self._resolve_round()

        self.player_action()  # Stay in player turn
        return True

    def stand(self) -> bool:
        """Player keeps the current hand and the dealer plays out."""
        if self.state != GameState.PLAYER_TURN:
            self.events.emit_new(EventType.INVALID_ACTION, message="Cannot stand now")
            return False

        self.events.emit_new(EventType.PLAYER_STAND, hand_value=self.player.hand.value)
        self.player_done()
        return self._play_dealer()

    def _play_dealer(self) -> bool:
        """Dealer plays their hand."""
        self._reveal_hole_card()

        while dealer_should_draw(self.dealer.hand, hits_soft_17=self.hits_soft_17):
            self._deal_card_to(self.dealer)
            self.events.emit_new(EventType.DEALER_HITS, hand_value=self.dealer.hand.value)

        if self.dealer.hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=self.dealer.hand.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer.hand.value)

        self.dealer_done()
        return self._resolve_round()

    def _resolve_round(self) -> bool:
        """Classify the finished round."""
        self.outcome = resolve_outcome(
            self.player.hand.value,
            self.dealer.hand.value,
            player_natural=self.player_natural,
            dealer_natural=self.dealer_natural,
        )
        self.events.emit_new(
            EventType.ROUND_ENDED,
            outcome=self.outcome.name,
            result=self.outcome.result,
            message=self.outcome.message,
            player_score=self.player.hand.value,
            dealer_score=self.dealer.hand.value,
        )
        self.resolve()
        return True

    @property
    def player_score(self) -> Score:
        return self.player.hand.score

    @property
    def dealer_score(self) -> Score:
        return self.dealer.hand.score

    @property
    def hole_card_hidden(self) -> bool:
        """Check if the dealer's second card is still face down."""
        return self.state in (GameState.DEALING, GameState.PLAYER_TURN)

    @property
    def is_round_over(self) -> bool:
        return self.state == GameState.ROUND_COMPLETE

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        return self.state == GameState.PLAYER_TURN and not self.player.hand.is_busted

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        return self.state == GameState.PLAYER_TURN

    @property
    def can_deal(self) -> bool:
        """Check if a new round may be dealt."""
        return self.state in (GameState.WAITING_TO_DEAL, GameState.ROUND_COMPLETE)
