"""Tests for the round engine."""

import pytest
from random import Random

from core.cards import Card, Deck, create_deck
from core.exceptions import EmptyDeckError
from core.game import BlackjackGame, EventType, GameState
from core.outcome import Outcome


class TopCardRandom(Random):
    """Generator that always picks the first remaining card."""

    def randrange(self, *args, **kwargs):
        return 0


@pytest.fixture
def stacked_game(monkeypatch):
    """
    Factory for a game whose deck deals the given cards in order.

    Deal order is player, dealer, player, dealer, then any hits.
    """

    def make(*codes: str, hits_soft_17: bool = True) -> BlackjackGame:
        top = [Card.from_string(code) for code in codes]
        stacked = top + [c for c in create_deck() if c not in top]
        monkeypatch.setattr(
            "core.game.engine.create_deck",
            lambda rng=None: Deck(stacked, rng=rng),
        )
        return BlackjackGame(player_name="Tester", hits_soft_17=hits_soft_17, rng=TopCardRandom())

    return make


def _event_types(game):
    return [e.event_type for e in game.events.history]


class TestStartRound:
    """Tests for dealing a round."""

    def test_initial_state(self, game):
        assert game.state == GameState.WAITING_TO_DEAL
        assert game.can_deal
        assert not game.can_hit

    def test_invalid_player_name(self):
        with pytest.raises(ValueError):
            BlackjackGame(player_name=" ")

    def test_deals_two_cards_each(self, game):
        assert game.start_round()
        assert len(game.player.hand) == 2
        assert len(game.dealer.hand) == 2
        assert len(game.deck) == 48

    def test_deal_order(self, stacked_game):
        game = stacked_game("2S", "3H", "4D", "5C")
        game.start_round()
        assert [str(c) for c in game.player.hand] == ["2♠", "4♦"]
        assert [str(c) for c in game.dealer.hand] == ["3♥", "5♣"]
        assert game.state == GameState.PLAYER_TURN
        assert game.hole_card_hidden

    def test_hole_card_is_hidden_in_events(self, stacked_game):
        game = stacked_game("2S", "3H", "4D", "5C")
        game.start_round()
        dealt = [e for e in game.events.history if e.event_type == EventType.CARD_DEALT]
        assert len(dealt) == 4
        assert dealt[3].data["card"] == "??"
        assert dealt[3].data["hand_value"] is None
        assert dealt[3].data["hole_card"] is True
        assert not any(e.data["hole_card"] for e in dealt[:3])
        assert dealt[1].data["hand"] == "dealer"

    def test_player_named_dealer_keeps_player_seat(self, monkeypatch):
        stacked = [Card.from_string(code) for code in ("2S", "3H", "4D", "5C")]
        monkeypatch.setattr(
            "core.game.engine.create_deck",
            lambda rng=None: Deck(stacked + [c for c in create_deck() if c not in stacked], rng=rng),
        )
        game = BlackjackGame(player_name="Dealer", rng=TopCardRandom())
        game.start_round()
        dealt = [e for e in game.events.history if e.event_type == EventType.CARD_DEALT]
        assert [e.data["hand"] for e in dealt] == ["player", "dealer", "player", "dealer"]
        assert not game.player.is_dealer
        assert [str(c) for c in game.player.hand] == ["2♠", "4♦"]

    def test_cannot_deal_mid_round(self, stacked_game):
        game = stacked_game("2S", "3H", "4D", "5C")
        game.start_round()
        assert not game.start_round()
        assert _event_types(game)[-1] == EventType.INVALID_ACTION

    def test_each_round_gets_a_fresh_deck(self, game):
        game.start_round()
        first_deck = game.deck
        while game.can_hit:
            game.stand()
        game.start_round()
        assert game.deck is not first_deck
        assert len(game.deck) + len(game.player.hand) + len(game.dealer.hand) == 52

    def test_player_natural_wins(self, stacked_game):
        game = stacked_game("AS", "9H", "KD", "8C")
        game.start_round()
        assert game.state == GameState.ROUND_COMPLETE
        assert game.outcome == Outcome.PLAYER_BLACKJACK_WIN
        assert EventType.PLAYER_BLACKJACK in _event_types(game)

    def test_dealer_natural_loses(self, stacked_game):
        game = stacked_game("9S", "AH", "8D", "QC")
        game.start_round()
        assert game.outcome == Outcome.DEALER_BLACKJACK_LOSS
        assert EventType.DEALER_BLACKJACK in _event_types(game)
        assert len(game.player.hand) == 2

    def test_both_naturals_push(self, stacked_game):
        game = stacked_game("AS", "AH", "KD", "QC")
        game.start_round()
        assert game.outcome == Outcome.PUSH_BOTH_BLACKJACK


class TestPlayerTurn:
    """Tests for hitting and standing."""

    def test_hit_adds_card(self, stacked_game):
        game = stacked_game("2S", "3H", "4D", "5C", "6S")
        game.start_round()
        assert game.hit()
        assert game.player_score.total == 12
        assert game.state == GameState.PLAYER_TURN
        assert len(game.deck) == 47

    def test_hit_to_bust_loses(self, stacked_game):
        game = stacked_game("10S", "3H", "6D", "5C", "KS")
        game.start_round()
        game.hit()
        assert game.state == GameState.ROUND_COMPLETE
        assert game.outcome == Outcome.PLAYER_BUST_LOSS
        # Dealer never drew
        assert len(game.dealer.hand) == 2
        assert EventType.PLAYER_BUSTS in _event_types(game)

    def test_three_card_21_is_not_a_natural(self, stacked_game):
        game = stacked_game("7S", "10H", "7D", "8C", "7H")
        game.start_round()
        game.hit()
        game.stand()
        assert game.player_score.total == 21
        assert not game.player_natural
        assert game.outcome == Outcome.PLAYER_WIN

    def test_actions_outside_player_turn(self, game):
        assert not game.hit()
        assert not game.stand()
        assert _event_types(game) == [EventType.INVALID_ACTION, EventType.INVALID_ACTION]


class TestDealerTurn:
    """Tests for the dealer playing out."""

    def test_dealer_stands_on_17(self, stacked_game):
        game = stacked_game("10S", "10H", "9D", "7C")
        game.start_round()
        game.stand()
        assert game.dealer_score.total == 17
        assert len(game.dealer.hand) == 2
        assert game.outcome == Outcome.PLAYER_WIN

    def test_dealer_hits_soft_17(self, stacked_game):
        game = stacked_game("10S", "AH", "8D", "6C", "2S")
        game.start_round()
        game.stand()
        assert [str(c) for c in game.dealer.hand][-1] == "2♠"
        assert game.dealer_score.total == 19
        assert game.outcome == Outcome.DEALER_WIN

    def test_s17_dealer_stands_on_soft_17(self, stacked_game):
        game = stacked_game("10S", "AH", "8D", "6C", "2S", hits_soft_17=False)
        game.start_round()
        game.stand()
        assert len(game.dealer.hand) == 2
        assert game.outcome == Outcome.PLAYER_WIN

    def test_dealer_draws_until_standing(self, stacked_game):
        game = stacked_game("10S", "2H", "8D", "3C", "2S", "2D", "AC", "5H")
        game.start_round()
        game.stand()
        # 2+3+2+2 = 9, +A = soft 20
        assert game.dealer_score.total == 20
        assert game.outcome == Outcome.DEALER_WIN

    def test_dealer_bust(self, stacked_game):
        game = stacked_game("10S", "10H", "8D", "6C", "KS")
        game.start_round()
        game.stand()
        assert game.outcome == Outcome.DEALER_BUST_WIN
        assert EventType.DEALER_BUSTS in _event_types(game)

    def test_tie(self, stacked_game):
        game = stacked_game("10S", "10H", "8D", "8C")
        game.start_round()
        game.stand()
        assert game.outcome == Outcome.TIE

    def test_event_sequence_on_stand(self, stacked_game):
        game = stacked_game("10S", "10H", "8D", "6C", "2S")
        game.start_round()
        game.stand()
        types = _event_types(game)[-6:]
        assert types == [
            EventType.PLAYER_STAND,
            EventType.DEALER_REVEALS,
            EventType.CARD_DEALT,
            EventType.DEALER_HITS,
            EventType.DEALER_STANDS,
            EventType.ROUND_ENDED,
        ]

    def test_round_ended_event_data(self, stacked_game):
        game = stacked_game("10S", "10H", "9D", "7C")
        game.start_round()
        game.stand()
        ended = game.events.history[-1]
        assert ended.event_type == EventType.ROUND_ENDED
        assert ended.data["outcome"] == "PLAYER_WIN"
        assert ended.data["result"] == "win"
        assert ended.data["player_score"] == 19
        assert ended.data["dealer_score"] == 17


class TestEngineInvariants:
    """Tests that hold over many random rounds."""

    def test_seeded_rounds_conserve_cards(self):
        game = BlackjackGame(rng=Random(99))
        for _ in range(200):
            game.start_round()
            while game.can_hit and game.player_score.total < 17:
                game.hit()
            if game.can_stand:
                game.stand()
            assert game.is_round_over
            assert game.outcome is not None
            assert len(game.deck) + len(game.player.hand) + len(game.dealer.hand) == 52

    def test_history_holds_only_the_current_round(self):
        game = BlackjackGame(rng=Random(7))
        for _ in range(300):
            game.start_round()
            while game.can_hit and game.player_score.total < 17:
                game.hit()
            if game.can_stand:
                game.stand()
            history = game.events.history
            assert history[0].event_type == EventType.ROUND_STARTED
            assert history[-1].event_type == EventType.ROUND_ENDED
            # Two events per card at most, plus round and action events
            assert len(history) <= 2 * (len(game.player.hand) + len(game.dealer.hand)) + 6

    def test_empty_deck_propagates(self, game, monkeypatch):
        monkeypatch.setattr("core.game.engine.create_deck", lambda rng=None: Deck([], rng=rng))
        with pytest.raises(EmptyDeckError):
            game.start_round()

    def test_subscribe_receives_events(self, game):
        seen = []
        game.subscribe(seen.append, EventType.CARD_DEALT)
        game.start_round()
        assert len(seen) >= 4
        assert all(e.event_type == EventType.CARD_DEALT for e in seen)
