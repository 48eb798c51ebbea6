"""Tests for players and name validation."""

import pytest

from core.player import DEALER_NAME, Player, validate_player_name


class TestPlayer:
    """Tests for Player."""

    def test_player_owns_empty_hand(self):
        player = Player("Ada")
        assert player.name == "Ada"
        assert len(player.hand) == 0
        assert not player.is_dealer

    def test_dealer(self):
        dealer = Player.dealer()
        assert dealer.name == DEALER_NAME
        assert dealer.is_dealer

    def test_dealer_role_does_not_follow_the_name(self):
        assert not Player(DEALER_NAME).is_dealer

    def test_hands_are_not_shared(self):
        first, second = Player("Ada"), Player("Bob")
        assert first.hand is not second.hand


class TestValidatePlayerName:
    """Tests for validate_player_name."""

    def test_strips_whitespace(self):
        assert validate_player_name("  Ada  ") == "Ada"

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_required(self, name):
        with pytest.raises(ValueError, match="Name is required"):
            validate_player_name(name)

    def test_too_short(self):
        with pytest.raises(ValueError, match="at least 2 characters"):
            validate_player_name("A")

    def test_too_long(self):
        with pytest.raises(ValueError, match="20 characters or less"):
            validate_player_name("x" * 21)

    def test_boundaries(self):
        assert validate_player_name("Al") == "Al"
        assert validate_player_name("x" * 20) == "x" * 20
