"""Players seated at the table."""

from dataclasses import dataclass, field

from core.hand import Hand

DEALER_NAME = "Dealer"


@dataclass
class Player:
    """A named card player (the dealer included) holding one hand."""

    name: str
    hand: Hand = field(default_factory=Hand)
    # Seat role; a human may pick any display name, "Dealer" included
    is_dealer: bool = False

    @classmethod
    def dealer(cls) -> "Player":
        """Create the automated dealer."""
        return cls(DEALER_NAME, is_dealer=True)


def validate_player_name(name: str | None, min_length: int = 2, max_length: int = 20) -> str:
    """
    Validate and normalize a player's display name.

    Returns:
        The name with surrounding whitespace stripped

    Raises:
        ValueError: If the name is empty, too short or too long
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Name is required")
    if len(name) < min_length:
        raise ValueError(f"Name must be at least {min_length} characters")
    if len(name) > max_length:
        raise ValueError(f"Name must be {max_length} characters or less")
    return name
