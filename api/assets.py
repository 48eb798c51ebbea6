"""Card image lookup against the Deck of Cards image set."""

from core.cards import Card

from config import config


def card_code(card: Card) -> str:
    """Return the image code for a card, e.g. 'AS', '0H' (ten), 'KD'."""
    label = card.display_label
    if label == "10":
        label = "0"
    return f"{label}{card.suit.name[0]}"


def card_image_url(card: Card, base_url: str | None = None) -> str:
    """Return the face image URL for a card."""
    base_url = base_url or config.assets.card_image_base_url
    return f"{base_url}/{card_code(card)}.png"


def card_back_url(base_url: str | None = None) -> str:
    """Return the image URL for a face-down card."""
    base_url = base_url or config.assets.card_image_base_url
    return f"{base_url}/back.png"


def card_text(card: Card) -> str:
    """Return the text fallback shown when no image is available."""
    return f"{card.display_label} of {card.suit}"
