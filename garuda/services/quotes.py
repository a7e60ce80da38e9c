from datetime import date
from typing import List, Optional

from garuda.schemas.chat import DailyQuote

VERSES: List[DailyQuote] = [
    DailyQuote(
        text="You have a right to perform your prescribed duties, but you are not entitled to the fruits of your actions.",
        source="Bhagavad Gita 2.47",
    ),
    DailyQuote(
        text="The soul can never be cut into pieces by any weapon, nor can it be burned by fire, nor moistened by water, nor withered by the wind.",
        source="Bhagavad Gita 2.23",
    ),
    DailyQuote(
        text="For one who has conquered the mind, the mind is the best of friends; but for one who has failed to do so, his very mind will be the greatest enemy.",
        source="Bhagavad Gita 6.6",
    ),
    DailyQuote(
        text="There is no loss or diminution in this endeavor, and even a little advancement on this path can protect one from the most dangerous type of fear.",
        source="Bhagavad Gita 2.40",
    ),
    DailyQuote(
        text="When meditation is mastered, the mind is unwavering like the flame of a lamp in a windless place.",
        source="Bhagavad Gita 6.19",
    ),
]


def day_key(day: date) -> str:
    """Date rendered as e.g. 'Mon Oct 19 2026'; the quote index is hashed from it."""
    return day.strftime("%a %b %d %Y")


def daily_quote(day: Optional[date] = None) -> DailyQuote:
    """The verse of the day: same day, same verse."""
    key = day_key(day or date.today())
    index = sum(ord(ch) for ch in key) % len(VERSES)
    return VERSES[index]
