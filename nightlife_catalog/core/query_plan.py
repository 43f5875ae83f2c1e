"""Phrase list, search grid and the ordered task list they produce."""

from dataclasses import dataclass
from typing import Iterator, List, Sequence

from nightlife_catalog.models import Category, GridAnchor, PhraseQuery

BAR = Category.BAR
PUB = Category.PUB
CLUB = Category.NIGHT_CLUB

# Each phrase maps to exactly one of the three categories.
DEFAULT_PHRASES: List[PhraseQuery] = [
    # general
    PhraseQuery("bar Kraków", BAR),
    PhraseQuery("pub Kraków", PUB),
    PhraseQuery("klub nocny Kraków", CLUB),
    # bar sub-types
    PhraseQuery("cocktail bar Kraków", BAR),
    PhraseQuery("shot bar Kraków", BAR),
    PhraseQuery("wine bar Kraków", BAR),
    PhraseQuery("craft beer Kraków", BAR),
    PhraseQuery("taproom Kraków", BAR),
    PhraseQuery("brewpub Kraków", BAR),
    PhraseQuery("rooftop bar Kraków", BAR),
    PhraseQuery("bar z muzyką na żywo Kraków", BAR),
    PhraseQuery("live music bar Kraków", BAR),
    PhraseQuery("bar z DJ Kraków", BAR),
    PhraseQuery("karaoke bar Kraków", BAR),
    PhraseQuery("cocktail lounge Kraków", BAR),
    PhraseQuery("gastro bar Kraków", BAR),
    PhraseQuery("bar z tapas Kraków", BAR),
    PhraseQuery("after hours bar Kraków", BAR),
    PhraseQuery("24h bar Kraków", BAR),
    # pub sub-types; sports bars are usually pubs here
    PhraseQuery("irish pub Kraków", PUB),
    PhraseQuery("sports bar Kraków", PUB),
    PhraseQuery("bar studencki Kraków", PUB),
    PhraseQuery("local pub Kraków", PUB),
    # club sub-types
    PhraseQuery("club Kraków", CLUB),
    PhraseQuery("late night club Kraków", CLUB),
    PhraseQuery("dance club Kraków", CLUB),
    PhraseQuery("electronic club Kraków", CLUB),
]

DEFAULT_GRID: List[GridAnchor] = [
    GridAnchor(50.0647, 19.9450, 15),  # center
    GridAnchor(50.0705, 19.9400, 15),  # north-west
    GridAnchor(50.0590, 19.9400, 15),  # south-west
    GridAnchor(50.0647, 19.9550, 15),  # east
    GridAnchor(50.0647, 19.9350, 15),  # west
]


@dataclass(frozen=True)
class SearchTask:
    anchor: GridAnchor
    phrase: PhraseQuery


class QueryPlan:
    """Cross product of grid anchors and phrases, anchor-major.

    The iteration order decides which record reaches the catalog first, and
    therefore which category and field values an entry ends up with.
    """

    def __init__(
        self,
        phrases: Sequence[PhraseQuery] = tuple(DEFAULT_PHRASES),
        anchors: Sequence[GridAnchor] = tuple(DEFAULT_GRID),
    ) -> None:
        self.phrases = tuple(phrases)
        self.anchors = tuple(anchors)

    def __len__(self) -> int:
        return len(self.phrases) * len(self.anchors)

    def __iter__(self) -> Iterator[SearchTask]:
        for anchor in self.anchors:
            for phrase in self.phrases:
                yield SearchTask(anchor=anchor, phrase=phrase)

    def query_texts(self) -> List[str]:
        return [phrase.text for phrase in self.phrases]

    def grid_texts(self) -> List[str]:
        return [anchor.to_ll() for anchor in self.anchors]
