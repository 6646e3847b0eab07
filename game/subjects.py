"""Curated subjects for quick-start and random rounds.

Ids are catalog (TMDB) ids. Names are only for display before details are
fetched; the candidate lists always come from the provider.
"""
import random
from typing import List, Optional, Sequence, Tuple

from game.state import EntityKind


TOP_MOVIES: List[Tuple[int, str]] = [
    (238, "The Godfather"),
    (389, "12 Angry Men"),
    (155, "The Dark Knight"),
    (429, "The Good, the Bad and the Ugly"),
    (240, "The Godfather Part II"),
    (424, "Schindler's List"),
    (680, "Pulp Fiction"),
    (13, "Forrest Gump"),
    (122, "The Lord of the Rings: The Return of the King"),
    (769, "GoodFellas"),
    (550, "Fight Club"),
    (311, "Once Upon a Time in America"),
    (27205, "Inception"),
    (157336, "Interstellar"),
    (120, "The Lord of the Rings: The Fellowship of the Ring"),
    (121, "The Lord of the Rings: The Two Towers"),
    (76338, "Thor: The Dark World"),
    (637, "Life Is Beautiful"),
    (19404, "Dilwale Dulhania Le Jayenge"),
    (278, "The Shawshank Redemption"),
    (24428, "The Avengers"),
    (299536, "Avengers: Infinity War"),
    (299534, "Avengers: Endgame"),
    (557, "Spider-Man"),
    (315635, "Spider-Man: Homecoming"),
    (429617, "Spider-Man: Far From Home"),
    (634649, "Spider-Man: No Way Home"),
    (603, "The Matrix"),
    (604, "The Matrix Reloaded"),
    (605, "The Matrix Revolutions"),
    (49026, "The Dark Knight Rises"),
    (272, "Batman Begins"),
    (1726, "Iron Man"),
    (10138, "Iron Man 2"),
    (68721, "Iron Man 3"),
    (284053, "Thor: Ragnarok"),
    (8363, "Superbad"),
    (109445, "Frozen"),
    (105, "Back to the Future"),
    (98, "Gladiator"),
    (8587, "The Lion King"),
    (597, "Titanic"),
    (671, "Harry Potter and the Philosopher's Stone"),
    (767, "Harry Potter and the Half-Blood Prince"),
    (12444, "Harry Potter and the Deathly Hallows: Part 1"),
    (12445, "Harry Potter and the Deathly Hallows: Part 2"),
    (118340, "Guardians of the Galaxy"),
    (181808, "Star Wars: The Last Jedi"),
    (11, "Star Wars"),
    (1891, "The Empire Strikes Back"),
    (1892, "Return of the Jedi"),
    (330459, "Rogue One: A Star Wars Story"),
    (438631, "Dune"),
    (254, "King Kong"),
    (335984, "Blade Runner 2049"),
    (335983, "Venom"),
    (447365, "Guardians of the Galaxy Vol. 3"),
    (85, "Raiders of the Lost Ark"),
    (87, "Indiana Jones and the Temple of Doom"),
    (89, "Indiana Jones and the Last Crusade"),
    (807, "Se7en"),
    (629, "The Usual Suspects"),
    (423, "The Pianist"),
    (77338, "The Intouchables"),
    (346698, "Barbie"),
    (872585, "Oppenheimer"),
    (502356, "The Super Mario Bros. Movie"),
    (76600, "Avatar: The Way of Water"),
    (497, "The Green Mile"),
    (23483, "Kick-Ass"),
]

TOP_ACTORS: List[Tuple[int, str]] = [
    (31, "Tom Hanks"),
    (500, "Tom Cruise"),
    (192, "Morgan Freeman"),
    (2, "Mark Hamill"),
    (505710, "Zendaya"),
    (6193, "Leonardo DiCaprio"),
    (3894, "Christian Bale"),
    (287, "Brad Pitt"),
    (16828, "Chris Evans"),
    (74568, "Chris Hemsworth"),
    (73457, "Chris Pratt"),
    (1245, "Scarlett Johansson"),
    (1283, "Helena Bonham Carter"),
    (380, "Robert De Niro"),
    (4, "Carrie Fisher"),
    (3, "Harrison Ford"),
    (3223, "Robert Downey Jr."),
    (2231, "Samuel L. Jackson"),
    (6, "Anthony Daniels"),
    (6384, "Keanu Reeves"),
    (10205, "Sigourney Weaver"),
    (1158, "Al Pacino"),
    (62, "Bruce Willis"),
    (1100, "Arnold Schwarzenegger"),
    (5292, "Denzel Washington"),
    (85, "Johnny Depp"),
    (514, "Jack Nicholson"),
    (18277, "Sandra Bullock"),
    (2888, "Will Smith"),
    (206, "Jim Carrey"),
    (4587, "Halle Berry"),
    (4173, "Anthony Hopkins"),
    (1204, "Julia Roberts"),
    (2461, "Mel Gibson"),
    (5064, "Meryl Streep"),
    (204, "Kate Winslet"),
    (18897, "Jackie Chan"),
    (4483, "Dustin Hoffman"),
    (880, "Ben Affleck"),
    (4491, "Jennifer Aniston"),
    (11856, "Daniel Day-Lewis"),
    (72129, "Jennifer Lawrence"),
    (112, "Cate Blanchett"),
    (2524, "Tom Hardy"),
    (11701, "Angelina Jolie"),
    (1892, "Matt Damon"),
    (54693, "Emma Stone"),
    (110, "Viggo Mortensen"),
    (30614, "Ryan Gosling"),
    (1620, "Michelle Yeoh"),
    (16483, "Sylvester Stallone"),
    (19492, "Viola Davis"),
    (18918, "Dwayne Johnson"),
    (524, "Natalie Portman"),
    (6885, "Charlize Theron"),
    (2227, "Nicole Kidman"),
    (17605, "Idris Elba"),
    (6968, "Hugh Jackman"),
    (73421, "Joaquin Phoenix"),
    (90633, "Gal Gadot"),
    (236695, "John Boyega"),
]


def get_curated(kind: EntityKind) -> Sequence[Tuple[int, str]]:
    """Get the curated (id, name) list for a kind."""
    return TOP_ACTORS if kind == EntityKind.ACTOR else TOP_MOVIES


def pick_random(kind: EntityKind, rng: Optional[random.Random] = None) -> Tuple[int, str]:
    """Pick one curated subject. Pass a seeded rng for repeatable picks."""
    rng = rng or random.Random()
    return rng.choice(list(get_curated(kind)))


def popular(kind: EntityKind, count: int = 10,
            rng: Optional[random.Random] = None) -> List[Tuple[int, str]]:
    """A shuffled selection of curated subjects for the picker screen."""
    rng = rng or random.Random()
    entries = list(get_curated(kind))
    rng.shuffle(entries)
    return entries[:count]
