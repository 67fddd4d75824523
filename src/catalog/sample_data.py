"""Built-in catalog records served when the remote catalog is unreachable."""

from src.core.models import Character, Story

FEATURED_CHARACTERS = [
    Character(
        id="sample-luna",
        name="Luna",
        avatar="https://via.placeholder.com/120x160/8B5CF6/FFFFFF?text=Luna",
        popularity=482000,
        tags=["carefree", "stylish", "headstrong", "leo"],
        description=(
            "Famous for the gossip that follows her around town, she met you "
            "the night you started working at her favourite bar."
        ),
        gender="female",
    ),
    Character(
        id="sample-kai",
        name="Kai",
        avatar="https://via.placeholder.com/120x160/8B5CF6/FFFFFF?text=Kai",
        popularity=478000,
        tags=["rebellious", "untamed", "dark", "gemini"],
        description=(
            "A third-year student and your boyfriend's younger brother, "
            "who never hides his true self around you."
        ),
        gender="male",
    ),
    Character(
        id="sample-momo",
        name="Momo",
        avatar="https://via.placeholder.com/120x160/8B5CF6/FFFFFF?text=Momo",
        popularity=465000,
        tags=["cute", "petite", "sweet", "virgo"],
        description="Momo has a secret crush on you and keeps asking you to walk home together.",
        gender="female",
    ),
]

PRIVATE_CHARACTERS = [
    Character(
        id="sample-iris",
        name="Iris",
        avatar="https://via.placeholder.com/120x160/8B5CF6/FFFFFF?text=Iris",
        popularity=12000,
        tags=["gentle", "bookish"],
        description="A quiet librarian who remembers every book you ever borrowed.",
        gender="female",
        category="private",
    ),
]

STORIES = [
    Story(
        id="sample-story-after-the-breakup-with-the-ceo",
        title="After the Breakup with the CEO",
        cover="https://via.placeholder.com/200x200/8B5CF6/FFFFFF?text=Story1",
        popularity=78000,
        description="You chased him, then dumped him. He says he will never let you go.",
        character_name="Adrian",
        gender="male",
    ),
    Story(
        id="sample-story-managing-the-hottest-star",
        title="Managing the Hottest Star",
        cover="https://via.placeholder.com/200x200/8B5CF6/FFFFFF?text=Story2",
        popularity=61000,
        description="Endless rumours, endless schedules, and one sharp-tongued celebrity.",
        character_name="Pei",
        gender="male",
    ),
    Story(
        id="sample-story-my-online-crush-is-my-boss",
        title="My Online Crush Is My Boss",
        cover="https://via.placeholder.com/200x200/8B5CF6/FFFFFF?text=Story3",
        popularity=53000,
        description="The stranger you flirted with all month just walked into the Monday meeting.",
        character_name="Evan",
        gender="male",
    ),
]
