"""System prompts for the character chat agent."""

from src.core.models import Character, ChatRecord, PrivateCharacter, Story

STAY_IN_CHARACTER = "\nPlease converse with the user as this character, maintaining character consistency."

STAY_IN_STORY = (
    "\nPlease converse with the user as this character, maintaining character "
    "setting and story background consistency."
)


def character_prompt(character: Character) -> str:
    prompt = f"You are {character.name}, {character.description}."
    if character.tags:
        prompt += f"\nYour personality traits: {', '.join(character.tags)}."
    return prompt + STAY_IN_CHARACTER


def story_prompt(story: Story) -> str:
    prompt = f'You are {story.character_name} from the story "{story.title}".\n{story.description}'
    if story.chat_description:
        prompt += f"\n\n{story.chat_description}"
    return prompt + STAY_IN_STORY


def private_character_prompt(character: PrivateCharacter) -> str:
    prompt = f"You are {character.name}, {character.description}."
    if character.chat_description:
        prompt += f"\n\n{character.chat_description}"
    return prompt + STAY_IN_CHARACTER


def build_system_prompt(record: ChatRecord) -> str:
    """Return the system prompt for whichever kind of record is being chatted with."""
    if isinstance(record, Character):
        return character_prompt(record)
    if isinstance(record, Story):
        return story_prompt(record)
    if isinstance(record, PrivateCharacter):
        return private_character_prompt(record)
    raise TypeError(f"Unsupported chat record: {type(record).__name__}")
