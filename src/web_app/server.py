"""FastAPI server for the character chat backend."""

# Load .env FIRST so API keys are visible to the clients built below.
from dotenv import load_dotenv
load_dotenv()

from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from src.catalog.character_service import CatalogError
from src.core.models import RECORD_TYPES, ConversationType, PrivateCharacter
from src.main import build_services
from src.utils.logging import get_logger
from src.workflow.chat_flow import ChatStatus

logger = get_logger(__name__)

app = FastAPI(
    title="Character Chat",
    description=(
        "Chat with AI characters and stories. Conversations, messages, pins "
        "and the diamonds balance are stored per user."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],            # tighten in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared service graph (one per server process)
_services = build_services()


# ── Request models ─────────────────────────────────────────────────────────────

class CreateUserRequest(BaseModel):
    username: str
    email: str
    age: int
    gender: str
    avatar: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "shawn",
                "email": "shawn@example.com",
                "age": 26,
                "gender": "male",
            }
        }
    }


class UpdateProfileRequest(BaseModel):
    username: str
    age: int
    gender: str


class DiamondsRequest(BaseModel):
    amount: int = Field(gt=0)


class OpenConversationRequest(BaseModel):
    type: ConversationType
    record: dict


class PinRequest(BaseModel):
    pinned: bool


class SendMessageRequest(BaseModel):
    content: str


class UnlockRequest(BaseModel):
    url: str


# ── Helpers ────────────────────────────────────────────────────────────────────

def _dump(items) -> List[dict]:
    return [item.model_dump(mode="json") for item in items]


def _require_user(user_id: str):
    user = _services.accounts.load_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail=f"Unknown user: {user_id}")
    return user


# ── Routes ─────────────────────────────────────────────────────────────────────

@app.get("/health", summary="Health check")
def health_check() -> dict:
    """Returns 200 OK when the service is running."""
    return {"status": "ok"}


# ── Catalog ────────────────────────────────────────────────────────────────────

@app.get("/characters", summary="List characters in a category")
def list_characters(category: str = "featured") -> dict:
    """Most popular first; served from the cache for five minutes after a fetch."""
    return {"category": category, "characters": _dump(_services.catalog.fetch_characters(category))}


@app.get("/stories", summary="List stories")
def list_stories() -> dict:
    return {"stories": _dump(_services.catalog.fetch_stories())}


@app.get("/search", summary="Search characters and stories")
def search(q: str) -> dict:
    query = q.strip()
    if not query:
        raise HTTPException(status_code=422, detail="Query must not be empty.")
    try:
        characters = _services.catalog.search_characters(query)
        stories = _services.catalog.search_stories(query)
    except CatalogError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"characters": _dump(characters), "stories": _dump(stories)}


@app.get("/users/{user_id}/private-characters", summary="List a user's private characters")
def list_private_characters(user_id: str) -> dict:
    return {"characters": _dump(_services.catalog.fetch_private_characters(user_id))}


@app.post("/users/{user_id}/private-characters", summary="Create a private character")
def create_private_character(user_id: str, character: PrivateCharacter) -> dict:
    try:
        created = _services.catalog.create_private_character(character, user_id)
    except CatalogError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return created.model_dump(mode="json")


@app.delete("/users/{user_id}/private-characters/{character_id}", summary="Delete a private character")
def delete_private_character(user_id: str, character_id: str) -> dict:
    try:
        _services.catalog.delete_private_character(character_id, user_id)
    except CatalogError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"character_id": character_id, "status": "deleted"}


# ── Users & diamonds ───────────────────────────────────────────────────────────

@app.post("/users", summary="Sign up a user")
def create_user(request: CreateUserRequest) -> dict:
    """
    Create a local account with the starting diamonds balance.

    The remote user record is created best-effort: if the catalog is
    unreachable the local account is still returned.
    """
    user = _services.accounts.create_user(
        username=request.username,
        email=request.email,
        age=request.age,
        gender=request.gender,
        avatar=request.avatar,
    )
    try:
        _services.catalog.create_user(user)
    except CatalogError as exc:
        logger.warning("Remote user creation failed, using local user: %s", exc)
    return user.model_dump(mode="json")


@app.get("/users/{user_id}", summary="Get a user and their diamonds balance")
def get_user(user_id: str) -> dict:
    return _require_user(user_id).model_dump(mode="json")


@app.put("/users/{user_id}", summary="Update a user profile")
def update_profile(user_id: str, request: UpdateProfileRequest) -> dict:
    user = _services.accounts.update_profile(user_id, request.username, request.age, request.gender)
    if user is None:
        raise HTTPException(status_code=404, detail=f"Unknown user: {user_id}")
    return user.model_dump(mode="json")


@app.delete("/users/{user_id}", summary="Delete a user account")
def delete_user(user_id: str) -> dict:
    _require_user(user_id)
    try:
        _services.catalog.delete_user(user_id)
    except CatalogError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    _services.accounts.delete_user(user_id)
    return {"user_id": user_id, "status": "deleted"}


@app.post("/users/{user_id}/diamonds", summary="Top up diamonds")
def add_diamonds(user_id: str, request: DiamondsRequest) -> dict:
    balance = _services.accounts.add_diamonds(user_id, request.amount)
    if balance is None:
        raise HTTPException(status_code=404, detail=f"Unknown user: {user_id}")
    return {"user_id": user_id, "diamonds": balance}


# ── Conversations ──────────────────────────────────────────────────────────────

@app.get("/users/{user_id}/conversations", summary="List conversations (pinned first)")
def list_conversations(user_id: str) -> dict:
    pinned = _services.conversations.load_pinned_ids(user_id)
    conversations = _services.conversations.load(user_id)
    return {
        "conversations": [
            {**c.model_dump(mode="json"), "pinned": c.id in pinned} for c in conversations
        ]
    }


@app.post("/users/{user_id}/conversations", summary="Open a conversation with a character or story")
def open_conversation(user_id: str, request: OpenConversationRequest) -> dict:
    try:
        record = RECORD_TYPES[request.type].model_validate(request.record)
    except ValidationError as exc:
        detail = exc.errors(include_url=False, include_context=False)
        raise HTTPException(status_code=422, detail=detail) from exc
    conversation, messages = _services.chat.open_conversation(record, user_id)
    return {"conversation": conversation.model_dump(mode="json"), "messages": _dump(messages)}


@app.delete("/users/{user_id}/conversations/{conversation_id}", summary="Delete a conversation")
def delete_conversation(user_id: str, conversation_id: str) -> dict:
    _services.chat.delete_conversation(conversation_id, user_id)
    return {"conversation_id": conversation_id, "status": "deleted"}


@app.put("/users/{user_id}/conversations/{conversation_id}/pin", summary="Pin or unpin a conversation")
def pin_conversation(user_id: str, conversation_id: str, request: PinRequest) -> dict:
    _services.conversations.set_pinned(conversation_id, request.pinned, user_id)
    return {"conversation_id": conversation_id, "pinned": request.pinned}


# ── Messages ───────────────────────────────────────────────────────────────────

@app.get("/users/{user_id}/conversations/{conversation_id}/messages", summary="Get messages")
def get_messages(user_id: str, conversation_id: str, limit: Optional[int] = None) -> dict:
    """Return the whole log, or only the last *limit* messages when given."""
    if limit is None:
        messages = _services.messages.load(conversation_id, user_id)
    else:
        messages = _services.messages.recent(conversation_id, user_id, limit=limit)
    return {"conversation_id": conversation_id, "messages": _dump(messages)}


@app.post("/users/{user_id}/conversations/{conversation_id}/messages", summary="Send a chat message")
def send_message(user_id: str, conversation_id: str, request: SendMessageRequest) -> dict:
    """
    Charge the chat cost, store the message and return the character's reply.

    402 when the user cannot afford the message, 502 when the reply could
    not be generated (the user's message is kept).
    """
    logger.info("POST message  user=%s  conversation=%s", user_id, conversation_id)
    try:
        outcome = _services.chat.send(conversation_id, request.content, user_id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    if outcome.status == ChatStatus.INSUFFICIENT_DIAMONDS:
        raise HTTPException(status_code=402, detail=outcome.error)
    if outcome.status == ChatStatus.FAILED:
        raise HTTPException(status_code=502, detail=outcome.error)
    return outcome.model_dump(mode="json")


# ── Gallery ────────────────────────────────────────────────────────────────────

@app.get("/users/{user_id}/gallery/{profile_id}", summary="List unlocked gallery items")
def get_unlocked_gallery(user_id: str, profile_id: str) -> dict:
    return {"profile_id": profile_id, "unlocked": sorted(_services.gallery.unlocked(profile_id, user_id))}


@app.post("/users/{user_id}/gallery/{profile_id}/unlock", summary="Unlock a gallery item with diamonds")
def unlock_gallery_item(user_id: str, profile_id: str, request: UnlockRequest) -> dict:
    _require_user(user_id)
    if not _services.gallery.unlock(profile_id, request.url, user_id, _services.accounts):
        cost = _services.accounts.gallery_cost()
        raise HTTPException(status_code=402, detail=f"Unlocking this image costs {cost} diamonds.")
    return {
        "profile_id": profile_id,
        "url": request.url,
        "diamonds": _services.accounts.balance(user_id),
    }


# ── Entry point (local dev) ────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    from src.main import setup_logging
    from src.utils.config import get_section

    setup_logging()
    _server_cfg = get_section("server")
    uvicorn.run(
        "src.web_app.server:app",
        host=_server_cfg.get("host", "0.0.0.0"),
        port=int(_server_cfg.get("port", 8000)),
        reload=True,
    )
