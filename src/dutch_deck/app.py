from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from .deck import add_card, apply_review, find_card, load_deck, save_deck
from .progress import average_confidence, load_progress
from .srs import Flashcard, Rating, now_ms, quality_for_rating, select_due_cards
from .storage import default_store

PACKAGE_ROOT = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_ROOT / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@asynccontextmanager
async def lifespan(_: FastAPI):
    default_store()
    yield


app = FastAPI(title="Dutch Deck", lifespan=lifespan)


def _is_hx(request: Request) -> bool:
    return request.headers.get("HX-Request", "false").lower() == "true"


def _review_context(due: list[Flashcard], card: Flashcard | None, revealed: bool) -> dict:
    return {"card": card, "revealed": revealed, "remaining": len(due)}


@app.get("/", response_class=HTMLResponse)
async def index(request: Request) -> Response:
    store = default_store()
    deck = load_deck(store)
    context = {
        "page_title": "Dutch Deck",
        "due_count": len(select_due_cards(deck, now_ms())),
        "deck_size": len(deck),
        "cards": list(reversed(deck))[:10],
        "completed_count": len(load_progress(store)),
        "average_confidence": average_confidence(store),
    }
    return templates.TemplateResponse(request, "index.html", context)


@app.post("/cards", response_class=HTMLResponse)
async def create_card_route(
    request: Request,
    front: str = Form(...),
    back: str = Form(...),
    source: str = Form(""),
) -> Response:
    store = default_store()
    try:
        deck, card = add_card(load_deck(store), front, back, source or None)
    except ValueError:
        return HTMLResponse("Front and back are required.", status_code=status.HTTP_400_BAD_REQUEST)

    if card is None:
        message = f'"{front.strip()}" is already in your deck'
        return HTMLResponse(message, status_code=status.HTTP_409_CONFLICT)
    save_deck(store, deck)

    if _is_hx(request):
        return templates.TemplateResponse(request, "partials/card_row.html", {"card": card})

    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/review", response_class=HTMLResponse)
async def review_panel(request: Request) -> Response:
    due = select_due_cards(load_deck(default_store()), now_ms())
    card = due[0] if due else None
    return templates.TemplateResponse(request, "review.html", _review_context(due, card, False))


@app.get("/review/{card_id}/reveal", response_class=HTMLResponse)
async def reveal_card(request: Request, card_id: str) -> Response:
    deck = load_deck(default_store())
    due = select_due_cards(deck, now_ms())
    card = find_card(deck, card_id)
    return templates.TemplateResponse(request, "review.html", _review_context(due, card, card is not None))


@app.post("/review/{card_id}/{rating}", response_class=HTMLResponse)
async def grade_card(
    request: Request,
    card_id: str,
    rating: Rating,
) -> Response:
    store = default_store()
    now = now_ms()
    deck = apply_review(load_deck(store), card_id, quality_for_rating(rating), now=now)
    save_deck(store, deck)
    due = select_due_cards(deck, now)
    next_card = due[0] if due else None
    return templates.TemplateResponse(request, "review.html", _review_context(due, next_card, False))


def main() -> None:
    import uvicorn

    uvicorn.run("dutch_deck.app:app", host="127.0.0.1", port=8000, reload=True)


if __name__ == "__main__":
    main()
