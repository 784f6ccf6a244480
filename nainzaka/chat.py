# chat.py
"""
Customer chat assistant.

Cheap local rules run before the expensive remote call: the message is
lowercased and checked against three keyword sets (contact, social media,
business hours). The first set that matches answers from the static store
context and the LLM is never called. Only unmatched messages are sent to the
hosted chat-completion endpoint, together with a one-line summary of every
product in the store.
"""

import functools
import json
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from nainzaka import store
from nainzaka.catalog import plain_number
from nainzaka.db import get_db
from nainzaka.llm import LLMClient, LLMError, EmptyCompletionError, get_llm_client
from nainzaka.schemas import ChatIn, ChatOut, ProductOut, serialize_product
from nainzaka.settings import settings

log = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])

CONTACT_KEYWORDS = ("contact", "phone", "email")
SOCIAL_KEYWORDS = ("social media", "instagram", "whatsapp", "tiktok")
HOURS_KEYWORDS = ("business", "hours", "open", "24/7")

EMPTY_REPLY = "Sorry, I couldn't generate a response."
ERROR_REPLY = "Sorry, there was an error processing your request. Please try again later."


# ===================================================================
# STORE CONTEXT
# ===================================================================

@functools.lru_cache(maxsize=4)
def load_store_context(path: str = settings.STORE_CONTEXT_PATH) -> Dict:
    """Static contact/social/hours data shipped with the app."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


# ===================================================================
# KEYWORD ROUTER
# ===================================================================

def contact_reply(context: Dict) -> str:
    details = context["contactDetails"]
    return (
        "Here are our contact details:\n"
        f"Phone: {details['phone']}\n"
        f"Email: {details['email']}\n"
        f"Address: {details['address']}"
    )


def social_reply(context: Dict) -> str:
    links = context["socialLinks"]
    return (
        "Here are our social media links:\n"
        f"WhatsApp: {links['whatsapp']}\n"
        f"Instagram: {links['instagram']}\n"
        f"TikTok: {links['tiktok']}"
    )


def hours_reply(context: Dict) -> str:
    return f"{context['businessHours']['weekdays']}"


# Checked in order; the first hit wins.
KEYWORD_ROUTES: List[Tuple[str, Tuple[str, ...], Callable[[Dict], str]]] = [
    ("contact", CONTACT_KEYWORDS, contact_reply),
    ("social", SOCIAL_KEYWORDS, social_reply),
    ("hours", HOURS_KEYWORDS, hours_reply),
]


def route_message(message: str, context: Dict) -> Optional[Tuple[str, str]]:
    """Return (route name, canned reply) for keyword matches, else None."""
    text = message.lower()
    for name, keywords, render in KEYWORD_ROUTES:
        if any(k in text for k in keywords):
            return name, render(context)
    return None


# ===================================================================
# LLM FALLBACK
# ===================================================================

def product_context(products: Sequence[ProductOut]) -> str:
    lines = []
    for p in products:
        sale = f"₨{plain_number(p.salePrice)}" if p.salePrice else "₨N/A"
        lines.append(
            f"Name: {p.name}, Category: {p.category}, "
            f"Price: ₨{plain_number(p.price)}, Sale Price: {sale}"
        )
    return "\n".join(lines)


def build_chat_prompt(products: Sequence[ProductOut], query: str) -> str:
    return (
        "Rules:\n"
        "- your name is Nainzaka.\n"
        "- Provide accurate information based on the following product data:\n"
        "- just be so specific. no more than 100 words.\n"
        "- don't show prices unless asked for.\n"
        f"{product_context(products)}\n"
        f'Query: "{query}"'
    )


async def answer(message: str, db: AsyncSession, llm: LLMClient) -> ChatOut:
    routed = route_message(message, load_store_context())
    if routed:
        source, reply = routed
        log.info(f"Chat answered locally ({source}).")
        return ChatOut(reply=reply, source=source)

    try:
        products = [serialize_product(p) for p in await store.list_products(db)]
        reply = await llm.complete(build_chat_prompt(products, message), model=settings.GROQ_CHAT_MODEL)
        return ChatOut(reply=reply, source="llm")
    except EmptyCompletionError:
        return ChatOut(reply=EMPTY_REPLY, source="fallback")
    except LLMError as e:
        log.error(f"Chat completion failed: {e}")
        return ChatOut(reply=ERROR_REPLY, source="fallback")
    except Exception as e:
        log.error(f"Unexpected chat error: {e}", exc_info=True)
        return ChatOut(reply=ERROR_REPLY, source="fallback")


# ===================================================================
# ENDPOINT
# ===================================================================

@router.post("", response_model=ChatOut)
async def chat(
    data: ChatIn,
    db: AsyncSession = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
):
    """Answer a storefront chat message."""
    message = data.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message must not be empty.")
    return await answer(message, db, llm)
