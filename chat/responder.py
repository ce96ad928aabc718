"""Chatbot replies about live events.

``respond`` prefers the generative API when a key is configured and falls
back to the keyword rule table on any failure, so a reply is always produced.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

import requests

from chat.constants import (
    CHATBOT_TIMEOUT,
    GEMINI_API_KEY,
    GEMINI_API_URL,
    PROMPT_EVENT_LIMIT,
    SYSTEM_PROMPT,
    UPCOMING_LIMIT,
)
from common.helpers import as_utc, utcnow

logger = logging.getLogger(__name__)


class ChatbotUnavailable(Exception):
    pass


def _day(event: dict) -> str:
    return as_utc(event["date"]).strftime("%b %d, %Y")


def _bullets(lines: Iterable[str]) -> str:
    return "\n".join(f"• {line}" for line in lines)


def _upcoming(events: List[dict], now: datetime) -> List[dict]:
    future = [e for e in events if as_utc(e["date"]) >= now]
    return sorted(future, key=lambda e: as_utc(e["date"]))


def _count_reply(events, now):
    return (
        f"Currently, there are {len(events)} events available in our system. "
        "Would you like to explore them by category?"
    )


def _upcoming_reply(events, now):
    upcoming = _upcoming(events, now)[:UPCOMING_LIMIT]
    if not upcoming:
        return "There are no upcoming events scheduled at the moment. Check back soon!"
    listing = _bullets(f"{e['title']} ({e['category']}) on {_day(e)}" for e in upcoming)
    return f"Here are the upcoming events:\n{listing}\n\nWould you like details on any specific event?"


def _category_reply(category, intro, outro, empty):
    def reply(events, now):
        matching = [e for e in events if e["category"] == category]
        if not matching:
            return empty
        listing = _bullets(f"{e['title']} at {e['venue']} on {_day(e)}" for e in matching)
        return f"{intro}\n{listing}\n\n{outro}"

    return reply


def _canned(text):
    return lambda events, now: text


# First matching rule wins; keywords are matched as lower-case substrings.
RULES = [
    (("how many events", "total events"), _count_reply),
    (("today", "upcoming"), _upcoming_reply),
    (
        ("technical", "tech", "hackathon"),
        _category_reply(
            "technical",
            "Here are our technical events:",
            "These events are perfect for coding enthusiasts!",
            "We don't have any technical events scheduled right now. Stay tuned!",
        ),
    ),
    (
        ("cultural", "music", "dance", "art"),
        _category_reply(
            "cultural",
            "Check out these cultural events:",
            "Experience the diversity of our campus culture!",
            "No cultural events are currently scheduled. Check back later!",
        ),
    ),
    (
        ("sports", "sport", "game", "tournament"),
        _category_reply(
            "sports",
            "Here are our sports events:",
            "Ready to compete?",
            "No sports events are scheduled at the moment. Stay active!",
        ),
    ),
    (
        ("workshop", "training", "learn"),
        _category_reply(
            "workshop",
            "Available workshops:",
            "Expand your skills with these hands-on sessions!",
            "No workshops are available right now. Keep learning!",
        ),
    ),
    (
        ("my events", "registered events", "my registrations"),
        _canned(
            "You can view all your registered events in your Student Dashboard. "
            "Navigate to the dashboard from the main menu to see your complete event list."
        ),
    ),
    (
        ("register", "signup", "how to join"),
        _canned(
            "To register for an event:\n1. Browse available events\n"
            "2. Click on an event to view details\n3. Click the 'Register' button\n"
            "4. You must be logged in as a student to register\n\n"
            "Need help finding a specific event?"
        ),
    ),
    (
        ("categories", "types of events"),
        _canned(
            "We have 4 event categories:\n"
            + _bullets(
                [
                    "Technical - Hackathons, tech talks, coding competitions",
                    "Cultural - Music, dance, drama, art exhibitions",
                    "Sports - Tournaments, championships, athletic meets",
                    "Workshop - Skill-building sessions, training programs",
                ]
            )
            + "\n\nWhich category interests you?"
        ),
    ),
    (
        ("help", "what can you do"),
        _canned(
            "I'm CEMS AI Assistant! I can help you with:\n"
            + _bullets(
                [
                    "Finding events by category or date",
                    "Event registration information",
                    "Viewing upcoming events",
                    "Understanding event categories",
                    "General event queries",
                ]
            )
            + "\n\nWhat would you like to know?"
        ),
    ),
    (
        ("venue", "location", "where"),
        _canned(
            "Each event has a specific venue. You can see the venue details on the event page. "
            "Common venues include:\n"
            + _bullets(
                [
                    "Main Auditorium",
                    "Sports Complex",
                    "Open Air Theater",
                    "Computer Labs",
                    "Innovation Hub",
                ]
            )
            + "\n\nLooking for a specific event's location?"
        ),
    ),
]

DEFAULT_REPLY = (
    "I can help you find events, get registration info, and answer questions about "
    "our college event management system. Try asking about:\n"
    + _bullets(
        [
            "Upcoming events",
            "Events by category (technical, cultural, sports, workshop)",
            "How to register",
            "Your registered events",
        ]
    )
    + "\n\nWhat would you like to know?"
)


def rule_based_reply(query: str, events: List[dict], now: Optional[datetime] = None) -> str:
    lowered = query.lower()
    now = now or utcnow()
    for keywords, reply in RULES:
        if any(keyword in lowered for keyword in keywords):
            return reply(events, now)
    return DEFAULT_REPLY


def build_prompt(query: str, events: List[dict], now: Optional[datetime] = None) -> str:
    sample = _upcoming(events, now or utcnow())[:PROMPT_EVENT_LIMIT]
    if sample:
        listing = "\n".join(
            f"- {e['title']} ({e['category']}) on {_day(e)} at {e['time']}, "
            f"{e['venue']}, {e.get('college', '')}; "
            f"{e.get('registration_count', 0)}/{e['capacity']} registered"
            for e in sample
        )
    else:
        listing = "- No upcoming events"
    return f"{SYSTEM_PROMPT}\n\nCurrent Events:\n{listing}\n\nUser: {query}\n\nAssistant:"


def ask_gemini(prompt: str, api_key: str) -> str:
    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": 0.7,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": 512,
        },
    }
    try:
        response = requests.post(
            GEMINI_API_URL,
            params={"key": api_key},
            json=payload,
            timeout=CHATBOT_TIMEOUT,
        )
        response.raise_for_status()
        text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
    except requests.exceptions.Timeout as e:
        raise ChatbotUnavailable("Request timed out") from e
    except requests.exceptions.RequestException as e:
        raise ChatbotUnavailable(f"Gemini API error: {e}") from e
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ChatbotUnavailable("No valid response from AI") from e

    text = text.strip()
    if not text:
        raise ChatbotUnavailable("Empty response from AI")
    return text


def respond(
    query: str,
    events: List[dict],
    api_key: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    api_key = GEMINI_API_KEY if api_key is None else api_key
    if api_key:
        try:
            return ask_gemini(build_prompt(query, events, now), api_key)
        except ChatbotUnavailable as e:
            logger.warning("Falling back to rule-based reply: %s", e)
    return rule_based_reply(query, events, now)
