"""Dynamic question flow — a bounded, budget-aware interview (at most 5 questions + a closing one).

Each turn tries one LLM call for an adaptive question; on any failure, or when
too few options survive the budget/duration filters, it falls back to
deterministic templates in priority order:

    budget → duration → style → priorities → accommodation → interests

Sessions are immutable: record_answer returns a new session.
"""

import json
import logging
import math
import re
from dataclasses import dataclass, field, replace

from app.data.currency import (
    CURRENCY_SYMBOLS,
    SYMBOL_CURRENCIES,
    currency_code,
    currency_for_location,
    usd_multiplier,
)
from app.services.llm_client import LLMClient, llm_client
from app.services.recommendation.config import recommendation_config
from app.services.recommendation.models import UserPreferences
from app.services.recommendation.prompts import load_prompt

logger = logging.getLogger(__name__)

cfg = recommendation_config
qcfg = cfg.questions

_GENERATOR_GUIDE = load_prompt("question_generator_guide.md")

FINAL_QUESTION_ID = "final"
FLEXIBLE_ANSWER = "None - I'm flexible!"

TEMPLATE_ORDER = ("budget", "duration", "style", "priorities", "accommodation", "interests")


# ---------- Data structures ----------


@dataclass(frozen=True)
class DynamicQuestion:
    id: str
    text: str
    options: tuple[str, ...]
    icon: str = "❓"
    multi_select: bool = False
    priority: int = 1
    context_aware: bool = True
    adaptive_options: bool = True
    metadata: dict = field(default_factory=dict)   # display only
    source: str = "template"                       # "llm" | "template" | "final"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "options": list(self.options),
            "icon": self.icon,
            "multi_select": self.multi_select,
            "priority": self.priority,
            "context_aware": self.context_aware,
            "adaptive_options": self.adaptive_options,
            "metadata": dict(self.metadata),
            "source": self.source,
        }


@dataclass(frozen=True)
class QuestionSession:
    """State of one interview. Never mutated; see QuestionFlow.record_answer."""

    question_number: int = 1
    answers: dict = field(default_factory=dict)          # question id → str | tuple[str, ...]
    previous_questions: tuple[str, ...] = ()

    # Creator profile
    themes: tuple[str, ...] = ()
    content_type: str = ""
    audience_location: str | None = None

    # Derived from answers
    budget: float | None = None
    currency: str | None = None
    duration_days: int | None = None
    daily_budget: int | None = None

    complete: bool = False

    @property
    def answered_ids(self) -> set[str]:
        return set(self.answers)

    @property
    def currency_symbol(self) -> str:
        code = self.currency or currency_for_location(self.audience_location)
        return CURRENCY_SYMBOLS.get(code, "$")

    def to_dict(self) -> dict:
        return {
            "question_number": self.question_number,
            "answers": {k: list(v) if isinstance(v, tuple) else v for k, v in self.answers.items()},
            "previous_questions": list(self.previous_questions),
            "themes": list(self.themes),
            "content_type": self.content_type,
            "audience_location": self.audience_location,
            "budget": self.budget,
            "currency": self.currency,
            "duration_days": self.duration_days,
            "daily_budget": self.daily_budget,
            "complete": self.complete,
        }


# ---------- Answer parsing ----------

_SYMBOLS = "".join(re.escape(s) for s in SYMBOL_CURRENCIES)
_NUMBER = r"\d[\d,]*(?:\.\d+)?"
_SYMBOL_FIRST = re.compile(rf"^\s*([{_SYMBOLS}])\s*({_NUMBER})")
_NUMBER_FIRST = re.compile(rf"^\s*({_NUMBER})(?:\s*-\s*{_NUMBER})?\s*([A-Za-z]{{3}}\b|[{_SYMBOLS}])?")


def parse_budget(answer) -> tuple[float, str] | None:
    """Budget answers like "$500-1000", "₹5000", "500 USD" → (amount, ISO code).

    Ranges resolve to their lower bound. Returns None when no amount is present.
    """
    if not isinstance(answer, str):
        return None

    match = _SYMBOL_FIRST.match(answer)
    if match:
        return float(match.group(2).replace(",", "")), currency_code(match.group(1))

    match = _NUMBER_FIRST.match(answer)
    if match:
        return float(match.group(1).replace(",", "")), currency_code(match.group(2))

    return None


def parse_duration_days(answer) -> int | None:
    """Duration answers like "2 weeks", "1 month", "3-4 days" → days (ranges take
    their first number). Returns None for non-strings."""
    if not isinstance(answer, str):
        return None
    lowered = answer.lower()
    match = re.search(r"(\d+)", lowered)
    count = int(match.group(1)) if match else None

    if "day" in lowered:
        return max(1, count or 1)
    if "week" in lowered:
        return max(1, count or 1) * 7
    if "month" in lowered:
        return max(1, count or 1) * 30
    return max(1, count) if count else None


def _to_usd(amount: float, currency: str | None) -> float:
    return amount * usd_multiplier(currency or "USD")


# ---------- Option filters ----------


def _contains_any(option: str, keywords) -> bool:
    lowered = option.lower()
    return any(k in lowered for k in keywords)


def filter_options(options, session: QuestionSession) -> list[str]:
    """Drop options that contradict the known budget or trip length."""
    drop_luxury = drop_budget = False

    if session.budget:
        budget_usd = _to_usd(session.budget, session.currency)
        # Thresholds apply to the stated amount and to its USD value
        drop_luxury = session.budget < qcfg.luxury_cutoff_budget or budget_usd < qcfg.luxury_cutoff_budget
        drop_budget = session.budget > qcfg.budget_cutoff_budget or budget_usd > qcfg.budget_cutoff_budget

        if session.daily_budget:
            daily_tier = cfg.daily_tiers.tier(_to_usd(session.daily_budget, session.currency))
            drop_luxury = drop_luxury or daily_tier in ("ultra-budget", "budget")
            drop_budget = drop_budget or daily_tier == "luxury"

    kept = []
    for option in options:
        if not isinstance(option, str) or not option.strip():
            continue
        if drop_luxury and _contains_any(option, qcfg.luxury_keywords):
            continue
        if drop_budget and _contains_any(option, qcfg.budget_keywords):
            continue
        if session.duration_days:
            lowered = option.lower()
            if session.duration_days <= qcfg.short_trip_days and "month" in lowered:
                continue
            if session.duration_days > qcfg.long_trip_days and "day trip" in lowered:
                continue
        kept.append(option.strip())
    return kept


# Defaults appended to thin option sets, keyed by a fragment of the question id
PADDING_OPTIONS: dict[str, tuple[str, ...]] = {
    "style": ("Flexible - mix of everything", "Whatever gives best content"),
    "priorit": ("Meeting other creators", "Unique experiences"),
    "accommodation": ("Depends on the destination", "Open to suggestions"),
}


def pad_options(question_id: str, options: list[str]) -> list[str]:
    needed = qcfg.pad_to_options - len(options)
    if needed <= 0:
        return options
    extra: list[str] = []
    for fragment, defaults in PADDING_OPTIONS.items():
        if fragment in question_id.lower():
            extra.extend(d for d in defaults if d not in options)
    return options + extra[:needed]


def select_icon(text: str) -> str:
    lowered = text.lower()
    if "budget" in lowered or "cost" in lowered:
        return "💸"
    if "duration" in lowered or "long" in lowered or "days" in lowered:
        return "🗓️"
    if "style" in lowered or "type" in lowered:
        return "🌍"
    if "accommodation" in lowered or "stay" in lowered:
        return "🏨"
    if "food" in lowered or "cuisine" in lowered:
        return "🍽️"
    if "priorit" in lowered or "important" in lowered:
        return "🎯"
    if "climate" in lowered or "weather" in lowered:
        return "☀️"
    if "creator" in lowered or "collab" in lowered:
        return "👥"
    if "brand" in lowered or "partner" in lowered:
        return "🤝"
    return "❓"


def is_multi_select(text: str) -> bool:
    return _contains_any(text, qcfg.multi_select_keywords)


# ---------- Flow ----------


class QuestionFlow:
    """Produces one question per turn and folds answers into a new session."""

    def __init__(self, llm: LLMClient | None = None):
        self.llm = llm or llm_client

    async def next_question(self, session: QuestionSession) -> DynamicQuestion | None:
        """Next question for the session, or None once the closing question is answered."""
        if session.complete or FINAL_QUESTION_ID in session.answers:
            return None

        if session.question_number > qcfg.max_questions:
            return self.final_question()

        if self.llm.available:
            try:
                return await self._llm_question(session)
            except Exception as e:
                logger.warning(f"Adaptive question generation failed, using template: {e}")
        else:
            logger.info("No LLM provider enabled, using question templates")

        return self.template_question(session)

    # ---- LLM path ----

    async def _llm_question(self, session: QuestionSession) -> DynamicQuestion:
        raw = await self.llm.complete(
            system=_GENERATOR_GUIDE,
            user=self._build_user_prompt(session),
            max_tokens=cfg.llm.max_tokens,
            temperature=cfg.llm.temperature,
            json_mode=cfg.llm.json_mode,
        )

        # Clean markdown fencing if present
        text = raw.strip()
        if text.startswith("```"):
            text = text.split("\n", 1)[1] if "\n" in text else text[3:]
            if text.endswith("```"):
                text = text[:-3]
            text = text.strip()

        parsed = json.loads(text)
        question_text = parsed.get("question")
        if not isinstance(question_text, str) or not question_text.strip():
            raise ValueError("LLM response has no question text")
        raw_options = parsed.get("options") or []
        if not isinstance(raw_options, list):
            raise ValueError("LLM options are not a list")

        options = filter_options(raw_options, session)
        if len(options) < qcfg.min_options:
            raise ValueError(f"Only {len(options)} usable options after filtering")

        question_text = question_text.strip()
        return DynamicQuestion(
            id=f"q{session.question_number}",
            text=question_text,
            options=tuple(dict.fromkeys(options))[:qcfg.max_options],
            icon=select_icon(question_text),
            multi_select=is_multi_select(question_text),
            priority=session.question_number,
            metadata=self._metadata(session),
            source="llm",
        )

    def _build_user_prompt(self, session: QuestionSession) -> str:
        parts = [
            f"Content Type: {session.content_type or 'unknown'}",
            f"Themes: {', '.join(session.themes) or 'none'}",
        ]
        if session.audience_location:
            parts.append(f"Audience location: {session.audience_location}")

        if session.answers:
            parts.append("\nPREVIOUS ANSWERS:")
            for key, value in session.answers.items():
                shown = ", ".join(value) if isinstance(value, tuple) else value
                parts.append(f"- {key.replace('_', ' ').title()}: {shown}")

        symbol = session.currency_symbol
        if session.budget:
            tier = cfg.total_tiers.tier(_to_usd(session.budget, session.currency))
            parts.append(f"\nBUDGET CONSTRAINT: {symbol}{session.budget:.0f}")
            parts.append(f"This is a {tier} budget - all suggestions must be realistic for this amount.")
        if session.duration_days:
            parts.append(f"DURATION CONSTRAINT: {session.duration_days} days")
        if session.daily_budget:
            parts.append(f"DAILY BUDGET: {symbol}{session.daily_budget}/day")

        previous = "\n".join(session.previous_questions) or "None yet"
        return (
            "CONTEXT:\n" + "\n".join(parts)
            + f"\n\nPREVIOUS QUESTIONS ASKED:\n{previous}"
            + f"\n\nGenerate question {session.question_number} of {qcfg.max_questions}."
        )

    # ---- Templates ----

    def template_question(self, session: QuestionSession) -> DynamicQuestion:
        """Deterministic question for the first unanswered topic."""
        answered = session.answered_ids
        builders = {
            "budget": self._budget_question,
            "duration": self._duration_question,
            "style": self._style_question,
            "priorities": self._priorities_question,
            "accommodation": self._accommodation_question,
            "interests": self._interests_question,
        }
        needs = {
            "style": session.budget is not None,
            "priorities": session.budget is not None and session.duration_days is not None,
            "accommodation": session.budget is not None,
        }

        remaining = [qid for qid in TEMPLATE_ORDER if qid not in answered]
        if not remaining:
            return self.final_question()

        chosen = next((qid for qid in remaining if needs.get(qid, True)), None)
        if chosen is None:
            chosen = "interests" if "interests" in remaining else remaining[0]

        question = builders[chosen](session)
        options = pad_options(question.id, filter_options(question.options, session))
        return replace(question, options=tuple(options)[:qcfg.max_options], metadata=self._metadata(session))

    def _budget_question(self, session: QuestionSession) -> DynamicQuestion:
        symbol = session.currency_symbol
        ranges = ((300, 500), (500, 1000), (1000, 2000), (2000, 5000), (5000, 10000))
        options = tuple(f"{symbol}{lo}-{hi}" for lo, hi in ranges) + ("Custom amount",)
        return DynamicQuestion(
            id="budget",
            text="What's your travel budget per person?",
            options=options,
            icon="💸",
            priority=1,
        )

    def _duration_question(self, session: QuestionSession) -> DynamicQuestion:
        budget = _to_usd(session.budget, session.currency) if session.budget else 0
        if budget < 500:
            options = ("1 day trip", "2-3 days", "4-5 days", "One week")
        elif budget < 1000:
            options = ("2-3 days", "4-7 days", "1-2 weeks", "2-3 weeks")
        else:
            options = ("3-5 days", "1 week", "2 weeks", "3-4 weeks", "1+ months")

        if session.budget:
            text = f"With your {session.currency_symbol}{session.budget:.0f} budget, how long would you like to travel?"
        else:
            text = "How long would you like to travel?"
        return DynamicQuestion(id="duration", text=text, options=options, icon="🗓️", priority=2)

    def _style_question(self, session: QuestionSession) -> DynamicQuestion:
        budget = session.budget or 1000
        tier = cfg.total_tiers.tier(_to_usd(budget, session.currency))
        if tier == "budget":
            options = (
                "Backpacking & hostels",
                "Local experiences & street food",
                "Budget-friendly adventures",
                "Cultural immersion on a budget",
                "Work exchange & volunteering",
            )
        elif tier == "mid-range":
            options = (
                "Comfortable hotels & local dining",
                "Mix of budget and comfort",
                "Guided tours & experiences",
                "Photography-focused travel",
                "Balanced adventure & relaxation",
            )
        else:
            options = (
                "Luxury accommodations",
                "Premium experiences",
                "Exclusive access & VIP",
                "High-end culinary journey",
                "Boutique & unique stays",
            )
        return DynamicQuestion(
            id="style",
            text=f"What travel style fits your {session.currency_symbol}{budget:.0f} budget best?",
            options=options,
            icon="🌍",
            priority=3,
        )

    def _priorities_question(self, session: QuestionSession) -> DynamicQuestion:
        budget = session.budget or 1000
        duration = session.duration_days or 7
        daily = session.daily_budget or math.floor(budget / duration)
        daily_usd = _to_usd(daily, session.currency)

        if daily_usd < 50:
            options = (
                "Free attractions & nature",
                "Street food & local markets",
                "Public transport & walking tours",
                "Community experiences",
                "Budget photography spots",
            )
        elif daily_usd < 150:
            options = (
                "Cultural sites & museums",
                "Local restaurants & cafes",
                "Mix of free and paid attractions",
                "Comfortable transport",
                "Some guided experiences",
            )
        else:
            options = (
                "Premium experiences",
                "Fine dining & cocktails",
                "Private tours & guides",
                "Luxury transport",
                "Exclusive access venues",
            )

        symbol = session.currency_symbol
        if duration <= 3:
            text = f"For your {duration}-day trip with {symbol}{budget:.0f} budget, what's most important?"
        else:
            text = f"With {duration} days and {symbol}{budget:.0f} budget ({symbol}{daily}/day), what are your priorities?"
        return DynamicQuestion(id="priorities", text=text, options=options, icon="🎯", multi_select=True, priority=4)

    def _accommodation_question(self, session: QuestionSession) -> DynamicQuestion:
        budget = session.budget or 1000
        duration = session.duration_days or 7
        per_night = math.floor(budget * qcfg.accommodation_share / duration)
        per_night_usd = _to_usd(per_night, session.currency)

        if per_night_usd < 20:
            options = (
                "Hostels (dorms)",
                "Couchsurfing",
                "Camping",
                "Work exchange accommodation",
                "Ultra-budget guesthouses",
            )
        elif per_night_usd < 50:
            options = ("Private hostel rooms", "Budget hotels", "Airbnb (shared)", "Guesthouses", "Homestays")
        elif per_night_usd < 100:
            options = (
                "Mid-range hotels",
                "Entire Airbnb apartments",
                "Boutique guesthouses",
                "Business hotels",
                "Serviced apartments",
            )
        else:
            options = ("Luxury hotels", "Resort stays", "Premium Airbnb", "Boutique hotels", "Five-star properties")

        return DynamicQuestion(
            id="accommodation",
            text=f"With ~{session.currency_symbol}{per_night}/night for accommodation, what's your preference?",
            options=options,
            icon="🏨",
            priority=5,
        )

    def _interests_question(self, session: QuestionSession) -> DynamicQuestion:
        themes = " ".join(session.themes).lower()
        content = session.content_type.lower()

        options: list[str] = []
        if "photo" in themes or "photo" in content:
            options += ["Photography hotspots", "Golden hour locations", "Unique architecture"]
        if "food" in themes or "food" in content:
            options += ["Local cuisine", "Street food tours", "Cooking classes"]
        if "adventure" in themes or "outdoor" in themes:
            options += ["Hiking & trekking", "Water activities", "Extreme sports"]
        if "culture" in themes or "history" in themes:
            options += ["Museums & galleries", "Historical sites", "Local traditions"]
        if "business" in themes or "tech" in themes:
            options += ["Coworking spaces", "Tech hubs", "Networking events"]

        budget = _to_usd(session.budget, session.currency) if session.budget else 1000
        if budget < 500:
            options += ["Free walking tours", "Public markets", "Street art"]
        else:
            options += ["Guided experiences", "Workshop classes", "Special events"]

        return DynamicQuestion(
            id="interests",
            text="Which experiences interest you most for content creation?",
            options=tuple(dict.fromkeys(options))[:qcfg.max_options],
            icon="🎯",
            multi_select=True,
            priority=6,
        )

    @staticmethod
    def final_question() -> DynamicQuestion:
        return DynamicQuestion(
            id=FINAL_QUESTION_ID,
            text="Any specific requirements or preferences I should know about?",
            options=(
                "Visa-free destinations only",
                "Direct flights preferred",
                "Vegetarian/Vegan friendly",
                "LGBTQ+ friendly",
                "Family-friendly",
                "Solo traveler safety",
                "Accessibility needs",
                FLEXIBLE_ANSWER,
            ),
            icon="📝",
            multi_select=True,
            priority=10,
            adaptive_options=False,
            source="final",
        )

    @staticmethod
    def _metadata(session: QuestionSession) -> dict:
        metadata = {}
        if session.budget:
            metadata["budget_range"] = {"min": 0, "max": session.budget}
        if session.duration_days:
            metadata["duration_range"] = {"min": 1, "max": session.duration_days}
        return metadata

    # ---- Answers ----

    def validate_answer(self, session: QuestionSession, question_id: str, answer) -> tuple[bool, str | None]:
        """Reject budgets under 50 and trips that leave less than 20/day (USD)."""
        if answer is None or (isinstance(answer, (str, tuple, list)) and not answer):
            return False, "Answer is empty"

        if question_id == "budget":
            parsed = parse_budget(answer)
            if parsed and _to_usd(*parsed) < qcfg.min_total_budget:
                return False, "Budget too low for travel recommendations"

        if question_id == "duration" and session.budget:
            days = parse_duration_days(answer)
            if days:
                daily = session.budget / days
                if _to_usd(daily, session.currency) < qcfg.min_daily_budget:
                    return False, (
                        f"With your budget, {days} days would mean only "
                        f"{session.currency_symbol}{daily:.0f}/day. Consider shorter duration."
                    )
        return True, None

    def record_answer(
        self,
        session: QuestionSession,
        question_id: str,
        answer,
        question_text: str | None = None,
    ) -> QuestionSession:
        """Fold one answer into a new session.

        Raises:
            ValueError: flow already complete, question already answered, or invalid answer.
        """
        if session.complete:
            raise ValueError("Question flow is already complete")
        if question_id in session.answers:
            raise ValueError(f"Question '{question_id}' was already answered")

        valid, message = self.validate_answer(session, question_id, answer)
        if not valid:
            raise ValueError(message)

        if isinstance(answer, (list, tuple)):
            answer = tuple(str(a) for a in answer)

        updates: dict = {"answers": {**session.answers, question_id: answer}}
        if question_text:
            updates["previous_questions"] = session.previous_questions + (question_text,)

        lowered_text = (question_text or "").lower()
        if question_id == "budget" or (session.budget is None and "budget" in lowered_text):
            parsed = parse_budget(answer)
            if parsed:
                updates["budget"], updates["currency"] = parsed

        if question_id == "duration" or (
            session.duration_days is None and ("how long" in lowered_text or "duration" in lowered_text)
        ):
            days = parse_duration_days(answer)
            if days:
                updates["duration_days"] = days

        budget = updates.get("budget", session.budget)
        days = updates.get("duration_days", session.duration_days)
        if budget and days:
            updates["daily_budget"] = math.floor(budget / days)

        if question_id == FINAL_QUESTION_ID:
            updates["complete"] = True
        else:
            updates["question_number"] = min(session.question_number + 1, qcfg.max_questions + 1)

        logger.debug(f"Recorded answer for {question_id} (question {session.question_number})")
        return replace(session, **updates)

    def to_preferences(self, session: QuestionSession) -> UserPreferences:
        """Freeze a session's answers into the processor's input.

        Raises:
            ValueError: no usable budget was given.
        """
        if not session.budget:
            raise ValueError("A budget answer is required before recommending")

        def as_tuple(value) -> tuple[str, ...]:
            if value is None:
                return ()
            return value if isinstance(value, tuple) else (value,)

        constraints = tuple(c for c in as_tuple(session.answers.get(FINAL_QUESTION_ID)) if c != FLEXIBLE_ANSWER)
        interests = as_tuple(session.answers.get("interests"))
        style = session.answers.get("style")

        return UserPreferences(
            budget=float(session.budget),
            currency=session.currency or "USD",
            duration_days=session.duration_days or 7,
            travel_style=", ".join(style) if isinstance(style, tuple) else style,
            content_focus=session.content_type or None,
            climate=as_tuple(session.answers.get("climate")),
            constraints=constraints,
            themes=tuple(dict.fromkeys(session.themes + interests)),
        )


# Singleton — import this everywhere
question_flow = QuestionFlow()
