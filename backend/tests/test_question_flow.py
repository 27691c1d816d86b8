"""
Question flow tests.

Covers:
  - answer parsing (budgets in symbols / codes / ranges, durations)
  - option filters by budget and trip length, option padding
  - LLM path incl. fenced JSON, failure and thin-option fallbacks to templates
  - template priority order and the closing question
  - answer validation, record_answer immutability and errors
  - conversion to processor preferences
"""

import json

import pytest

from app.services.question_flow import (
    FINAL_QUESTION_ID,
    FLEXIBLE_ANSWER,
    QuestionFlow,
    QuestionSession,
    filter_options,
    is_multi_select,
    pad_options,
    parse_budget,
    parse_duration_days,
    select_icon,
)


@pytest.fixture
def template_flow(mock_llm):
    mock_llm.available = False
    return QuestionFlow(mock_llm)


@pytest.fixture
def llm_flow(mock_llm):
    return QuestionFlow(mock_llm)


def llm_reply(question="Which vibe suits your channel?", options=None) -> str:
    return json.dumps({
        "question": question,
        "options": options or ["Beach towns", "Mountain villages", "Big cities", "Desert escapes"],
        "reasoning": "Builds on previous answers",
        "adaptations": [],
    })


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "answer, expected",
    [
        ("$500-1000", (500.0, "USD")),
        ("₹5000", (5000.0, "INR")),
        ("€1,200", (1200.0, "EUR")),
        ("500 USD", (500.0, "USD")),
        ("2500 gbp", (2500.0, "GBP")),
        ("3000", (3000.0, "USD")),
        ("Custom amount", None),
        (("$500",), None),
    ],
)
def test_parse_budget(answer, expected):
    assert parse_budget(answer) == expected


@pytest.mark.parametrize(
    "answer, expected",
    [
        ("3-5 days", 3),
        ("1 week", 7),
        ("2 weeks", 14),
        ("1+ months", 30),
        ("1 day trip", 1),
        ("10", 10),
        ("whenever", None),
        (None, None),
    ],
)
def test_parse_duration(answer, expected):
    assert parse_duration_days(answer) == expected


# ---------------------------------------------------------------------------
# Option filters
# ---------------------------------------------------------------------------

def test_low_budget_drops_luxury_options():
    session = QuestionSession(budget=800, currency="USD")
    kept = filter_options(["Luxury hotels", "Hostels", "Premium experiences", "Street food"], session)
    assert kept == ["Hostels", "Street food"]


def test_high_budget_drops_budget_options():
    session = QuestionSession(budget=8000, currency="USD")
    kept = filter_options(["Budget hotels", "Backpacking", "Boutique stays"], session)
    assert kept == ["Boutique stays"]


def test_budget_compared_in_usd():
    # ₹50,000 is about $600, so luxury goes
    session = QuestionSession(budget=50_000, currency="INR")
    assert filter_options(["Luxury resort", "Guesthouse"], session) == ["Guesthouse"]


@pytest.mark.parametrize("budget, currency", [(950, "EUR"), (900, "GBP"), (999, "USD")])
def test_stated_budget_under_1000_drops_luxury(budget, currency):
    session = QuestionSession(budget=budget, currency=currency)
    kept = filter_options(["Luxury resort", "Guesthouse", "Premium tours"], session)
    assert kept == ["Guesthouse"]


def test_stated_budget_over_5000_drops_budget_options():
    session = QuestionSession(budget=4800, currency="EUR")
    assert filter_options(["Hostel dorms", "Boutique stays"], session) == ["Boutique stays"]


def test_short_trip_drops_month_options():
    session = QuestionSession(duration_days=5)
    assert filter_options(["1 month", "3-5 days", "Monthly pass"], session) == ["3-5 days"]


def test_long_trip_drops_day_trips():
    session = QuestionSession(duration_days=21)
    assert filter_options(["Day trip to the coast", "Multi-city loop"], session) == ["Multi-city loop"]


def test_blank_options_removed():
    assert filter_options(["", "  ", None, "Real"], QuestionSession()) == ["Real"]


def test_padding_for_thin_style_options():
    padded = pad_options("style", ["Foodie trip"])
    assert padded == ["Foodie trip", "Flexible - mix of everything", "Whatever gives best content"]


def test_padding_not_needed():
    options = ["a", "b", "c", "d"]
    assert pad_options("style", options) == options


def test_icon_and_multi_select_detection():
    assert select_icon("What's your budget?") == "💸"
    assert select_icon("Where would you stay?") == "🏨"
    assert select_icon("Anything else?") == "❓"
    assert is_multi_select("Select all that apply") is True
    assert is_multi_select("Pick one") is False


# ---------------------------------------------------------------------------
# next_question — LLM path
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_llm_question_used_when_available(llm_flow, mock_llm):
    mock_llm.complete.return_value = llm_reply()
    question = await llm_flow.next_question(QuestionSession(question_number=2))

    assert question.source == "llm"
    assert question.id == "q2"
    assert question.options == ("Beach towns", "Mountain villages", "Big cities", "Desert escapes")
    mock_llm.complete.assert_awaited_once()


@pytest.mark.asyncio
async def test_llm_fenced_json_is_parsed(llm_flow, mock_llm):
    mock_llm.complete.return_value = f"```json\n{llm_reply()}\n```"
    question = await llm_flow.next_question(QuestionSession())
    assert question.source == "llm"
    assert question.text == "Which vibe suits your channel?"


@pytest.mark.asyncio
async def test_llm_failure_falls_back_to_template(llm_flow, mock_llm, caplog):
    mock_llm.complete.side_effect = RuntimeError("All LLM providers failed")
    question = await llm_flow.next_question(QuestionSession())

    assert question.source == "template"
    assert question.id == "budget"
    assert "using template" in caplog.text


@pytest.mark.asyncio
async def test_llm_invalid_json_falls_back(llm_flow, mock_llm):
    mock_llm.complete.return_value = "not json at all"
    question = await llm_flow.next_question(QuestionSession())
    assert question.source == "template"


@pytest.mark.asyncio
async def test_llm_too_few_options_after_filtering_falls_back(llm_flow, mock_llm):
    mock_llm.complete.return_value = llm_reply(
        question="Where would you stay?",
        options=["Luxury villa", "Five-star resort", "Hostel"],
    )
    session = QuestionSession(question_number=2, answers={"budget": "$500-1000"}, budget=500, currency="USD")
    question = await llm_flow.next_question(session)

    assert question.source == "template"
    assert question.id == "duration"


@pytest.mark.asyncio
async def test_prompt_carries_budget_constraint(llm_flow, mock_llm):
    mock_llm.complete.return_value = llm_reply()
    session = QuestionSession(
        question_number=3,
        answers={"budget": "$2000-5000"},
        budget=2000,
        currency="USD",
        duration_days=7,
        daily_budget=285,
        themes=("food",),
    )
    await llm_flow.next_question(session)

    user_prompt = mock_llm.complete.await_args.kwargs["user"]
    assert "BUDGET CONSTRAINT: $2000" in user_prompt
    assert "DURATION CONSTRAINT: 7 days" in user_prompt
    assert "Generate question 3 of 5." in user_prompt


# ---------------------------------------------------------------------------
# next_question — templates and closing question
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_template_order(template_flow):
    flow = template_flow
    session = QuestionSession()
    seen = []
    for qid, answer in [
        ("budget", "$1000-2000"),
        ("duration", "1 week"),
        ("style", "Mix of budget and comfort"),
        ("priorities", ["Cultural sites & museums"]),
        ("accommodation", "Mid-range hotels"),
    ]:
        question = await flow.next_question(session)
        seen.append(question.id)
        assert question.id == qid
        session = flow.record_answer(session, question.id, answer, question.text)

    assert seen == ["budget", "duration", "style", "priorities", "accommodation"]
    assert session.question_number == 6

    final = await flow.next_question(session)
    assert final.id == FINAL_QUESTION_ID
    assert final.source == "final"
    assert final.multi_select is True
    assert final.adaptive_options is False
    assert len(final.options) == 8


@pytest.mark.asyncio
async def test_template_budget_options_use_audience_currency(template_flow):
    question = await template_flow.next_question(QuestionSession(audience_location="Mumbai, India"))
    assert question.options[0] == "₹300-500"


@pytest.mark.asyncio
async def test_template_options_respect_budget(template_flow):
    session = QuestionSession(answers={"budget": "$300-500", "duration": "2-3 days"}, budget=300, currency="USD", duration_days=2)
    question = await template_flow.next_question(session)
    assert question.id == "style"
    assert not any("luxury" in o.lower() for o in question.options)


@pytest.mark.asyncio
async def test_final_question_after_five(llm_flow, mock_llm):
    question = await llm_flow.next_question(QuestionSession(question_number=6))
    assert question.id == FINAL_QUESTION_ID
    mock_llm.complete.assert_not_awaited()


@pytest.mark.asyncio
async def test_no_question_once_complete(template_flow):
    assert await template_flow.next_question(QuestionSession(complete=True)) is None
    answered = QuestionSession(question_number=6, answers={FINAL_QUESTION_ID: FLEXIBLE_ANSWER})
    assert await template_flow.next_question(answered) is None


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------

def test_record_answer_returns_new_session(template_flow):
    session = QuestionSession()
    updated = template_flow.record_answer(session, "budget", "$2000-5000", "What's your travel budget per person?")

    assert session.answers == {}
    assert updated.answers == {"budget": "$2000-5000"}
    assert updated.budget == 2000
    assert updated.currency == "USD"
    assert updated.question_number == 2
    assert updated.previous_questions == ("What's your travel budget per person?",)


def test_daily_budget_derived(template_flow):
    session = QuestionSession(budget=1000, currency="USD", answers={"budget": "$1000-2000"})
    updated = template_flow.record_answer(session, "duration", "1 week")
    assert updated.duration_days == 7
    assert updated.daily_budget == 142


def test_duplicate_answer_rejected(template_flow):
    session = QuestionSession(answers={"budget": "$500"}, budget=500)
    with pytest.raises(ValueError, match="already answered"):
        template_flow.record_answer(session, "budget", "$800")


def test_answer_after_completion_rejected(template_flow):
    with pytest.raises(ValueError, match="already complete"):
        template_flow.record_answer(QuestionSession(complete=True), "q3", "anything")


def test_budget_below_minimum_rejected(template_flow):
    with pytest.raises(ValueError, match="Budget too low"):
        template_flow.record_answer(QuestionSession(), "budget", "$30")


def test_duration_leaving_too_little_per_day_rejected(template_flow):
    session = QuestionSession(budget=300, currency="USD", answers={"budget": "$300"})
    valid, message = template_flow.validate_answer(session, "duration", "1+ months")
    assert valid is False
    assert "$10/day" in message


def test_empty_answer_rejected(template_flow):
    assert template_flow.validate_answer(QuestionSession(), "style", "") == (False, "Answer is empty")
    assert template_flow.validate_answer(QuestionSession(), "style", []) == (False, "Answer is empty")


def test_final_answer_completes_flow(template_flow):
    session = QuestionSession(question_number=6, budget=2000)
    updated = template_flow.record_answer(session, FINAL_QUESTION_ID, ["Direct flights preferred", FLEXIBLE_ANSWER])
    assert updated.complete is True
    assert updated.question_number == 6
    assert updated.answers[FINAL_QUESTION_ID] == ("Direct flights preferred", FLEXIBLE_ANSWER)


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

def test_to_preferences(template_flow):
    session = QuestionSession(
        answers={
            "style": "Photography-focused travel",
            "interests": ("Local cuisine", "Historical sites"),
            FINAL_QUESTION_ID: ("Visa-free destinations only", FLEXIBLE_ANSWER),
        },
        themes=("food",),
        content_type="Travel vlog",
        budget=2500,
        currency="EUR",
        duration_days=10,
        complete=True,
    )
    prefs = template_flow.to_preferences(session)

    assert prefs.budget == 2500.0
    assert prefs.currency == "EUR"
    assert prefs.duration_days == 10
    assert prefs.travel_style == "Photography-focused travel"
    assert prefs.constraints == ("Visa-free destinations only",)
    assert prefs.themes == ("food", "Local cuisine", "Historical sites")
    assert prefs.content_focus == "Travel vlog"


def test_to_preferences_requires_budget(template_flow):
    with pytest.raises(ValueError, match="budget"):
        template_flow.to_preferences(QuestionSession(answers={"duration": "1 week"}))
