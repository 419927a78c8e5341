import pytest

from smartstudy.models.quiz_item import ItemKind
from smartstudy.models.study import Rating, SessionStats
from smartstudy.services import session_engine
from smartstudy.services.session_engine import (
    InvalidSelection,
    Phase,
    derive_quality,
)

from .conftest import NOW, SAMPLE_SENTENCES, make_item


@pytest.fixture
def items():
    return [
        make_item(ItemKind.FLASHCARD, id="card"),
        make_item(ItemKind.MULTIPLE_CHOICE, id="mcq"),
        make_item(ItemKind.TRUE_FALSE, id="tf"),
    ]


def _answer_flashcard(state, stats, rating):
    state = session_engine.reveal(state)
    return session_engine.rate(state, stats, rating, now=NOW)


def test_start_on_first_item(items):
    state = session_engine.start(items)

    assert state.cursor == 0
    assert state.phase is Phase.UNANSWERED
    assert state.current.id == "card"


def test_start_clamps_stale_cursor(items):
    assert session_engine.start(items, cursor=10).cursor == 2
    assert session_engine.start([], cursor=3).current is None


@pytest.mark.parametrize(
    "rating,quality,correct",
    [(Rating.HARD, 2, False), (Rating.GOOD, 3, True), (Rating.EASY, 4, True)],
)
def test_flashcard_quality_from_rating(rating, quality, correct):
    assert derive_quality(make_item(), rating) == (quality, correct)


def test_flashcard_needs_rating():
    with pytest.raises(InvalidSelection):
        derive_quality(make_item())


def test_multiple_choice_quality():
    item = make_item(ItemKind.MULTIPLE_CHOICE)

    assert derive_quality(item, selection=SAMPLE_SENTENCES[0]) == (4, True)
    for option in item.options:
        if option != item.correct_answer:
            assert derive_quality(item, selection=option) == (2, False)


def test_true_false_quality_is_type_strict():
    item = make_item(ItemKind.TRUE_FALSE, correct_answer=True)

    assert derive_quality(item, selection=True) == (4, True)
    assert derive_quality(item, selection=False) == (2, False)
    assert derive_quality(item, selection="True") == (2, False)


def test_select_refused_on_flashcard(items):
    state = session_engine.start(items)
    with pytest.raises(InvalidSelection):
        session_engine.select(state, "anything")


def test_reveal_requires_selection_for_mcq(items):
    state = session_engine.start(items, cursor=1)

    with pytest.raises(InvalidSelection):
        session_engine.reveal(state)

    state = session_engine.select(state, "Opposite meaning")
    assert session_engine.reveal(state).phase is Phase.REVEALED


def test_select_checks_value_type(items):
    mcq = session_engine.start(items, cursor=1)
    tf = session_engine.start(items, cursor=2)

    with pytest.raises(InvalidSelection):
        session_engine.select(mcq, "")
    with pytest.raises(InvalidSelection):
        session_engine.select(mcq, True)
    with pytest.raises(InvalidSelection):
        session_engine.select(tf, "true")


def test_select_refused_after_reveal(items):
    state = session_engine.start(items, cursor=2)
    state = session_engine.reveal(session_engine.select(state, True))

    with pytest.raises(InvalidSelection):
        session_engine.select(state, False)


def test_rate_requires_reveal(items):
    state = session_engine.start(items)
    with pytest.raises(InvalidSelection):
        session_engine.rate(state, SessionStats(), Rating.GOOD)


def test_refused_action_leaves_state_untouched(items):
    state = session_engine.start(items, cursor=1)
    with pytest.raises(InvalidSelection):
        session_engine.reveal(state)
    assert state.phase is Phase.UNANSWERED
    assert state.selection is None


def test_rate_reschedules_and_advances(items):
    state = session_engine.start(items)
    step = _answer_flashcard(state, SessionStats(), Rating.EASY)

    assert step.quality == 4
    assert step.is_correct
    assert step.item.repetition_count == 1
    assert step.state.items[0] == step.item
    assert step.state.cursor == 1
    assert step.state.phase is Phase.UNANSWERED
    assert step.state.selection is None
    assert step.stats == SessionStats(items_studied=1, correct_answers=1, current_streak=1)
    # input state is not modified
    assert state.items[0].repetition_count == 0


def test_full_walk_completes_session(items):
    stats = SessionStats()
    state = session_engine.start(items)

    step = _answer_flashcard(state, stats, Rating.GOOD)
    state, stats = step.state, step.stats

    state = session_engine.reveal(session_engine.select(state, SAMPLE_SENTENCES[0]))
    step = session_engine.rate(state, stats, now=NOW)
    state, stats = step.state, step.stats
    assert step.quality == 4

    state = session_engine.reveal(session_engine.select(state, True))
    step = session_engine.rate(state, stats, now=NOW)
    assert step.quality == 2
    assert not step.is_correct

    assert step.state.complete
    assert step.state.current is None
    assert step.stats == SessionStats(items_studied=3, correct_answers=2, current_streak=0)

    with pytest.raises(InvalidSelection):
        session_engine.reveal(step.state)


def test_streak_resets_and_rebuilds():
    deck = [make_item(id=f"card-{i}") for i in range(5)]
    ratings = [Rating.GOOD, Rating.EASY, Rating.HARD, Rating.GOOD, Rating.GOOD]
    streaks = []

    state, stats = session_engine.start(deck), SessionStats()
    for rating in ratings:
        step = _answer_flashcard(state, stats, rating)
        state, stats = step.state, step.stats
        streaks.append(stats.current_streak)

    assert streaks == [1, 2, 0, 1, 2]
    assert stats.items_studied == 5
    assert stats.correct_answers == 4
    assert stats.accuracy == 80


def test_restart_goes_back_to_first_item(items):
    state = session_engine.start(items, cursor=2)
    state = session_engine.select(state, False)

    restarted = session_engine.restart(state)
    assert restarted.cursor == 0
    assert restarted.selection is None
    assert not restarted.complete
    assert restarted.items == items


def test_extend_resumes_completed_walk(items):
    state = session_engine.start(items[:1])
    done = _answer_flashcard(state, SessionStats(), Rating.GOOD).state
    assert done.complete

    extended = session_engine.extend(done, items[1:])
    assert not extended.complete
    assert extended.cursor == 1
    assert extended.current.id == "mcq"


def test_extend_keeps_position_mid_walk(items):
    state = session_engine.select(session_engine.start(items, cursor=1), "Opposite meaning")
    extended = session_engine.extend(state, [make_item(id="extra")])

    assert extended.cursor == 1
    assert extended.selection == "Opposite meaning"
    assert len(extended.items) == 4


def test_clear_empties_items(items):
    state = session_engine.start(items, cursor=2)
    cleared = session_engine.clear(state)

    assert cleared.items == []
    assert cleared.cursor == 0
    assert cleared.current is None


@pytest.mark.parametrize(
    "correct,studied,accuracy",
    [(0, 0, 0), (1, 8, 13), (5, 8, 63), (3, 8, 38), (2, 3, 67), (1, 3, 33)],
)
def test_accuracy_rounds_halves_up(correct, studied, accuracy):
    stats = SessionStats(items_studied=studied, correct_answers=correct)
    assert stats.accuracy == accuracy
