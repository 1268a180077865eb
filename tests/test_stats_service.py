"""Tests for session statistics."""
from datetime import timedelta

import pytest

from emotion_companion.exceptions import SessionNotFoundError
from emotion_companion.models.emotion import EmotionSample, EmotionVector
from emotion_companion.models.records import Session, StoredEmotionSample
from emotion_companion.services.stats_service import session_duration, summarize


def stored(session_id, vector, captured_at, confidence=None):
    return StoredEmotionSample(
        session_id=session_id,
        vector=vector,
        captured_at=captured_at,
        confidence=confidence,
    )


def test_totals_and_dominant(clock):
    session = Session(start_time=clock())
    samples = [
        stored(session.id, EmotionVector(happy=80, sad=70), clock()),
        stored(session.id, EmotionVector(happy=80, sad=70), clock()),
    ]

    stats = summarize(session, samples, [], clock())

    assert stats.emotion_totals["happy"] == 160
    assert stats.emotion_totals["sad"] == 140
    assert stats.dominant_emotion == "happy"
    assert stats.detection_count == 2


def test_no_samples(clock):
    session = Session(start_time=clock())

    stats = summarize(session, [], [], clock())

    assert stats.dominant_emotion == "neutral"
    assert stats.average_confidence_percent == 0
    assert stats.latest_vector is None
    assert set(stats.emotion_totals.values()) == {0.0}


def test_average_confidence_rounds_half_up(clock):
    session = Session(start_time=clock())
    samples = [
        stored(session.id, EmotionVector(happy=1), clock(), confidence=85),
        stored(session.id, EmotionVector(happy=1), clock(), confidence=86),
    ]

    assert summarize(session, samples, [], clock()).average_confidence_percent == 86


def test_missing_confidence_counts_as_zero(clock):
    session = Session(start_time=clock())
    samples = [
        stored(session.id, EmotionVector(happy=1), clock(), confidence=90),
        stored(session.id, EmotionVector(happy=1), clock()),
    ]

    assert summarize(session, samples, [], clock()).average_confidence_percent == 45


def test_latest_vector_by_capture_time(clock):
    session = Session(start_time=clock())
    newest = EmotionVector(angry=50)
    samples = [
        stored(session.id, newest, clock() + timedelta(seconds=10)),
        stored(session.id, EmotionVector(sad=50), clock()),
    ]

    assert summarize(session, samples, [], clock()).latest_vector == newest


def test_latest_vector_tie_goes_to_later_insert(clock):
    session = Session(start_time=clock())
    samples = [
        stored(session.id, EmotionVector(sad=50), clock()),
        stored(session.id, EmotionVector(fearful=50), clock()),
    ]

    assert summarize(session, samples, [], clock()).latest_vector == EmotionVector(fearful=50)


def test_duration_of_ended_session_ignores_now(clock):
    start = clock()
    session = Session(start_time=start, end_time=start + timedelta(seconds=120), is_active=False)

    assert session_duration(session, start + timedelta(seconds=500)) == 120


def test_duration_of_active_session(clock):
    session = Session(start_time=clock())

    assert session_duration(session, clock() + timedelta(seconds=42, milliseconds=900)) == 42


def test_duration_of_inactive_session_without_end_time(clock):
    session = Session(start_time=clock(), is_active=False)

    assert session_duration(session, clock() + timedelta(seconds=30)) == 0


def test_to_dict_keys(clock):
    session = Session(start_time=clock())
    samples = [stored(session.id, EmotionVector(happy=10), clock(), confidence=80)]

    data = summarize(session, samples, [], clock()).to_dict()

    assert data["detections"] == 1
    assert data["average_confidence"] == 80
    assert data["latest_emotions"]["happy"] == 10
    assert data["dominant_emotion"] == "happy"


@pytest.mark.asyncio
async def test_aggregator_reads_storage(storage, stats_aggregator, clock):
    session = await storage.create_session()
    for value in (20, 40):
        sample = EmotionSample(vector=EmotionVector(surprised=value), captured_at=clock())
        await storage.create_emotion_sample(session.id, sample, confidence=85)
    await storage.create_message(session.id, is_user=True, content="hello")

    stats = await stats_aggregator.compute(session.id)

    assert stats.detection_count == 2
    assert stats.emotion_totals["surprised"] == 60
    assert stats.dominant_emotion == "surprised"
    assert stats.message_count == 1
    assert stats.average_confidence_percent == 85


@pytest.mark.asyncio
async def test_aggregator_unknown_session(stats_aggregator):
    with pytest.raises(SessionNotFoundError):
        await stats_aggregator.compute("missing")


def test_totals_three_sample_scenario(clock):
    session = Session(start_time=clock())
    vectors = [
        EmotionVector.from_mapping({"happy": 100}),
        EmotionVector.from_mapping({"happy": 60, "sad": 40}),
        EmotionVector.from_mapping({"sad": 100}),
    ]
    samples = [stored(session.id, vector, clock()) for vector in vectors]

    stats = summarize(session, samples, [], clock())

    assert stats.emotion_totals["happy"] == 160
    assert stats.emotion_totals["sad"] == 140
    assert stats.dominant_emotion == "happy"


def test_overflowing_totals_keep_their_dominant(clock):
    session = Session(start_time=clock())
    samples = [stored(session.id, EmotionVector(sad=1e308, happy=5), clock()) for _ in range(2)]

    stats = summarize(session, samples, [], clock())

    assert stats.emotion_totals["sad"] == float("inf")
    assert stats.dominant_emotion == "sad"
