"""
Practice session word routes.
"""

import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from lingotrack.api.dependencies import get_word_tracker
from lingotrack.words.tracker import SessionWordTracker

router = APIRouter()


class AddWordRequest(BaseModel):
    word: str = Field(..., min_length=1, description="Word used as an exercise target")
    user_id: Optional[str] = Field(None, description="Also start a cooldown for this user")


class SessionWordsResponse(BaseModel):
    session_id: str
    words: List[str]


class AvoidanceResponse(BaseModel):
    session_id: str
    user_id: str
    words: List[str]


@router.post("/{session_id}/words", response_model=SessionWordsResponse)
def add_word(
    session_id: str,
    request: AddWordRequest,
    tracker: SessionWordTracker = Depends(get_word_tracker)
) -> SessionWordsResponse:
    """Record a word used in the session."""
    tracker.add_word_to_session(session_id, request.word)
    if request.user_id:
        tracker.set_cooldown(request.user_id, request.word)
    return SessionWordsResponse(session_id=session_id, words=tracker.get_session_words(session_id))


@router.get("/{session_id}/words", response_model=SessionWordsResponse)
def get_session_words(
    session_id: str,
    tracker: SessionWordTracker = Depends(get_word_tracker)
) -> SessionWordsResponse:
    """Get the words used in the session, oldest first."""
    return SessionWordsResponse(session_id=session_id, words=tracker.get_session_words(session_id))


@router.get("/{session_id}/avoidance", response_model=AvoidanceResponse)
async def get_avoidance_list(
    session_id: str,
    user_id: str = Query(..., min_length=1),
    language: Optional[str] = Query(None, description="Also avoid words from recent sessions"),
    tracker: SessionWordTracker = Depends(get_word_tracker)
) -> AvoidanceResponse:
    """Get the merged list of words to avoid for the next exercise."""
    recent: List[str] = []
    if language:
        recent = await tracker.load_recent_words(user_id, language)
    # The word state backend may be a blocking Redis client
    words = await asyncio.to_thread(tracker.get_avoidance_list, session_id, user_id, recent)
    return AvoidanceResponse(session_id=session_id, user_id=user_id, words=words)


@router.delete("/{session_id}", status_code=204)
def clear_session(
    session_id: str,
    tracker: SessionWordTracker = Depends(get_word_tracker)
) -> None:
    """Forget the session's words."""
    tracker.clear_session(session_id)
