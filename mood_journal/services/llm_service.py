# llm service: langchain-powered text understanding for diary entries
# gemini generates titles, emotion emoji, written feedback and emotion ratios
#
# every helper is a thin chain: prompt | gemini | parser
# chains are built lazily and cached for the process lifetime

import logging
from typing import Optional

from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.output_parsers import JsonOutputParser, StrOutputParser

from mood_journal.config import settings
from mood_journal.errors import GenerationError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled day"
DEFAULT_EMOJI = "😐"


def get_llm(temperature: float = 0.7, max_output_tokens: int = 1024) -> ChatGoogleGenerativeAI:
    """create a gemini llm instance"""
    return ChatGoogleGenerativeAI(
        model=settings.GEMINI_MODEL,
        google_api_key=settings.GEMINI_API_KEY,
        temperature=temperature,
        max_output_tokens=max_output_tokens,
    )


TITLE_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "You summarize diary entries in one line. Write a short, witty title of at most "
     "ten words for today's entry. Respond with the title only."),
    ("human", "Summarize this diary entry in one line: {entry}"),
])

EMOJI_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "You read text and pick the emoji that best matches its emotion. "
     "Respond with a single emoji and nothing else."),
    ("human", "Analyze the emotion of this text and return a fitting emoji: {entry}"),
])

FEEDBACK_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are a warm, thoughtful journaling companion.
The user wrote a diary entry and tagged it with an emotion. Reply with short written feedback.

YOUR JOB:
- Acknowledge what the writer went through, using details from the entry
- Reflect the emotion back without judging it
- Offer one gentle, practical suggestion or question to reflect on

TONE:
- Kind and personal, never clinical
- Three to five sentences
- If the entry suggests crisis or self-harm, encourage reaching out to someone they trust or a local helpline"""),
    ("human", """EMOTION: {emotion}

DIARY ENTRY:
{entry}"""),
])

EMOTION_ANALYSIS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "You are an emotion analyst. Analyze the emotions in the given text and express the "
     "share of each emotion as a number between 0 and 100. Respond with a JSON object only, "
     'for example {{"happiness": 60, "calm": 30, "anticipation": 10}}.'),
    ("human", "Diary entry: {entry}"),
])

_title_chain = None
_emoji_chain = None
_feedback_chain = None
_emotion_chain = None


def get_title_chain():
    global _title_chain
    if _title_chain is None:
        _title_chain = TITLE_PROMPT | get_llm(max_output_tokens=60) | StrOutputParser()
    return _title_chain


def get_emoji_chain():
    global _emoji_chain
    if _emoji_chain is None:
        _emoji_chain = EMOJI_PROMPT | get_llm(temperature=0.0, max_output_tokens=10) | StrOutputParser()
    return _emoji_chain


def get_feedback_chain():
    global _feedback_chain
    if _feedback_chain is None:
        _feedback_chain = FEEDBACK_PROMPT | get_llm() | StrOutputParser()
    return _feedback_chain


def get_emotion_chain():
    global _emotion_chain
    if _emotion_chain is None:
        _emotion_chain = EMOTION_ANALYSIS_PROMPT | get_llm(max_output_tokens=150) | JsonOutputParser()
    return _emotion_chain


async def summarize_title(entry: str) -> str:
    """one-line title for a diary entry"""
    try:
        result = await get_title_chain().ainvoke({"entry": entry})
    except Exception as e:
        logger.error(f"Title generation failed: {e}")
        raise GenerationError("title generation failed") from e
    title = (result or "").strip().strip('"').strip()
    return title or DEFAULT_TITLE


async def convert_emotion_to_emoji(entry: str) -> str:
    """single emoji describing the entry's dominant emotion"""
    try:
        result = await get_emoji_chain().ainvoke({"entry": entry})
    except Exception as e:
        logger.error(f"Emotion emoji generation failed: {e}")
        raise GenerationError("emotion emoji generation failed") from e
    emoji = (result or "").strip()
    return emoji or DEFAULT_EMOJI


async def generate_feedback(entry: str, emotion: str) -> str:
    """written feedback for an entry. raises GenerationError on failure or empty output"""
    try:
        result = await get_feedback_chain().ainvoke({"entry": entry, "emotion": emotion})
    except Exception as e:
        logger.error(f"Feedback generation failed: {e}")
        raise GenerationError("feedback generation failed") from e
    feedback = (result or "").strip()
    if not feedback:
        raise GenerationError("feedback generation returned no text")
    return feedback


def normalize_emotions(raw: object) -> dict[str, float]:
    """coerce the model's json into {emotion: score} with scores clamped to 0-100.
    non-numeric values are dropped"""
    if not isinstance(raw, dict):
        return {}
    emotions: dict[str, float] = {}
    for key, value in raw.items():
        if isinstance(value, bool):
            continue
        try:
            score = float(value)
        except (TypeError, ValueError):
            continue
        name = str(key).strip()
        if name:
            emotions[name] = max(0.0, min(100.0, score))
    return emotions


async def analyze_emotion(entry: str) -> dict[str, float]:
    """emotion ratios for an entry, e.g. {"happiness": 60, "calm": 40}"""
    try:
        raw: Optional[object] = await get_emotion_chain().ainvoke({"entry": entry})
    except Exception as e:
        logger.error(f"Emotion analysis failed: {e}")
        raise GenerationError("emotion analysis failed") from e
    return normalize_emotions(raw)
