# Conversational AI tutor; a LangChain pipeline over a pluggable LLM provider with an offline keyword fallback
# galaxion/services/tutor_agent.py
import re
import threading
from langchain_community.llms import Ollama
from langchain_openai import ChatOpenAI
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.prompts import PromptTemplate
from langchain_core.runnables import RunnableLambda
from langchain_core.output_parsers import StrOutputParser
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession

from galaxion.models.user import AIChatHistory
from galaxion.services.course_service import course_service
from galaxion.services.prompt_library import (
    PROMPT_LIBRARY,
    OFFLINE_KNOWLEDGE_BASE,
    OFFLINE_DEFAULT_ANSWER,
    FALLBACK_APOLOGY,
)
from galaxion.utils.config import settings
from galaxion.utils.logger import logger

# --- LLM client, initialized lazily ---
_llm_client = None
_init_lock = threading.Lock()

# Prompt lines that carry the learner's own words
MESSAGE_LINE = re.compile(r"^\*\*(?:Student|Concept|Topic):\*\*\s*(.*)$", re.MULTILINE)


def extract_learner_message(prompt_text: str) -> str:
    match = MESSAGE_LINE.search(prompt_text)
    return match.group(1) if match else prompt_text


def offline_answer(text: str) -> str:
    """Answers from the built-in knowledge base by keyword."""
    normalized = " " + re.sub(r"[^a-z0-9]+", " ", text.lower()) + " "
    for keywords, answer in OFFLINE_KNOWLEDGE_BASE:
        if any(keyword in normalized for keyword in keywords):
            return answer
    return OFFLINE_DEFAULT_ANSWER


def _offline_llm(prompt_value) -> str:
    return offline_answer(extract_learner_message(prompt_value.to_string()))


def _initialize_llm():
    """Initializes the LLM client for the configured provider. Returns True on success, False on failure."""
    global _llm_client

    with _init_lock:
        if _llm_client is not None:
            return True

        provider = settings.llm_provider
        logger.info(f"Initializing LLM client for provider: {provider}")
        try:
            if provider == "offline":
                _llm_client = RunnableLambda(_offline_llm)
            elif provider == "ollama":
                _llm_client = Ollama(base_url=settings.ollama_base_url, model=settings.ollama_model)
            elif provider == "openai":
                _llm_client = ChatOpenAI(openai_api_key=settings.openai_api_key, model_name=settings.openai_model_name, temperature=0.3)
            elif provider == "google":
                _llm_client = ChatGoogleGenerativeAI(google_api_key=settings.google_api_key, model=settings.google_model_name, temperature=0.3, max_output_tokens=settings.max_output_tokens)
            else:
                raise ValueError(f"Unsupported LLM_PROVIDER: {provider}")
        except Exception as e:
            logger.exception(f"Failed to initialize LLM client: {e}")
            _llm_client = None
            return False

        logger.info(f"Initialized LLM with provider {provider}")
        return True


def get_tutor_chain(mode: str):
    """Builds the prompt | llm | parser pipeline for a tutor mode."""
    if _llm_client is None:
        raise RuntimeError("LLM client not initialized.")

    prompt = PROMPT_LIBRARY.get(mode)
    if prompt is None:
        logger.warning(f"Tutor mode '{mode}' not found in PROMPT_LIBRARY. Falling back to 'chat'.")
        prompt = PROMPT_LIBRARY["chat"]

    return PromptTemplate.from_template(prompt.template) | _llm_client | StrOutputParser()


async def ask(mode: str, message: str, context: str = "", level: str = "beginner") -> dict:
    """Runs the tutor. Never raises; failures come back as success=False with an apology."""
    if _llm_client is None and not _initialize_llm():
        logger.error("LLM client failed to initialize. Cannot answer tutor request.")
        return {"success": False, "response": FALLBACK_APOLOGY}

    try:
        chain = get_tutor_chain(mode)
        response = await chain.ainvoke({
            "message": message,
            "context": context or "No lesson context.",
            "level": level,
        })
        logger.debug(f"Tutor ({mode}) answered {len(response)} characters")
        return {"success": True, "response": response.strip()}
    except Exception as e:
        logger.exception(f"Error generating tutor response ({mode}): {e}")
        return {"success": False, "response": FALLBACK_APOLOGY}


async def lesson_context(session: AsyncSession, lesson_id: int | None) -> str:
    if lesson_id is None:
        return ""
    lesson = await course_service.get_lesson(session, lesson_id)
    if lesson is None:
        logger.warning(f"Tutor context requested for unknown lesson {lesson_id}")
        return ""
    return f"Lesson: {lesson.title}\n{lesson.description or ''}".strip()


async def save_exchange(
    session: AsyncSession, user_id: int, message: str, response: str, lesson_id: int | None = None, assistant_type: str = "tutor"
) -> AIChatHistory:
    entry = AIChatHistory(
        user_id=user_id,
        lesson_id=lesson_id,
        assistant_type=assistant_type,
        user_message=message,
        ai_response=response,
    )
    session.add(entry)
    await session.flush()
    return entry


async def get_history(session: AsyncSession, user_id: int, limit: int | None = None) -> list[dict]:
    limit = limit or settings.tutor_history_limit
    result = await session.execute(
        select(AIChatHistory)
        .filter_by(user_id=user_id)
        .order_by(AIChatHistory.created_at.desc(), AIChatHistory.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": entry.id,
            "lesson_id": entry.lesson_id,
            "assistant_type": entry.assistant_type,
            "message": entry.user_message,
            "response": entry.ai_response,
            "created_at": entry.created_at.isoformat() if entry.created_at else None,
        }
        for entry in result.scalars().all()
    ]


def ensure_llm_initialized():
    """Public function to trigger initialization, e.g., during app startup."""
    if _llm_client is None:
        if not _initialize_llm():
            raise RuntimeError("Failed to initialize the LLM client during startup check.")
        logger.info("LLM client initialized successfully during startup check.")
    else:
        logger.info("LLM client already initialized.")
