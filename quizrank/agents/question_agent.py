"""
Question Agent - Generates multiple-choice questions from lecture text
"""

import json
import logging
import re
from typing import Dict, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import AzureChatOpenAI

from quizrank.core.config import settings
from quizrank.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert quiz generator and educational content creator.
Create multiple-choice questions with detailed explanations based on lecture content.
Output must be valid JSON only, no extra text."""

QUESTION_PROMPT = """
**QUIZ CONTEXT:** {quiz_context}

**CRITICAL REQUIREMENTS - MUST FOLLOW EXACTLY:**
1. Generate EXACTLY {question_count} multiple-choice questions (NO MORE, NO LESS)
2. Quiz duration is EXACTLY {duration_minutes} minutes
3. Each question must have exactly 4 options (A, B, C, D)
4. Questions should test understanding, not just memorization
5. Mix difficulty levels: 30% easy, 40% medium, 30% hard questions
6. Ensure all questions are directly based on the lecture content
7. Make wrong options plausible but clearly incorrect
8. Provide a detailed explanation for EACH wrong answer option
9. Provide a comprehensive explanation for the correct answer

**LECTURE CONTENT:**
{lecture_text}

**REQUIRED JSON FORMAT:**
[
  {{
    "question": "Clear, complete question text here?",
    "options": {{"A": "First option", "B": "Second option", "C": "Third option", "D": "Fourth option"}},
    "correct_answer": "B",
    "correct_answer_explanation": "Why B is correct, referencing the lecture.",
    "explanations": {{
      "A": "Why A is incorrect",
      "B": "",
      "C": "Why C is incorrect",
      "D": "Why D is incorrect"
    }}
  }}
]
"""

QUOTA_MARKERS = ("quota", "rate limit", "ratelimit", "429", "too many requests")


class QuestionAgent:
    """Agent responsible for generating quiz questions from lecture text"""

    def __init__(
        self,
        azure_endpoint: str = None,
        api_key: str = None,
        deployment_name: str = None,
        llm=None,
    ):
        self.llm = llm or AzureChatOpenAI(
            azure_endpoint=azure_endpoint or settings.AOAI_ENDPOINT,
            api_key=api_key or settings.AOAI_API_KEY,
            azure_deployment=deployment_name or settings.AOAI_DEPLOY_GPT4O_MINI,
            openai_api_version=settings.AOAI_API_VERSION,
            temperature=settings.GENERATOR_TEMPERATURE,
            timeout=settings.GENERATOR_TIMEOUT_SECONDS,
            max_retries=0,
        )

    def generate(
        self,
        lecture_text: str,
        question_count: int,
        duration_minutes: int,
        exam_duration_minutes: Optional[int] = None,
    ) -> List[Dict]:
        """Generate raw question dicts; shape checks happen in QuizDomain"""
        if exam_duration_minutes:
            quiz_context = (
                f"This quiz will be used as a timed exam with a {exam_duration_minutes}-minute "
                "window. Generate challenging but fair questions appropriate for an exam setting."
            )
        else:
            quiz_context = "This quiz will be used for regular practice and learning."

        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(
                content=QUESTION_PROMPT.format(
                    quiz_context=quiz_context,
                    question_count=question_count,
                    duration_minutes=duration_minutes,
                    lecture_text=lecture_text,
                )
            ),
        ]

        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            logger.error(f"Question generation request failed: {e}")
            message = str(e).lower()
            if any(marker in message for marker in QUOTA_MARKERS):
                raise UpstreamError(
                    "API quota exceeded. Please try again later.", quota_exceeded=True
                )
            raise UpstreamError("Failed to generate quiz. Please try again.")

        logger.info("Received question generation response")
        return self._parse_questions(response.content)

    def _parse_questions(self, content: str) -> List[Dict]:
        """Extract the JSON question array, tolerating markdown fences"""
        cleaned = re.sub(r"```json\s*|\s*```", "", content or "").strip()
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError:
            json_match = re.search(r"\[.*\]", cleaned, re.DOTALL)
            if json_match:
                try:
                    return json.loads(json_match.group())
                except json.JSONDecodeError:
                    pass
        logger.error("Could not parse generator response as JSON")
        raise UpstreamError("Failed to parse AI response. Please try again.")
