"""
Interview Analysis LLM Client

The analysis model is reached through an OpenAI-compatible chat completions
endpoint, so we use the openai library with a custom base_url. By default
this points at Anthropic's OpenAI-compatible API and a Claude model; any
compatible provider works by changing LLM_BASE_URL / LLM_MODEL.

AI is used ONLY to score communication quality from a transcript. The
scores are validated and then STORED in the relational database.
"""
import json
import logging

from openai import OpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from careerhub.core.config import get_settings
from careerhub.core.exceptions import UpstreamServiceError
from careerhub.models.providers import AnalysisResult
from careerhub.services.providers import InterviewAnalyzer

logger = logging.getLogger(__name__)

settings = get_settings()

ANALYSIS_PROMPT = """You are an interview coach analyzing a recorded interview transcript.

Participants:
- Interviewer (employer): {interviewer_name}
- Candidate (student): {candidate_name}

Transcript:
{transcript}

Analyze the communication quality of BOTH participants. For each person, provide:
1. Clarity score (1-10): How clear and understandable was their communication?
2. Pacing score (1-10): Was their speaking pace appropriate? Not too fast or slow?
3. Engagement score (1-10): Did they seem engaged, attentive, and enthusiastic?
4. 2-3 specific, actionable suggestions for improvement

Be constructive and encouraging. Focus on communication skills, not technical content.

Respond with ONLY valid JSON in this exact format:
{{
  "interviewer": {{"clarity_score": 8, "pacing_score": 7, "engagement_score": 9, "suggestions": "..."}},
  "candidate": {{"clarity_score": 7, "pacing_score": 8, "engagement_score": 8, "suggestions": "..."}}
}}"""


class LLMInterviewAnalyzer(InterviewAnalyzer):
    """
    Wrapper for the analysis model with a single structured-output method.
    """

    def __init__(self, client: OpenAI = None):
        self.client = client or OpenAI(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            timeout=settings.provider_timeout_seconds,
        )
        self.model = settings.llm_model

    def _call_api(self, user_content: str, max_tokens: int) -> str:
        """
        Internal method to call the chat completions API.
        Returns raw text response.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": user_content}],
                max_tokens=max_tokens,
                temperature=0.2  # Low temp for consistent structured output
            )
        except OpenAIError as e:
            logger.error("LLM call failed: %s", e)
            raise UpstreamServiceError(f"LLM request failed: {e}", provider="llm") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamServiceError("No text response from the analysis model", provider="llm")
        return content

    def _extract_json(self, text: str) -> dict:
        """
        Extract JSON from API response.
        Handles cases where model wraps JSON in markdown code blocks.
        """
        text = text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    def check_connection(self) -> bool:
        """Test if the analysis endpoint is reachable"""
        try:
            response = self._call_api("Reply with exactly: OK", max_tokens=10)
            return "OK" in response.upper()
        except UpstreamServiceError as e:
            logger.warning("LLM connection failed: %s", e.message)
            return False

    def analyze(self, transcript: str, interviewer_name: str, candidate_name: str) -> AnalysisResult:
        prompt = ANALYSIS_PROMPT.format(
            interviewer_name=interviewer_name,
            candidate_name=candidate_name,
            transcript=transcript,
        )
        raw = self._call_api(prompt, max_tokens=settings.llm_max_tokens)

        try:
            return AnalysisResult(**self._extract_json(raw))
        except (ValueError, TypeError, PydanticValidationError) as e:
            logger.error("Failed to parse analysis response: %s", raw)
            raise UpstreamServiceError("Failed to parse AI feedback", provider="llm") from e


# Singleton instance
_analyzer: LLMInterviewAnalyzer = None


def get_interview_analyzer() -> InterviewAnalyzer:
    """Get or create the analysis client (singleton pattern)"""
    global _analyzer
    if _analyzer is None:
        _analyzer = LLMInterviewAnalyzer()
    return _analyzer
