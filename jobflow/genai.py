"""Cover letters, interview guides, résumé analysis and coach chat via an LLM.

Talks to any OpenAI-compatible endpoint through the ``openai`` SDK; the
default base URL is Gemini's OpenAI-compatible API.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

import openai
from openai import AsyncOpenAI, OpenAI

from jobflow.config import DEFAULTS
from jobflow.documents import extract_text, is_image, to_data_url
from jobflow.errors import GenerationError, MissingCredentialError, ResumeParseError
from jobflow.log import get_logger
from jobflow.models import ChatMessage
from jobflow.retry import retry

log = get_logger(__name__)

COVER_LETTER_FALLBACK = "Failed to generate cover letter. Please try again."
INTERVIEW_GUIDE_FALLBACK = "Failed to generate interview guide. Please try again."
EMPTY_REPLY = "I'm having trouble thinking of a response right now."

_TRANSIENT = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


@dataclass(frozen=True)
class ChatResult:
    ok: bool
    text: str = ""
    error: str | None = None

    @classmethod
    def success(cls, text: str) -> ChatResult:
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, error: str) -> ChatResult:
        return cls(ok=False, error=error)


# ── Prompts ──────────────────────────────────────────────────────────────

_COVER_LETTER_PROMPT = """\
Write a passionate and professional cover letter for the position of {role} at {company}.

The candidate has the following skills and experience:
{skills}

Guidelines:
- Keep it concise (3-4 paragraphs)
- Show genuine enthusiasm for the role and company
- Highlight relevant skills naturally
- Use a professional but warm tone
- End with a strong call to action

Write only the cover letter body, no subject line or addresses."""

_INTERVIEW_GUIDE_PROMPT = """\
Create a comprehensive interview preparation guide for the position of {role} at {company}.

Candidate's skills and background:
{skills}

Please include:
1. **Company Research Tips** - Key areas to research about {company}
2. **Common Interview Questions** - 5-7 likely questions for this role
3. **STAR Method Examples** - How to structure answers using the candidate's skills
4. **Technical Topics** - Key technical areas to review based on the role
5. **Questions to Ask** - 3-5 insightful questions to ask the interviewer
6. **Day-of Tips** - Practical advice for interview day

Format with clear headings and bullet points. Keep it actionable and specific to this role."""

_RESUME_PROMPT = """\
Analyze this resume and extract the data into a JSON structure matching this schema:
{
  "fullName": "string",
  "summary": "string - professional summary, improve wording to be action-oriented",
  "skills": "string - comma separated list of top skills",
  "experience": [
    { "title": "Role & Company", "date": "Date Range", "content": "Description - improved to be action-oriented" }
  ],
  "education": [
    { "title": "Degree & School", "date": "Date Range", "content": "Details" }
  ],
  "projects": [
    { "name": "Project Name", "description": "Short description", "tech": ["tech1", "tech2"] }
  ]
}

Only return the JSON object, no markdown formatting."""


# ── Low-level calls ──────────────────────────────────────────────────────


@retry(max_attempts=3, base_delay=2.0, retryable=_TRANSIENT)
def _complete(client: OpenAI, model: str, messages: list[dict[str, Any]], **kwargs: Any) -> str:
    r = client.chat.completions.create(model=model, messages=messages, **kwargs)
    if not r.choices:
        return ""
    return (r.choices[0].message.content or "").strip()


def parse_resume_json(raw: str) -> dict[str, Any]:
    """Decode the model's résumé JSON into store field names.

    Tolerates markdown code fences and chatter around the object; anything
    else raises ResumeParseError.
    """
    text = raw.replace("```json", "").replace("```", "").strip()
    start = text.find("{")
    end = text.rfind("}") + 1
    if start == -1 or end == 0:
        raise ResumeParseError("Failed to parse analysis result: no JSON object in response")
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError as exc:
        raise ResumeParseError(f"Failed to parse analysis result: {exc}") from exc
    if not isinstance(data, dict):
        raise ResumeParseError("Failed to parse analysis result: expected a JSON object")

    def _items(key: str) -> list[dict[str, Any]]:
        value = data.get(key) or []
        if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
            raise ResumeParseError(f"Failed to parse analysis result: '{key}' must be a list of objects")
        return value

    partial: dict[str, Any] = {
        "experience": [_section(e) for e in _items("experience")],
        "education": [_section(e) for e in _items("education")],
        "projects": [_project(p) for p in _items("projects")],
    }
    for src, dst in (("fullName", "full_name"), ("summary", "summary"), ("skills", "skills")):
        value = data.get(src)
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        if value:
            partial[dst] = str(value)
    return partial


def _section(item: dict[str, Any]) -> dict[str, str]:
    return {k: str(item.get(k) or "") for k in ("title", "content", "date")}


def _project(item: dict[str, Any]) -> dict[str, Any]:
    tech = item.get("tech") or []
    if isinstance(tech, str):
        tech = [t.strip() for t in tech.split(",") if t.strip()]
    return {
        "name": str(item.get("name") or ""),
        "description": str(item.get("description") or ""),
        "tech": [str(t) for t in tech],
    }


# ── Client ───────────────────────────────────────────────────────────────


class GenAIClient:
    """Narrow facade over the language model; the API key is passed per call."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        *,
        client_factory: Callable[[str], Any] | None = None,
        async_client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        cfg = {**DEFAULTS, **(config or {})}
        self.base_url: str = cfg["base_url"]
        self.text_model: str = cfg["text_model"]
        self.chat_model: str = cfg["chat_model"]
        self.vision_model: str = cfg["vision_model"]
        self.timeout: float = float(cfg["chat_timeout"])
        self._client_factory = client_factory or self._default_client
        self._async_client_factory = async_client_factory or self._default_async_client

    def _default_client(self, api_key: str) -> OpenAI:
        return OpenAI(api_key=api_key, base_url=self.base_url, timeout=self.timeout, max_retries=0)

    def _default_async_client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=api_key, base_url=self.base_url, timeout=self.timeout, max_retries=0)

    @staticmethod
    def _require_key(api_key: str | None) -> str:
        key = (api_key or "").strip()
        if not key:
            raise MissingCredentialError()
        return key

    def _generate(self, api_key: str, model: str, messages: list[dict[str, Any]], what: str, **kwargs: Any) -> str:
        client = self._client_factory(self._require_key(api_key))
        try:
            return _complete(client, model, messages, **kwargs)
        except openai.AuthenticationError as exc:
            raise GenerationError(f"The API key was rejected while generating {what}") from exc
        except openai.OpenAIError as exc:
            raise GenerationError(f"Failed to generate {what}: {exc}") from exc

    def generate_cover_letter(self, api_key: str, role: str, company: str, skills: str) -> str:
        prompt = _COVER_LETTER_PROMPT.format(role=role, company=company, skills=skills)
        text = self._generate(api_key, self.text_model, [{"role": "user", "content": prompt}], "cover letter")
        log.info("Cover letter generated for %s @ %s", role, company)
        return text or COVER_LETTER_FALLBACK

    def generate_interview_guide(self, api_key: str, role: str, company: str, skills: str) -> str:
        prompt = _INTERVIEW_GUIDE_PROMPT.format(role=role, company=company, skills=skills)
        text = self._generate(api_key, self.text_model, [{"role": "user", "content": prompt}], "interview guide")
        log.info("Interview guide generated for %s @ %s", role, company)
        return text or INTERVIEW_GUIDE_FALLBACK

    def analyze_resume_document(self, api_key: str, data: bytes, filename: str = "") -> dict[str, Any]:
        """Extract a partial résumé (store field names) from an image, PDF, DOCX or TXT."""
        self._require_key(api_key)
        if is_image(data, filename):
            content: Any = [
                {"type": "text", "text": _RESUME_PROMPT},
                {"type": "image_url", "image_url": {"url": to_data_url(data, filename)}},
            ]
        else:
            text = extract_text(data, filename)
            if not text.strip():
                raise ResumeParseError(f"Could not extract any text from {filename or 'document'}")
            content = f"{_RESUME_PROMPT}\n\nResume text:\n{text[:8000]}"

        raw = self._generate(
            api_key, self.vision_model, [{"role": "user", "content": content}], "résumé analysis", temperature=0.1,
        )
        partial = parse_resume_json(raw)
        log.info(
            "Résumé analysed — name=%s, experience=%d, education=%d, projects=%d",
            partial.get("full_name", ""), len(partial["experience"]),
            len(partial["education"]), len(partial["projects"]),
        )
        return partial

    async def converse(
        self, api_key: str, framing: str, prior_turns: list[ChatMessage], user_text: str,
    ) -> ChatResult:
        """One chat exchange. Never raises for service problems; see ChatResult."""
        try:
            client = self._async_client_factory(self._require_key(api_key))
        except MissingCredentialError as exc:
            return ChatResult.failure(str(exc))

        messages: list[dict[str, str]] = [{"role": "user", "content": framing}]
        for turn in prior_turns:
            messages.append({"role": "assistant" if turn.role == "model" else "user", "content": turn.content})
        messages.append({"role": "user", "content": user_text})

        try:
            r = await client.chat.completions.create(model=self.chat_model, messages=messages)
        except openai.OpenAIError as exc:
            return ChatResult.failure(f"{type(exc).__name__}: {exc}")
        if not r.choices:
            return ChatResult.failure("Service returned no choices")
        text = (r.choices[0].message.content or "").strip()
        return ChatResult.success(text or EMPTY_REPLY)
