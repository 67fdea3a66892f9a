import google.generativeai as genai
import json
import math
import re
from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional
import logging

from django.conf import settings

from .conf import get_pipeline_settings

logger = logging.getLogger(__name__)

LEAVE_REQUEST = 'leave_request'
INCOMPLETE_REQUEST = 'incomplete_request'
UNKNOWN = 'unknown'

INTENTS = (LEAVE_REQUEST, INCOMPLETE_REQUEST, UNKNOWN)
HALF_DAY_PERIODS = ('morning', 'afternoon')

CODE_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)


@dataclass
class ParsedIntent:
    intent: str = UNKNOWN
    confidence: float = 0.0
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    reason: Optional[str] = None
    leave_type: Optional[str] = None
    is_half_day: bool = False
    half_day_period: Optional[str] = None

    @classmethod
    def unknown(cls):
        return cls(intent=UNKNOWN, confidence=0.0)

    def to_dict(self):
        return asdict(self)


RELATIVE_DATE_RULES = """3. Dates MUST be absolute calendar dates written in the message (e.g. "15/11/2025", "2025-11-15", "15 November 2025").
   Relative dates such as "today", "tomorrow", "yesterday", "next Monday", "this week", "next week" or "next month" are NOT accepted.
   If the message has no absolute date, return "intent": "incomplete_request" with "start_date": null and "end_date": null."""

RESOLVE_DATE_RULES = """3. Always return start_date and end_date in YYYY-MM-DD format.
   If dates are relative (today, tomorrow, next week), calculate the actual dates based on today being {today}."""

PROMPT_TEMPLATE = """You are an HR assistant that reads Thai or English chat messages and extracts leave request details.

IMPORTANT RULES:
1. Reply with a single JSON object only. No markdown, no explanations, no text before or after the JSON.
2. "intent" is "leave_request" when the message asks for leave with enough detail, "incomplete_request" when it asks for leave but a required detail is missing, otherwise "unknown".
{date_rules}
4. A single-day leave has the same start_date and end_date.
5. Leave types: "Personal", "Sick", "Vacation" or "Other". Use "Sick" for illness or medical appointments, "Vacation" for trips and holidays, "Personal" for family matters and errands.
6. Half-day leave: if the message asks for a half day, set "is_half_day": true and "half_day_period" to "morning" or "afternoon".
   If a half day is requested without saying morning or afternoon, return "intent": "incomplete_request".
7. "confidence" is a number between 0.0 and 1.0 describing how sure you are about the intent.

User text: "{text}"

Return JSON with this exact structure:
{{
    "intent": "leave_request" | "incomplete_request" | "unknown",
    "start_date": "YYYY-MM-DD" or null,
    "end_date": "YYYY-MM-DD" or null,
    "reason": "reason for the leave" or null,
    "leave_type": "Personal" | "Sick" | "Vacation" | "Other",
    "is_half_day": true | false,
    "half_day_period": "morning" | "afternoon" | null,
    "confidence": 0.0-1.0
}}

Examples:
- "Personal leave 15/11/2025 to 17/11/2025 for a family event" → {{"intent": "leave_request", "start_date": "2025-11-15", "end_date": "2025-11-17", "reason": "family event", "leave_type": "Personal", "is_half_day": false, "half_day_period": null, "confidence": 0.9}}
- "Sick leave on 20/11/2025" → {{"intent": "leave_request", "start_date": "2025-11-20", "end_date": "2025-11-20", "reason": "sick", "leave_type": "Sick", "is_half_day": false, "half_day_period": null, "confidence": 0.95}}
- "Half day afternoon leave on 2025-11-21 for a dentist appointment" → {{"intent": "leave_request", "start_date": "2025-11-21", "end_date": "2025-11-21", "reason": "dentist appointment", "leave_type": "Sick", "is_half_day": true, "half_day_period": "afternoon", "confidence": 0.9}}
- "Half day leave on 2025-11-21" → {{"intent": "incomplete_request", "start_date": "2025-11-21", "end_date": "2025-11-21", "reason": null, "leave_type": "Personal", "is_half_day": true, "half_day_period": null, "confidence": 0.8}}
- "I want a day off" → {{"intent": "incomplete_request", "start_date": null, "end_date": null, "reason": null, "leave_type": "Personal", "is_half_day": false, "half_day_period": null, "confidence": 0.6}}
- "hello bot" → {{"intent": "unknown", "confidence": 0.3}}
"""


def build_prompt(text, reject_relative_dates=True, today=None):
    if reject_relative_dates:
        date_rules = RELATIVE_DATE_RULES
    else:
        date_rules = RESOLVE_DATE_RULES.format(today=(today or date.today()).isoformat())
    return PROMPT_TEMPLATE.format(date_rules=date_rules, text=text)


def strip_code_fences(raw_text):
    """Remove ```json ... ``` wrappers the model sometimes adds"""
    return CODE_FENCE_RE.sub('', raw_text or '').strip()


def intent_from_payload(payload):
    """Validate the model's JSON object; returns None when it is unusable"""
    if not isinstance(payload, dict):
        return None

    intent = payload.get('intent')
    confidence = payload.get('confidence')
    if not intent or isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        return None
    if not math.isfinite(confidence):
        return None

    if intent not in INTENTS:
        logger.warning(f"Model returned unexpected intent {intent!r}, treating as unknown")
        intent = UNKNOWN

    period = payload.get('half_day_period')
    period = period.strip().lower() if isinstance(period, str) else None
    if period not in HALF_DAY_PERIODS:
        period = None

    parsed = ParsedIntent(
        intent=intent,
        confidence=min(max(float(confidence), 0.0), 1.0),
        start_date=_optional_str(payload.get('start_date')),
        end_date=_optional_str(payload.get('end_date')),
        reason=_optional_str(payload.get('reason')),
        leave_type=_optional_str(payload.get('leave_type')),
        is_half_day=payload.get('is_half_day') is True,
        half_day_period=period,
    )

    if parsed.is_half_day and not parsed.half_day_period and parsed.intent == LEAVE_REQUEST:
        logger.info("Half-day leave without a period, downgrading to incomplete_request")
        parsed.intent = INCOMPLETE_REQUEST
    if not parsed.is_half_day:
        parsed.half_day_period = None

    return parsed


def _optional_str(value):
    if value is None:
        return None
    value = str(value).strip()
    if not value or value.lower() == 'null':
        return None
    return value


class LeaveIntentParser:
    """Classifies a chat message as a leave request using a Gemini model"""

    def __init__(self, model, pipeline_settings=None, max_output_tokens=500, temperature=0.2):
        self.model = model
        self.settings = pipeline_settings or get_pipeline_settings()
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature

    def parse(self, text):
        if self.model is None:
            logger.error("LEAVE_AI_ERROR: no Gemini model configured (is GOOGLE_AI_API_KEY set?)")
            return ParsedIntent.unknown()

        template = build_prompt(text, reject_relative_dates=self.settings.reject_relative_dates)

        try:
            logger.info(f"LEAVE_AI_REQUEST: parsing message {text!r}")
            response = self.model.generate_content(
                template,
                generation_config=genai.types.GenerationConfig(
                    max_output_tokens=self.max_output_tokens,
                    temperature=self.temperature,
                ),
            )
            response_text = response.text
            logger.info(f"LEAVE_AI_RAW_RESPONSE: {response_text}")

            payload = json.loads(strip_code_fences(response_text))
        except json.JSONDecodeError as e:
            logger.error(f"LEAVE_AI_ERROR: could not parse model JSON: {e}")
            return ParsedIntent.unknown()
        except Exception as e:
            logger.error(f"LEAVE_AI_ERROR: error calling Gemini: {e}")
            return ParsedIntent.unknown()

        parsed = intent_from_payload(payload)
        if parsed is None:
            logger.error(f"LEAVE_AI_ERROR: invalid response structure: {payload}")
            return ParsedIntent.unknown()

        logger.info(f"LEAVE_AI_FINAL_RESULT: {parsed.to_dict()}")
        return parsed


def build_gemini_model(api_key=None, model_name=None):
    """Configure the SDK and return a GenerativeModel, or None without an API key"""
    api_key = api_key if api_key is not None else settings.GOOGLE_AI_API_KEY
    if not api_key:
        return None
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name or settings.GEMINI_MODEL)


def build_intent_parser():
    return LeaveIntentParser(build_gemini_model(), get_pipeline_settings())
