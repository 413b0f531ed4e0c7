"""
query_processor/parser.py
Free-text → partial QuoteRequest.

Two interchangeable strategies behind TextExtractor:
  - RegexTextExtractor : deterministic pattern matching (default)
  - LLMTextExtractor   : LangChain PromptTemplate | ChatGroq | JsonOutputParser,
                          falling back to the regex extractor on any failure

Neither ever raises: a field whose pattern is absent is simply left unset.
"""
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from monitoring import get_logger
from query_processor.models import CONTAINER_TYPES, MODES, Dimensions, QuoteRequest

log = get_logger(__name__)

# Checked in order; the first category with a keyword hit decides the mode
_MODE_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("parcel", re.compile(r"\b(dhl|fedex|ups|parcel|small package|express)\b", re.I)),
    ("air",    re.compile(r"\b(air|iata|airport|air freight|air cargo)\b", re.I)),
    ("ocean",  re.compile(r"\b(ocean|sea|container|fcl|lcl|ship|vessel|port)\b", re.I)),
    ("ground", re.compile(r"\b(truck|trucking|ground|ltl|road|interstate|intrastate)\b", re.I)),
]

_FROM_TO_RE = re.compile(
    r"\bfrom\b\s+([^\n]+?)\s+\bto\b\s+([^\n,.]+?)"
    r"(?:(?:\s+\d+(?:\.\d+)?\s*(?:kg|km)\b)|\bby\b|\bvia\b|\.|,|$)",
    re.I,
)
_WEIGHT_RE     = re.compile(r"\b(\d+(?:\.\d+)?)\s*kg\b", re.I)
_DIMENSIONS_RE = re.compile(
    r"\b(\d+(?:\.\d+)?)\s*[x×]\s*(\d+(?:\.\d+)?)\s*[x×]\s*(\d+(?:\.\d+)?)\s*cm\b", re.I
)
_DISTANCE_RE   = re.compile(r"\b(\d+(?:\.\d+)?)\s*km\b", re.I)
_C20_RE        = re.compile(r"\b20\s*(ft|feet)\b", re.I)
_C40HC_RE      = re.compile(r"\b40\s*hc\b|\b40\s*high\s*cube\b", re.I)
_C40_RE        = re.compile(r"\b40\s*(ft|feet)\b", re.I)
_EXPRESS_RE    = re.compile(r"\b(express|dhl|fedex|ups)\b", re.I)
_DEMURRAGE_RE  = re.compile(r"\b(\d+)\s*(day|days)\b.*\b(demurrage|detention)\b", re.I)

_TRAILING_QTY_RE = re.compile(r"\s+\d+(?:\.\d+)?\s*(kg|km)\b.*$", re.I)
_TRAILING_BY_RE  = re.compile(r"\s+(by|via)\s+.*$", re.I)


def detect_mode(text: Optional[str]) -> Optional[str]:
    t = str(text or "")
    for mode, pattern in _MODE_PATTERNS:
        if pattern.search(t):
            return mode
    return None


def clean_place(value: Optional[str]) -> str:
    """Strip trailing '42kg' / 'by air' / 'via Kano' tails from a captured place."""
    raw = str(value or "").strip()
    if not raw:
        return ""
    raw = _TRAILING_QTY_RE.sub("", raw)
    raw = _TRAILING_BY_RE.sub("", raw)
    return raw.strip()


class TextExtractor(ABC):
    """Free-text extraction strategy."""

    @abstractmethod
    def extract(self, text: str) -> QuoteRequest:
        pass


class RegexTextExtractor(TextExtractor):

    def extract(self, text: str) -> QuoteRequest:
        text = str(text or "")
        out = QuoteRequest(free_text=text, mode=detect_mode(text))

        m = _FROM_TO_RE.search(text)
        if m:
            out.origin = clean_place(m.group(1)) or None
            out.destination = clean_place(m.group(2)) or None

        m = _WEIGHT_RE.search(text)
        if m:
            out.weight_kg = float(m.group(1))

        m = _DIMENSIONS_RE.search(text)
        if m:
            out.dimensions_cm = Dimensions(
                length=float(m.group(1)), width=float(m.group(2)), height=float(m.group(3)),
            )

        m = _DISTANCE_RE.search(text)
        if m:
            out.distance_km = float(m.group(1))

        if _C20_RE.search(text):
            out.container_type = "20ft"
        if _C40HC_RE.search(text):
            out.container_type = "40hc"
        elif _C40_RE.search(text):
            out.container_type = "40ft"

        if _EXPRESS_RE.search(text):
            out.is_express = True

        m = _DEMURRAGE_RE.search(text)
        if m:
            out.demurrage_days = float(m.group(1))

        return out


# ── LLM strategy ─────────────────────────────────────────────────────────────

_TEMPLATE = """You are a freight forwarding assistant. Extract shipment parameters from the customer message below.

Return ONLY a valid JSON object with these exact keys (use null for missing values):
{{
  "mode": "parcel | air | ocean | ground | null",
  "origin": "string or null",
  "destination": "string or null",
  "weight_kg": number_or_null,
  "dimensions_cm": {{"length": number, "width": number, "height": number}} or null,
  "volume_cbm": number_or_null,
  "container_type": "20ft | 40ft | 40hc | null",
  "distance_km": number_or_null,
  "is_express": boolean_or_null,
  "demurrage_days": number_or_null
}}

Only fill a value the message states. Do not guess.
Return ONLY the JSON object. No explanation, no markdown, no code fences.

Customer message:
{message}
"""


def _positive(value: Any) -> Optional[float]:
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if out > 0 else None


class LLMTextExtractor(TextExtractor):
    """
    LangChain pipeline:
      PromptTemplate → ChatGroq → JsonOutputParser → QuoteRequest
    """

    def __init__(self, api_key: str, model: str, fallback: Optional[TextExtractor] = None) -> None:
        self._api_key  = api_key
        self._model    = model
        self._fallback = fallback or RegexTextExtractor()
        self._chain    = None   # lazy LangChain chain

    def _get_chain(self):
        from langchain_core.output_parsers import JsonOutputParser
        from langchain_core.prompts import PromptTemplate
        from langchain_groq import ChatGroq

        llm = ChatGroq(api_key=self._api_key, model=self._model, temperature=0, max_tokens=512)
        prompt = PromptTemplate(template=_TEMPLATE, input_variables=["message"])
        return prompt | llm | JsonOutputParser()

    @property
    def chain(self):
        if self._chain is None:
            self._chain = self._get_chain()
        return self._chain

    def extract(self, text: str) -> QuoteRequest:
        text = str(text or "")
        try:
            params = self.chain.invoke({"message": text})
            if not isinstance(params, dict):
                raise ValueError(f"expected a JSON object, got {type(params).__name__}")
        except Exception as exc:
            log.warning("LLM extraction failed, falling back to regex", error=str(exc))
            return self._fallback.extract(text)

        out = self._from_params(params, text)
        log.info("Free text parsed via LLM", fields=sorted(out.set_fields()))
        return out

    @staticmethod
    def _from_params(params: dict[str, Any], text: str) -> QuoteRequest:
        mode = str(params.get("mode") or "").lower()
        container = str(params.get("container_type") or "").lower()
        dims = params.get("dimensions_cm")
        dimensions = None
        if isinstance(dims, dict):
            sides = [_positive(dims.get(k)) for k in ("length", "width", "height")]
            if all(sides):
                dimensions = Dimensions(*sides)
        days = _positive(params.get("demurrage_days"))
        return QuoteRequest(
            free_text      =text,
            mode           =mode if mode in MODES else None,
            origin         =str(params.get("origin") or "").strip() or None,
            destination    =str(params.get("destination") or "").strip() or None,
            weight_kg      =_positive(params.get("weight_kg")),
            dimensions_cm  =dimensions,
            volume_cbm     =_positive(params.get("volume_cbm")),
            container_type =container if container in CONTAINER_TYPES else None,
            distance_km    =_positive(params.get("distance_km")),
            is_express     =True if params.get("is_express") is True else None,
            demurrage_days =days,
        )


def build_extractor(settings) -> TextExtractor:
    if settings.quote_extractor == "llm" and settings.groq_api_key:
        return LLMTextExtractor(settings.groq_api_key, settings.groq_model)
    if settings.quote_extractor == "llm":
        log.warning("QUOTE_EXTRACTOR=llm but GROQ_API_KEY is not set, using regex extractor")
    return RegexTextExtractor()
