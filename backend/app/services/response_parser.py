"""Extract a structured risk analysis from free-form model output.

Language models often wrap the requested JSON in prose or markdown fences.
The parser scans for the first complete JSON object in the text, validates
it against RiskAnalysis, and reports any failure as a ParseFailure value
instead of raising, so the caller decides between fallback and propagation.
"""

import json
import re
from dataclasses import dataclass

from pydantic import ValidationError

from app.schemas.analysis import RiskAnalysis

_OBJECT_START = re.compile(r"\{")
_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class ParseFailure:
    """Tagged result for text that does not contain a valid analysis."""

    reason: str
    raw_text: str


def extract_json_object(text: str) -> dict | None:
    """Return the first complete JSON object embedded in text.

    Tries each ``{`` in order and decodes from there, so leading prose and
    trailing commentary (even if it contains braces) are ignored. Text nested
    too deeply to decode yields None.
    """
    for match in _OBJECT_START.finditer(text):
        try:
            value, _ = _decoder.raw_decode(text, match.start())
        except RecursionError:
            # Re-decoding from each inner brace would hit the same depth
            return None
        except ValueError:
            # JSONDecodeError, or an integer past the int conversion limit
            continue
        if isinstance(value, dict):
            return value
    return None


def parse_risk_analysis(text: str | None) -> RiskAnalysis | ParseFailure:
    """Parse model output into a RiskAnalysis.

    Args:
        text: Raw assistant message content.

    Returns:
        The validated RiskAnalysis, or a ParseFailure describing why the
        text could not be used.
    """
    if not text or not text.strip():
        return ParseFailure(reason="Empty response", raw_text=text or "")

    payload = extract_json_object(text)
    if payload is None:
        return ParseFailure(reason="No JSON found in response", raw_text=text)

    try:
        return RiskAnalysis.model_validate(payload)
    except RecursionError:
        return ParseFailure(reason="Response JSON is nested too deeply", raw_text=text)
    except ValidationError as e:
        return ParseFailure(
            reason=f"Response JSON does not match the analysis schema: {e.error_count()} error(s)",
            raw_text=text,
        )
