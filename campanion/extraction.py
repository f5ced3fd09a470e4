"""
Camp data extraction from a web page.

A language model reads the page at a URL and returns whatever camp fields
it can find. Extracted values only replace existing form values when the
model actually supplied them, and date strings are parsed against a fixed
list of formats (first match wins). Any service failure is reported as
"nothing extracted" rather than breaking the form.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from flask import current_app
from openai import OpenAI, OpenAIError

from campanion.errors import CollaboratorFailure, ValidationFailed

# Tried in order; the first format that parses wins
DATE_FORMATS = (
    '%m/%d/%Y',   # 07/10/2024
    '%Y-%m-%d',   # 2024-07-10
    '%b %d, %Y',  # Jul 10, 2024
    '%B %d, %Y',  # July 10, 2024
    '%d %b %Y',   # 10 Jul 2024
    '%Y/%m/%d',   # 2024/07/10
    '%d.%m.%Y',   # 10.07.2024
    '%m-%d-%Y',   # 07-10-2024
)

EXTRACTION_PROMPT = """You are an expert data extractor. Analyze the content of the webpage at the following URL and extract the requested camp information.
If a piece of information is not clearly available, omit the corresponding field.

URL: {url}

Respond with a single JSON object using these keys:
- "name": the camp name
- "description": a short description
- "location": city, state or region
- "startDateString": start date as a string, preferably 'MM/DD/YYYY', 'YYYY-MM-DD' or 'Month Day, Year'
- "endDateString": end date as a string, in the same style
- "price": the price as a number, without currency symbols
- "imageUrl": a direct URL to a representative image
- "activities": a list of the main activities
"""

# Response key -> PartialCampRecord attribute
_RESPONSE_FIELDS = {
    'name': 'name',
    'description': 'description',
    'location': 'location',
    'startDateString': 'start_date_string',
    'endDateString': 'end_date_string',
    'price': 'price',
    'imageUrl': 'image_url',
    'activities': 'activities',
}


@dataclass
class PartialCampRecord:
    """Best-effort camp fields; every field may be missing."""

    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_date_string: Optional[str] = None
    end_date_string: Optional[str] = None
    price: Optional[float] = None
    image_url: Optional[str] = None
    activities: Optional[List[str]] = None

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> 'PartialCampRecord':
        """Build a record from the model's JSON, dropping malformed values."""
        record = cls()
        for key, attr in _RESPONSE_FIELDS.items():
            value = payload.get(key)
            if value is None:
                continue
            if attr == 'price':
                if isinstance(value, bool):
                    continue
                try:
                    value = float(value)
                except (TypeError, ValueError):
                    continue
            elif attr == 'activities':
                if not isinstance(value, list):
                    continue
                value = [str(item).strip() for item in value if str(item).strip()]
            elif not isinstance(value, str):
                continue
            setattr(record, attr, value)
        return record


@dataclass
class MergeResult:
    """Form values after applying an extraction."""

    values: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)
    failed: bool = False


def parse_date_string(text: Optional[str]) -> Optional[date]:
    """
    Parse a free-text date against DATE_FORMATS.

    Returns:
        date or None when no format matches.
    """
    if not text:
        return None
    text = text.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def validate_url(url: Optional[str]) -> str:
    """
    Require an absolute http(s) URL.

    Raises:
        ValidationFailed: For a missing or malformed URL.
    """
    if not url:
        raise ValidationFailed({'original_link': 'Please enter a URL to extract from.'})
    parsed = urlparse(url.strip())
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ValidationFailed({'original_link': 'Please enter a valid URL.'})
    return url.strip()


class CampExtractor:
    """
    Client for the extraction model.

    Args:
        client: An openai.OpenAI client (or compatible object).
        model (str): Chat model name.
    """

    def __init__(self, client, model):
        self.client = client
        self.model = model

    @classmethod
    def from_config(cls, config):
        client = OpenAI(api_key=config['OPENAI_API_KEY'], timeout=config['EXTRACTION_TIMEOUT'])
        return cls(client, config['EXTRACTION_MODEL'])

    def extract(self, url: str) -> PartialCampRecord:
        """
        Ask the model for camp data at ``url``.

        Raises:
            CollaboratorFailure: On API errors, timeouts or an unreadable reply.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{'role': 'user', 'content': EXTRACTION_PROMPT.format(url=url)}],
                response_format={'type': 'json_object'},
            )
            content = response.choices[0].message.content or '{}'
            payload = json.loads(content)
        except OpenAIError as exc:
            raise CollaboratorFailure('camp extraction', exc) from exc
        except (ValueError, IndexError, AttributeError) as exc:
            raise CollaboratorFailure('camp extraction', f'unreadable response: {exc}') from exc
        if not isinstance(payload, dict):
            raise CollaboratorFailure('camp extraction', 'response is not a JSON object')
        return PartialCampRecord.from_response(payload)


def merge_extracted(current: Dict[str, Any], record: PartialCampRecord) -> MergeResult:
    """
    Apply extracted values over the current form values.

    A field is replaced only when the extraction supplied a non-empty value
    for it. Unparseable dates leave the current date in place and add a
    warning.
    """
    values = dict(current)
    warnings = []

    for attr in ('name', 'description', 'location', 'image_url'):
        extracted = getattr(record, attr)
        if extracted:
            values[attr] = extracted
    if record.price is not None:
        values['price'] = record.price
    if record.activities:
        values['activities'] = list(record.activities)

    for attr, text, label in (
        ('start_date', record.start_date_string, 'start'),
        ('end_date', record.end_date_string, 'end'),
    ):
        parsed = parse_date_string(text)
        if parsed is not None:
            values[attr] = parsed
        elif text:
            warnings.append(f'Could not automatically parse {label} date: "{text}". Please set manually.')

    return MergeResult(values=values, warnings=warnings)


def prefill_from_url(extractor: CampExtractor, url: str, current: Dict[str, Any]) -> MergeResult:
    """
    Extract camp data from ``url`` and merge it into ``current``.

    Raises:
        ValidationFailed: If the URL is malformed (no service call is made).

    Returns:
        MergeResult: With ``failed`` set and values unchanged when the
        service call fails.
    """
    url = validate_url(url)
    try:
        record = extractor.extract(url)
    except CollaboratorFailure as exc:
        current_app.logger.warning("Extraction from %s failed: %s", url, exc)
        return MergeResult(values=dict(current), failed=True)
    result = merge_extracted(current, record)
    for warning in result.warnings:
        current_app.logger.warning("Extraction from %s: %s", url, warning)
    return result


def get_extractor() -> CampExtractor:
    """Extractor bound to the current app, created on first use."""
    extractor = current_app.extensions.get('camp_extractor')
    if extractor is None:
        extractor = CampExtractor.from_config(current_app.config)
        current_app.extensions['camp_extractor'] = extractor
    return extractor
