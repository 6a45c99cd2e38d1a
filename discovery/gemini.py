"""
Grounded search client for site discovery.

Sends a search-and-extract prompt to Gemini with the Google Search tool
enabled, then turns the JSON answer and the grounding metadata into
GamblingSite records.

Configuration:
    GEMINI_API_KEY (or GOOGLE_API_KEY / API_KEY): API key
    GEMINI_MODEL: Model to use (default: gemini-3-flash-preview)
"""

import json
import re
from datetime import datetime
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors, types
from loguru import logger
from pydantic import ValidationError

from discovery.config import GeminiSettings, settings
from discovery.exceptions import ConfigurationError, DiscoveryServiceError
from discovery.models import (
    DiscoveryResult,
    ExtractedSite,
    ExtractionPayload,
    GamblingSite,
    SiteStatus,
    utc_now,
)
from discovery.utils.text import normalize_signature

PROMPT_TEMPLATE = """Search for and extract gambling website names and identifiers commonly seen in live stream chat spam or donation messages in Indonesia.
Focus on specific brand names or domain-like strings (e.g., brandname.com, brandnamevip).
Current Query: {query}{context}

Rules:
1. Extract the primary brand/site name.
2. Normalize it (lowercase, no symbols).
3. Assign a confidence score (0.0 - 1.0) based on how clearly it appears as a gambling platform.
4. Provide the current timestamp."""

CONTEXT_TEMPLATE = """

CONTEXTUAL KNOWLEDGE: We already know these patterns: [{patterns}].
Focus on finding NEW variations, different TLDs, or obfuscated versions of these, as well as entirely new platforms."""

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "extracted_sites": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "site_name": types.Schema(type=types.Type.STRING),
                    "normalized_name": types.Schema(type=types.Type.STRING),
                    "confidence_score": types.Schema(type=types.Type.NUMBER),
                },
                required=["site_name", "normalized_name", "confidence_score"],
            ),
        ),
    },
    required=["extracted_sites"],
)


def build_prompt(query: str, known_patterns: list[str], max_patterns: int = 20) -> str:
    """Build the extraction prompt, priming it with already-known signatures."""
    context = ""
    if known_patterns:
        context = CONTEXT_TEMPLATE.format(patterns=", ".join(known_patterns[:max_patterns]))
    return PROMPT_TEMPLATE.format(query=query, context=context)


def extract_sources(response: Any) -> list[str]:
    """Collect grounding web URIs from the first candidate, in order, without duplicates."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []

    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources: list[str] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if uri and uri not in sources:
            sources.append(uri)
    return sources


def _load_json_object(response_text: str) -> dict | None:
    """Find the JSON object in a model response.

    Tries: 1) full text as JSON, 2) markdown code fence, 3) greedy brace match.
    """
    stripped = response_text.strip()
    if stripped.startswith("{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass

    fence_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", response_text, re.DOTALL)
    if fence_match:
        try:
            return json.loads(fence_match.group(1))
        except json.JSONDecodeError:
            pass

    brace_match = re.search(r"\{.*\}", response_text, re.DOTALL)
    if brace_match:
        try:
            return json.loads(brace_match.group(0))
        except json.JSONDecodeError:
            pass

    return None


def parse_extraction(response_text: Optional[str]) -> ExtractionPayload:
    """Parse the model's JSON answer.

    Unparseable output is logged and treated as an empty extraction.
    Individual malformed entries are skipped.
    """
    if not response_text:
        logger.error("Failed to parse AI response: empty response text")
        return ExtractionPayload()

    data = _load_json_object(response_text)
    if not isinstance(data, dict) or not isinstance(data.get("extracted_sites"), list):
        logger.error(f"Failed to parse AI response: {response_text[:200]!r}")
        return ExtractionPayload()

    extracted: list[ExtractedSite] = []
    for item in data["extracted_sites"]:
        try:
            extracted.append(ExtractedSite.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping malformed extracted site {item!r}: {e.error_count()} errors")
    return ExtractionPayload(extracted_sites=extracted)


def build_sites(
    payload: ExtractionPayload,
    sources: list[str],
    max_sources: int = 3,
    min_confidence: float = 0.0,
    timestamp: Optional[datetime] = None,
) -> list[GamblingSite]:
    """Turn extracted entries into registry records sharing one timestamp."""
    timestamp = timestamp or utc_now()
    sites = []
    for item in payload.extracted_sites:
        signature = normalize_signature(item.normalized_name or item.site_name)
        if not signature:
            logger.debug(f"Dropping '{item.site_name}': empty signature")
            continue

        site = GamblingSite(
            site_name=item.site_name.strip(),
            normalized_name=signature,
            first_seen=timestamp,
            last_seen=timestamp,
            confidence_score=item.confidence_score if item.confidence_score is not None else 0.0,
            status=SiteStatus.ACTIVE,
            source_count=len(sources),
            sources=sources[:max_sources],
        )
        if site.confidence_score < min_confidence:
            logger.debug(f"Dropping '{site.site_name}': confidence {site.confidence_score:.2f} < {min_confidence}")
            continue
        sites.append(site)
    return sites


class GroundedSearchClient:
    """
    Gemini client with Google Search grounding.

    The SDK client is created lazily so the API key is only required
    when a search actually runs.
    """

    def __init__(
        self,
        gemini_settings: Optional[GeminiSettings] = None,
        min_confidence: float = 0.0,
        client: Optional[genai.Client] = None,
    ):
        self.settings = gemini_settings or settings.gemini
        self.min_confidence = min_confidence
        self._client = client

    @property
    def model(self) -> str:
        return self.settings.model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.settings.api_key:
                raise ConfigurationError("GEMINI_API_KEY is not set")
            self._client = genai.Client(
                api_key=self.settings.api_key,
                http_options=types.HttpOptions(timeout=self.settings.request_timeout * 1000),
            )
            logger.info(f"Gemini client initialized: model={self.model}")
        return self._client

    async def perform_discovery(
        self,
        query: str,
        known_patterns: Optional[list[str]] = None,
    ) -> DiscoveryResult:
        """
        Run one grounded search and extraction.

        Args:
            query: Search focus for this cycle
            known_patterns: Signatures already in the registry, newest first

        Returns:
            DiscoveryResult with the new records and all grounding URIs

        Raises:
            ConfigurationError: No API key configured
            DiscoveryServiceError: The service call failed
        """
        client = self._get_client()
        prompt = build_prompt(query, known_patterns or [], self.settings.max_known_patterns)

        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
        )

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            logger.error(f"Gemini API error for query '{query}': {e}")
            raise DiscoveryServiceError(str(e)) from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini transport error for query '{query}': {e}")
            raise DiscoveryServiceError(str(e) or type(e).__name__) from e

        sources = extract_sources(response)
        payload = parse_extraction(response.text)
        sites = build_sites(
            payload,
            sources,
            max_sources=self.settings.max_sources_per_site,
            min_confidence=self.min_confidence,
        )

        logger.info(
            f"Grounded search '{query}': {len(payload.extracted_sites)} extracted, "
            f"{len(sites)} kept, {len(sources)} sources"
        )
        return DiscoveryResult(sites=sites, sources=sources)
