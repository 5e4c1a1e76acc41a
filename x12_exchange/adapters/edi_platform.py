"""EDI platform HTTP adapter for guide resolution, mapping invocation and translation."""

from __future__ import annotations

import logging
from typing import Any, Final

import httpx

from x12_exchange.domain import Envelope
from x12_exchange.domain.errors import GuideResolutionError, MappingInvocationError, TranslationError

from .interfaces import GuideResolverPort, GuideSummary, MappingInvokerPort, TranslatorPort

logger = logging.getLogger(__name__)


class EdiPlatformAdapter(GuideResolverPort, MappingInvokerPort, TranslatorPort):
    """Adapter for the EDI platform `guides`, `mappings` and `translate` endpoints."""

    _USER_AGENT: Final[str] = "x12-exchange/1.0 (Python/httpx)"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize EDI platform adapter.

        Args:
            base_url: Base endpoint URL of the EDI platform API.
            api_key: API key sent in the `Authorization` header.
            timeout_seconds: HTTP request timeout in seconds.
            transport: Optional httpx transport override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_base_url = base_url.strip()
        normalized_api_key = api_key.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if not normalized_api_key:
            raise ValueError("api_key must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._base_url = normalized_base_url.rstrip("/")
        self._api_key = normalized_api_key
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    def adapter_resolve_guide(self, candidate_guide_ids: list[str], transaction_set_type: str) -> GuideSummary:
        """Resolve the single candidate guide that targets the transaction set type.

        Candidates missing on the platform are ignored; any other lookup
        failure aborts resolution.

        Args:
            candidate_guide_ids: Guide ids configured for the partner pair.
            transaction_set_type: Transaction set code of the event.

        Returns:
            GuideSummary: Selected guide.

        Raises:
            GuideResolutionError: Raised when zero or several guides match or a lookup fails.
        """

        unique_guide_ids = list(dict.fromkeys(guide_id.strip() for guide_id in candidate_guide_ids if guide_id.strip()))
        if not unique_guide_ids:
            raise GuideResolutionError(f"no candidate guides configured for transaction set '{transaction_set_type}'")

        matching_guides: list[GuideSummary] = []
        for guide_id in unique_guide_ids:
            try:
                response = self._adapter_request("GET", f"/guides/{guide_id}")
            except httpx.HTTPError as error:
                raise GuideResolutionError(f"guide lookup failed for '{guide_id}': {error}") from error

            if response.status_code == httpx.codes.NOT_FOUND:
                logger.warning("configured guide %s was not found on the EDI platform", guide_id)
                continue
            if response.is_error:
                raise GuideResolutionError(f"guide lookup failed for '{guide_id}': HTTP {response.status_code}")

            guide_payload = self._adapter_read_json(response, error_type=GuideResolutionError)
            guide_transaction_set = str((guide_payload.get("target") or {}).get("transactionSet") or "").strip()
            if guide_transaction_set == transaction_set_type:
                matching_guides.append(
                    GuideSummary(guide_id=str(guide_payload.get("id") or guide_id), transaction_set_type=guide_transaction_set)
                )

        if not matching_guides:
            raise GuideResolutionError(f"no guide found for transaction set '{transaction_set_type}'")
        if len(matching_guides) > 1:
            matching_ids = ", ".join(guide.guide_id for guide in matching_guides)
            raise GuideResolutionError(
                f"multiple guides found for transaction set '{transaction_set_type}': {matching_ids}"
            )
        return matching_guides[0]

    def adapter_invoke_mapping(self, mapping_id: str, input_payload: Any) -> Any:
        """Run one mapping and return its output document.

        Args:
            mapping_id: Mapping identifier.
            input_payload: Mapping input document.

        Returns:
            Any: Mapping output JSON.

        Raises:
            MappingInvocationError: Raised for transport failures or non-success responses.
        """

        try:
            response = self._adapter_request("POST", f"/mappings/{mapping_id}/map", json_body=input_payload)
        except httpx.HTTPError as error:
            raise MappingInvocationError(f"mapping '{mapping_id}' invocation failed: {error}") from error

        if response.is_error:
            raise MappingInvocationError(
                f"mapping '{mapping_id}' invocation failed: HTTP {response.status_code} {response.text}"
            )
        try:
            return response.json()
        except ValueError as error:
            raise MappingInvocationError(f"mapping '{mapping_id}' returned a non-JSON body") from error

    def adapter_translate_json_to_edi(self, guide_json: Any, guide_id: str, envelope: Envelope) -> str:
        """Translate guide JSON to X12 EDI with the shared envelope.

        Args:
            guide_json: Guide-schema JSON.
            guide_id: Guide used for translation.
            envelope: Shared interchange and group envelope.

        Returns:
            str: Serialized X12 EDI document.

        Raises:
            TranslationError: Raised when the platform rejects the document or returns no output.
        """

        request_body = {
            "guideId": guide_id,
            "input": guide_json,
            "envelope": envelope.envelope_to_payload(),
        }
        try:
            response = self._adapter_request("POST", "/translate/x12", json_body=request_body)
        except httpx.HTTPError as error:
            raise TranslationError(f"translation request failed: {error}") from error

        if response.is_error:
            raise TranslationError(f"translation failed: HTTP {response.status_code} {response.text}")

        translation_payload = self._adapter_read_json(response, error_type=TranslationError)
        translation_errors = translation_payload.get("errors") or []
        if translation_errors:
            raise TranslationError(f"translation returned errors: {translation_errors}")
        edi_output = translation_payload.get("output")
        if not isinstance(edi_output, str) or not edi_output:
            raise TranslationError("translation response did not include EDI output")
        return edi_output

    def _adapter_request(self, method: str, path: str, json_body: Any = None) -> httpx.Response:
        """Execute one HTTP request against the platform API.

        Args:
            method: HTTP method.
            path: Path relative to the base URL.
            json_body: Optional JSON request body.

        Returns:
            httpx.Response: Raw response; status handling is left to callers.

        Raises:
            httpx.HTTPError: Raised for transport failures and timeouts.
        """

        with httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout_seconds,
            transport=self._transport,
            headers={"Authorization": f"Key {self._api_key}", "User-Agent": self._USER_AGENT},
        ) as client:
            return client.request(method, path, json=json_body)

    def _adapter_read_json(self, response: httpx.Response, error_type: type[Exception]) -> dict[str, Any]:
        """Decode a JSON object body, raising `error_type` for anything else."""

        try:
            payload = response.json()
        except ValueError as error:
            raise error_type(f"EDI platform returned a non-JSON body for {response.request.url}") from error
        if not isinstance(payload, dict):
            raise error_type(f"EDI platform returned a non-object body for {response.request.url}")
        return payload
