"""
HTTP Job Board Gateway

SubmissionGatewayProtocol implementation for a job board exposing
POST {base_url}/jobs/{job_id}/apply with bearer-token authentication.

Responsibility:
    - Build the multipart request (resume PDF + applicant fields + cover letter)
    - Map the HTTP outcome onto SubmissionResult / TransientSubmissionError

Business Rules:
    - 2xx: success, confirmation id from "confirmationId" or "id"
    - 408, 429, 5xx, network errors, timeouts: TransientSubmissionError (retried)
    - Any other 4xx: SubmissionResult(success=False, retryable=False)

Architecture Notes:
    - One raw call per submit_application(); retry and circuit breaking are
      composed around it by ApplicationWorker
    - Synchronous httpx.Client; pass a client to share connections or to
      mount a mock transport in tests
"""

import logging
from typing import Any, Final, Optional

import httpx

from src.domain.applications.services.ports import (
    SubmissionPayload,
    SubmissionResult,
    TransientSubmissionError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL: Final[str] = "https://api.jabinja.com"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0

RETRYABLE_STATUS_CODES: Final[frozenset[int]] = frozenset({408, 429})


class HttpJobBoardGateway:
    """
    Submits applications to the job board over HTTP.

    Examples:
        >>> gateway = HttpJobBoardGateway(api_key="secret")
        >>> result = gateway.submit_application("job-42", payload)
        >>> result.confirmation_id
        'conf-123'
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str = "",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def submit_application(self, job_id: str, payload: SubmissionPayload) -> SubmissionResult:
        """
        Send one application.

        Raises:
            TransientSubmissionError: Network failure or retryable HTTP status
        """
        url = f"{self.base_url}/jobs/{job_id}/apply"

        try:
            response = self._client.post(
                url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                data=self._build_form_fields(payload),
                files={"resume": ("resume.pdf", payload.resume_file, "application/pdf")},
            )
        except httpx.HTTPError as e:
            raise TransientSubmissionError(f"Request to {url} failed: {e}") from e

        if response.is_success:
            data = self._parse_json(response)
            confirmation_id = data.get("confirmationId") or data.get("id")
            logger.info(f"Job board accepted application for job {job_id}")
            return SubmissionResult(
                success=True,
                confirmation_id=str(confirmation_id) if confirmation_id else None,
            )

        error_message = self._error_message(response)

        if response.status_code in RETRYABLE_STATUS_CODES or response.status_code >= 500:
            raise TransientSubmissionError(error_message, status_code=response.status_code)

        logger.warning(f"Job board rejected application for job {job_id}: {error_message}")
        return SubmissionResult(success=False, error_message=error_message, retryable=False)

    def _build_form_fields(self, payload: SubmissionPayload) -> dict[str, str]:
        info = payload.applicant_info
        fields = {
            "firstName": info.first_name,
            "lastName": info.last_name,
            "email": info.email,
            "phone": info.phone,
        }
        if payload.cover_letter:
            fields["coverLetter"] = payload.cover_letter
        return fields

    def _parse_json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _error_message(self, response: httpx.Response) -> str:
        message = self._parse_json(response).get("message")
        if message:
            return str(message)
        return f"HTTP {response.status_code}: {response.reason_phrase}"
