"""
AI semantic checker client.

Asks a Claude model whether submitted application data looks plausible
(real-looking name, passport number, date and amount). The model is an
opaque classifier: we send four fields and expect back a small JSON object.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

import anthropic
import httpx

from visa_fees.config import Settings
from visa_fees.core.interfaces import ISemanticChecker, SemanticCheckRequest, SemanticCheckResult

logger = logging.getLogger(__name__)

# Keys the checker may use in fieldErrors
CHECKED_FIELDS = ("fullName", "passportNumber", "applicationDate", "amountPaid")

VALIDATION_PROMPT = """You are an AI assistant that validates visa application data.

Determine if the provided application data is valid based on the following criteria:
- The full name should be a valid name.
- The passport number should be a valid passport number.
- The application date should be a valid date.
- The amount paid should be a valid amount.

Return only a JSON object with the following format:
{{
  "isValid": true/false,
  "errors": ["list of errors"],
  "fieldErrors": {{"fullName": [], "passportNumber": [], "applicationDate": [], "amountPaid": []}}
}}

Every message in "errors" must also appear under the matching key in "fieldErrors".

Application Data:
Full Name: {full_name}
Passport Number: {passport_number}
Application Date: {application_date}
Amount Paid: {amount_paid}
"""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class SemanticCheckError(Exception):
    """Exception raised when the semantic check could not be performed"""
    def __init__(self, message: str, status_code: Optional[int] = None, raw_output: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.raw_output = raw_output
        super().__init__(self.message)


def parse_check_output(text: str) -> SemanticCheckResult:
    """
    Parse the model's reply into a SemanticCheckResult.

    Accepts a bare JSON object or one wrapped in prose / code fences.

    Raises:
        SemanticCheckError: If no valid verdict can be extracted
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise SemanticCheckError("Checker reply contains no JSON object", raw_output=text)

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise SemanticCheckError(f"Checker reply is not valid JSON: {e}", raw_output=text) from e

    if not isinstance(payload, dict) or not isinstance(payload.get("isValid"), bool):
        raise SemanticCheckError("Checker reply is missing boolean 'isValid'", raw_output=text)

    errors = payload.get("errors") or []
    if not isinstance(errors, list):
        raise SemanticCheckError("Checker reply 'errors' is not a list", raw_output=text)

    return SemanticCheckResult(
        is_valid=payload["isValid"],
        errors=[str(error) for error in errors],
        field_errors=_parse_field_errors(payload.get("fieldErrors")),
    )


def _parse_field_errors(raw: Any) -> Optional[Dict[str, List[str]]]:
    """Keep only known fields with non-empty message lists"""
    if not isinstance(raw, dict):
        return None

    field_errors = {
        key: [str(message) for message in messages]
        for key, messages in raw.items()
        if key in CHECKED_FIELDS and isinstance(messages, list) and messages
    }
    return field_errors or None


class SemanticCheckClient(ISemanticChecker):
    """
    Client for the Claude Messages API.

    A single attempt per check: no retries, no queuing. Any transport
    error, API error or unreadable reply becomes SemanticCheckError.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        logger_instance: logging.Logger = logger
    ):
        """
        Initialize semantic checker client.

        Args:
            http_client: httpx AsyncClient shared with the Anthropic SDK
            settings: Application settings containing API key and model
            logger_instance: Logger for tracking API calls
        """
        self._settings = settings
        self._logger = logger_instance
        self._client = anthropic.AsyncAnthropic(
            api_key=settings.anthropic_api_key or None,
            http_client=http_client,
            max_retries=0,
        )

    async def check(self, request: SemanticCheckRequest) -> SemanticCheckResult:
        """
        Run the plausibility check.

        Args:
            request: Fields to check

        Returns:
            SemanticCheckResult with verdict and error strings

        Raises:
            SemanticCheckError: If the API request fails or the reply is unusable
        """
        prompt = VALIDATION_PROMPT.format(
            full_name=request.full_name,
            passport_number=request.passport_number,
            application_date=request.application_date,
            amount_paid=request.amount_paid,
        )

        self._logger.info(f"Requesting semantic check (model: {self._settings.ai_model})")

        try:
            message = await self._client.messages.create(
                model=self._settings.ai_model,
                max_tokens=self._settings.ai_max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            self._logger.error(f"❌ Semantic check API error - status: {e.status_code}, message: {e.message}")
            raise SemanticCheckError(
                message=f"Semantic check API error: {e.message}",
                status_code=e.status_code,
            ) from e
        except anthropic.APIConnectionError as e:
            self._logger.error(f"❌ Semantic check connection error: {e}")
            raise SemanticCheckError(message=f"Request error: {str(e)}") from e
        except Exception as e:
            self._logger.error(f"❌ Unexpected error during semantic check: {e}", exc_info=True)
            raise SemanticCheckError(message=f"Unexpected error: {str(e)}") from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        )
        result = parse_check_output(text)

        if result.is_valid:
            self._logger.info("✅ Semantic check passed")
        else:
            self._logger.info(f"⚠️ Semantic check rejected data: {len(result.errors)} error(s)")
        return result


class PassThroughSemanticChecker(ISemanticChecker):
    """Accepts every application. Used when AI validation is disabled."""

    async def check(self, request: SemanticCheckRequest) -> SemanticCheckResult:
        return SemanticCheckResult(is_valid=True, errors=[])
