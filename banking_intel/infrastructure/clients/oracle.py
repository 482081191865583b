"""Text-generation oracle client for an OpenAI-compatible chat completions API"""

import logging
import httpx
from typing import Any, Dict, Optional
from banking_intel.config import settings
from banking_intel.domain.exceptions import OracleError
from banking_intel.domain.models import SectionKind
from banking_intel.infrastructure.observability.metrics import oracle_latency_histogram, oracle_failure_counter

SYSTEM_PROMPT = (
    "You are a banking intelligence analysis system. Provide clear, concise financial insights "
    "based on transaction and account data. Be informative and data-driven, focusing on patterns, "
    "risks, and actionable recommendations."
)

DEFAULT_TEMPERATURE = 0.3

# Risk prose must stay consistent; travel narration can vary a little
SECTION_TEMPERATURES = {
    SectionKind.RISK.value: 0.1,
    SectionKind.TRAVEL.value: 0.4,
}


def temperature_for(section_kind: str) -> float:
    return SECTION_TEMPERATURES.get(section_kind, DEFAULT_TEMPERATURE)


class HttpTextOracle:
    """Client for the external text-generation service"""

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        max_tokens: int | None = None,
    ):
        self.base_url = (base_url or settings.oracle_base_url).rstrip("/")
        self.model = model or settings.oracle_model
        self.api_key = api_key if api_key is not None else settings.oracle_api_key
        self.timeout = timeout or settings.oracle_timeout_seconds
        self.max_tokens = max_tokens or settings.oracle_max_tokens

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _payload(self, prompt: str, section_kind: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature_for(section_kind),
            "max_tokens": self.max_tokens,
        }

    async def generate(self, prompt: str, *, request_id: str, section_kind: str) -> str:
        """
        Generate prose for one report section.

        Raises:
            OracleError: On timeout, HTTP errors, malformed or empty response
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                with oracle_latency_histogram.time():
                    response = await client.post(
                        f"{self.base_url}/chat/completions",
                        headers=self._headers(),
                        json=self._payload(prompt, section_kind),
                    )
                    response.raise_for_status()
                    data = response.json()

            text: Optional[str] = data["choices"][0]["message"]["content"]
            if not isinstance(text, str) or not text.strip():
                raise OracleError("Oracle returned an empty response")

            logging.debug(
                "Oracle section generated",
                extra={"request_id": request_id, "section": section_kind, "response_length": len(text)},
            )
            return text.strip()

        except OracleError:
            oracle_failure_counter.labels(section=section_kind).inc()
            raise
        except httpx.TimeoutException as e:
            oracle_failure_counter.labels(section=section_kind).inc()
            raise OracleError(f"Oracle timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            oracle_failure_counter.labels(section=section_kind).inc()
            raise OracleError(f"Oracle error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            oracle_failure_counter.labels(section=section_kind).inc()
            raise OracleError(f"Oracle unreachable: {e}") from e
        except (KeyError, IndexError, ValueError, TypeError) as e:
            oracle_failure_counter.labels(section=section_kind).inc()
            raise OracleError(f"Invalid response from oracle: {e}") from e
