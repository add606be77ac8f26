import logging
from typing import Any

import requests
from jose import jwt

from schoolpay.core.config import Settings

logger = logging.getLogger("app.gateway")

COMMON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class GatewayError(Exception):
    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class GatewayClient:
    """Edviron collect-request API. Only used while opening an order."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.http = session or requests.Session()

    def _sign(self, claims: dict[str, Any]) -> str:
        return jwt.encode(claims, self.settings.PAYMENT_PG_KEY, algorithm="HS256")

    def create_collect_request(
        self, amount: float, callback_url: str | None = None
    ) -> dict[str, Any]:
        s = self.settings
        claims = {
            "school_id": s.SCHOOL_ID,
            "amount": _amount_str(amount),
            "callback_url": callback_url or s.DEFAULT_CALLBACK_URL,
        }
        body = {**claims, "sign": self._sign(claims)}
        url = f"{s.GATEWAY_BASE_URL.rstrip('/')}/create-collect-request"

        try:
            resp = self.http.post(
                url,
                json=body,
                headers={
                    **COMMON_HEADERS,
                    "Authorization": f"Bearer {s.PAYMENT_API_KEY}",
                },
                timeout=s.GATEWAY_TIMEOUT_SECONDS,
            )
        except requests.Timeout:
            logger.warning("gateway timeout url=%s", url)
            raise GatewayError("gateway request timed out")
        except requests.RequestException as e:
            logger.warning("gateway unreachable url=%s err=%s", url, e)
            raise GatewayError(f"gateway unreachable: {e}")

        if not resp.ok:
            detail = (resp.text or resp.reason or "").strip()[:300]
            logger.warning("gateway rejected status=%s body=%s", resp.status_code, detail)
            raise GatewayError(
                f"gateway returned {resp.status_code}: {detail}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError:
            raise GatewayError("gateway returned a non-JSON body", resp.status_code)
        if not isinstance(data, dict):
            raise GatewayError("gateway returned an unexpected body", resp.status_code)
        return data


def _amount_str(amount: float) -> str:
    # 500.0 -> "500", 499.5 -> "499.5"
    return str(int(amount)) if float(amount).is_integer() else str(amount)
