"""
Lulu Client - Print-on-demand API (https://api.lulu.com/docs/)

Authenticates with OAuth2 client credentials and wraps the print-job,
cost-calculation and shipping-option endpoints.
"""
import logging
from typing import Optional, Dict, Any

import requests

from config import get_settings
from errors import PrintVendorError
from utils.print_specs import POD_PACKAGE_ID

logger = logging.getLogger(__name__)

LULU_PRODUCTION_URL = "https://api.lulu.com"
LULU_SANDBOX_URL = "https://api.sandbox.lulu.com"
TOKEN_PATH = "/auth/realms/glasstree/protocol/openid-connect/token"

# Lulu job status -> order status ("failed" means set the failure marker)
LULU_STATUS_MAP = {
    "CREATED": "submitted",
    "UNPAID": "submitted",
    "PAYMENT_IN_PROGRESS": "submitted",
    "PRODUCTION_READY": "in_production",
    "PRODUCTION_DELAYED": "in_production",
    "IN_PRODUCTION": "in_production",
    "MANUFACTURED": "in_production",
    "SHIPPED": "shipped",
    "DELIVERED": "delivered",
    "CANCELED": "failed",
    "ERROR": "failed",
    "REJECTED": "failed",
}


def map_lulu_status(lulu_status: Optional[str]) -> Optional[str]:
    return LULU_STATUS_MAP.get((lulu_status or "").upper())


def extract_tracking(job: Dict[str, Any]) -> tuple:
    """(tracking_number, tracking_url) from the first line item, if shipped."""
    line_items = job.get("line_items") or []
    if not line_items:
        return None, None
    first = line_items[0]
    urls = first.get("tracking_urls") or []
    return first.get("tracking_id"), (urls[0] if urls else None)


class LuluClient:
    """Thin synchronous client; one access token per client instance."""

    def __init__(
        self,
        client_key: str,
        client_secret: str,
        use_sandbox: bool = False,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.client_key = client_key
        self.client_secret = client_secret
        self.base_url = LULU_SANDBOX_URL if use_sandbox else LULU_PRODUCTION_URL
        self.timeout = timeout
        self.session = session or requests.Session()
        self._access_token: Optional[str] = None

    @classmethod
    def from_settings(cls) -> "LuluClient":
        settings = get_settings()
        return cls(
            client_key=settings.lulu_client_key,
            client_secret=settings.lulu_client_secret,
            use_sandbox=settings.lulu_use_sandbox,
            timeout=settings.http_timeout_seconds,
        )

    # ============================================
    # Transport
    # ============================================

    def _check(self, response: requests.Response, action: str) -> Dict[str, Any]:
        if not response.ok:
            logger.error(f"Lulu {action} failed: {response.status_code} - {response.text}")
            raise PrintVendorError(
                f"Lulu API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response.json()

    def get_access_token(self) -> str:
        if self._access_token:
            return self._access_token

        if not self.client_key or not self.client_secret:
            raise PrintVendorError("LULU_CLIENT_KEY and LULU_CLIENT_SECRET must be configured")

        try:
            response = self.session.post(
                f"{self.base_url}{TOKEN_PATH}",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_key,
                    "client_secret": self.client_secret,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise PrintVendorError(f"Lulu auth request failed: {e}") from e

        data = self._check(response, "auth")
        self._access_token = data["access_token"]
        return self._access_token

    def _request(self, method: str, path: str, action: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self.get_access_token()}"
        try:
            response = self.session.request(
                method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise PrintVendorError(f"Lulu {action} request failed: {e}") from e
        return self._check(response, action)

    # ============================================
    # Print jobs
    # ============================================

    def submit_print_job(self, order, book) -> Dict[str, Any]:
        """
        Create a print job for one copy of `book`, shipped GROUND to the order's address.

        Returns:
            The created job as returned by Lulu ({"id", "status": {"name"}, ...})

        Raises:
            PrintVendorError: if the PDFs are missing or Lulu rejects the request
        """
        if not order.interior_pdf_url or not order.cover_pdf_url:
            raise PrintVendorError("PDFs must be generated before submitting to Lulu")

        payload = {
            "contact_email": order.contact_email,
            "external_id": str(order.id),
            "shipping_address": {
                "name": order.ship_name,
                "street1": order.ship_street1,
                "street2": order.ship_street2,
                "city": order.ship_city,
                "state_code": order.ship_state_code,
                "postcode": order.ship_postal_code,
                "country_code": order.ship_country_code,
                "phone_number": order.ship_phone_number,
            },
            "shipping_option_level": "GROUND",
            "line_items": [
                {
                    "external_id": str(book.id),
                    "title": book.title,
                    "cover": order.cover_pdf_url,
                    "interior": order.interior_pdf_url,
                    "pod_package_id": book.pod_package_id or POD_PACKAGE_ID,
                    "quantity": 1,
                }
            ],
        }

        logger.info(f"Submitting print job to Lulu for order {order.id}")
        job = self._request("POST", "/print-jobs/", "print job submission", json=payload)
        logger.info(f"Lulu print job created: {job.get('id')} for order {order.id}")
        return job

    def get_print_job(self, job_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/print-jobs/{job_id}/", "print job lookup")

    # ============================================
    # Estimates
    # ============================================

    def get_print_cost_estimate(self, page_count: int) -> Dict[str, Any]:
        """Returns {"cost": float, "currency": str}."""
        data = self._request(
            "GET",
            "/print-job-cost-calculations/",
            "cost calculation",
            params={"page_count": page_count, "pod_package_id": POD_PACKAGE_ID, "quantity": 1},
        )
        if not data.get("total_cost_excl_tax"):
            raise PrintVendorError("Could not calculate cost")
        return {"cost": float(data["total_cost_excl_tax"]), "currency": data.get("currency") or "USD"}

    def get_shipping_estimate(self, page_count: int, postal_code: str, country_code: str) -> Dict[str, Any]:
        """Returns {"cost": float, "currency": str} for GROUND shipping."""
        data = self._request(
            "GET",
            "/print-shipping-options/",
            "shipping options",
            params={
                "page_count": page_count,
                "pod_package_id": POD_PACKAGE_ID,
                "quantity": 1,
                "postal_code": postal_code,
                "country_code": country_code,
                "level": "GROUND",
            },
        )
        for option in data.get("results") or []:
            if option.get("level") == "GROUND":
                return {"cost": float(option["total_cost_excl_tax"]), "currency": option.get("currency") or "USD"}
        raise PrintVendorError("No shipping options available")
