"""
Risk Assessor Client — Transaction Service
Posts a transaction to the external ML service and returns its risk tier.
Response body: { risk: "Low" | "Medium" | "High", is_fraud: bool }
"""

import logging

import requests

from transaction_service.errors import UpstreamAssessmentError

logger = logging.getLogger(__name__)

RISK_TIERS = ("Low", "Medium", "High")


class RiskAssessorClient:
    def __init__(self, url, timeout=None, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def assess(self, payload):
        """Return (risk, is_fraud) for payload, or raise UpstreamAssessmentError."""
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"Risk assessor returned {status}: {e}")
            raise UpstreamAssessmentError(str(e), status_code=status) from e
        except requests.RequestException as e:
            logger.error(f"Error calling risk assessor at {self.url}: {e}")
            raise UpstreamAssessmentError(str(e)) from e
        except ValueError as e:
            logger.error(f"Risk assessor returned a non-JSON body: {e}")
            raise UpstreamAssessmentError("Risk assessor returned an invalid response") from e

        if not isinstance(data, dict):
            raise UpstreamAssessmentError("Risk assessor returned an invalid response")

        risk = data.get("risk")
        if risk not in RISK_TIERS:
            logger.error(f"Risk assessor returned unknown risk tier: {risk!r}")
            raise UpstreamAssessmentError(f"Unknown risk tier: {risk}")

        return risk, data.get("is_fraud")
