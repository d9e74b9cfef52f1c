"""
OTP Client — Transaction Service
Sends and checks one-time passcodes through the SMU-style OTP REST API.

Endpoints:
    POST {base}/SendOTP    { Mobile }                 -> { Success, VerificationSid, ErrorMessage }
    POST {base}/VerifyOTP  { VerificationSid, Code }  -> { Success, ErrorMessage }

Codes always go to one fixed recipient. The intake flow keeps no session, so
the VerificationSid of the latest send is held here until it is checked.
"""

import logging
import threading

import requests

logger = logging.getLogger(__name__)


class OtpError(Exception):
    pass


class OtpClient:
    def __init__(self, base_url, api_key, recipient, timeout=None, session=None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.recipient = recipient
        self.timeout = timeout
        self.session = session or requests.Session()
        self._lock = threading.Lock()
        self._verification_sid = None

    def _post(self, path, payload):
        try:
            resp = self.session.post(
                f"{self.base_url}/{path}",
                json=payload,
                headers={"X-API-KEY": self.api_key},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            raise OtpError(f"OTP provider call {path} failed: {e}") from e

    def send(self):
        """Send a fresh code to the configured recipient. Returns the VerificationSid."""
        data = self._post("SendOTP", {"Mobile": self.recipient})
        if not data.get("Success"):
            raise OtpError(data.get("ErrorMessage") or "OTP provider refused to send")

        sid = data.get("VerificationSid")
        with self._lock:
            self._verification_sid = sid
        logger.info(f"OTP sent to {self._masked_recipient()} (sid={sid})")
        return sid

    def verify(self, code):
        """True when the provider accepts code for the latest send."""
        with self._lock:
            sid = self._verification_sid
        if not sid:
            raise OtpError("No pending OTP verification")

        data = self._post("VerifyOTP", {"VerificationSid": sid, "Code": str(code).strip()})
        if data.get("Success"):
            with self._lock:
                if self._verification_sid == sid:
                    self._verification_sid = None
            return True

        logger.info(f"OTP rejected for sid={sid}: {data.get('ErrorMessage')}")
        return False

    def _masked_recipient(self):
        recipient = self.recipient or ""
        return f"***{recipient[-4:]}" if len(recipient) > 4 else "***"
