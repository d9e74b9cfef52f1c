"""
SMS Scam Classifier — Transaction Service
Asks an OpenAI-compatible chat-completions endpoint whether an SMS is a scam.
Label: 1 = likely scam, 0 = likely legitimate.
"""

import logging
import re

import requests

from transaction_service.errors import ScamCheckError

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are a fraud analyst for a mobile banking app. Classify SMS messages "
    "as scam or legitimate. Scams include phishing links, fake delivery or bank "
    "notices, prize claims, urgent payment requests and requests for codes or "
    "passwords. Reply with a single digit: 1 if the message is likely a scam, "
    "0 if it is likely legitimate. No other text."
)

_LABEL_RE = re.compile(r"\b([01])\b")


def parse_label(text):
    """Pull the first standalone 0/1 out of a model reply."""
    m = _LABEL_RE.search(text or "")
    if not m:
        raise ScamCheckError(f"Could not read a label from model reply: {text!r}")
    return int(m.group(1))


class ScamClassifier:
    def __init__(self, api_url, api_key, model, timeout=None, session=None):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self):
        return bool(self.api_key)

    def classify(self, message):
        if not self.configured:
            raise ScamCheckError("SMS classifier is not configured", status_code=503)

        payload = {
            "model": self.model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": message},
            ],
        }
        try:
            resp = self.session.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            reply = resp.json()["choices"][0]["message"]["content"]
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"LLM call failed: {e}")
            raise ScamCheckError("SMS classification failed") from e

        label = parse_label(reply)
        logger.info(f"SMS classified as {'scam' if label else 'legitimate'}")
        return label
