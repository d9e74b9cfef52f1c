"""
Configuration — Transaction Service
Read once from the environment (and .env) at startup, then passed around explicitly.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from transaction_service.errors import ConfigError

VERIFICATION_MODES = ("answer", "otp")


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name, default):
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{value}'") from None


def _env_float(name):
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{value}'") from None


@dataclass
class Config:
    port: int = 5000
    csv_file: str = "./data/transactions.csv"
    sms_csv_file: str = "./data/sms.csv"
    risk_assessor_url: str = "https://fraudy.onrender.com/assess"
    verification_mode: str = "answer"
    verification_answer: str = "gaming"
    otp_api_url: Optional[str] = None
    otp_api_key: Optional[str] = None
    otp_recipient: Optional[str] = None
    llm_api_url: str = "https://api.openai.com/v1/chat/completions"
    llm_api_key: Optional[str] = None
    llm_model: str = "gpt-4o-mini"
    hour_bucket_time: bool = True
    upstream_timeout: Optional[float] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        load_dotenv()
        return cls(
            port=_env_int("PORT", 5000),
            csv_file=os.environ.get("CSV_FILE", "./data/transactions.csv"),
            sms_csv_file=os.environ.get("SMS_CSV_FILE", "./data/sms.csv"),
            risk_assessor_url=os.environ.get("RISK_ASSESSOR_URL", "https://fraudy.onrender.com/assess"),
            verification_mode=os.environ.get("VERIFICATION_MODE", "answer").strip().lower(),
            verification_answer=os.environ.get("VERIFICATION_ANSWER", "gaming"),
            otp_api_url=os.environ.get("OTP_API_URL"),
            otp_api_key=os.environ.get("OTP_API_KEY"),
            otp_recipient=os.environ.get("OTP_RECIPIENT"),
            llm_api_url=os.environ.get("LLM_API_URL", "https://api.openai.com/v1/chat/completions"),
            llm_api_key=os.environ.get("LLM_API_KEY"),
            llm_model=os.environ.get("LLM_MODEL", "gpt-4o-mini"),
            hour_bucket_time=_env_flag("HOUR_BUCKET_TIME", True),
            upstream_timeout=_env_float("UPSTREAM_TIMEOUT"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self):
        if self.verification_mode not in VERIFICATION_MODES:
            raise ConfigError(
                f"VERIFICATION_MODE must be one of {', '.join(VERIFICATION_MODES)}, "
                f"got '{self.verification_mode}'"
            )

        missing = []
        if not self.risk_assessor_url:
            missing.append("RISK_ASSESSOR_URL")
        if self.verification_mode == "answer" and not self.verification_answer:
            missing.append("VERIFICATION_ANSWER")
        if self.verification_mode == "otp":
            for name in ("otp_api_url", "otp_api_key", "otp_recipient"):
                if not getattr(self, name):
                    missing.append(name.upper())
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")
        return self
