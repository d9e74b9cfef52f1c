"""
Intake Service — Transaction Service
Runs each transaction through risk assessment and, for medium risk, step-up verification.

States:
    PENDING_ASSESSMENT    -> ACCEPTED | AWAITING_VERIFICATION
    AWAITING_VERIFICATION -> VERIFIED_CLEAN | VERIFIED_FRAUD | VERIFICATION_ERROR

Every terminal state appends exactly one record to the store. Nothing is kept
between Submit and Verify: the client sends the held transaction back on Verify.
Verification fails closed, so a wrong credential or a broken verifier both
record the transaction as fraud.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from transaction_service.errors import (
    UpstreamAssessmentError,
    ValidationError,
    VerificationRejected,
    VerificationSystemError,
)
from transaction_service.models.transaction import Transaction

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    PENDING_ASSESSMENT = "PENDING_ASSESSMENT"
    ACCEPTED = "ACCEPTED"
    AWAITING_VERIFICATION = "AWAITING_VERIFICATION"
    VERIFIED_CLEAN = "VERIFIED_CLEAN"
    VERIFIED_FRAUD = "VERIFIED_FRAUD"
    VERIFICATION_ERROR = "VERIFICATION_ERROR"


ACCEPT_TIERS = ("Low", "High")
HOLD_TIER = "Medium"


@dataclass
class SubmitResult:
    state: WorkflowState
    transaction: Transaction
    verification_method: str = None

    @property
    def verification_required(self):
        return self.state == WorkflowState.AWAITING_VERIFICATION


@dataclass
class VerifyResult:
    state: WorkflowState
    transaction: Transaction


def to_hour_bucket(value):
    """
    UTC hour of day (0-23) for an ISO-8601 timestamp string, else None.
    Naive timestamps are taken as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).hour


class IntakeService:
    def __init__(self, store, assessor, verifier, hour_bucket_time=True):
        self.store = store
        self.assessor = assessor
        self.verifier = verifier
        self.hour_bucket_time = hour_bucket_time

    def prepare_payload(self, payload):
        """
        Copy of payload as the assessor should see it: time rewritten to an
        hour bucket, the original value kept in created_at.
        """
        data = dict(payload)
        if not self.hour_bucket_time:
            return data

        hour = to_hour_bucket(data.get("time"))
        if hour is not None:
            if not data.get("created_at"):
                data["created_at"] = data["time"]
            data["time"] = hour
        return data

    def submit(self, payload):
        if not isinstance(payload, dict):
            raise ValidationError("Transaction body must be a JSON object")

        data = self.prepare_payload(payload)
        risk, is_fraud = self.assessor.assess(data)
        tx = Transaction.from_mapping({**data, "risk_level": risk, "is_fraud": is_fraud})

        if risk in ACCEPT_TIERS:
            self.store.append(tx)
            logger.info(f"Transaction {tx.id} accepted with {risk} risk")
            return SubmitResult(WorkflowState.ACCEPTED, tx)

        if risk == HOLD_TIER:
            logger.info(f"Medium risk detected for {tx.id}. {self.verifier.method} verification required.")
            try:
                self.verifier.challenge()
            except Exception as e:
                logger.error(f"Could not issue {self.verifier.method} challenge: {e}")
                raise VerificationSystemError("Could not start verification") from e
            return SubmitResult(WorkflowState.AWAITING_VERIFICATION, tx, self.verifier.method)

        raise UpstreamAssessmentError(f"Unknown risk tier: {risk}")

    def verify(self, credential, candidate):
        """
        Finalize a held transaction. Returns a VerifyResult on success and
        raises VerificationRejected / VerificationSystemError otherwise, in
        both cases after the transaction has been recorded as fraud.
        """
        if not credential or not isinstance(candidate, dict):
            logger.error("Missing credential or transaction in verification request.")
            raise ValidationError("Missing required data")

        try:
            accepted = self.verifier.check(credential)
        except Exception as e:
            logger.error(f"Error during {self.verifier.method} verification: {e}")
            self._finalize(candidate, is_fraud=True)
            raise VerificationSystemError("Verification error") from e

        if accepted:
            tx = self._finalize(candidate, is_fraud=False)
            logger.info(f"Transaction {tx.id} verified.")
            return VerifyResult(WorkflowState.VERIFIED_CLEAN, tx)

        tx = self._finalize(candidate, is_fraud=True)
        logger.warning(f"Verification failed. Transaction {tx.id} flagged as fraud.")
        raise VerificationRejected(self.verifier.rejection_message)

    def _finalize(self, candidate, is_fraud):
        tx = Transaction.from_mapping(candidate).with_fraud_flag(is_fraud)
        return self.store.append(tx)
