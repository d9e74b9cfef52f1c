from flask import Blueprint, request, jsonify

from transaction_service.errors import PersistenceError, ServiceError
from transaction_service.extensions import get_intake_service, get_store

transactions_bp = Blueprint('transactions', __name__)


@transactions_bp.route('/transactions', methods=['GET'])
def list_transactions():
    """
    List recorded transactions, newest first
    ---
    tags:
      - Transactions
    responses:
      200:
        description: List of transactions
      500:
        description: Transaction file could not be read
    """
    try:
        transactions = get_store().read_all()
    except PersistenceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify([tx.to_dict() for tx in transactions]), 200


@transactions_bp.route('/transactions', methods=['POST'])
def submit_transaction():
    """
    Submit a transaction for risk assessment
    ---
    tags:
      - Transactions
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            id:
              type: string
            sender:
              type: string
            receiver:
              type: string
            amount:
              type: number
            time:
              type: string
            ip_address:
              type: string
            location:
              type: string
    responses:
      201:
        description: Low or high risk, transaction recorded
      200:
        description: Medium risk, verification required before recording
      500:
        description: Risk assessment failed (upstream status is passed through when known)
    """
    data = request.get_json(silent=True)

    try:
        result = get_intake_service().submit(data)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    body = {
        'tx': result.transaction.to_dict(),
        'verification_required': result.verification_required,
    }
    if result.verification_required:
        body['verification_method'] = result.verification_method
        return jsonify(body), 200
    return jsonify(body), 201


@transactions_bp.route('/verify-transaction', methods=['POST'])
def verify_transaction():
    """
    Verify a medium-risk transaction and record it
    ---
    tags:
      - Transactions
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            answer:
              type: string
              description: Shared-secret answer (answer mode)
            code:
              type: string
              description: One-time passcode (otp mode)
            transaction:
              type: object
              description: Candidate transaction returned by POST /transactions
            latestTransaction:
              type: object
              description: Alias of transaction
    responses:
      200:
        description: Verified, transaction recorded as not fraud
      400:
        description: Missing data, or wrong credential (transaction recorded as fraud)
      500:
        description: Verifier error (transaction recorded as fraud)
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    credential = data.get('answer') or data.get('code')
    candidate = data.get('transaction')
    if candidate is None:
        candidate = data.get('latestTransaction')

    try:
        get_intake_service().verify(credential, candidate)
    except ServiceError as e:
        return jsonify({'verified': False, **e.to_dict()}), e.status_code

    return jsonify({'verified': True}), 200
