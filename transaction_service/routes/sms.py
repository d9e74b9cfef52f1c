import logging
import os

from flask import Blueprint, Response, current_app, request, jsonify

from transaction_service.errors import ServiceError
from transaction_service.extensions import get_scam_classifier

logger = logging.getLogger(__name__)

sms_bp = Blueprint('sms', __name__)


@sms_bp.route('/sms', methods=['GET'])
def get_sms_dataset():
    """
    Raw SMS dataset as CSV
    ---
    tags:
      - SMS
    produces:
      - text/csv
    responses:
      200:
        description: CSV file contents
      404:
        description: No SMS dataset configured
    """
    path = current_app.config['SMS_CSV_FILE']
    if not os.path.exists(path):
        return jsonify({'error': 'SMS dataset not found'}), 404

    try:
        with open(path, encoding='utf-8') as fh:
            content = fh.read()
    except OSError as e:
        logger.error(f"Failed to read SMS dataset {path}: {e}")
        return jsonify({'error': 'Failed to read SMS dataset'}), 500

    return Response(content, mimetype='text/csv')


@sms_bp.route('/api/check-sms', methods=['POST'])
def check_sms():
    """
    Classify an SMS as scam (1) or legitimate (0)
    ---
    tags:
      - SMS
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - message
          properties:
            message:
              type: string
    responses:
      200:
        description: Classification label
      400:
        description: Missing message
      502:
        description: LLM service failed
      503:
        description: LLM service not configured
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    message = data.get('message')

    if not message or not isinstance(message, str):
        return jsonify({'error': 'Missing message'}), 400

    try:
        label = get_scam_classifier().classify(message)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({'label': label}), 200
