"""
Transaction Service — Flask application
Risk-checks incoming transactions, holds medium-risk ones for verification,
and records finalized transactions to a CSV file.
"""

import logging
import sys
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS
from flasgger import Swagger

from transaction_service.config import Config
from transaction_service.errors import ConfigError
from transaction_service.extensions import init_services
from transaction_service.services.intake_service import IntakeService
from transaction_service.services.otp_client import OtpClient
from transaction_service.services.risk_client import RiskAssessorClient
from transaction_service.services.scam_classifier import ScamClassifier
from transaction_service.services.transaction_store import TransactionStore
from transaction_service.services.verification import OtpVerifier, SharedSecretVerifier

logger = logging.getLogger(__name__)


def configure_logging(level="INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )


def build_verifier(config, otp_client=None):
    if config.verification_mode == "otp":
        otp_client = otp_client or OtpClient(
            config.otp_api_url,
            config.otp_api_key,
            config.otp_recipient,
            timeout=config.upstream_timeout,
        )
        return OtpVerifier(otp_client)
    return SharedSecretVerifier(config.verification_answer)


def create_app(config=None, assessor=None, otp_client=None, scam_classifier=None):
    """
    Build the app. Collaborators not passed in are constructed from config.
    Raises ConfigError when required settings are missing.
    """
    config = (config or Config.from_env()).validate()
    configure_logging(config.log_level)

    app = Flask(__name__)
    app.config['SMS_CSV_FILE'] = config.sms_csv_file

    CORS(app)

    store = TransactionStore(config.csv_file)
    assessor = assessor or RiskAssessorClient(
        config.risk_assessor_url, timeout=config.upstream_timeout
    )
    scam_classifier = scam_classifier or ScamClassifier(
        config.llm_api_url,
        config.llm_api_key,
        config.llm_model,
        timeout=config.upstream_timeout,
    )
    if not scam_classifier.configured:
        logger.warning("LLM_API_KEY is not set; /api/check-sms will answer 503")

    intake_service = IntakeService(
        store,
        assessor,
        build_verifier(config, otp_client),
        hour_bucket_time=config.hour_bucket_time,
    )
    init_services(app, store, intake_service, scam_classifier)

    # Initialize Swagger
    swagger_config = {
        "headers": [],
        "specs": [
            {
                "endpoint": 'apispec_1',
                "route": '/apispec_1.json',
                "rule_filter": lambda rule: True,  # all in
                "model_filter": lambda tag: True,  # all in
            }
        ],
        "static_url_path": "/flasgger_static",
        "swagger_ui": True,
        "specs_route": "/apidocs/"
    }
    Swagger(app, config=swagger_config)

    # Register Blueprints
    from transaction_service.routes.transactions import transactions_bp
    app.register_blueprint(transactions_bp)

    from transaction_service.routes.sms import sms_bp
    app.register_blueprint(sms_bp)

    # --- Health check ---------------------------------------------------
    @app.route("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "service": "transaction-service",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    logger.info(f"Verification mode: {config.verification_mode}; store: {config.csv_file}")
    return app


def main():
    try:
        config = Config.from_env()
        app = create_app(config)
    except ConfigError as e:
        configure_logging()
        logger.critical(e.message)
        sys.exit(1)

    logger.info(f"Server listening on http://localhost:{config.port}")
    app.run(host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
