"""
Shared collaborators, built once in create_app and looked up per request.
"""

from flask import current_app

INTAKE_SERVICE = "intake_service"
TRANSACTION_STORE = "transaction_store"
SCAM_CLASSIFIER = "scam_classifier"


def init_services(app, store, intake_service, scam_classifier):
    app.extensions[TRANSACTION_STORE] = store
    app.extensions[INTAKE_SERVICE] = intake_service
    app.extensions[SCAM_CLASSIFIER] = scam_classifier


def get_store():
    return current_app.extensions[TRANSACTION_STORE]


def get_intake_service():
    return current_app.extensions[INTAKE_SERVICE]


def get_scam_classifier():
    return current_app.extensions[SCAM_CLASSIFIER]
