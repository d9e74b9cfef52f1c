from transaction_service.models.transaction import Transaction
