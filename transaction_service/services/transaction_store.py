"""
Transaction Store — Transaction Service
Newest-first CSV file of finalized transactions.

Appends rewrite the whole file (read all, prepend, write all). There is no
locking, so two concurrent appends can lose one of the records.
"""

import csv
import logging
import os

from transaction_service.errors import PersistenceError
from transaction_service.models.transaction import FIELDS, Transaction

logger = logging.getLogger(__name__)

# CSV has no null; blank cells in these columns read back as None
NULLABLE_FIELDS = ("id", "sender", "receiver", "time", "created_at")


class TransactionStore:
    def __init__(self, path):
        self.path = path

    def read_all(self):
        """Return every stored Transaction, newest first."""
        if not os.path.exists(self.path):
            return []

        try:
            with open(self.path, newline="", encoding="utf-8") as fh:
                rows = [row for row in csv.DictReader(fh) if any(row.values())]
        except (OSError, csv.Error) as e:
            logger.error(f"Failed to read transactions from {self.path}: {e}")
            raise PersistenceError("Failed to read transactions") from e

        return [Transaction.from_mapping(self._clean_row(row)) for row in rows]

    def append(self, transaction):
        """Put transaction at the head of the file. Returns it once written."""
        records = self.read_all()
        records.insert(0, transaction)

        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", newline="", encoding="utf-8") as fh:
                writer = csv.DictWriter(fh, fieldnames=FIELDS)
                writer.writeheader()
                for record in records:
                    writer.writerow(record.to_dict())
        except (OSError, csv.Error) as e:
            logger.error(f"Failed to write transactions to {self.path}: {e}")
            raise PersistenceError("Failed to record transaction") from e

        logger.info(
            f"Recorded transaction id={transaction.id} is_fraud={transaction.is_fraud} "
            f"({len(records)} total)"
        )
        return transaction

    @staticmethod
    def _clean_row(row):
        cleaned = {}
        for key, value in row.items():
            if key is None:
                continue
            if key in NULLABLE_FIELDS and value == "":
                value = None
            cleaned[key] = value
        return cleaned
