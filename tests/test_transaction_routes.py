import os
import shutil
import tempfile
import unittest
from unittest import mock

from transaction_service.app import create_app
from transaction_service.config import Config
from transaction_service.errors import UpstreamAssessmentError
from transaction_service.services.otp_client import OtpError


class RouteTestCase(unittest.TestCase):
    verification_mode = "answer"

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.csv_file = os.path.join(self.tmpdir, "data", "transactions.csv")
        self.assessor = mock.Mock()
        self.assessor.assess.return_value = ("Low", False)
        self.otp_client = mock.Mock()
        self.scam_classifier = mock.Mock()

        config = Config(
            csv_file=self.csv_file,
            sms_csv_file=os.path.join(self.tmpdir, "sms.csv"),
            verification_mode=self.verification_mode,
            otp_api_url="http://otp.test/api",
            otp_api_key="test-key",
            otp_recipient="+6591234567",
            log_level="WARNING",
        )
        self.app = create_app(
            config,
            assessor=self.assessor,
            otp_client=self.otp_client,
            scam_classifier=self.scam_classifier,
        )
        self.client = self.app.test_client()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def list_transactions(self):
        resp = self.client.get("/transactions")
        self.assertEqual(resp.status_code, 200)
        return resp.get_json()


class TestTransactionRoutes(RouteTestCase):
    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["service"], "transaction-service")

    def test_empty_list(self):
        self.assertEqual(self.list_transactions(), [])

    def test_low_risk_submit(self):
        resp = self.client.post("/transactions", json={
            "sender": "A",
            "receiver": "B",
            "amount": "100",
            "time": "2024-01-01T10:00:00Z",
        })

        self.assertEqual(resp.status_code, 201)
        data = resp.get_json()
        self.assertFalse(data["verification_required"])
        self.assertEqual(data["tx"]["is_fraud"], "false")
        self.assertEqual(data["tx"]["amount"], 100)
        self.assertEqual(data["tx"]["risk_level"], "Low")
        self.assertEqual(data["tx"]["created_at"], "2024-01-01T10:00:00Z")

        rows = self.list_transactions()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["sender"], "A")

    def test_high_risk_goes_to_head_of_list(self):
        self.client.post("/transactions", json={"id": "first", "amount": 10})
        self.assessor.assess.return_value = ("High", True)

        resp = self.client.post("/transactions", json={"id": "second", "amount": 99999})

        self.assertEqual(resp.status_code, 201)
        rows = self.list_transactions()
        self.assertEqual([r["id"] for r in rows], ["second", "first"])
        self.assertEqual(rows[0]["is_fraud"], "true")

    def test_medium_risk_then_wrong_answer(self):
        self.assessor.assess.return_value = ("Medium", False)

        resp = self.client.post("/transactions", json={"id": "t1", "sender": "A", "amount": 700})
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertTrue(data["verification_required"])
        self.assertEqual(data["verification_method"], "answer")
        self.assertEqual(self.list_transactions(), [])

        resp = self.client.post("/verify-transaction", json={"answer": "wrong", "transaction": data["tx"]})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {"verified": False, "error": "Incorrect answer"})

        rows = self.list_transactions()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["id"], "t1")
        self.assertEqual(rows[0]["is_fraud"], "true")

    def test_medium_risk_then_correct_answer(self):
        self.assessor.assess.return_value = ("Medium", False)
        tx = self.client.post("/transactions", json={"id": "t2", "amount": 700}).get_json()["tx"]

        resp = self.client.post("/verify-transaction", json={"answer": " GAMING ", "latestTransaction": tx})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"verified": True})
        rows = self.list_transactions()
        self.assertEqual(rows[0]["is_fraud"], "false")
        self.assertEqual(rows[0]["risk_level"], "Medium")

    def test_verify_missing_fields(self):
        for body in ({}, {"answer": "gaming"}, {"transaction": {"id": "t1"}}):
            with self.subTest(body=body):
                resp = self.client.post("/verify-transaction", json=body)
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.get_json(), {"verified": False, "error": "Missing required data"})
        self.assertEqual(self.list_transactions(), [])

    def test_verify_error_records_fraud(self):
        resp = self.client.post("/verify-transaction", json={"answer": 42, "transaction": {"id": "t3"}})

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {"verified": False, "error": "Verification error"})
        self.assertEqual(self.list_transactions()[0]["is_fraud"], "true")

    def test_verify_non_object_body(self):
        resp = self.client.post("/verify-transaction", json=["x"])

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {"verified": False, "error": "Missing required data"})
        self.assertEqual(self.list_transactions(), [])

    def test_submit_non_object_body(self):
        resp = self.client.post("/transactions", json=["x"])

        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.get_json())
        self.assessor.assess.assert_not_called()

    def test_verify_empty_transaction_is_recorded_as_fraud(self):
        resp = self.client.post("/verify-transaction", json={"answer": "wrong", "transaction": {}})

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {"verified": False, "error": "Incorrect answer"})
        rows = self.list_transactions()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["is_fraud"], "true")

    def test_huge_amount_is_stored_as_placeholder(self):
        resp = self.client.post("/transactions", json={"id": "big", "amount": 10 ** 400})

        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.get_json()["tx"]["amount"], "-")
        self.assertEqual(self.list_transactions()[0]["amount"], "-")

    def test_huge_amount_wrong_answer_records_fraud(self):
        resp = self.client.post("/verify-transaction", json={
            "answer": "wrong",
            "transaction": {"id": "big", "amount": 10 ** 400},
        })

        self.assertEqual(resp.status_code, 400)
        rows = self.list_transactions()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["is_fraud"], "true")
        self.assertEqual(rows[0]["amount"], "-")

    def test_assessor_status_is_passed_through(self):
        self.assessor.assess.side_effect = UpstreamAssessmentError("Service Unavailable", status_code=503)

        resp = self.client.post("/transactions", json={"id": "t4"})

        self.assertEqual(resp.status_code, 503)
        self.assertIn("error", resp.get_json())
        self.assertEqual(self.list_transactions(), [])

    def test_unknown_risk_tier_is_server_error(self):
        self.assessor.assess.return_value = ("Critical", True)

        resp = self.client.post("/transactions", json={"id": "t5"})

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(self.list_transactions(), [])

    def test_store_write_failure_surfaces(self):
        os.makedirs(self.csv_file)

        resp = self.client.post("/transactions", json={"id": "t6"})

        self.assertEqual(resp.status_code, 500)
        self.assertIn("error", resp.get_json())

    def test_swagger_spec_lists_routes(self):
        resp = self.client.get("/apispec_1.json")
        self.assertEqual(resp.status_code, 200)
        paths = resp.get_json()["paths"]
        self.assertIn("/transactions", paths)
        self.assertIn("/verify-transaction", paths)


class TestOtpVerificationRoutes(RouteTestCase):
    verification_mode = "otp"

    def test_medium_risk_sends_code(self):
        self.assessor.assess.return_value = ("Medium", False)

        resp = self.client.post("/transactions", json={"id": "t1", "amount": 700})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["verification_method"], "otp")
        self.otp_client.send.assert_called_once_with()

    def test_code_accepted(self):
        self.otp_client.verify.return_value = True

        resp = self.client.post("/verify-transaction", json={"code": "123456", "latestTransaction": {"id": "t1"}})

        self.assertEqual(resp.status_code, 200)
        self.otp_client.verify.assert_called_once_with("123456")
        self.assertEqual(self.list_transactions()[0]["is_fraud"], "false")

    def test_code_rejected(self):
        self.otp_client.verify.return_value = False

        resp = self.client.post("/verify-transaction", json={"code": "000000", "latestTransaction": {"id": "t1"}})

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Incorrect code")
        self.assertEqual(self.list_transactions()[0]["is_fraud"], "true")

    def test_provider_down_fails_closed(self):
        self.otp_client.verify.side_effect = OtpError("connection refused")

        resp = self.client.post("/verify-transaction", json={"code": "123456", "latestTransaction": {"id": "t1"}})

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(self.list_transactions()[0]["is_fraud"], "true")


if __name__ == '__main__':
    unittest.main()
