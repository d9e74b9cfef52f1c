"""
Verifiers — Transaction Service
Credential checks for medium-risk transactions.

Each verifier exposes:
    method          name returned to the client ("answer" | "otp")
    challenge()     called when a transaction is put on hold
    check(value)    True / False; any exception means the check itself failed
"""


class SharedSecretVerifier:
    method = "answer"
    rejection_message = "Incorrect answer"

    def __init__(self, secret):
        self.secret = secret.lower().strip()

    def challenge(self):
        # Nothing to send; the client already knows to ask the user
        return None

    def check(self, answer):
        return answer.lower().strip() == self.secret


class OtpVerifier:
    method = "otp"
    rejection_message = "Incorrect code"

    def __init__(self, otp_client):
        self.otp_client = otp_client

    def challenge(self):
        return self.otp_client.send()

    def check(self, code):
        return self.otp_client.verify(code)
