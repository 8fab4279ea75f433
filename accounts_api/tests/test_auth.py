import unittest
from unittest.mock import MagicMock, patch

from accounts_api.auth import Caller, FirebaseTokenVerifier, parse_bearer
from accounts_api.errors import AuthError


class ParseBearerTests(unittest.TestCase):
    def test_extracts_token(self):
        self.assertEqual(parse_bearer("Bearer abc.def"), "abc.def")

    def test_missing_or_malformed(self):
        for header in [None, "", "Bearer ", "Basic abc", "bearer abc"]:
            self.assertIsNone(parse_bearer(header), header)


class FirebaseTokenVerifierTests(unittest.TestCase):
    def setUp(self):
        app_patch = patch("accounts_api.auth.firebase_admin")
        cred_patch = patch("accounts_api.auth.credentials")
        auth_patch = patch("accounts_api.auth.admin_auth")
        self.firebase_admin = app_patch.start()
        self.credentials = cred_patch.start()
        self.admin_auth = auth_patch.start()
        for p in (app_patch, cred_patch, auth_patch):
            self.addCleanup(p.stop)

        self.app = MagicMock(name="firebase-app")
        self.firebase_admin.get_app.side_effect = ValueError("no app")
        self.firebase_admin.initialize_app.return_value = self.app

    def test_initializes_named_app_once(self):
        verifier = FirebaseTokenVerifier({"type": "service_account"})
        self.credentials.Certificate.assert_called_once_with({"type": "service_account"})
        self.firebase_admin.initialize_app.assert_called_once_with(
            self.credentials.Certificate.return_value, name="accounts-api"
        )
        self.assertIs(verifier.app, self.app)

    def test_reuses_existing_app(self):
        self.firebase_admin.get_app.side_effect = None
        self.firebase_admin.get_app.return_value = self.app
        verifier = FirebaseTokenVerifier({"type": "service_account"})
        self.firebase_admin.initialize_app.assert_not_called()
        self.assertIs(verifier.app, self.app)

    def test_verify_returns_caller(self):
        self.admin_auth.verify_id_token.return_value = {"uid": "u1", "email": "a@b.c"}
        verifier = FirebaseTokenVerifier({"type": "service_account"})
        self.assertEqual(verifier.verify("tok"), Caller(uid="u1", email="a@b.c"))
        self.admin_auth.verify_id_token.assert_called_once_with("tok", app=self.app)

    def test_verify_without_email(self):
        self.admin_auth.verify_id_token.return_value = {"uid": "u1"}
        verifier = FirebaseTokenVerifier({"type": "service_account"})
        self.assertEqual(verifier.verify("tok").email, "")

    def test_rejected_token_raises_auth_error_with_details(self):
        self.admin_auth.verify_id_token.side_effect = ValueError("Token expired")
        verifier = FirebaseTokenVerifier({"type": "service_account"})
        with self.assertRaises(AuthError) as ctx:
            verifier.verify("tok")
        self.assertEqual(
            ctx.exception.to_payload(),
            {"error": "Invalid token", "details": "Token expired"},
        )
        self.assertEqual(ctx.exception.status_code, 401)


if __name__ == "__main__":
    unittest.main()
