from django.test import TestCase
from rest_framework.test import APIClient

from .helpers import make_user


class RequestLoggingMiddlewareTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_request_is_logged(self):
        with self.assertLogs("review_platform.middleware", level="INFO") as logs:
            self.client.get("/api/movies/")

        self.assertEqual(len(logs.output), 1)
        self.assertIn("User: Anonymous", logs.output[0])
        self.assertIn("GET /api/movies/ - 200", logs.output[0])

    def test_client_ip_behind_proxy(self):
        with self.assertLogs("review_platform.middleware", level="INFO") as logs:
            self.client.get("/api/movies/", HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1")

        self.assertIn("IP: 203.0.113.7 ", logs.output[0])

    def test_authenticated_user_and_status(self):
        user = make_user("critic")
        self.client.force_authenticate(user=user)

        with self.assertLogs("review_platform.middleware", level="INFO") as logs:
            self.client.post("/api/movies/", {})

        self.assertIn("critic", logs.output[0])
        self.assertIn("POST /api/movies/ - 403", logs.output[0])
