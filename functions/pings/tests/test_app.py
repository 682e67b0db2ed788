import unittest

from pings.tests.support import make_client, make_gateways, make_settings


class PingsApiTests(unittest.TestCase):
    def setUp(self):
        self.settings = make_settings()
        self.gateways = make_gateways(self.settings)
        self.client = make_client(self.settings, self.gateways)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_medication_example(self):
        response = self.client.post(
            "/medications",
            json={
                "userId": "dad-001",
                "medicationId": "med-001",
                "action": "skipped",
                "notes": "no pharmacy",
            },
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.headers["content-type"], "application/json")
        payload = response.json()
        self.assertEqual(payload["log"]["action"], "skipped")
        self.assertEqual(payload["message"], "Noted. Skipped medication logged.")

    def test_checkin_missing_field(self):
        response = self.client.post("/checkin", json={"userId": "dad-001", "type": "mood"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("value", response.json()["error"])

    def test_invalid_json_body(self):
        response = self.client.post(
            "/checkin",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid JSON body"})

    def test_photo_lifecycle(self):
        created = self.client.post(
            "/photos",
            json={"userId": "mom-001", "filename": "cake.png", "contentType": "image/png"},
        )
        self.assertEqual(created.status_code, 201)
        photo_id = created.json()["photoId"]

        fetched = self.client.get(f"/photos/{photo_id}")
        self.assertEqual(fetched.status_code, 200)
        self.assertIn(f"photos/mom-001/{photo_id}-cake.png", fetched.json()["url"])

        deleted = self.client.delete(f"/photos/{photo_id}")
        self.assertEqual(deleted.json(), {"success": True})
        self.assertEqual(self.client.get(f"/photos/{photo_id}").status_code, 404)
        self.assertEqual(self.client.delete(f"/photos/{photo_id}").json(), {"success": True})

    def test_get_photo_without_id(self):
        response = self.client.get("/photos")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Missing photoId")

    def test_method_not_allowed(self):
        for method, path in (("PUT", "/family"), ("PATCH", "/photos/p1"), ("GET", "/checkin")):
            with self.subTest(method=method, path=path):
                response = self.client.request(method, path)
                self.assertEqual(response.status_code, 405)
                self.assertEqual(response.json(), {"error": "Method not allowed"})

    def test_unknown_route(self):
        response = self.client.get("/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Not found"})

    def test_family_dashboard_reads_checkins(self):
        self.gateways.store.put("PingsUsers", {"userId": "dad-001", "name": "Dad"})
        self.client.post(
            "/checkin", json={"userId": "dad-001", "type": "mood", "value": "Happy"}
        )
        response = self.client.get("/family", params={"userId": "dad-001"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["name"], "Dad")
        self.assertEqual(response.json()["recentCheckins"][0]["value"], "Happy")

    def test_register_then_send(self):
        registered = self.client.post(
            "/notifications",
            json={
                "userId": "dad-001",
                "action": "register",
                "deviceToken": "ios-token-abc",
                "platform": "ios",
            },
        )
        self.assertEqual(registered.status_code, 201)

        sent = self.client.post(
            "/notifications",
            json={
                "userId": "dad-001",
                "action": "send",
                "deviceToken": "ios-token-abc",
                "platform": "ios",
                "title": "Hello",
                "message": "Dinner at six",
            },
        )
        self.assertEqual(sent.status_code, 200)
        self.assertEqual(sent.json()["sentCount"], 1)
        self.assertEqual(len(self.gateways.notifier.sent_to("ios-token-abc")), 1)


class ApiPrefixTests(unittest.TestCase):
    def test_routes_mount_under_prefix(self):
        settings = make_settings(api_prefix="/api")
        client = make_client(settings, make_gateways(settings))
        response = client.post(
            "/api/medications",
            json={"userId": "u", "medicationId": "m", "action": "log"},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(client.post("/medications", json={}).status_code, 404)


class CorsTests(unittest.TestCase):
    PREFLIGHT_HEADERS = {
        "Origin": "https://dashboard.example.com",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "Content-Type",
    }

    def test_any_origin_by_default(self):
        settings = make_settings()
        client = make_client(settings, make_gateways(settings))
        preflight = client.options("/checkin", headers=self.PREFLIGHT_HEADERS)
        self.assertEqual(preflight.status_code, 200)
        self.assertEqual(preflight.headers["access-control-allow-origin"], "*")
        self.assertIn("POST", preflight.headers["access-control-allow-methods"])

        response = client.get("/health", headers={"Origin": "https://dashboard.example.com"})
        self.assertEqual(response.headers["access-control-allow-origin"], "*")

    def test_configured_origins(self):
        settings = make_settings(cors_origins=["https://dashboard.example.com"])
        client = make_client(settings, make_gateways(settings))
        allowed = client.options("/checkin", headers=self.PREFLIGHT_HEADERS)
        self.assertEqual(
            allowed.headers["access-control-allow-origin"], "https://dashboard.example.com"
        )
        denied = client.options(
            "/checkin", headers={**self.PREFLIGHT_HEADERS, "Origin": "https://evil.example.com"}
        )
        self.assertEqual(denied.status_code, 400)


if __name__ == "__main__":
    unittest.main()
