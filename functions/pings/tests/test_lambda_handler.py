import base64
import json
import unittest
from dataclasses import replace
from decimal import Decimal
from unittest.mock import MagicMock, patch

from pings import lambda_handler
from pings.db import DynamoDocumentStore, key_schemas_for
from pings.lambda_handler import handle_event
from pings.routes import Dispatcher
from pings.tests.support import make_gateways, make_settings


class LambdaHandlerTests(unittest.TestCase):
    def setUp(self):
        self.settings = make_settings()
        self.gateways = make_gateways(self.settings)
        self.dispatcher = Dispatcher(self.settings, self.gateways)

    def call(self, event):
        response = handle_event(event, self.dispatcher)
        self.assertEqual(response["headers"], {"Content-Type": "application/json"})
        return response["statusCode"], json.loads(response["body"])

    def test_checkin_event(self):
        status, body = self.call(
            {
                "httpMethod": "POST",
                "resource": "/checkin",
                "body": json.dumps(
                    {"userId": "dad-001", "type": "checkin", "value": "Feeling good today!"}
                ),
            }
        )
        self.assertEqual(status, 201)
        self.assertEqual(body["userId"], "dad-001")

    def test_base64_body(self):
        raw = json.dumps({"userId": "u", "medicationId": "m", "action": "taken"})
        status, body = self.call(
            {
                "httpMethod": "POST",
                "resource": "/medications",
                "isBase64Encoded": True,
                "body": base64.b64encode(raw.encode("utf-8")).decode("ascii"),
            }
        )
        self.assertEqual(status, 201)
        self.assertEqual(body["message"], "Great job! Medication logged.")

    def test_null_body_is_validation_error(self):
        status, body = self.call({"httpMethod": "POST", "resource": "/checkin", "body": None})
        self.assertEqual(status, 400)
        self.assertIn("userId", body["error"])

    def test_resource_template_uses_path_parameters(self):
        self.gateways.store.put(
            "PingsPhotos",
            {
                "photoId": "p1",
                "userId": "dad-001",
                "filename": "a.jpg",
                "storageKey": "photos/dad-001/p1-a.jpg",
            },
        )
        status, body = self.call(
            {
                "httpMethod": "GET",
                "resource": "/photos/{photoId}",
                "path": "/photos/p1",
                "pathParameters": {"photoId": "p1"},
            }
        )
        self.assertEqual(status, 200)
        self.assertEqual(body["photoId"], "p1")

    def test_resource_template_without_parameters(self):
        status, body = self.call(
            {"httpMethod": "DELETE", "resource": "/photos/{photoId}", "pathParameters": None}
        )
        self.assertEqual(status, 400)
        self.assertEqual(body["error"], "Missing photoId")

    def test_concrete_path_matches_template(self):
        status, body = self.call({"httpMethod": "DELETE", "path": "/photos/ghost/"})
        self.assertEqual(status, 200)
        self.assertEqual(body, {"success": True})

    def test_query_parameters(self):
        self.gateways.store.put("PingsUsers", {"userId": "dad-001", "name": "Dad"})
        status, body = self.call(
            {
                "httpMethod": "GET",
                "resource": "/family",
                "queryStringParameters": {"userId": "dad-001"},
            }
        )
        self.assertEqual(status, 200)
        self.assertEqual(body["recentCheckins"], [])

    def test_method_not_allowed(self):
        status, body = self.call({"httpMethod": "PUT", "resource": "/family", "body": None})
        self.assertEqual(status, 405)
        self.assertIn("not allowed", body["error"])

    def test_unknown_resource(self):
        status, body = self.call({"httpMethod": "GET", "resource": "/unknown"})
        self.assertEqual(status, 404)

    def test_handler_builds_dispatcher_once(self):
        with patch.object(lambda_handler, "_dispatcher", self.dispatcher):
            response = lambda_handler.handler(
                {"httpMethod": "POST", "resource": "/notifications", "body": "{}"}, None
            )
        self.assertEqual(response["statusCode"], 400)


class DynamoBackedEventTests(unittest.TestCase):
    @patch("pings.db.boto3.resource")
    def setUp(self, mock_resource):
        self.settings = make_settings()
        self.table = MagicMock()
        mock_resource.return_value.Table.return_value = self.table
        store = DynamoDocumentStore(schemas=key_schemas_for(self.settings))
        self.gateways = replace(make_gateways(self.settings), store=store)
        self.dispatcher = Dispatcher(self.settings, self.gateways)

    def test_family_status_with_numeric_profile_fields(self):
        self.table.get_item.return_value = {
            "Item": {"userId": "dad-001", "name": "Dad", "age": Decimal("78")}
        }
        self.table.query.return_value = {
            "Items": [{"userId": "dad-001", "timestamp": "2025-01-01T09:00:00.000Z"}]
        }
        response = handle_event(
            {
                "httpMethod": "GET",
                "resource": "/family",
                "queryStringParameters": {"userId": "dad-001"},
            },
            self.dispatcher,
        )
        self.assertEqual(response["statusCode"], 200)
        body = json.loads(response["body"])
        self.assertEqual(body["user"]["age"], 78)

    def test_join_with_float_member_attribute(self):
        response = handle_event(
            {
                "httpMethod": "POST",
                "resource": "/family",
                "body": json.dumps(
                    {
                        "action": "join",
                        "userId": "kid-001",
                        "familyId": "fam-1",
                        "member": {"name": "Kid", "role": "family", "heightCm": 172.5},
                    }
                ),
            },
            self.dispatcher,
        )
        self.assertEqual(response["statusCode"], 201)
        item = self.table.put_item.call_args.kwargs["Item"]
        self.assertEqual(item["heightCm"], Decimal("172.5"))


if __name__ == "__main__":
    unittest.main()
