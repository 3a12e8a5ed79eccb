"""Tests for the channels.* placeholder procedures."""

import json


class TestChannels:
    def test_list_is_empty(self, client):
        response = client.get("/trpc/channels.list")

        assert response.status_code == 200
        assert response.json() == {"result": {"data": {"channels": []}}}

    def test_add_echoes_channel_id(self, client):
        response = client.post("/trpc/channels.add", json={"channelId": "UC123", "name": "Chan"})

        assert response.status_code == 200
        assert response.json() == {"result": {"data": {"success": True, "channelId": "UC123"}}}

    def test_add_name_optional(self, client):
        response = client.post("/trpc/channels.add", json={"channelId": "UC123"})

        assert response.status_code == 200

    def test_add_requires_channel_id(self, client):
        response = client.post("/trpc/channels.add", json={"name": "Chan"})

        assert response.status_code == 400

    def test_add_does_not_persist(self, client):
        client.post("/trpc/channels.add", json={"channelId": "UC123"})

        response = client.get("/trpc/channels.list", params={"input": json.dumps(None)})
        assert response.json()["result"]["data"]["channels"] == []
