"""
WebSocket and HTTP integration tests using FastAPI TestClient.
"""


def recv_state(ws):
    msg = ws.receive_json()
    assert msg["type"] == "game-state"
    return msg["data"]


def join(ws, room_id, name):
    ws.send_json({"type": "join-room", "roomId": room_id, "playerName": name})


class TestVotingRound:
    def test_two_player_round(self, client):
        with client.websocket_connect("/ws") as alice:
            join(alice, "r1", "Alice")
            state = recv_state(alice)
            assert state["id"] == "R1"
            alice_id = state["players"][0]["id"]

            with client.websocket_connect("/ws") as bob:
                join(bob, "R1", "Bob")
                recv_state(alice)
                state = recv_state(bob)
                bob_id = state["players"][1]["id"]
                assert [p["name"] for p in state["players"]] == ["Alice", "Bob"]

                alice.send_json({"type": "cast-vote", "roomId": "R1", "vote": 5})
                recv_state(bob)
                state = recv_state(alice)
                assert state["allVoted"] is False
                assert state["votes"] == {}
                assert state["players"][0] == {
                    "id": alice_id, "name": "Alice", "hasVoted": True, "vote": None,
                }

                bob.send_json({"type": "cast-vote", "roomId": "R1", "vote": 8})
                recv_state(alice)
                assert recv_state(bob)["allVoted"] is True

                bob.send_json({"type": "reveal-votes", "roomId": "R1"})
                recv_state(bob)
                state = recv_state(alice)
                assert state["votesRevealed"] is True
                assert state["votes"] == {alice_id: 5, bob_id: 8}

                alice.send_json({"type": "reset-votes", "roomId": "R1"})
                recv_state(bob)
                state = recv_state(alice)
                assert state["votesRevealed"] is False
                assert state["votes"] == {}
                assert state["allVoted"] is False

            # Bob's socket closed: Alice sees him gone.
            state = recv_state(alice)
            assert [p["name"] for p in state["players"]] == ["Alice"]

    def test_invalid_join_returns_error(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join-room", "roomId": "R1", "playerName": ""})
            msg = ws.receive_json()
            assert msg == {"type": "error", "data": {"message": "Room ID and player name are required"}}

    def test_malformed_frame_keeps_connection_open(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.send_text("{not json")
            join(ws, "R9", "Alice")
            assert recv_state(ws)["id"] == "R9"


class TestRoomRoutes:
    def test_room_snapshot_and_reclaim_on_disconnect(self, client):
        with client.websocket_connect("/ws") as ws:
            join(ws, "snap", "Alice")
            recv_state(ws)
            res = client.get("/rooms/SNAP")
            assert res.status_code == 200
            body = res.json()
            assert body["id"] == "SNAP"
            assert body["votesRevealed"] is False
            assert [p["name"] for p in body["players"]] == ["Alice"]

        assert client.get("/rooms/SNAP").status_code == 404
        assert client.get("/health").json() == {"status": "ok", "rooms": 0}

    def test_unknown_room_is_not_created(self, client):
        assert client.get("/rooms/NOPE").status_code == 404
        assert client.get("/health").json()["rooms"] == 0

    def test_create_room_code(self, client):
        res = client.post("/rooms")
        assert res.status_code == 200
        code = res.json()["roomId"]
        assert len(code) == 6
        assert code == code.upper()
        assert client.get(f"/rooms/{code}").status_code == 404

    def test_card_sets(self, client):
        data = client.get("/card-sets").json()
        assert data["fibonacci"]["values"][-2:] == ["?", "∞"]
        assert data["tshirt"]["values"][0] == "XS"
