import pytest

from settleup.services import attribution


@pytest.fixture
def gemini(monkeypatch):
    """Stub out the Gemini call; tests set ``reply`` or ``error``."""
    calls = {"reply": "{}", "error": None, "prompts": []}

    def fake_generate(prompt):
        calls["prompts"].append(prompt)
        if calls["error"]:
            raise calls["error"]
        return calls["reply"]

    monkeypatch.setattr(attribution, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(attribution, "_generate", fake_generate)
    return calls


def test_suggestions(client, picnic, gemini):
    gemini["reply"] = '{"Alice": 0.9, "Bob": 0.2, "Carol": 1.4, "Zed": 1}'
    res = client.post(f"/api/projects/{picnic}/suggestions", json={"description": "Wine"})
    assert res.status_code == 200
    data = res.json()
    assert data["scores"] == {"Alice": 0.9, "Bob": 0.2, "Carol": 1.0}
    assert data["suggested_participants"] == ["Alice", "Carol"]
    assert "Expense Description: Wine" in gemini["prompts"][0]
    assert "Participants: Alice, Bob, Carol" in gemini["prompts"][0]


def test_suggestions_threshold(client, picnic, gemini):
    gemini["reply"] = '```json\n{"Alice": 0.3, "Bob": 0.1}\n```'
    res = client.post(f"/api/projects/{picnic}/suggestions", json={"description": "Sunscreen", "threshold": 0.25})
    data = res.json()
    assert data["scores"] == {"Alice": 0.3, "Bob": 0.1, "Carol": 0.0}
    assert data["suggested_participants"] == ["Alice"]


def test_suggestions_not_configured(client, picnic, monkeypatch):
    monkeypatch.setattr(attribution, "GEMINI_API_KEY", "")
    res = client.post(f"/api/projects/{picnic}/suggestions", json={"description": "Wine"})
    assert res.status_code == 503


def test_suggestions_bad_reply(client, picnic, gemini):
    gemini["reply"] = "not json"
    res = client.post(f"/api/projects/{picnic}/suggestions", json={"description": "Wine"})
    assert res.status_code == 502


def test_suggestions_quota(client, picnic, gemini):
    gemini["error"] = RuntimeError("429 RESOURCE_EXHAUSTED")
    res = client.post(f"/api/projects/{picnic}/suggestions", json={"description": "Wine"})
    assert res.status_code == 502
    assert "at capacity" in res.json()["detail"]


def test_suggestions_need_description(client, picnic, gemini):
    res = client.post(f"/api/projects/{picnic}/suggestions", json={"description": " "})
    assert res.status_code == 400


def test_parse_scores_rejects_list():
    with pytest.raises(attribution.AttributionError):
        attribution.parse_scores("[1, 2]", ["Alice"])
