import pytest
from fastapi.testclient import TestClient

from text_matching.api import app as app_module

TEXTS = {
    "a.txt": "the cat sat on the mat",
    "b.txt": "a cat sat on a mat",
    "c.txt": "completely different words here",
}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(app_module, "service", None)
    monkeypatch.setattr(app_module, "DEFAULT_DATASET_DIR", None)
    with TestClient(app_module.app) as test_client:
        yield test_client


@pytest.fixture
def analyzed(client):
    for identifier, content in TEXTS.items():
        response = client.post("/texts", json={"identifier": identifier, "content": content})
        assert response.status_code == 200
    response = client.post("/analyze", json={"strategy": "word", "min_match_length": 2})
    assert response.status_code == 200
    return client


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_text_registry(client):
    first = client.post("/texts", json={"identifier": "x", "content": "one"})
    assert first.json() == {"identifier": "x", "replaced": False}
    second = client.post("/texts", json={"identifier": "x", "content": "two"})
    assert second.json()["replaced"] is True
    assert client.get("/texts").json() == {"identifiers": ["x"]}

    assert client.delete("/texts/x").status_code == 200
    assert client.delete("/texts/x").status_code == 404
    assert client.post("/texts", json={"identifier": " ", "content": "x"}).status_code == 400


def test_analyze_summary(analyzed):
    response = analyzed.post("/analyze", json={"strategy": "SMART", "min_match_length": 1})
    body = response.json()
    assert body["strategy"] == "SMART"
    assert body["min_match_length"] == 1
    assert body["pairs"] == 3


def test_analyze_rejects_bad_input(client):
    client.post("/texts", json={"identifier": "only", "content": "text"})
    assert client.post("/analyze", json={"strategy": "WORD", "min_match_length": 2}).status_code == 400
    client.post("/texts", json={"identifier": "other", "content": "text"})
    assert client.post("/analyze", json={"strategy": "LINES", "min_match_length": 2}).status_code == 400
    assert client.post("/analyze", json={"strategy": "WORD", "min_match_length": 0}).status_code == 400


def test_get_result(analyzed):
    body = analyzed.get("/results/a.txt/b.txt").json()
    assert body["text_a"] == "a.txt"
    assert body["matches"] == [{"start_a": 1, "start_b": 1, "length": 3}]
    assert body["metric"] == "AVG"
    assert body["formatted_score"] == "50.00%"

    swapped = analyzed.get("/results/b.txt/a.txt", params={"metric": "long"}).json()
    assert swapped["text_a"] == "b.txt"
    assert swapped["metric"] == "LONG"
    assert swapped["formatted_score"] == "3"


def test_get_result_errors(analyzed):
    assert analyzed.get("/results/a.txt/missing.txt").status_code == 404
    assert analyzed.get("/results/a.txt/b.txt", params={"metric": "MEDIAN"}).status_code == 400


def test_result_before_analysis(client):
    assert client.get("/results/a.txt/b.txt").status_code == 404
    assert client.get("/results").status_code == 404


def test_ranked_results(analyzed):
    body = analyzed.get("/results", params={"metric": "LEN", "limit": 2}).json()
    assert [(p["text_a"], p["text_b"]) for p in body] == [("a.txt", "b.txt"), ("a.txt", "c.txt")]
    assert body[0]["score"] == 3.0
    assert analyzed.get("/results", params={"metric": "MEDIAN"}).status_code == 400


def test_add_and_remove_match(analyzed):
    overlap = analyzed.post("/results/a.txt/b.txt/matches", json={"start_a": 2, "start_b": 4, "length": 1})
    assert overlap.status_code == 409

    out_of_bounds = analyzed.post(
        "/results/a.txt/b.txt/matches", json={"start_a": 5, "start_b": 5, "length": 3}
    )
    assert out_of_bounds.status_code == 400

    negative = analyzed.post("/results/a.txt/b.txt/matches", json={"start_a": -1, "start_b": 0, "length": 1})
    assert negative.status_code == 422

    added = analyzed.post("/results/a.txt/b.txt/matches", json={"start_a": 5, "start_b": 5, "length": 1})
    assert added.status_code == 200
    assert len(added.json()["matches"]) == 2
    assert analyzed.get("/results/a.txt/b.txt", params={"metric": "LEN"}).json()["score"] == 4.0

    params = {"start_a": 5, "start_b": 5, "length": 1}
    removed = analyzed.delete("/results/a.txt/b.txt/matches", params=params)
    assert removed.status_code == 200
    assert removed.json()["matches"] == [{"start_a": 1, "start_b": 1, "length": 3}]
    assert analyzed.delete("/results/a.txt/b.txt/matches", params=params).status_code == 404


def test_add_match_from_second_text(analyzed):
    # coordinates are given relative to the order in the URL
    response = analyzed.post("/results/c.txt/a.txt/matches", json={"start_a": 0, "start_b": 2, "length": 1})
    assert response.status_code == 200
    assert response.json()["matches"] == [{"start_a": 0, "start_b": 2, "length": 1}]
    stored = analyzed.get("/results/a.txt/c.txt").json()
    assert stored["matches"] == [{"start_a": 2, "start_b": 0, "length": 1}]


def test_exclusions(analyzed):
    assert analyzed.post("/exclusions/a.txt").status_code == 200
    body = analyzed.get("/results").json()
    assert [(p["text_a"], p["text_b"]) for p in body] == [("b.txt", "c.txt")]
    assert analyzed.delete("/exclusions/a.txt").status_code == 200
    assert analyzed.delete("/exclusions/a.txt").status_code == 404


def test_extend_match(analyzed):
    url = "/results/a.txt/b.txt/matches/extend"
    body = {"start_a": 1, "start_b": 1, "length": 3, "amount": 1}
    response = analyzed.patch(url, json=body)
    assert response.status_code == 200
    assert response.json()["matches"] == [{"start_a": 1, "start_b": 1, "length": 4}]
    assert analyzed.get("/results/a.txt/b.txt").json()["matches"] == response.json()["matches"]


def test_extend_match_errors(analyzed):
    url = "/results/a.txt/b.txt/matches/extend"
    match = {"start_a": 1, "start_b": 1, "length": 3}
    assert analyzed.patch(url, json={**match, "amount": 0}).status_code == 400
    assert analyzed.patch(url, json={**match, "amount": 3}).status_code == 400
    absent = {"start_a": 0, "start_b": 0, "length": 1, "amount": 1}
    assert analyzed.patch(url, json=absent).status_code == 404
    assert analyzed.patch("/results/a.txt/x.txt/matches/extend", json={**match, "amount": 1}).status_code == 404

    analyzed.post("/results/a.txt/b.txt/matches", json={"start_a": 5, "start_b": 5, "length": 1})
    assert analyzed.patch(url, json={**match, "amount": 2}).status_code == 409


def test_truncate_match(analyzed):
    url = "/results/a.txt/b.txt/matches/truncate"
    response = analyzed.patch(url, json={"start_a": 1, "start_b": 1, "length": 3, "amount": -1})
    assert response.status_code == 200
    assert response.json()["matches"] == [{"start_a": 2, "start_b": 2, "length": 2}]
    absent = {"start_a": 1, "start_b": 1, "length": 3, "amount": 1}
    assert analyzed.patch(url, json=absent).status_code == 404


def test_match_context(analyzed):
    params = {"start_a": 1, "start_b": 1, "length": 3, "context_size": 4}
    response = analyzed.get("/results/a.txt/b.txt/matches/context", params=params)
    assert response.status_code == 200
    body = response.json()
    assert body["text_a"] == "a.txt"
    assert body["context_a"] == "the cat sat on the..."
    assert body["context_b"] == "a cat sat on a m..."
    assert body["span_a"] == 10
    assert body["rendered"].splitlines()[1] == "^" * 10

    reversed_order = analyzed.get("/results/b.txt/a.txt/matches/context", params=params).json()
    assert reversed_order["text_a"] == "b.txt"
    assert reversed_order["context_a"] == "a cat sat on a m..."


def test_match_context_errors(analyzed):
    url = "/results/a.txt/b.txt/matches/context"
    absent = {"start_a": 0, "start_b": 0, "length": 1}
    assert analyzed.get(url, params=absent).status_code == 404
    negative = {"start_a": 1, "start_b": 1, "length": 3, "context_size": -1}
    assert analyzed.get(url, params=negative).status_code == 400


def test_removed_text_drops_its_results(analyzed):
    assert analyzed.delete("/texts/b.txt").status_code == 200
    assert analyzed.get("/results/a.txt/b.txt").status_code == 404
    assert analyzed.get("/results/a.txt/c.txt").status_code == 200
