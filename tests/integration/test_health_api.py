from fastapi.testclient import TestClient

from askme_bot.api.main import HEALTH_BODY, create_health_app


def test_root_returns_fixed_text() -> None:
    client = TestClient(create_health_app())

    response = client.get("/")

    assert response.status_code == 200
    assert response.text == HEALTH_BODY
    assert response.headers["content-type"].startswith("text/plain")


def test_other_paths_return_404() -> None:
    client = TestClient(create_health_app())

    for path in ("/health", "/docs", "/openapi.json", "/anything/else"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.text == "not found"


def test_root_answers_any_method() -> None:
    client = TestClient(create_health_app())

    for method in ("POST", "PUT", "DELETE"):
        response = client.request(method, "/")
        assert response.status_code == 200
        assert response.text == HEALTH_BODY

    assert client.head("/").status_code == 200
