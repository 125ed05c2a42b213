"""
Lesson and exercise endpoints: ordering, conflicts and content validation.
"""
import pytest
from fastapi.testclient import TestClient


def create_lesson(api_client, level="A1", order=1, title="Lesson"):
    return api_client.post(
        "/api/lessons",
        json={"title": title, "level": level, "order": order, "description": f"{title} description"},
    )


@pytest.mark.integration
class TestLessonRoutes:
    def test_create_lesson(self, api_client: TestClient):
        response = create_lesson(api_client, title="Food")
        assert response.status_code == 201
        lesson = response.json()["lesson"]
        assert lesson["title"] == "Food"
        assert lesson["level"] == "A1"
        assert lesson["created_at"].endswith("Z")

    def test_duplicate_order_conflicts(self, api_client: TestClient):
        create_lesson(api_client, level="B1", order=3)
        response = create_lesson(api_client, level="B1", order=3)
        assert response.status_code == 409
        data = response.json()
        assert data["error"] == "conflict"
        assert data["detail"] == "Lesson with order 3 already exists for level B1"

    def test_same_order_on_other_level_allowed(self, api_client: TestClient):
        assert create_lesson(api_client, level="A1", order=1).status_code == 201
        assert create_lesson(api_client, level="A2", order=1).status_code == 201

    def test_list_sorted_by_level_then_order(self, api_client: TestClient):
        create_lesson(api_client, level="B1", order=1, title="b1-1")
        create_lesson(api_client, level="A1", order=2, title="a1-2")
        create_lesson(api_client, level="A1", order=1, title="a1-1")
        create_lesson(api_client, level="A2", order=1, title="a2-1")
        titles = [l["title"] for l in api_client.get("/api/lessons").json()["lessons"]]
        assert titles == ["a1-1", "a1-2", "a2-1", "b1-1"]

    def test_filter_by_level(self, api_client: TestClient):
        create_lesson(api_client, level="A1", order=1, title="a1")
        create_lesson(api_client, level="C1", order=1, title="c1")
        lessons = api_client.get("/api/lessons", params={"level": "C1"}).json()["lessons"]
        assert [l["title"] for l in lessons] == ["c1"]

    def test_missing_fields(self, api_client: TestClient):
        response = api_client.post("/api/lessons", json={"title": "No level"})
        assert response.status_code == 422


@pytest.mark.integration
class TestExerciseRoutes:
    def test_create_with_default_reward(self, api_client: TestClient, seeded_lesson):
        exercises = api_client.get("/api/exercises", params={"lesson_id": seeded_lesson["id"]}).json()["exercises"]
        assert [e["type"] for e in exercises] == ["quiz", "fill-in-the-blank"]
        assert [e["xp_reward"] for e in exercises] == [10, 10]
        assert exercises[0]["lessons"]["title"] == "Greetings"

    def test_content_as_json_string(self, api_client: TestClient, seeded_lesson):
        response = api_client.post(
            "/api/exercises",
            json={
                "lessonId": seeded_lesson["id"],
                "type": "memory-match",
                "order": 3,
                "xpReward": 20,
                "content": '{"word_pairs": [{"english": "sun", "russian": "солнце"}]}',
            },
        )
        assert response.status_code == 201
        exercise = response.json()["exercise"]
        assert exercise["xp_reward"] == 20
        assert exercise["content_json"] == {"word_pairs": [{"english": "sun", "russian": "солнце"}]}

    def test_invalid_json_content(self, api_client: TestClient, seeded_lesson):
        response = api_client.post(
            "/api/exercises",
            json={"lessonId": seeded_lesson["id"], "type": "quiz", "order": 3, "content": "{broken"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid JSON format in content"

    def test_content_shape_checked_per_type(self, api_client: TestClient, seeded_lesson):
        response = api_client.post(
            "/api/exercises",
            json={
                "lessonId": seeded_lesson["id"],
                "type": "fill-in-the-blank",
                "order": 3,
                "content": {"sentence": "No placeholder", "options": ["a"], "correct": "a"},
            },
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_duplicate_order_conflicts(self, api_client: TestClient, seeded_lesson):
        response = api_client.post(
            "/api/exercises",
            json={
                "lessonId": seeded_lesson["id"],
                "type": "word-puzzle",
                "order": 1,
                "content": {"target": "cat", "words": ["cat", "cut"]},
            },
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Exercise with order 1 already exists for this lesson"

    def test_unknown_lesson(self, api_client: TestClient):
        response = api_client.post(
            "/api/exercises",
            json={"lessonId": "missing", "type": "word-puzzle", "order": 1, "content": {"target": "a", "words": ["a"]}},
        )
        assert response.status_code == 404

    def test_unknown_type(self, api_client: TestClient, seeded_lesson):
        response = api_client.post(
            "/api/exercises",
            json={"lessonId": seeded_lesson["id"], "type": "crossword", "order": 5, "content": {}},
        )
        assert response.status_code == 422
