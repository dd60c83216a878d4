"""Tests for analytics API routes."""

from datetime import timedelta

from journal.models import Distortion, EntryAnalysis, utcnow


def _seed(store, owner="user-123"):
    now = utcnow()
    store.create(owner, "Good", "Lovely walk", "happy", 8, created_at=now)
    store.create(owner, "Good too", "Nice lunch", "happy", 6, created_at=now - timedelta(hours=2))
    sad = store.create(
        owner, "Bad", "Everything is awful", "sad", 3, created_at=now - timedelta(days=1)
    )
    store.save_analysis(
        owner,
        sad.id,
        EntryAnalysis(
            distortions=[
                Distortion("all-or-nothing", 0.9, "absolute language", "Everything is awful"),
                Distortion("all-or-nothing", 0.7, "", ""),
                Distortion("blame", 0.6, "", ""),
            ],
            overall_sentiment="negative",
        ),
    )


def test_mood_trends(client, auth_headers, store):
    _seed(store)
    res = client.get("/api/analytics/mood-trends?days=7&groupBy=month", headers=auth_headers)
    assert res.status_code == 200
    data = res.json()
    assert data["period"] == "7 days"
    assert data["groupBy"] == "month"
    total = sum(b["totalCount"] for b in data["trends"])
    assert total == 3
    for bucket in data["trends"]:
        assert bucket["totalCount"] == sum(m["count"] for m in bucket["perMood"])


def test_bad_params_fall_back(client, auth_headers):
    res = client.get("/api/analytics/mood-trends?days=abc&groupBy=year", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["period"] == "30 days"
    assert res.json()["groupBy"] == "day"


def test_days_clamped(client, auth_headers):
    res = client.get("/api/analytics/journal-stats?days=100000", headers=auth_headers)
    assert res.status_code == 200


def test_cognitive_distortions(client, auth_headers, store):
    _seed(store)
    res = client.get("/api/analytics/cognitive-distortions", headers=auth_headers)
    data = res.json()
    assert data["distortions"][0] == {"type": "all-or-nothing", "count": 2, "avgConfidence": 0.8}
    assert data["distortions"][1]["type"] == "blame"


def test_distortion_patterns(client, auth_headers, store):
    _seed(store)
    data = client.get("/api/analytics/distortion-patterns", headers=auth_headers).json()
    top = data["patterns"][0]
    assert top["examples"][0]["snippet"] == "Everything is awful"
    assert top["examples"][0]["entryTitle"] == "Bad"
    assert data["trends"][0]["totalDistortions"] == 3


def test_journal_stats(client, auth_headers, store):
    _seed(store)
    data = client.get("/api/analytics/journal-stats", headers=auth_headers).json()
    assert data["totalEntries"] == 3
    assert data["avgMoodScore"] == round(17 / 3, 2)
    assert data["streakDays"] >= 1
    assert data["improvementRate"] == 0


def test_progress_tracking(client, auth_headers, store):
    _seed(store)
    data = client.get("/api/analytics/progress-tracking?days=30", headers=auth_headers).json()
    assert set(data) == {"progressIndicators", "period", "comparisonPeriod"}
    assert data["period"] == "30 days"
    assert data["comparisonPeriod"] == "Previous 30 days"
    assert set(data["progressIndicators"]) == {
        "journalingConsistency",
        "moodStability",
        "cognitiveHealth",
        "problemResolution",
        "positivityRatio",
    }
    consistency = data["progressIndicators"]["journalingConsistency"]
    assert consistency["current"] == 3
    assert consistency["percentChange"] == 0
    assert consistency["trend"] == "improving"


def test_writing_insights(client, auth_headers, store):
    _seed(store)
    data = client.get("/api/analytics/writing-insights", headers=auth_headers).json()
    assert data["summary"]["totalEntries"] == 3
    assert data["mostCommonMood"] == "happy"
    assert data["sentimentDistribution"] == [{"sentiment": "negative", "count": 1}]


def test_dashboard(client, auth_headers, store):
    _seed(store)
    data = client.get("/api/analytics/dashboard", headers=auth_headers).json()
    assert data["period"] == "7 days"
    assert data["quickStats"]["totalDistortions"] == 3
    assert data["quickStats"]["processedEntries"] == 1
    assert len(data["recentEntries"]) == 3


def test_empty_history(client, auth_headers):
    data = client.get("/api/analytics/journal-stats", headers=auth_headers).json()
    assert data == {"totalEntries": 0, "avgMoodScore": 0, "streakDays": 0, "improvementRate": 0}


def test_aggregation_error_is_500(client, auth_headers, monkeypatch):
    import web.routes.analytics as routes

    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(routes, "mood_trends", boom)
    res = client.get("/api/analytics/mood-trends", headers=auth_headers)
    assert res.status_code == 500
    assert res.json()["detail"] == "Server error"


def test_aggregation_error_detail_in_development(client, auth_headers, monkeypatch, web_config):
    import web.routes.analytics as routes

    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(routes, "dashboard", boom)
    web_config.server.environment = "development"
    res = client.get("/api/analytics/dashboard", headers=auth_headers)
    assert res.status_code == 500
    assert "disk on fire" in res.json()["detail"]
