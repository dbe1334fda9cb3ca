from healthlens.errors import ApiError
from healthlens.services.completion import CompletionError
from healthlens.services.summarizer import DISCLAIMER, LEGAL_NOTICE

AI_SUMMARY = {
    "overallSummary": "Some values are above the usual range.",
    "keyObservations": ["HbA1c is above the reference range."],
    "markerExplanations": [
        {
            "name": "HbA1c",
            "whatItMeasures": "Average blood sugar over about three months.",
            "whatItSuggests": "May suggest elevated blood sugar.",
            "whyItMatters": "Is often associated with long-term health risks.",
        }
    ],
    "wellnessConsiderations": [],
    "whenToSeekAdvice": ["Talk to a healthcare professional about these results."],
    "disclaimer": "AI text",
    "legalNotice": "AI text",
}

MARKERS = [
    {"name": "HbA1c", "code": "HBA1C", "value": 8.1, "unit": "%", "refRange": "4.0-6.0", "sourceSnippet": "HbA1c 8.1"},
    {"name": "LDL", "code": "LDL", "value": 150, "unit": "mg/dL", "refRange": "<130"},
]


def test_summary_is_augmented_with_deterministic_fields(client, fake_completion):
    fake_completion.replies.append(dict(AI_SUMMARY))

    response = client.post("/nlp/summary", json={"markers": MARKERS, "language": "en"})
    assert response.status_code == 200
    payload = response.json()

    assert payload["overallSummary"] == AI_SUMMARY["overallSummary"]
    assert payload["overallRecommendation"] == "Seek medical evaluation promptly"
    assert payload["overallRecheckDays"] == 30
    assert payload["immediateAttention"] is True
    assert payload["overallConfidence"] == "high"
    assert payload["disclaimer"] == DISCLAIMER
    assert payload["legalNotice"] == LEGAL_NOTICE
    assert payload["extractionDebug"] == [
        {"code": "HBA1C", "sourceSnippet": "HbA1c 8.1"},
        {"code": "LDL", "sourceSnippet": None},
    ]

    hba1c, ldl = payload["enrichedMarkers"]
    assert hba1c["severity"] == "significant"
    assert hba1c["urgency"] == "prompt"
    assert hba1c["uiHints"] == {"color": "#EF4444", "icon": "alert-octagon"}
    assert ldl["status"] == "high"
    assert ldl["severity"] == "mild"
    assert ldl["recommendedRecheckDays"] == 180


def test_summary_prompt_carries_enriched_markers(client, fake_completion):
    fake_completion.replies.append(dict(AI_SUMMARY))

    client.post("/nlp/summary", json={"markers": MARKERS, "language": "de"})
    call = fake_completion.calls[0]
    assert "Language: de" in call["user"]
    assert '"severity": "significant"' in call["user"]
    assert call["temperature"] == 0.2


def test_raw_markers_without_code_are_normalised(client, fake_completion):
    fake_completion.replies.append(dict(AI_SUMMARY))

    response = client.post("/nlp/summary", json={"markers": [{"name": "Serum Creatinine", "value": "2.1", "refRange": "0.6-1.3"}]})
    marker = response.json()["enrichedMarkers"][0]
    assert marker["code"] == "CREAT"
    assert marker["value"] == 2.1
    assert marker["recommendedRecheckDays"] == 7
    assert response.json()["overallRecommendation"] == "Seek medical evaluation promptly"


def test_empty_markers_is_ai_failed(client):
    response = client.post("/nlp/summary", json={"markers": []})
    assert response.status_code == 400
    assert response.json()["error"] == {"code": "AI_FAILED", "message": "Missing markers"}

    response = client.post("/nlp/summary", json={})
    assert response.status_code == 400


def test_missing_key_is_invalid_key(client, fake_completion):
    fake_completion.configured = False
    response = client.post("/nlp/summary", json={"markers": MARKERS})
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INVALID_KEY"


def test_unsafe_summary_is_rejected(client, fake_completion):
    unsafe = dict(AI_SUMMARY, whenToSeekAdvice=["Your doctor may prescribe metformin."])
    fake_completion.replies.append(unsafe)

    response = client.post("/nlp/summary", json={"markers": MARKERS})
    assert response.status_code == 502
    payload = response.json()
    assert payload["error"] == {"code": "UNSAFE_RESPONSE", "message": "Unsafe content detected"}
    assert "enrichedMarkers" not in payload


def test_quota_error_is_surfaced_without_retry(client, fake_completion):
    fake_completion.replies.append(CompletionError("AI_QUOTA_EXCEEDED", "OpenAI quota exceeded.", 402))
    fake_completion.replies.append(dict(AI_SUMMARY))

    response = client.post("/nlp/summary", json={"markers": MARKERS})
    assert response.status_code == 402
    assert response.json()["error"]["code"] == "AI_QUOTA_EXCEEDED"
    assert len(fake_completion.calls) == 1


def test_provider_and_malformed_errors(client, fake_completion):
    fake_completion.replies.append(CompletionError("AI_PROVIDER_ERROR", "Bad gateway", 502))
    response = client.post("/nlp/summary", json={"markers": MARKERS})
    assert response.status_code == 502
    assert response.json()["error"]["code"] == "AI_PROVIDER_ERROR"

    fake_completion.replies.append(ApiError("AI_FAILED", "Invalid AI JSON", 502))
    response = client.post("/nlp/summary", json={"markers": MARKERS})
    assert response.json()["error"] == {"code": "AI_FAILED", "message": "Invalid AI JSON"}


def test_non_list_markers_is_ai_failed(client, fake_completion):
    for markers in ("HbA1c 7.2", {"name": "LDL"}, 42):
        response = client.post("/nlp/summary", json={"markers": markers})
        assert response.status_code == 400
        assert response.json()["error"] == {"code": "AI_FAILED", "message": "Missing markers"}
    assert fake_completion.calls == []


def test_wrongly_typed_marker_fields_are_still_enriched(client, fake_completion):
    fake_completion.replies.append(dict(AI_SUMMARY))

    markers = [
        {"name": "LDL", "value": 150, "observedAt": 20240101, "unit": 1, "sourceSnippet": ["LDL 150"]},
        "not an object",
    ]
    response = client.post("/nlp/summary", json={"markers": markers, "language": 7})
    assert response.status_code == 200
    first, second = response.json()["enrichedMarkers"]
    assert first["code"] == "LDL"
    assert first["value"] == 150
    assert first["observedAt"] is None
    assert first["unit"] is None
    assert first["sourceSnippet"] is None
    assert (second["code"], second["status"], second["confidence"]) == (None, "unknown", "low")
    assert "Language: en" in fake_completion.calls[0]["user"]
