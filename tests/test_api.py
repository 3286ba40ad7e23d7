from fastapi.testclient import TestClient

from conftest import FakePredictionClient, FakeVisionClient
from wall_quote.core.errors import UpstreamError
from wall_quote.main import create_app


def make_client(settings, vision=None, endpoint=None):
    app = create_app(
        settings=settings,
        vision_client=vision or FakeVisionClient('{"width": 10, "height": 8}'),
        prediction_client=endpoint,
    )
    return TestClient(app)


def upload(data, name="wall.jpg", content_type="image/jpeg"):
    return {"image": (name, data, content_type)}


def test_health(settings):
    with make_client(settings) as client:
        r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["cost_rate"] == 5.0
    assert body["localizer_configured"] is False


def test_analyze_wall_no_file(settings):
    with make_client(settings) as client:
        r = client.post("/api/analyze-wall")
    assert r.status_code == 400
    assert r.json() == {"error": "No image uploaded"}


def test_analyze_wall_image_sent_as_text_field(settings):
    with make_client(settings) as client:
        r = client.post("/api/analyze-wall", data={"image": "not-a-file"})
    assert r.status_code == 400
    assert r.json()["error"] == "No image uploaded"


def test_analyze_wall_invalid_zoom(settings, jpeg_bytes):
    vision = FakeVisionClient('{"width": 10, "height": 8}')
    with make_client(settings, vision) as client:
        for zoom in ("abc", "-1", "0", "nan", "inf", "1e400"):
            r = client.post("/api/analyze-wall", files=upload(jpeg_bytes), data={"zoom": zoom})
            assert r.status_code == 400, zoom
            assert r.json() == {"error": "Invalid zoom value"}
    assert vision.calls == []


def test_analyze_wall_defaults_zoom_to_one(settings, jpeg_bytes):
    vision = FakeVisionClient('Sure! {"width": 10, "height": 8}')
    with make_client(settings, vision) as client:
        r = client.post("/api/analyze-wall", files=upload(jpeg_bytes))
    assert r.status_code == 200
    assert r.json() == {"width": 10, "height": 8, "cost": 400, "zoom": 1}
    assert "zoom level of 1x" in vision.calls[0]["prompt"]


def test_analyze_wall_forwards_zoom_into_prompt(settings, jpeg_bytes):
    vision = FakeVisionClient('{"width": 10, "height": 8}')
    with make_client(settings, vision) as client:
        r = client.post("/api/analyze-wall", files=upload(jpeg_bytes), data={"zoom": "2.5"})
    assert r.status_code == 200
    assert r.json()["zoom"] == 2.5
    assert "zoom level of 2.5x" in vision.calls[0]["prompt"]
    assert vision.calls[0]["mime_type"] == "image/jpeg"
    assert vision.calls[0]["image"] == jpeg_bytes


def test_analyze_wall_large_jpeg_end_to_end(settings, jpeg_bytes):
    # a valid JPEG header padded out to 12MB
    data = jpeg_bytes + b"\0" * (12 * 1024 * 1024 - len(jpeg_bytes))
    vision = FakeVisionClient('```json\n{"width": 12, "height": 9}\n```')
    with make_client(settings, vision) as client:
        r = client.post("/api/analyze-wall", files=upload(data), data={"zoom": "1.5"})
    assert r.status_code == 200
    assert r.json() == {"width": 12, "height": 9, "cost": 12 * 9 * 5.0, "zoom": 1.5}


def test_analyze_wall_unparseable_reply(settings, jpeg_bytes):
    vision = FakeVisionClient('{"width": "10", "height": 8}')
    with make_client(settings, vision) as client:
        r = client.post("/api/analyze-wall", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert r.json()["error"].startswith("Vision model did not return valid dimensions")


def test_analyze_wall_non_finite_reply(settings, jpeg_bytes):
    for reply in ('{"width": NaN, "height": 8}', '{"width": Infinity, "height": 8}', '{"width": 1e400, "height": 8}'):
        with make_client(settings, FakeVisionClient(reply)) as client:
            r = client.post("/api/analyze-wall", files=upload(jpeg_bytes))
        assert r.status_code == 500, reply
        assert r.json()["error"].startswith("Vision model did not return valid dimensions")


def test_analyze_wall_huge_integer_reply(settings, jpeg_bytes):
    reply = '{"width": 1' + "0" * 400 + ', "height": 8}'
    with make_client(settings, FakeVisionClient(reply)) as client:
        r = client.post("/api/analyze-wall", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json()["error"].startswith("Vision model did not return valid dimensions")


def test_analyze_wall_cost_out_of_range(settings, jpeg_bytes):
    reply = '{"width": 1e200, "height": 1e200}'
    with make_client(settings, FakeVisionClient(reply)) as client:
        r = client.post("/api/analyze-wall", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert r.json()["error"].startswith("Estimated cost is out of range")


def test_object_detection_non_finite_number_keeps_raw_text(settings, jpeg_bytes):
    reply = '{"objects": [{"name": "wall", "bounding_box": {"x": NaN}}]}'
    with make_client(settings, FakeVisionClient(reply)) as client:
        r = client.post("/api/object-detection", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to parse model response", "raw_response": reply}


def test_analyze_wall_upstream_failure(settings, jpeg_bytes):
    vision = FakeVisionClient(error=UpstreamError("Vision model request failed: 503"))
    with make_client(settings, vision) as client:
        r = client.post("/api/analyze-wall", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert r.json() == {"error": "Vision model request failed: 503"}


def test_analyze_wall_failure_without_message(settings, jpeg_bytes):
    vision = FakeVisionClient(error=RuntimeError())
    with make_client(settings, vision) as client:
        r = client.post("/api/analyze-wall", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to analyze image"}


def test_analyze_wall_not_an_image(settings):
    with make_client(settings) as client:
        r = client.post("/api/analyze-wall", files=upload(b"plain text, no pixels"))
    assert r.status_code == 400
    assert "Could not decode image" in r.json()["error"]


def test_analyze_wall_too_large(settings, jpeg_bytes):
    settings.max_image_mb = 1
    data = jpeg_bytes + b"\0" * (2 * 1024 * 1024)
    with make_client(settings) as client:
        r = client.post("/api/analyze-wall", files=upload(data))
    assert r.status_code == 413


def test_object_detection_returns_parsed_json(settings, jpeg_bytes):
    reply = 'Here you go:\n{"objects": [{"name": "door"}], "scene": "hallway"}\nDone.'
    with make_client(settings, FakeVisionClient(reply)) as client:
        r = client.post("/api/object-detection", files=upload(jpeg_bytes))
    assert r.status_code == 200
    assert r.json() == {"objects": [{"name": "door"}], "scene": "hallway"}


def test_object_detection_keeps_raw_text_on_parse_failure(settings, jpeg_bytes):
    reply = "I cannot see anything in this picture."
    with make_client(settings, FakeVisionClient(reply)) as client:
        r = client.post("/api/object-detection", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to parse model response", "raw_response": reply}


def test_object_detection_no_file(settings):
    with make_client(settings) as client:
        r = client.post("/api/object-detection")
    assert r.status_code == 400
    assert r.json() == {"error": "No image uploaded"}


def test_object_localization_passes_predictions_through(settings, jpeg_bytes):
    predictions = [{"displayNames": ["wall"], "confidences": [0.91], "bboxes": [[0.1, 0.9, 0.0, 1.0]]}]
    endpoint = FakePredictionClient({"predictions": predictions, "deployedModelId": "1"})
    with make_client(settings, endpoint=endpoint) as client:
        r = client.post("/api/object-localization", files=upload(jpeg_bytes))
    assert r.status_code == 200
    assert r.json() == {"success": True, "predictions": predictions}
    assert endpoint.calls[0]["parameters"] == {"confidenceThreshold": 0.2, "maxPredictions": 100}


def test_object_localization_upstream_error(settings, jpeg_bytes):
    endpoint = FakePredictionClient(error=UpstreamError('{"error": {"code": 403}}'))
    with make_client(settings, endpoint=endpoint) as client:
        r = client.post("/api/object-localization", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert r.json() == {"error": '{"error": {"code": 403}}'}


def test_object_localization_no_file(settings):
    endpoint = FakePredictionClient()
    with make_client(settings, endpoint=endpoint) as client:
        r = client.post("/api/object-localization")
    assert r.status_code == 400
    assert r.json() == {"error": "No image uploaded"}
    assert endpoint.calls == []


def test_object_localization_not_configured(settings, jpeg_bytes):
    with make_client(settings) as client:
        r = client.post("/api/object-localization", files=upload(jpeg_bytes))
    assert r.status_code == 500
    assert "not configured" in r.json()["error"]
