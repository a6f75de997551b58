"""Tests for the @traced_engine decorator and input fingerprints."""

from scene_engines.tracer import (
    _canonicalize,
    compute_input_fingerprint,
    traced_engine,
)
from scene_kernel.domain import AccessPolicy
from scene_kernel.host import Camera


class _Engine:
    @traced_engine("probe", "2.1", fingerprint_fields=("component", "policy"))
    def run(self, component, policy=AccessPolicy.PUBLIC_ONLY):
        return "ran"


class TestCanonicalize:
    def test_scalars(self):
        assert _canonicalize(None) == "null"
        assert _canonicalize(3) == "3"
        assert _canonicalize("x") == "x"

    def test_enum(self):
        assert _canonicalize(AccessPolicy.PUBLIC_ONLY) == "AccessPolicy.PUBLIC_ONLY"

    def test_dict_keys_sorted(self):
        assert _canonicalize({"b": 1, "a": 2}) == "{a:2,b:1}"

    def test_host_object_uses_instance_id(self):
        camera = Camera(instance_id=77)
        assert _canonicalize(camera) == "Camera#77"


class TestFingerprint:
    def test_deterministic(self):
        args = {"component": Camera(instance_id=5), "policy": AccessPolicy.PUBLIC_ONLY}
        assert compute_input_fingerprint(("component", "policy"), args) == (
            compute_input_fingerprint(("component", "policy"), args)
        )

    def test_length(self):
        assert len(compute_input_fingerprint(("a",), {"a": 1})) == 16

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("a",), {}) == (
            compute_input_fingerprint(("a",), {"a": None})
        )

    def test_differs_by_identity(self):
        a = compute_input_fingerprint(("c",), {"c": Camera(instance_id=1)})
        b = compute_input_fingerprint(("c",), {"c": Camera(instance_id=2)})
        assert a != b


class TestTracedEngine:
    def test_return_value_passed_through(self):
        assert _Engine().run(Camera()) == "ran"

    def test_trace_record(self, captured_logs):
        _Engine().run(Camera(instance_id=9))
        traces = [r for r in captured_logs() if r["message"] == "SCENE_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["trace_type"] == "SCENE_ENGINE_TRACE"
        assert trace["engine_name"] == "probe"
        assert trace["engine_version"] == "2.1"
        assert trace["function"] == "_Engine.run"
        assert trace["duration_ms"] >= 0

    def test_positional_and_keyword_arguments_agree(self, captured_logs):
        camera = Camera(instance_id=9)
        _Engine().run(camera, AccessPolicy.INCLUDE_SERIALIZED)
        _Engine().run(component=camera, policy=AccessPolicy.INCLUDE_SERIALIZED)
        fingerprints = [
            r["input_fingerprint"]
            for r in captured_logs()
            if r["message"] == "SCENE_ENGINE_TRACE"
        ]
        assert fingerprints[0] == fingerprints[1]

    def test_wraps_preserves_name(self):
        assert _Engine.run.__name__ == "run"
