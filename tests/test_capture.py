import unittest

from chunkmaps.capture import (
    CaptureSettings,
    capture_request,
    image_path,
    plan_captures,
    run_captures,
)
from chunkmaps.classifier import classify
from chunkmaps.descriptor import build_descriptors
from chunkmaps.world_source import SurfaceSnapshot


class CapturePlanTests(unittest.TestCase):
    def test_request_targets_chunk_center(self) -> None:
        req = capture_request("nauvis", 2, -1)
        self.assertEqual(req.position, (80, -16))
        self.assertEqual(req.resolution, (1024, 1024))
        self.assertEqual(req.zoom, 1)
        self.assertEqual(req.path, "nauvis,2,-1.png")
        self.assertEqual(req.key, ("nauvis", 2, -1))
        self.assertEqual(image_path("space", 0, 0), "space,0,0.png")

    def test_request_to_dict(self) -> None:
        settings = CaptureSettings(resolution=(512, 256), zoom=0.5, show_entity_info=False)
        data = capture_request("nauvis", 0, 0, settings).to_dict()
        self.assertEqual(data["resolution"], [512, 256])
        self.assertEqual(data["position"], [16, 16])
        self.assertEqual(data["zoom"], 0.5)
        self.assertFalse(data["show_entity_info"])

    def test_plan_covers_included_chunks_only(self) -> None:
        surface = SurfaceSnapshot(name="nauvis", chunks=[(x, 0) for x in range(5)])
        result = classify(surface.chunks, [(0, 0)], horizon=2)
        descriptors = build_descriptors([(surface, result)])
        keys = [req.key for req in plan_captures(descriptors)]
        self.assertEqual(keys, [("nauvis", 0, 0), ("nauvis", 1, 0)])


class CaptureRunTests(unittest.TestCase):
    def test_renderer_failures_are_reported_without_touching_result(self) -> None:
        surface = SurfaceSnapshot(name="nauvis", chunks=[(x, 0) for x in range(4)])
        result = classify(surface.chunks, [(0, 0)], horizon=5)
        included_before = set(result.included)
        descriptors = build_descriptors([(surface, result)])

        rendered = []

        def renderer(req) -> None:
            if req.x == 2:
                raise RuntimeError("screenshot timed out")
            rendered.append(req.key)

        messages: list[str] = []
        report = run_captures(plan_captures(descriptors), renderer, log_fn=messages.append)

        self.assertFalse(report.ok)
        self.assertEqual(list(report.failed), [("nauvis", 2, 0)])
        self.assertIn("timed out", report.failed[("nauvis", 2, 0)])
        self.assertEqual(report.completed, rendered)
        self.assertEqual(len(report.completed), 3)
        self.assertEqual(result.included, included_before)
        self.assertTrue(any("nauvis,2,0.png" in m for m in messages))

    def test_all_captures_succeed(self) -> None:
        report = run_captures([capture_request("a", 0, 0)], lambda req: None)
        self.assertTrue(report.ok)
        self.assertEqual(report.completed, [("a", 0, 0)])


if __name__ == "__main__":
    unittest.main()
