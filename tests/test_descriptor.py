import json
import tempfile
import unittest
from pathlib import Path

from chunkmaps.classifier import classify
from chunkmaps.descriptor import (
    DescriptorError,
    build_descriptors,
    build_surface_descriptor,
    descriptor_bounds,
    load_descriptors,
    validate_descriptors,
    write_descriptors,
)
from chunkmaps.world_source import ChartTag, SurfaceSnapshot


def _surface() -> SurfaceSnapshot:
    return SurfaceSnapshot(
        name="nauvis",
        chunks=[(1, 0), (0, 0), (0, 1)],
        tags=[
            ChartTag(position=(3.0, 4.5), text="home", force="player"),
            ChartTag(position=(40.0, 0.0), text="", force="enemy"),
        ],
    )


class DescriptorTests(unittest.TestCase):
    def test_build_surface_descriptor(self) -> None:
        surface = _surface()
        result = classify(surface.chunks, [(0, 0)], horizon=5)
        descriptor = build_surface_descriptor(surface, result)

        self.assertEqual(descriptor["name"], "nauvis")
        self.assertEqual(
            descriptor["chunks"], [{"x": 0, "y": 0}, {"x": 0, "y": 1}, {"x": 1, "y": 0}]
        )
        self.assertEqual(list(descriptor["tags"]), ["enemy", "player"])
        self.assertEqual(
            descriptor["tags"]["player"], [{"position": {"x": 3.0, "y": 4.5}, "text": "home"}]
        )

    def test_surfaces_without_visible_chunks_are_omitted(self) -> None:
        visible = _surface()
        hidden = SurfaceSnapshot(name="space", chunks=[(0, 0)])
        pairs = [
            (visible, classify(visible.chunks, [(0, 0)])),
            (hidden, classify(hidden.chunks, [])),
        ]
        descriptors = build_descriptors(pairs)
        self.assertEqual([d["name"] for d in descriptors], ["nauvis"])

    def test_bounds(self) -> None:
        self.assertIsNone(descriptor_bounds({"chunks": []}))
        bounds = descriptor_bounds({"chunks": [{"x": -3, "y": 2}, {"x": 4, "y": -1}]})
        self.assertEqual(bounds, (-3, -1, 4, 2))

    def test_write_then_load(self) -> None:
        surface = _surface()
        descriptors = build_descriptors([(surface, classify(surface.chunks, [(0, 0)]))])
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = write_descriptors(Path(tmp_dir) / "out" / "info.json", descriptors)
            self.assertTrue(path.exists())
            self.assertEqual(load_descriptors(path), descriptors)

    def test_validate_rejects_bad_shapes(self) -> None:
        bad_inputs = [
            {},
            [{"chunks": []}],
            [{"name": "a", "chunks": {}}],
            [{"name": "a", "chunks": [{"x": 1}]}],
            [{"name": "a", "chunks": [{"x": True, "y": 0}]}],
            [{"name": "a", "chunks": [], "tags": []}],
            [{"name": "a", "chunks": [], "tags": {"player": [{"text": "x"}]}}],
        ]
        for data in bad_inputs:
            with self.subTest(data=data):
                with self.assertRaises(DescriptorError):
                    validate_descriptors(data)

    def test_check_script_finds_duplicate_chunks(self) -> None:
        from scripts.check_descriptor import find_duplicates

        descriptor = {"chunks": [{"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 0, "y": 0}]}
        self.assertEqual(find_duplicates(descriptor), [(0, 0)])
        self.assertEqual(find_duplicates({"chunks": []}), [])

    def test_load_rejects_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "info.json"
            path.write_text("[", encoding="utf-8")
            with self.assertRaises(DescriptorError):
                load_descriptors(path)
            path.write_text(json.dumps([]), encoding="utf-8")
            self.assertEqual(load_descriptors(path), [])


if __name__ == "__main__":
    unittest.main()
