import json
import os
import unittest

from chunkmaps.classifier import classify


SCENARIOS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "scenarios")

# Map legend: "S" seeded chunk, "." plain chunk, " " absent.
# Expected legend: "#" included, "x" excluded, " " absent.


def _load_scenarios() -> list[dict]:
    scenarios = []
    for fname in sorted(os.listdir(SCENARIOS_DIR)):
        if not fname.endswith(".json"):
            continue
        path = os.path.join(SCENARIOS_DIR, fname)
        with open(path, "r", encoding="utf-8") as f:
            scenarios.append(json.load(f))
    return scenarios


def _parse_map(rows: list[str]) -> tuple[list[tuple[int, int]], list[tuple[int, int]]]:
    coords = []
    seeds = []
    for y, row in enumerate(rows):
        for x, cell in enumerate(row):
            if cell == " ":
                continue
            coords.append((x, y))
            if cell == "S":
                seeds.append((x, y))
    return coords, seeds


def _render_expected(rows: list[str], included: set) -> list[str]:
    out = []
    for y, row in enumerate(rows):
        line = ""
        for x, cell in enumerate(row):
            if cell == " ":
                line += " "
            else:
                line += "#" if (x, y) in included else "x"
        out.append(line)
    return out


class ScenarioTests(unittest.TestCase):
    def test_run_all_scenarios(self) -> None:
        scenarios = _load_scenarios()
        self.assertGreater(len(scenarios), 0, "No scenarios found")

        for scenario in scenarios:
            with self.subTest(scenario=scenario.get("name", "(unnamed)")):
                rows = scenario["map"]
                coords, seeds = _parse_map(rows)
                result = classify(coords, seeds, horizon=int(scenario["horizon"]))
                self.assertEqual(
                    _render_expected(rows, result.included),
                    scenario["expected"],
                    scenario.get("description", ""),
                )


if __name__ == "__main__":
    unittest.main()
