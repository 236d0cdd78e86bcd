from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Tuple

from .chunk_grid import chunk_center


ImageKey = Tuple[str, int, int]


@dataclass(frozen=True)
class CaptureSettings:
    resolution: Tuple[int, int] = (1024, 1024)
    zoom: float = 1
    show_entity_info: bool = True


@dataclass(frozen=True)
class CaptureRequest:
    surface: str
    x: int
    y: int
    position: Tuple[int, int]
    resolution: Tuple[int, int]
    zoom: float
    path: str
    show_entity_info: bool = True

    @property
    def key(self) -> ImageKey:
        return (self.surface, self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["position"] = list(self.position)
        data["resolution"] = list(self.resolution)
        return data


@dataclass
class CaptureReport:
    completed: List[ImageKey] = field(default_factory=list)
    failed: Dict[ImageKey, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def image_path(surface: str, x: int, y: int) -> str:
    return f"{surface},{x},{y}.png"


def _log(log_fn, msg: str) -> None:
    if log_fn is not None:
        log_fn(msg)


def capture_request(
    surface: str,
    x: int,
    y: int,
    settings: CaptureSettings | None = None,
) -> CaptureRequest:
    settings = settings or CaptureSettings()
    return CaptureRequest(
        surface=surface,
        x=x,
        y=y,
        position=chunk_center((x, y)),
        resolution=tuple(settings.resolution),
        zoom=settings.zoom,
        path=image_path(surface, x, y),
        show_entity_info=settings.show_entity_info,
    )


def plan_captures(
    descriptors: Iterable[Dict[str, Any]],
    settings: CaptureSettings | None = None,
) -> Iterator[CaptureRequest]:
    """One capture request per included chunk of every surface descriptor."""
    for descriptor in descriptors:
        surface = descriptor["name"]
        for chunk in descriptor.get("chunks", []):
            yield capture_request(surface, int(chunk["x"]), int(chunk["y"]), settings)


def run_captures(
    requests: Iterable[CaptureRequest],
    renderer: Callable[[CaptureRequest], Any],
    *,
    log_fn=None,
) -> CaptureReport:
    """Hand each request to ``renderer``; failures are recorded, not retried."""
    report = CaptureReport()
    for request in requests:
        try:
            renderer(request)
        except Exception as exc:  # noqa: BLE001
            report.failed[request.key] = f"{type(exc).__name__}: {exc}"
            _log(log_fn, f"Capture failed for {request.path}: {exc}")
            continue
        report.completed.append(request.key)
    _log(
        log_fn,
        f"Captures: {len(report.completed)} completed, {len(report.failed)} failed",
    )
    return report
