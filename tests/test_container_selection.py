from src.wasteroute.models.domain import Container
from src.wasteroute.services.containers import (
    occupancy_status_color,
    select_for_collection,
    summarize_containers,
)


def _container(cid: int, ratio: float, is_full: bool = False) -> Container:
    return Container(
        id=cid,
        container_code=f"K-{cid:03d}",
        name=f"Container {cid}",
        latitude=40.97 + cid / 1000,
        longitude=28.87 + cid / 1000,
        occupancy_ratio=ratio,
        is_full=is_full,
    )


def test_select_keeps_containers_at_or_above_threshold_in_order():
    containers = [_container(1, 0.9), _container(2, 0.5), _container(3, 0.7), _container(4, 0.69)]

    selected = select_for_collection(containers, 0.7)

    assert [container.id for container in selected] == [1, 3]


def test_select_uses_default_threshold():
    containers = [_container(1, 0.71), _container(2, 0.2)]
    assert [c.id for c in select_for_collection(containers)] == [1]


def test_select_never_grows_input():
    containers = [_container(i, 1.0) for i in range(5)]
    assert len(select_for_collection(containers, 0.0)) == len(containers)
    assert select_for_collection([], 0.5) == []


def test_status_color_follows_threshold():
    assert occupancy_status_color(0.7) == "#ff0000"
    assert occupancy_status_color(0.69) == "#00cc00"
    assert occupancy_status_color(0.5, threshold=0.4) == "#ff0000"


def test_summary_counts():
    containers = [_container(1, 0.9, is_full=True), _container(2, 0.5), _container(3, 0.75)]

    summary = summarize_containers(containers, 0.7)

    assert summary["total"] == 3
    assert summary["needs_collection"] == 2
    assert summary["reported_full"] == 1
    assert summary["mean_occupancy"] == 0.717
    assert summary["threshold"] == 0.7
