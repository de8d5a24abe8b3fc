from __future__ import annotations

from image_display.geometry import (
    ORIGINAL_IMAGE_REGION,
    ORIGINAL_IMAGE_REGION_ID,
    SizeInPixels,
    parse_regions,
    ratio_diff_factor,
    select_best_region,
)

IMAGE = SizeInPixels(1000, 1000)

REGIONS = parse_regions(
    [
        {"id": "half", "x": 0, "y": 0, "width": 1, "height": 0.5},  # ratio 2
        {"id": "strip", "x": 0, "y": 0.5, "width": 1, "height": 0.25},  # ratio 4
        {"id": "tall", "x": 0.1, "y": 0.1, "width": 0.2, "height": 0.8},  # ratio 0.25
    ]
)


def test_picks_region_with_closest_ratio() -> None:
    assert select_best_region(SizeInPixels(400, 100), IMAGE, REGIONS).id == "strip"
    assert select_best_region(SizeInPixels(200, 100), IMAGE, REGIONS).id == "half"
    assert select_best_region(SizeInPixels(100, 400), IMAGE, REGIONS).id == "tall"


def test_close_ratio_keeps_whole_image_whatever_the_candidates() -> None:
    square = parse_regions([{"id": "sq", "x": 0.4, "y": 0.4, "width": 0.2, "height": 0.2}])
    for container in (SizeInPixels(1000, 1000), SizeInPixels(1050, 1000), SizeInPixels(1000, 1099)):
        assert ratio_diff_factor(container, IMAGE) <= 1.1
        assert select_best_region(container, IMAGE, square + REGIONS) is ORIGINAL_IMAGE_REGION


def test_threshold_is_configurable() -> None:
    container = SizeInPixels(1050, 1000)
    region = parse_regions([{"id": "wide", "x": 0, "y": 0, "width": 1, "height": 0.95}])
    assert select_best_region(container, IMAGE, region, threshold=1.01).id == "wide"


def test_whole_image_wins_when_no_candidate_is_better() -> None:
    # container ratio 2, whole image diff 2, "tall" diff 8
    tall_only = [r for r in REGIONS if r.id == "tall"]
    assert select_best_region(SizeInPixels(200, 100), IMAGE, tall_only) is ORIGINAL_IMAGE_REGION


def test_empty_set_returns_whole_image() -> None:
    assert select_best_region(SizeInPixels(1000, 10), IMAGE, []) is ORIGINAL_IMAGE_REGION


def test_forced_id_wins_over_better_fitting_region() -> None:
    region = select_best_region(SizeInPixels(400, 100), IMAGE, REGIONS, forced_id="tall")
    assert region.id == "tall"


def test_forced_original_id() -> None:
    region = select_best_region(SizeInPixels(400, 100), IMAGE, REGIONS, forced_id=ORIGINAL_IMAGE_REGION_ID)
    assert region is ORIGINAL_IMAGE_REGION


def test_unknown_forced_id_falls_back_to_automatic_selection() -> None:
    region = select_best_region(SizeInPixels(400, 100), IMAGE, REGIONS, forced_id="nope")
    assert region.id == "strip"


def test_first_region_wins_ties() -> None:
    twins = parse_regions(
        [
            {"id": "first", "x": 0, "y": 0, "width": 1, "height": 0.5},
            {"id": "second", "x": 0, "y": 0.5, "width": 1, "height": 0.5},
        ]
    )
    assert select_best_region(SizeInPixels(200, 100), IMAGE, twins).id == "first"
    assert select_best_region(SizeInPixels(200, 100), IMAGE, list(reversed(twins))).id == "second"
