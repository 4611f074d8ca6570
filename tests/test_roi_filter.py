"""
Tests for the ROI filter condition parser.
"""

import logging

import pytest

from detection.roi_filter import (
    FilterSyntaxError,
    RoiFilter,
    filter_rois,
    is_valid_filter_conditions,
)
from models.detection import BoundingBox
from models.result import EmotionsResult, Result


def _res(label, confidence, x=0):
    return EmotionsResult(location=BoundingBox(x, 0, x + 10, 10), label=label, confidence=confidence)


RESULTS = [
    _res("happy", 0.9, x=0),
    _res("sad", 0.4, x=10),
    _res("happy", 0.3, x=20),
    _res("neutral", 0.7, x=30),
]


def _xs(rois):
    return [r.x1 for r in rois]


class TestRoiFilter:
    @pytest.mark.parametrize("conditions,expected", [
        ("label=happy", [0, 20]),
        ("label == happy", [0, 20]),
        ("label == 'happy'", [0, 20]),
        ('label == "sad"', [10]),
        ("label != happy", [10, 30]),
        ("confidence > 0.5", [0, 30]),
        ("confidence >= 0.4", [0, 10, 30]),
        ("confidence < 0.4", [20]),
        ("confidence <= 0.4", [10, 20]),
        ("confidence == 0.7", [30]),
        ("label == happy && confidence > 0.5", [0]),
        ("label == sad || label == neutral", [10, 30]),
        ("label == happy and confidence < 0.5 or label == neutral", [20, 30]),
        ("LABEL == happy", [0, 20]),
    ])
    def test_conditions(self, conditions, expected):
        assert _xs(RoiFilter(conditions).apply(RESULTS)) == expected

    def test_and_binds_tighter_than_or(self):
        f = RoiFilter("label == sad || label == happy && confidence > 0.5")
        assert _xs(f.apply(RESULTS)) == [0, 10]

    @pytest.mark.parametrize("conditions", ["", "   ", None])
    def test_empty_matches_all(self, conditions):
        f = RoiFilter(conditions)
        assert f.matches_all
        assert len(f.apply(RESULTS)) == len(RESULTS)

    @pytest.mark.parametrize("conditions", [
        "label",
        "label ==",
        "emotion == happy",
        "label > happy",
        "confidence > high",
        "label == happy &&",
        "|| label == happy",
        "label == happy && && confidence > 0.1",
        "== happy",
        "label === happy",
        "label = a = b",
        "label == happy != sad",
        "confidence >= <0.5",
    ])
    def test_malformed_raises(self, conditions):
        with pytest.raises(FilterSyntaxError):
            RoiFilter(conditions)
        assert is_valid_filter_conditions(conditions) is False

    def test_valid_conditions(self):
        assert is_valid_filter_conditions("label == happy && confidence >= 0.5")
        assert is_valid_filter_conditions("")


class TestFilterRois:
    def test_keeps_store_order(self):
        rois = filter_rois(RESULTS, "label=happy")
        assert rois == [RESULTS[0].location, RESULTS[2].location]

    def test_malformed_logs_and_returns_empty(self, caplog):
        with caplog.at_level(logging.ERROR):
            assert filter_rois(RESULTS, "confidence >> 1") == []
        assert "confidence >> 1" in caplog.text

    def test_unsupported_attribute_for_result_kind(self, caplog):
        plain = [Result(location=BoundingBox(0, 0, 5, 5))]
        with caplog.at_level(logging.ERROR):
            assert filter_rois(plain, "label == happy") == []
        assert "does not support" in caplog.text

    def test_empty_store(self):
        assert filter_rois([], "label == happy") == []
