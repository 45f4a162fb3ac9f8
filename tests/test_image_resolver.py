"""Unit tests for thumbnail resolution (cache, stored image, generation)."""

import numpy as np
import pytest

from roi_thumbnail.config import ThumbnailConfig
from roi_thumbnail.image_resolver import (ImageResolver, ResolvedImage, Unavailable,
                                          UnavailableReason)
from roi_thumbnail.roi_model import Roi


def make_roi(image=None):
    roi = Roi.circle((16.0, 16.0), 3.0)
    if image is not None:
        roi.enhanced_image = image
    return roi


class ExplodingStack:
    def get_frame_set(self, mode="cache"):
        raise AssertionError("image stack must not be touched")


def test_stored_image_is_used_without_touching_stack(generator_cls):
    generator = generator_cls(np.ones((5, 5)))
    resolver = ImageResolver(generator, image_stack=ExplodingStack())
    stored = np.arange(25, dtype=np.float32).reshape(5, 5)
    result = resolver.resolve(make_roi(stored))
    assert isinstance(result, ResolvedImage)
    assert result.source == "stored"
    np.testing.assert_array_equal(result.image, stored)
    assert generator.calls == 0


def test_all_zero_stored_image_counts_as_empty(generator_cls):
    resolver = ImageResolver(generator_cls(np.ones((5, 5))))
    result = resolver.resolve(make_roi(np.zeros((5, 5))))
    assert result == Unavailable(UnavailableReason.NO_SOURCE)


def test_no_stack_configured(generator_cls):
    resolver = ImageResolver(generator_cls(np.ones((5, 5))))
    result = resolver.resolve(make_roi())
    assert isinstance(result, Unavailable)
    assert not result.available
    assert result.reason is UnavailableReason.NO_SOURCE
    assert result.message == "no image stack configured"


def test_insufficient_frames_warns_once(generator_cls, stack_cls):
    warnings = []
    generator = generator_cls(np.ones((5, 5)))
    resolver = ImageResolver(generator, image_stack=stack_cls(50))
    resolver.set_warning_callback(warnings.append)

    first = resolver.resolve(make_roi())
    second = resolver.resolve(make_roi())

    assert first.reason is UnavailableReason.INSUFFICIENT_FRAMES
    assert second.reason is UnavailableReason.INSUFFICIENT_FRAMES
    assert first.message == "not enough frames in memory"
    assert len(warnings) == 1
    assert "not enough image frames" in warnings[0]
    assert generator.calls == 0


def test_latch_is_per_resolver_instance(generator_cls, stack_cls):
    warnings = []
    for _ in range(2):
        resolver = ImageResolver(generator_cls(None), image_stack=stack_cls(10))
        resolver.set_warning_callback(warnings.append)
        resolver.resolve(make_roi())
    assert len(warnings) == 2


def test_missing_frame_set_is_insufficient(generator_cls):
    class EmptyStack:
        def get_frame_set(self, mode="cache"):
            return None

    resolver = ImageResolver(generator_cls(np.ones((5, 5))), image_stack=EmptyStack())
    assert resolver.resolve(make_roi()).reason is UnavailableReason.INSUFFICIENT_FRAMES


def test_cache_mode_is_requested(generator_cls, stack_cls):
    stack = stack_cls(100)
    resolver = ImageResolver(generator_cls(np.ones((5, 5))), image_stack=stack)
    resolver.resolve(make_roi())
    assert stack.requests == ["cache"]


def test_generation_failure(generator_cls, stack_cls):
    resolver = ImageResolver(generator_cls(None), image_stack=stack_cls(100))
    result = resolver.resolve(make_roi())
    assert result.reason is UnavailableReason.GENERATION_FAILED
    assert result.message == "generation failed"


def test_generator_exception_is_reported_as_failure(stack_cls):
    def boom(frames, roi):
        raise RuntimeError("pipeline crashed")

    resolver = ImageResolver(boom, image_stack=stack_cls(100))
    assert resolver.resolve(make_roi()).reason is UnavailableReason.GENERATION_FAILED


def test_generated_image_is_stored_and_cached(generator_cls, stack_cls):
    image = np.arange(16, dtype=np.float32).reshape(4, 4) + 1
    generator = generator_cls(image)
    resolver = ImageResolver(generator, image_stack=stack_cls(100))
    roi = make_roi()

    first = resolver.resolve(roi)
    assert first.source == "generated"
    np.testing.assert_array_equal(roi.enhanced_image, image)

    second = resolver.resolve(roi)
    assert second.source == "cache"
    assert second.image is first.image
    assert generator.calls == 1


def test_after_invalidation_stored_image_is_used(generator_cls, stack_cls):
    generator = generator_cls(np.ones((4, 4)))
    resolver = ImageResolver(generator, image_stack=stack_cls(100))
    roi = make_roi()
    resolver.resolve(roi)
    resolver.cache.invalidate(roi.uid)
    assert resolver.resolve(roi).source == "stored"
    assert generator.calls == 1


def test_custom_min_frames(generator_cls, stack_cls):
    config = ThumbnailConfig(min_frames=10)
    resolver = ImageResolver(generator_cls(np.ones((4, 4))), image_stack=stack_cls(10), config=config)
    assert resolver.resolve(make_roi()).available


def test_warning_callback_error_does_not_propagate(generator_cls, stack_cls):
    def bad_callback(msg):
        raise RuntimeError("dashboard gone")

    resolver = ImageResolver(generator_cls(None), image_stack=stack_cls(1))
    resolver.set_warning_callback(bad_callback)
    assert resolver.resolve(make_roi()).reason is UnavailableReason.INSUFFICIENT_FRAMES


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        ThumbnailConfig(upsample_factor=0)
    with pytest.raises(ValueError):
        ThumbnailConfig(min_frames=-1)


def test_non_2d_generated_image_is_rejected(generator_cls, stack_cls):
    generator = generator_cls(np.ones((5, 5, 3)))
    resolver = ImageResolver(generator, image_stack=stack_cls(100))
    roi = make_roi()

    for _ in range(2):
        assert resolver.resolve(roi).reason is UnavailableReason.GENERATION_FAILED
    assert not roi.has_image()
    assert roi.uid not in resolver.cache
    assert generator.calls == 2


def test_non_2d_stored_image_falls_back_to_generation(generator_cls, stack_cls):
    generator = generator_cls(np.ones((5, 5)))
    resolver = ImageResolver(generator, image_stack=stack_cls(100))
    roi = make_roi(np.ones((5, 5, 3)))

    result = resolver.resolve(roi)
    assert result.source == "generated"
    assert result.image.shape == (5, 5)
    assert roi.enhanced_image.shape == (5, 5)


def test_frame_read_error_is_reported_as_failure(generator_cls):
    class BrokenStack:
        def get_frame_set(self, mode="cache"):
            raise OSError("file vanished")

    generator = generator_cls(np.ones((5, 5)))
    resolver = ImageResolver(generator, image_stack=BrokenStack())
    assert resolver.resolve(make_roi()).reason is UnavailableReason.GENERATION_FAILED
    assert generator.calls == 0
