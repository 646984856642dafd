import pytest

from image_compressor.core.errors import ConfigError
from image_compressor.models.compress import ImageDimensions
from image_compressor.services.dimensions import plan_dimensions


def test_no_bounds_keeps_source_dimensions():
    plan = plan_dimensions(ImageDimensions(1234, 567))
    assert (plan.width, plan.height) == (1234, 567)


@pytest.mark.parametrize("max_width,max_height", [(2000, None), (None, 900), (1234, 567), (5000, 5000)])
def test_source_that_fits_is_never_enlarged(max_width, max_height):
    plan = plan_dimensions(ImageDimensions(1234, 567), max_width, max_height)
    assert (plan.width, plan.height) == (1234, 567)


def test_max_width_only_scales_height_proportionally():
    plan = plan_dimensions(ImageDimensions(4000, 3000), max_width=800)
    assert (plan.width, plan.height) == (800, 600)


def test_max_height_only():
    plan = plan_dimensions(ImageDimensions(4000, 3000), max_height=300)
    assert (plan.width, plan.height) == (400, 300)


def test_both_bounds_use_the_tighter_ratio():
    plan = plan_dimensions(ImageDimensions(4000, 3000), max_width=1000, max_height=1000)
    assert (plan.width, plan.height) == (1000, 750)


def test_rounding_is_half_up():
    # 333 * 0.5 = 166.5
    plan = plan_dimensions(ImageDimensions(200, 333), max_width=100)
    assert (plan.width, plan.height) == (100, 167)


@pytest.mark.parametrize(
    "source,max_width,max_height",
    [
        ((1920, 1080), 500, None),
        ((1080, 1920), None, 641),
        ((3001, 1999), 777, 333),
        ((1000, 400), 333, None),
    ],
)
def test_aspect_ratio_preserved_within_one_pixel(source, max_width, max_height):
    width, height = source
    plan = plan_dimensions(ImageDimensions(width, height), max_width, max_height)

    assert plan.width <= (max_width or width)
    assert plan.height <= (max_height or height)
    assert plan.width <= width and plan.height <= height
    assert abs(plan.height - plan.width * height / width) <= 1


def test_tiny_ratio_keeps_at_least_one_pixel():
    plan = plan_dimensions(ImageDimensions(10000, 10), max_width=10)
    assert (plan.width, plan.height) == (10, 1)


@pytest.mark.parametrize("max_width,max_height", [(0, None), (None, -5)])
def test_non_positive_bounds_are_rejected(max_width, max_height):
    with pytest.raises(ConfigError):
        plan_dimensions(ImageDimensions(100, 100), max_width, max_height)
