"""
Iterated function system tests.

The small hand-built IFS below uses two functions that don't commute, so the
order in which the odometer slots are applied shows up in the coordinates.
"""
import copy
import logging
import math

import numpy as np
import pytest

from hypermesh.geometry.ifs import (
    IFS, IFSIterator, RandomAffine, _next_word, _rotation_axes,
    random_affine_ifs, sierpinski_carpet, sierpinski_gasket,
)
from hypermesh.geometry.polytope import cube
from hypermesh.geometry.transformation import Affine
from hypermesh.model.parameters import Parameters


def _two_function_ifs(descriptor, iterations=2, functions=None):
    params = Parameters(radius=1.0, iterations=iterations)
    if functions is None:
        functions = [Affine.scale(2, 2.0), Affine.translation([1.0, 0.0])]
    return IFS(
        parameters=params,
        descriptor=descriptor,
        depth=2,
        base_factory=lambda: cube(params, 2),
        functions=functions,
    )


class TestIFSIterator:

    def test_odometer_order(self, test_descriptor):
        model = _two_function_ifs(test_descriptor)
        it = model.begin()

        seen = []
        while it != model.end():
            seen.append(list(it.iteration))
            it.advance()

        assert seen == [[0, 0], [0, 1], [1, 0], [1, 1]]

    def test_slot_zero_is_applied_first(self, test_descriptor):
        faces = _two_function_ifs(test_descriptor).faces()

        assert faces.shape == (4, 4, 2)
        np.testing.assert_allclose(faces[0][0], [-2.0, -2.0])
        # scale, then translate
        np.testing.assert_allclose(faces[1][0], [0.0, -1.0])
        # translate, then scale
        np.testing.assert_allclose(faces[2][0], [1.0, -1.0])
        np.testing.assert_allclose(faces[3][0], [1.5, -0.5])

    def test_exhausted_iterator_equals_end(self, test_descriptor):
        model = _two_function_ifs(test_descriptor)
        it = model.begin()
        assert it != model.end()

        faces = list(it)
        assert len(faces) == model.size() == 4
        assert it == model.end()
        assert it.is_end()

    def test_current_past_the_end(self, test_descriptor):
        model = _two_function_ifs(test_descriptor)
        with pytest.raises(IndexError):
            model.end().current()

    def test_copy_keeps_position(self, test_descriptor):
        model = _two_function_ifs(test_descriptor)
        it = model.begin()
        it.advance()
        it.advance()

        clone = copy.copy(it)
        assert clone == it
        assert clone.base is not it.base
        np.testing.assert_array_equal(clone.current(), it.current())

        clone.advance()
        assert clone != it

    def test_begin_restarts(self, test_descriptor):
        model = _two_function_ifs(test_descriptor)
        np.testing.assert_array_equal(model.faces(), model.faces())

    def test_zero_iterations_yield_the_base(self, test_descriptor):
        model = _two_function_ifs(test_descriptor, iterations=0)
        assert model.size() == 1
        np.testing.assert_array_equal(model.faces(), cube(Parameters(), 2).faces())

    def test_no_functions_is_empty(self, test_descriptor):
        model = _two_function_ifs(test_descriptor, iterations=2, functions=[])
        assert model.size() == 0
        assert model.begin().is_end()
        assert model.faces().shape == (0, 4, 2)

    def test_function_depth_must_match(self, test_descriptor):
        with pytest.raises(ValueError):
            _two_function_ifs(test_descriptor, functions=[Affine.identity(3)])

    def test_repr(self, test_descriptor):
        it = IFSIterator.begin(lambda: cube(Parameters(), 2), [Affine.identity(2)], 2)
        assert repr(it) == "IFSIterator(iteration=[0, 0], base_position=0)"


class TestVertexLimit:

    def test_iterations_are_reduced(self, caplog):
        params = Parameters(iterations=6, vertex_limit=100)
        with caplog.at_level(logging.WARNING, logger="hypermesh"):
            model = sierpinski_gasket(params, 2)

        assert model.iterations == 2
        assert model.vertex_count() <= 100
        assert len(model.faces()) == 9
        assert "reduced iterations" in caplog.text

    def test_within_limit_is_silent(self, caplog):
        with caplog.at_level(logging.WARNING, logger="hypermesh"):
            model = sierpinski_gasket(Parameters(iterations=2), 2)
        assert model.iterations == 2
        assert caplog.text == ""


class TestSierpinski:

    @pytest.mark.parametrize("depth, functions", [(2, 3), (3, 5), (4, 9)])
    def test_gasket_function_count(self, depth, functions):
        model = sierpinski_gasket(Parameters(iterations=1), depth)
        assert len(model.functions) == functions
        assert model.label == f"{depth}-sierpinski-gasket@{depth}"

    @pytest.mark.parametrize("depth, translations", [
        (2, [(0.25, 0.0), (-0.25, 0.25), (-0.25, -0.25)]),
        (3, [
            (0.25, 0.0, 0.0),
            (-0.25, 0.25, 0.25),
            (-0.25, -0.25, 0.25),
            (-0.25, 0.25, -0.25),
            (-0.25, -0.25, -0.25),
        ]),
    ])
    def test_gasket_functions(self, depth, translations):
        model = sierpinski_gasket(Parameters(iterations=1), depth)

        assert len(model.functions) == len(translations)
        for function, t in zip(model.functions, translations):
            assert function == Affine.scale(depth, 0.5) @ Affine.translation(t)

    def test_gasket_first_function_moves_towards_positive_x(self):
        function = sierpinski_gasket(Parameters(iterations=1), 3).functions[0]
        np.testing.assert_allclose(function.apply([0.5, 0.5, 0.5]), [0.5, 0.25, 0.25])

    def test_carpet_functions(self):
        third = 1.0 / 3.0
        offsets = [
            (-third, -third),
            (-third, 0.0),
            (-third, third),
            (third, -third),
            (third, 0.0),
            (third, third),
            (0.0, -third),
            (0.0, third),
        ]
        model = sierpinski_carpet(Parameters(iterations=1), 2)

        assert len(model.functions) == len(offsets)
        for function, t in zip(model.functions, offsets):
            assert function == Affine.scale(2, third) @ Affine.translation(t)

    def test_gasket_face_count(self):
        model = sierpinski_gasket(Parameters(iterations=2), 3)
        assert model.size() == 150
        assert len(model.faces()) == 150

    def test_gasket_stays_inside_the_cube(self):
        faces = sierpinski_gasket(Parameters(radius=1.0, iterations=3), 3).faces()
        assert np.all(np.abs(faces) <= 0.5 + 1e-12)

    def test_gasket_depth(self):
        with pytest.raises(ValueError):
            sierpinski_gasket(Parameters(), 1)

    def test_carpet(self):
        carpet = sierpinski_carpet(Parameters(iterations=2), 2)
        assert len(carpet.functions) == 8
        assert carpet.size() == 64

        sponge = sierpinski_carpet(Parameters(iterations=1), 3)
        assert len(sponge.functions) == 20
        assert sponge.size() == 120

    def test_carpet_leaves_the_centre_empty(self):
        faces = sierpinski_carpet(Parameters(radius=1.0, iterations=1), 2).faces()
        centres = faces.mean(axis=1)
        assert not np.any(np.all(np.isclose(centres, 0.0), axis=1))

    @pytest.mark.parametrize("depth", [1, 4])
    def test_carpet_depth(self, depth):
        with pytest.raises(ValueError):
            sierpinski_carpet(Parameters(), depth)


def _reference_random_affine(seed, depth):
    """
    Matrix of a random affine transformation with both rotations enabled,
    drawn word by word in the documented order.

    Returns the matrix and which equal-axes case each rotation hit
    ("distinct", "zero" or "positive").
    """
    prng = np.random.RandomState(seed)

    def draw():
        return int(prng.randint(0, 2**32, dtype=np.uint32))

    s = (draw() % 6000) / 10000 + 0.2
    r1 = (draw() % 10000) / 10000 * math.pi
    a1, a2 = draw() % depth, draw() % depth
    r2 = (draw() % 10000) / 10000 * math.pi
    a4, a5 = draw() % depth, draw() % depth

    axes = []
    cases = []
    for x, y in ((a1, a2), (a4, a5)):
        if x == y == 0:
            y = draw() % (depth - 1) + 1
            cases.append("zero")
        elif x == y:
            x -= 1
            cases.append("positive")
        else:
            cases.append("distinct")
        axes.append((min(x, y), max(x, y)))

    translation = [(draw() % 10000) / 5000 - 1 for _ in range(depth)]

    matrix = (
        Affine.scale(depth, s)
        @ Affine.rotation(depth, r1, *axes[0])
        @ Affine.translation(translation)
        @ Affine.rotation(depth, r2, *axes[1])
    ).matrix
    return matrix, cases


class TestRotationAxes:

    def test_larger_axis_goes_second(self):
        prng = np.random.RandomState(1)
        untouched = np.random.RandomState(1)

        assert _rotation_axes(prng, 2, 0, 3) == (0, 2)
        # no extra word was drawn
        assert _next_word(prng) == _next_word(untouched)

    def test_ordered_axes_are_kept(self):
        assert _rotation_axes(np.random.RandomState(1), 0, 2, 3) == (0, 2)

    def test_equal_zero_axes_draw_one_word(self):
        prng = np.random.RandomState(1)
        reference = np.random.RandomState(1)
        word = _next_word(reference)

        assert _rotation_axes(prng, 0, 0, 3) == (0, word % 2 + 1)
        # exactly one word was drawn
        assert _next_word(prng) == _next_word(reference)

    def test_equal_zero_axes_in_the_plane(self):
        assert _rotation_axes(np.random.RandomState(5), 0, 0, 2) == (0, 1)

    def test_equal_positive_axes_decrement_the_first(self):
        prng = np.random.RandomState(1)
        untouched = np.random.RandomState(1)

        assert _rotation_axes(prng, 2, 2, 4) == (1, 2)
        assert _next_word(prng) == _next_word(untouched)


class TestRandomAffine:

    @pytest.mark.parametrize("seed", [0, 8, 15, 16, 5489])
    def test_matches_reference_draw_order(self, seed):
        params = Parameters(pre_rotate=True, post_rotate=True)
        expected, _ = _reference_random_affine(seed, 3)
        np.testing.assert_allclose(RandomAffine(params, seed, 3).matrix, expected, rtol=1e-12, atol=0.0)

    def test_equal_axes_cases_follow_reference(self):
        params = Parameters(pre_rotate=True, post_rotate=True)
        seen = set()
        for seed in range(200):
            expected, cases = _reference_random_affine(seed, 3)
            seen.update(cases)
            np.testing.assert_allclose(RandomAffine(params, seed, 3).matrix, expected, rtol=1e-12, atol=0.0)

        # every branch of the axis selection was taken at least once
        assert seen == {"distinct", "zero", "positive"}

    def test_scale_and_translation_ranges(self):
        params = Parameters(pre_rotate=False, post_rotate=False)
        for seed in range(20):
            matrix = RandomAffine(params, seed, 3).matrix
            s = 1.0 / matrix[3, 3]
            translation = matrix[3, :3] / matrix[3, 3]

            assert 0.2 <= s < 0.8
            assert np.all(translation >= -1.0)
            assert np.all(translation < 1.0)

    def test_seed_is_reproducible(self):
        params = Parameters(post_rotate=True)
        assert RandomAffine(params, 42, 4) == RandomAffine(params, 42, 4)
        assert RandomAffine(params, 42, 4) != RandomAffine(params, 43, 4)

    def test_contracts(self):
        params = Parameters(pre_rotate=True, post_rotate=True)
        function = RandomAffine(params, 7, 3)
        a = function.apply([0.5, 0.5, 0.5])
        b = function.apply([-0.5, -0.5, -0.5])
        assert np.linalg.norm(a - b) < np.linalg.norm([1.0, 1.0, 1.0])

    def test_random_ifs(self):
        params = Parameters(functions=4, iterations=2, seed=3)
        model = random_affine_ifs(params, 3)

        assert len(model.functions) == 4
        assert model.render_depth == 3
        assert model.label == "3-random-affine-ifs@3"
        assert model.faces().shape == (16, 4, 3)

    def test_random_ifs_is_deterministic(self):
        params = Parameters(functions=3, iterations=2, seed=11)
        np.testing.assert_array_equal(
            random_affine_ifs(params, 4).faces(),
            random_affine_ifs(params, 4).faces(),
        )

    def test_different_seeds_differ(self):
        a = random_affine_ifs(Parameters(seed=1, iterations=1), 2).faces()
        b = random_affine_ifs(Parameters(seed=2, iterations=1), 2).faces()
        assert not np.allclose(a, b)
