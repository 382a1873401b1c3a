"""
Hypercube mesh tests.

The closed formula 2^(d-3) * (d-1) * d for the number of faces is the primary
check of the generator; the remaining tests look at the faces themselves.
"""
import logging

import numpy as np
import pytest

from hypermesh.geometry.polytope import (
    Adapt, CubeGenerator, Polytope, cube, cube_face_count, cube_mask_faces, extended_cube,
)
from hypermesh.model.parameters import Parameters


class TestCubeMasks:

    @pytest.mark.parametrize("depth", [3, 4, 5, 6, 7, 8])
    def test_face_count_matches_closed_formula(self, depth):
        expected = 2 ** (depth - 3) * (depth - 1) * depth
        assert cube_face_count(depth) == expected
        assert len(cube_mask_faces(depth)) == expected

    def test_square_and_line(self):
        assert cube_face_count(2) == 1
        assert cube_mask_faces(2) == (((False, False), (False, True), (True, True), (True, False)),)
        assert cube_face_count(1) == 0
        assert cube_mask_faces(1) == ()

    def test_known_counts(self):
        assert cube_face_count(3) == 6
        assert cube_face_count(4) == 24
        assert cube_face_count(5) == 80

    @pytest.mark.parametrize("depth", [3, 4, 5])
    def test_faces_are_distinct(self, depth):
        faces = cube_mask_faces(depth)
        assert len(set(faces)) == len(faces)

    @pytest.mark.parametrize("depth", [2, 3, 4, 5])
    def test_faces_are_squares_in_winding_order(self, depth):
        for face in cube_mask_faces(depth):
            # Consecutive corners share an edge: they differ in exactly one axis
            for j in range(4):
                a, b = face[j], face[(j + 1) % 4]
                assert sum(x != y for x, y in zip(a, b)) == 1
            # The face spans exactly two axes
            varying = [axis for axis in range(depth) if len({v[axis] for v in face}) > 1]
            assert len(varying) == 2

    def test_every_edge_of_a_cube_is_shared_by_two_faces(self):
        edges = {}
        for face in cube_mask_faces(3):
            for j in range(4):
                edge = frozenset((face[j], face[(j + 1) % 4]))
                edges[edge] = edges.get(edge, 0) + 1
        assert len(edges) == 12
        assert set(edges.values()) == {2}


class TestCubeGenerator:

    @pytest.mark.parametrize("depth", [2, 3, 4])
    def test_coordinates_are_half_radius(self, depth):
        params = Parameters(radius=3.0)
        faces = CubeGenerator(depth).faces(params)

        assert faces.shape == (cube_face_count(depth), 4, depth)
        assert np.all(np.isin(faces, [1.5, -1.5]))

    def test_depth_one_has_no_faces(self, parameters):
        assert CubeGenerator(1).faces(parameters).shape == (0, 4, 1)

    def test_invalid_depth(self):
        with pytest.raises(ValueError):
            CubeGenerator(0)


class TestPolytope:

    def test_face_sequence_contract(self, parameters):
        model = cube(parameters, 3)

        assert isinstance(model, Polytope)
        assert len(model) == 6
        assert model.size() == 6
        assert model.face_vertices == 4
        assert model.label == "3-cube@3"
        assert model.used_parameters.names() == ["radius"]

        faces = list(model)
        assert len(faces) == 6
        assert all(face.shape == (4, 3) for face in faces)

    def test_restartable(self, parameters):
        model = cube(parameters, 4)
        first = [face.copy() for face in model]
        second = [face.copy() for face in model]
        assert len(first) == 24
        np.testing.assert_array_equal(np.stack(first), np.stack(second))

    def test_faces_array(self, parameters):
        assert cube(parameters, 3).faces().shape == (6, 4, 3)
        assert cube(parameters, 1).faces().shape == (0, 4, 1)

    def test_vertex_limit_is_reported(self, caplog):
        params = Parameters(vertex_limit=10)
        with caplog.at_level(logging.WARNING, logger="hypermesh"):
            model = cube(params, 3)
        assert len(model) == 6
        assert "vertex limit" in caplog.text


class TestAdapt:

    def test_square_in_four_dimensions(self, parameters):
        model = extended_cube(parameters, 4)

        assert isinstance(model, Adapt)
        assert model.render_depth == 4
        assert model.depth == 2
        assert model.label == "2-cube@4"

        faces = list(model)
        assert len(faces) == 1
        assert faces[0].shape == (4, 4)
        np.testing.assert_array_equal(faces[0][:, 2:], 0.0)
        np.testing.assert_array_equal(faces[0][:, :2], list(cube(parameters, 2))[0])

    def test_native_depth_is_not_wrapped(self, parameters):
        assert isinstance(extended_cube(parameters, 2), Polytope)

    def test_dropping_coordinates(self, parameters):
        faces = list(Adapt(cube(parameters, 3), 2))
        assert len(faces) == 6
        assert all(face.shape == (4, 2) for face in faces)
