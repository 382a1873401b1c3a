import matplotlib

matplotlib.use("Agg")

import pytest

from hypermesh.model.descriptors import PrimitiveDescriptor
from hypermesh.model.parameters import Parameters


@pytest.fixture
def parameters() -> Parameters:
    return Parameters()


@pytest.fixture
def test_descriptor() -> PrimitiveDescriptor:
    return PrimitiveDescriptor(id="test-ifs", face_vertices=4)
