import numpy as np
import pytest

from sparseae.training.engine import Autoencoder


@pytest.fixture
def identity_data():
    eye = np.eye(4)
    return [{"input": row.tolist(), "output": row.tolist()} for row in eye]


@pytest.fixture
def trained_engine(identity_data):
    engine = Autoencoder(seed=0)
    engine.train(identity_data, iterations=200)
    return engine
