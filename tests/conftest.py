import pytest

from approx_entropy.logging import configure_logger


@pytest.fixture(scope="session", autouse=True)
def configure_logging(tmp_path_factory):
    log_path = tmp_path_factory.mktemp("logs") / "approx_entropy.log"
    configure_logger(verbosity_level=3, log_path=log_path)


@pytest.fixture
def input_file(tmp_path):
    input_file = tmp_path / "input_file"
    input_file.write_bytes(bytes(range(256)))
    return input_file
